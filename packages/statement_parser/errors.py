"""Document-level rejections raised by the import pipeline.

Only problems that make the whole file unusable are raised. Row and batch
problems are collected as ``ImportIssue`` records on the report instead.
"""

from typing import Optional


class StatementRejectedError(Exception):
    """Base class for files the importer refuses to process."""

    code = "statement_rejected"
    suggestion: Optional[str] = None

    def __init__(self, detail: str, suggestion: Optional[str] = None):
        self.detail = detail
        if suggestion is not None:
            self.suggestion = suggestion
        super().__init__(detail)


class UnsupportedFileTypeError(StatementRejectedError):
    code = "unsupported_file_type"
    suggestion = "Upload the statement as a CSV or PDF file."


class FileTooLargeError(StatementRejectedError):
    code = "file_too_large"
    suggestion = "Split the statement into smaller date ranges and import each one."

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File is {size} bytes, larger than the {limit // (1024 * 1024)}MB limit"
        )


class NoTextLayerError(StatementRejectedError):
    """The PDF has no embedded text, e.g. a scanned statement."""

    code = "no_text_layer"
    suggestion = (
        "This looks like a scanned PDF. Run it through OCR, or download the "
        "statement again from your bank with selectable text."
    )


class ExtractionFailedError(StatementRejectedError):
    code = "extraction_failed"
    suggestion = "Check that the file opens correctly, then try exporting it again."


class ExtractionTimeoutError(StatementRejectedError):
    code = "extraction_timeout"
    suggestion = "The PDF took too long to read. Try a shorter statement period."
