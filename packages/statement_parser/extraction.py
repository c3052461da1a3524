"""
Text Extraction Adapter - CSV bytes or PDF text layer to plain text.

PDF reading runs in a worker thread and is bounded by a timeout so a
pathological file cannot hang the import.
"""

import asyncio
import io
from typing import Optional

import pdfplumber
import structlog

from .config import ParserSettings, get_settings
from .errors import (
    ExtractionFailedError,
    ExtractionTimeoutError,
    FileTooLargeError,
    NoTextLayerError,
    UnsupportedFileTypeError,
)
from .models import RawDocument

logger = structlog.get_logger()

CSV_ENCODINGS = ["utf-8-sig", "utf-8", "cp1252", "latin-1"]


def check_size(document: RawDocument, limit: int) -> None:
    if document.size > limit:
        raise FileTooLargeError(document.size, limit)


def decode_csv(content: bytes) -> str:
    """Decode CSV content, trying common bank export encodings."""
    for encoding in CSV_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue

    raise ExtractionFailedError("Could not decode CSV file with any known encoding")


def read_pdf_text(
    content: bytes, max_pages: int, password: Optional[str] = None
) -> str:
    """Text layer of the first ``max_pages`` pages, one page after another."""
    pages = []
    with pdfplumber.open(io.BytesIO(content), password=password) as pdf:
        page_count = len(pdf.pages)
        if page_count > max_pages:
            logger.warning("pdf_pages_truncated", pages=page_count, max_pages=max_pages)

        for page in pdf.pages[:max_pages]:
            pages.append(page.extract_text() or "")

    return "\n".join(pages)


async def extract_text(
    document: RawDocument,
    *,
    password: Optional[str] = None,
    settings: Optional[ParserSettings] = None,
) -> str:
    """Plain text of a CSV or PDF document.

    Raises:
        FileTooLargeError: before any decoding, when over the size ceiling.
        NoTextLayerError: the PDF has no embedded text (scanned images).
        ExtractionFailedError: undecodable CSV, corrupt or locked PDF.
        ExtractionTimeoutError: PDF reading exceeded the configured timeout.
    """
    settings = settings or get_settings()
    check_size(document, settings.MAX_FILE_BYTES)

    if document.media_type == "csv":
        text = decode_csv(document.content)
        if not text.strip():
            raise ExtractionFailedError("File contains no data")
        return text

    if document.media_type != "pdf":
        raise UnsupportedFileTypeError(f"Unsupported file type '{document.media_type}'")

    try:
        text = await asyncio.wait_for(
            asyncio.to_thread(
                read_pdf_text, document.content, settings.MAX_PDF_PAGES, password
            ),
            timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "pdf_extraction_timeout",
            file_name=document.name,
            timeout_s=settings.EXTRACTION_TIMEOUT_SECONDS,
        )
        raise ExtractionTimeoutError(
            f"PDF text extraction took longer than {settings.EXTRACTION_TIMEOUT_SECONDS}s"
        )
    except Exception as e:
        logger.warning("pdf_extraction_failed", file_name=document.name, error=str(e))
        raise ExtractionFailedError(f"Could not read PDF: {e}") from e

    if not text or not text.strip():
        raise NoTextLayerError(
            "No text could be extracted from the PDF. The file might be scanned."
        )

    logger.info("pdf_text_extracted", file_name=document.name, length=len(text))
    return text


def extract_text_sync(
    document: RawDocument,
    *,
    password: Optional[str] = None,
    settings: Optional[ParserSettings] = None,
) -> str:
    return asyncio.run(extract_text(document, password=password, settings=settings))
