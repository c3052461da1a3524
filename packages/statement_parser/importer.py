"""
Import Orchestrator - one statement file in, one ImportReport out.

extract text -> detect bank -> recognize candidates -> normalize/categorize.
Row and batch problems end up in ``ImportReport.errors``; only document
level problems (type, size, unreadable file) raise StatementRejectedError.
"""

import asyncio
from typing import List, Optional, Tuple

import structlog

from .config import ParserSettings, get_settings
from .detector import GENERIC_PROFILE, BankFormatDetector, BankProfile, get_profile
from .extraction import extract_text
from .models import (
    ERROR,
    WARNING,
    ImportIssue,
    ImportReport,
    ParsedTransaction,
    RawDocument,
    StatementPeriod,
)
from .normalizer import normalize
from .recognition import RecognitionResult, get_amount_policy, recognize, split_lines

logger = structlog.get_logger()


class StatementImporter:
    """
    Main entry point for statement imports.

    Stateless between calls: the same instance can import any number of
    files, concurrently or not.
    """

    def __init__(
        self,
        bank_type: Optional[str] = None,
        amount_policy: Optional[str] = None,
        password: Optional[str] = None,
        settings: Optional[ParserSettings] = None,
    ):
        """
        Initialize importer.

        Args:
            bank_type: Bank profile override (hdfc, icici, sbi, axis, ..., generic)
            amount_policy: Amount-selection policy override (last, penultimate)
            password: Password for encrypted PDFs
            settings: Parser settings (defaults to environment)
        """
        self.settings = settings or get_settings()
        self.profile_override = get_profile(bank_type) if bank_type else None
        self.amount_policy = amount_policy or self.settings.AMOUNT_POLICY
        if self.amount_policy:
            get_amount_policy(self.amount_policy)
        self.password = password
        self.detector = BankFormatDetector()

    def detect_profile(self, text: str, file_name: Optional[str] = None) -> BankProfile:
        if self.profile_override is not None:
            return self.profile_override
        return self.detector.detect(text, file_name=file_name)

    async def import_document(self, document: RawDocument) -> ImportReport:
        logger.info(
            "import_started",
            file_name=document.name,
            media_type=document.media_type,
            size=document.size,
        )
        text = await extract_text(document, password=self.password, settings=self.settings)
        return self.parse_text(text, file_name=document.name, media_type=document.media_type)

    def parse_text(
        self, text: str, file_name: str = "", media_type: str = "csv"
    ) -> ImportReport:
        """Run detection, recognition and normalization over extracted text."""
        lines = split_lines(text)
        profile = self.detect_profile(text, file_name)
        result = recognize(lines, profile, self.amount_policy)
        issues: List[ImportIssue] = []

        # A bank-specific profile that recovers nothing falls back to the
        # generic patterns; a wrongly detected bank is not fatal.
        if not result.candidates and self.profile_override is None and not profile.is_generic:
            generic_result = recognize(lines, GENERIC_PROFILE, self.amount_policy)
            if generic_result.candidates:
                logger.info("generic_fallback_used", bank=profile.code)
                issues.append(
                    ImportIssue(
                        message=(
                            f"Layout did not match the {profile.display_name} format; "
                            "parsed with generic patterns"
                        ),
                        severity=WARNING,
                    )
                )
                result = generic_result

        transactions, normalize_issues = self._normalize(result)
        issues = result.issues + issues + normalize_issues

        report = ImportReport(
            file_name=file_name,
            media_type=media_type,
            bank_code=profile.code,
            bank_name=profile.display_name,
            strategy=result.strategy,
            transactions=transactions,
            errors=issues,
            statement_period=StatementPeriod.from_transactions(transactions),
        )

        logger.info(
            "import_complete",
            file_name=file_name,
            bank=profile.code,
            strategy=result.strategy,
            transactions=report.transaction_count,
            issues=len(issues),
        )
        return report

    def _normalize(
        self, result: RecognitionResult
    ) -> Tuple[List[ParsedTransaction], List[ImportIssue]]:
        transactions: List[ParsedTransaction] = []
        issues: List[ImportIssue] = []

        for index, candidate in enumerate(result.candidates):
            try:
                txn = normalize(candidate, index)
            except Exception as e:
                logger.warning("row_normalize_failed", row=candidate.line_index, error=str(e))
                issues.append(
                    ImportIssue(
                        row=candidate.line_index,
                        message=f"Failed to normalize row: {e}",
                        severity=ERROR,
                    )
                )
                continue

            if txn is None:
                issues.append(
                    ImportIssue(
                        row=candidate.line_index,
                        message="Row rejected: missing date or amount",
                        severity=WARNING,
                    )
                )
                continue
            transactions.append(txn)

        return transactions, issues


async def import_statement(
    name: str,
    content: bytes,
    content_type: Optional[str] = None,
    bank_type: Optional[str] = None,
    amount_policy: Optional[str] = None,
    password: Optional[str] = None,
    settings: Optional[ParserSettings] = None,
) -> ImportReport:
    """
    Convenience function to import a bank statement.

    Args:
        name: File name (used for type and bank detection)
        content: File content as bytes
        content_type: Declared MIME type (text/csv or application/pdf)
        bank_type: Bank type (hdfc, icici, sbi, axis, ..., generic)
        amount_policy: Amount-selection policy (last, penultimate)
        password: Password for encrypted PDFs
        settings: Parser settings

    Returns:
        ImportReport with transactions and issues
    """
    document = RawDocument.from_upload(name, content, content_type)
    importer = StatementImporter(
        bank_type=bank_type,
        amount_policy=amount_policy,
        password=password,
        settings=settings,
    )
    return await importer.import_document(document)


def import_statement_sync(*args, **kwargs) -> ImportReport:
    return asyncio.run(import_statement(*args, **kwargs))
