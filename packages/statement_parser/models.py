"""Records passed between the stages of the statement import pipeline."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import UnsupportedFileTypeError

CREDIT = "credit"
DEBIT = "debit"

WARNING = "warning"
ERROR = "error"

MEDIA_TYPES = {
    "text/csv": "csv",
    "application/csv": "csv",
    "application/vnd.ms-excel": "csv",  # what some browsers send for .csv
    "application/pdf": "pdf",
}
EXTENSIONS = {".csv": "csv", ".pdf": "pdf"}


@dataclass
class RawDocument:
    """An uploaded file for the duration of one import call."""

    name: str
    media_type: str  # csv | pdf
    content: bytes
    size: int = -1

    def __post_init__(self):
        if self.media_type not in ("csv", "pdf"):
            raise UnsupportedFileTypeError(
                f"Unsupported file type '{self.media_type}'. Accepted: csv, pdf"
            )
        if self.size < 0:
            self.size = len(self.content)

    @classmethod
    def from_upload(
        cls, name: str, content: bytes, content_type: Optional[str] = None
    ) -> "RawDocument":
        """Resolve the media type from the MIME type, then the extension."""
        media_type = MEDIA_TYPES.get((content_type or "").split(";")[0].strip().lower())
        if media_type is None:
            media_type = EXTENSIONS.get(Path(name or "").suffix.lower())
        if media_type is None:
            raise UnsupportedFileTypeError(
                f"Unsupported file '{name}' ({content_type or 'unknown type'}). "
                "Accepted: .csv, .pdf"
            )
        return cls(name=name, media_type=media_type, content=content)


@dataclass
class CandidateTransaction:
    """Unvalidated guess produced by one parsing strategy."""

    raw_date: str
    raw_amount: str
    raw_description: str
    line_index: int
    confidence: float
    strategy: str
    direction_hint: Optional[str] = None  # from a column or a dr/cr cue
    raw_balance: Optional[str] = None
    reference: Optional[str] = None


@dataclass
class ParsedTransaction:
    """Standardized transaction structure."""

    id: str
    date: date
    description: str
    amount: float  # magnitude, direction carries the sign
    direction: str
    category: str
    confidence: float
    balance: Optional[float] = None
    reference: Optional[str] = None
    source_line: Optional[int] = None
    is_reconciled: bool = False

    @property
    def signed_amount(self) -> float:
        return -self.amount if self.direction == DEBIT else self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": self.amount,
            "direction": self.direction,
            "category": self.category,
            "balance": self.balance,
            "reference": self.reference,
            "confidence": self.confidence,
            "is_reconciled": self.is_reconciled,
            "source_line": self.source_line,
        }


@dataclass
class ImportIssue:
    message: str
    severity: str = WARNING
    row: Optional[int] = None
    field: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "field": self.field,
            "message": self.message,
            "severity": self.severity,
            "suggestion": self.suggestion,
        }


@dataclass
class StatementPeriod:
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_transactions(cls, transactions: List[ParsedTransaction]) -> "StatementPeriod":
        if not transactions:
            return cls()
        dates = [t.date for t in transactions]
        return cls(start_date=min(dates), end_date=max(dates))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass
class ImportReport:
    """Outcome of one import call, handed to the caller as-is."""

    file_name: str
    media_type: str
    bank_code: str
    bank_name: Optional[str]
    strategy: Optional[str]
    transactions: List[ParsedTransaction] = field(default_factory=list)
    errors: List[ImportIssue] = field(default_factory=list)
    statement_period: StatementPeriod = field(default_factory=StatementPeriod)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == ERROR for issue in self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name,
            "media_type": self.media_type,
            "bank_code": self.bank_code,
            "bank_name": self.bank_name,
            "strategy": self.strategy,
            "transactions": [t.to_dict() for t in self.transactions],
            "errors": [e.to_dict() for e in self.errors],
            "statement_period": self.statement_period.to_dict(),
            "transaction_count": self.transaction_count,
        }
