"""Pydantic schemas for the statements domain."""

from pydantic import BaseModel, Field
from typing import Optional


class TransactionOut(BaseModel):
    """A parsed, categorized transaction ready for display or insert."""

    id: str
    date: str  # ISO 8601 calendar date
    description: str
    amount: float = Field(ge=0)
    direction: str  # "credit" or "debit"
    category: str
    balance: Optional[float] = None
    reference: Optional[str] = None
    confidence: float
    is_reconciled: bool = False
    source_line: Optional[int] = None


class ImportIssueOut(BaseModel):
    """A row- or batch-level problem found while parsing."""

    row: Optional[int] = None
    field: Optional[str] = None
    message: str
    severity: str  # "warning" or "error"
    suggestion: Optional[str] = None


class StatementPeriodOut(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ImportResponse(BaseModel):
    """Response from a statement import."""

    file_name: str
    media_type: str
    bank_code: str
    bank_name: Optional[str] = None
    strategy: Optional[str] = None
    transactions: list[TransactionOut]
    errors: list[ImportIssueOut]
    statement_period: StatementPeriodOut
    transaction_count: int


class BankOut(BaseModel):
    code: str
    name: Optional[str] = None
    keywords: list[str]
    amount_policy: str


class CategorizeRequest(BaseModel):
    """Descriptions to run through the keyword classifier."""

    descriptions: list[str] = Field(min_length=1, max_length=1000)


class CategoryPrediction(BaseModel):
    description: str
    category: str


class CategorizeResponse(BaseModel):
    predictions: list[CategoryPrediction]
