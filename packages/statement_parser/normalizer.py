"""
Transaction Normalizer - turns strategy candidates into ParsedTransactions.

Dates are standardized to calendar dates (day-month-year order, as used by
Indian bank statements), amounts to non-negative magnitudes with the sign
moved into ``direction``, descriptions cleaned and capped, and a category
assigned from the keyword table.
"""

import hashlib
import re
from datetime import date
from typing import Optional

from .categorizer import classify
from .models import CREDIT, DEBIT, CandidateTransaction, ParsedTransaction

DESCRIPTION_MAX_LENGTH = 100
FALLBACK_DESCRIPTION = "Transaction"

_DATE_SEPARATORS = re.compile(r"[/.-]")
_CURRENCY = re.compile(r"rs\.?|inr|[₹$€£]", re.IGNORECASE)
_DR_CR_SUFFIX = re.compile(r"\s*(?:dr|cr)\.?$", re.IGNORECASE)
_NUMBER = re.compile(r"^[+-]?\d+(?:\.\d+)?$")

_DEBIT_CUE = re.compile(r"(?<![a-z])(?:dr|debit|wdl|withdrawal)(?![a-z])", re.IGNORECASE)
_CREDIT_CUE = re.compile(r"(?<![a-z])(?:cr|credit|deposit)(?![a-z])", re.IGNORECASE)


def standardize_date(raw: Optional[str]) -> Optional[date]:
    """Parse DD/MM/YYYY, DD-MM-YYYY, DD.MM.YY or YYYY-MM-DD into a date.

    Anything that does not resolve to exactly three numeric components
    forming a real calendar date returns None. There is no fallback date.
    """
    if raw is None:
        return None

    tokens = str(raw).strip().split()
    if not tokens:
        return None
    # Drop a trailing time component ("2024-04-01T10:00:00", "01/04/2024 10:00")
    token = tokens[0].split("T")[0]

    parts = _DATE_SEPARATORS.split(token)
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    if len(parts[0]) == 4:
        year, month, day = parts
    else:
        day, month, year = parts

    if len(year) == 2:
        year = "20" + year
    elif len(year) != 4:
        return None

    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_amount(raw) -> Optional[float]:
    """Parse an amount string into a signed float.

    Handles currency symbols, ``Rs``/``INR`` prefixes, thousands separators,
    ``(123.00)`` negatives and trailing ``Dr``/``Cr`` markers. Returns None
    when nothing numeric is left.
    """
    if raw is None:
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if value == value and abs(value) != float("inf") else None

    amount_str = str(raw).strip()
    if not amount_str:
        return None

    amount_str = _DR_CR_SUFFIX.sub("", amount_str)
    amount_str = _CURRENCY.sub("", amount_str)
    amount_str = re.sub(r"\s+", "", amount_str)

    negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        negative = True
        amount_str = amount_str[1:-1]

    amount_str = amount_str.replace(",", "")
    if not _NUMBER.match(amount_str):
        return None

    value = float(amount_str)
    return -abs(value) if negative else value


def direction_cue(text: Optional[str]) -> Optional[str]:
    """Read a debit/credit marker from free text; debit cues win."""
    if not text:
        return None
    if _DEBIT_CUE.search(text):
        return DEBIT
    if _CREDIT_CUE.search(text):
        return CREDIT
    return None


def clean_description(text: Optional[str], max_length: int = DESCRIPTION_MAX_LENGTH) -> str:
    """Collapse whitespace, trim separator debris and cap the length."""
    if not text:
        return ""

    cleaned = re.sub(r"\s+", " ", str(text)).strip(" -|,;:")

    if len(cleaned) > max_length:
        cleaned = cleaned[: max_length - 3].rstrip() + "..."
    return cleaned


def make_transaction_id(
    index: int,
    txn_date: date,
    amount: float,
    direction: str,
    description: str,
) -> str:
    """Deterministic id from content and position within the import.

    Same construction as the ingestion fingerprint:
        SHA256(index|date|amount.2f|DIRECTION|DESCRIPTION)
    so re-importing the same file produces the same ids.
    """
    raw = (
        f"{index}|{txn_date.isoformat()}|{amount:.2f}"
        f"|{direction.strip().upper()}|{description.strip().upper()}"
    )
    return "txn_" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def normalize(
    candidate: CandidateTransaction,
    index: int,
    max_length: int = DESCRIPTION_MAX_LENGTH,
) -> Optional[ParsedTransaction]:
    """Build a ParsedTransaction, or None if the candidate must be rejected."""
    txn_date = standardize_date(candidate.raw_date)
    if txn_date is None:
        return None

    value = parse_amount(candidate.raw_amount)
    if not value:
        return None

    if candidate.direction_hint in (CREDIT, DEBIT):
        direction = candidate.direction_hint
    else:
        direction = DEBIT if value < 0 else CREDIT

    amount = round(abs(value), 2)
    # Strategies strip amount tokens by position; only whitespace and
    # length are left to fix here.
    description = (
        clean_description(candidate.raw_description, max_length=max_length)
        or FALLBACK_DESCRIPTION
    )

    balance = parse_amount(candidate.raw_balance) if candidate.raw_balance else None

    return ParsedTransaction(
        id=make_transaction_id(index, txn_date, amount, direction, description),
        date=txn_date,
        description=description,
        amount=amount,
        direction=direction,
        category=classify(description),
        confidence=candidate.confidence,
        balance=balance,
        reference=candidate.reference or None,
        source_line=candidate.line_index,
    )
