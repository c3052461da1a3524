from datetime import date

import pytest

from packages.statement_parser.models import CREDIT, DEBIT, CandidateTransaction
from packages.statement_parser.normalizer import (
    FALLBACK_DESCRIPTION,
    clean_description,
    direction_cue,
    make_transaction_id,
    normalize,
    parse_amount,
    standardize_date,
)


def _candidate(**overrides) -> CandidateTransaction:
    fields = dict(
        raw_date="01/04/2024",
        raw_amount="1,250.50",
        raw_description="SWIGGY ORDER",
        line_index=3,
        confidence=0.8,
        strategy="tabular",
    )
    fields.update(overrides)
    return CandidateTransaction(**fields)


# ----------------------------------------------------------------------
# Dates
# ----------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("01/04/2024", date(2024, 4, 1)),
        ("01-04-2024", date(2024, 4, 1)),
        ("01.04.2024", date(2024, 4, 1)),
        ("01/04/24", date(2024, 4, 1)),
        ("1/4/2024", date(2024, 4, 1)),
        ("2024-04-01", date(2024, 4, 1)),
        ("2024-04-01T10:15:00", date(2024, 4, 1)),
        ("31/12/2023 23:59", date(2023, 12, 31)),
    ],
)
def test_standardize_date_formats(raw, expected):
    assert standardize_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", None, "Apr 01 2024", "01/04", "01/04/2024/5", "31/02/2024", "13/13/2024", "01/04/202"],
)
def test_standardize_date_rejects_garbage(raw):
    """No fallback to today: unparseable dates come back as None."""
    assert standardize_date(raw) is None


# ----------------------------------------------------------------------
# Amounts
# ----------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1,250.50", 1250.50),
        ("1,00,000.00", 100000.0),
        ("-350.00", -350.0),
        ("(350.00)", -350.0),
        ("Rs. 499", 499.0),
        ("INR 1,200", 1200.0),
        ("₹ 75.25", 75.25),
        ("500.00 Dr", 500.0),
        ("500.00 Cr", 500.0),
        (42, 42.0),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", None, "abc", "12a", float("nan")])
def test_parse_amount_invalid(raw):
    assert parse_amount(raw) is None


# ----------------------------------------------------------------------
# Direction cues and descriptions
# ----------------------------------------------------------------------


def test_direction_cue():
    assert direction_cue("ATM WDL") == DEBIT
    assert direction_cue("POS 1234 DEBIT") == DEBIT
    assert direction_cue("SALARY CR") == CREDIT
    assert direction_cue("CASH DEPOSIT") == CREDIT
    assert direction_cue("SWIGGY ORDER") is None
    # "cr" inside a word is not a cue
    assert direction_cue("CRICKET ACADEMY") is None


def test_clean_description_collapses_and_truncates():
    assert clean_description("  UPI   SWIGGY   ORDER - ") == "UPI SWIGGY ORDER"

    long_text = "A" * 150
    cleaned = clean_description(long_text)
    assert len(cleaned) == 100
    assert cleaned.endswith("...")


# ----------------------------------------------------------------------
# normalize()
# ----------------------------------------------------------------------


def test_normalize_basic():
    txn = normalize(_candidate(), index=0)

    assert txn is not None
    assert txn.date == date(2024, 4, 1)
    assert txn.amount == 1250.50
    assert txn.direction == CREDIT
    assert txn.category == "food"
    assert txn.confidence == 0.8
    assert txn.is_reconciled is False
    assert txn.id.startswith("txn_")


def test_normalize_negative_amount_becomes_debit_magnitude():
    txn = normalize(_candidate(raw_amount="-350.00"), index=0)

    assert txn.amount == 350.0
    assert txn.direction == DEBIT
    assert txn.signed_amount == -350.0


def test_normalize_direction_hint_wins_over_sign():
    txn = normalize(_candidate(raw_amount="500", direction_hint=DEBIT), index=0)
    assert txn.direction == DEBIT
    assert txn.amount == 500.0


def test_normalize_rejects_invalid_date():
    assert normalize(_candidate(raw_date="32/01/2024"), index=0) is None


def test_normalize_rejects_zero_amount():
    assert normalize(_candidate(raw_amount="0.00"), index=0) is None


def test_normalize_empty_description_falls_back():
    txn = normalize(_candidate(raw_description="   "), index=0)
    assert txn.description == FALLBACK_DESCRIPTION


def test_normalize_parses_balance():
    txn = normalize(_candidate(raw_balance="45,210.50"), index=0)
    assert txn.balance == 45210.50


def test_transaction_id_is_deterministic():
    """Same content and position must give the same id across imports."""
    a = make_transaction_id(0, date(2024, 4, 1), 100.0, DEBIT, "ATM WDL")
    b = make_transaction_id(0, date(2024, 4, 1), 100.0, DEBIT, "atm wdl")
    c = make_transaction_id(1, date(2024, 4, 1), 100.0, DEBIT, "ATM WDL")

    assert a == b
    assert a != c
    assert len(a) == len("txn_") + 16


def test_to_dict_uses_iso_date():
    data = normalize(_candidate(), index=0).to_dict()

    assert data["date"] == "2024-04-01"
    assert data["amount"] == 1250.50
    assert data["direction"] == "credit"
    assert data["is_reconciled"] is False
