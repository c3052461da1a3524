"""
Transaction Recognition Engine - candidate transactions from statement text.

Three strategies are tried in order, and the first one that yields at least
one candidate wins:

1. tabular       header-anchored rows (column-aware for delimited text)
2. line_grouped  a dated line plus up to two continuation lines
3. regex_sweep   any single line with a date and an amount

Strategies are plain functions ``(lines, profile, policy) -> StrategyOutcome``.
"""

import io
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd
import structlog

from .detector import BankProfile
from .models import (
    CREDIT,
    DEBIT,
    ERROR,
    WARNING,
    CandidateTransaction,
    ImportIssue,
)
from .normalizer import (
    DESCRIPTION_MAX_LENGTH,
    clean_description,
    direction_cue,
    parse_amount,
    standardize_date,
)

logger = structlog.get_logger()

TABULAR_CONFIDENCE = 0.8
COLUMN_CONFIDENCE = 0.9
LINE_GROUPED_CONFIDENCE = 0.7
REGEX_SWEEP_CONFIDENCE = 0.6
MIN_LINE_LENGTH = 10
WINDOW_SIZE = 3

NO_TRANSACTIONS_MESSAGE = "No valid transactions could be extracted"

_HEADER_DATE = re.compile(r"\bdate\b|\bdt\b")
_HEADER_DESCRIPTION = re.compile(r"description|narration|particulars|details|remarks")
_HEADER_AMOUNT = re.compile(r"amount|debit|credit|withdrawal|deposit")
_HEADER_TRANSACTION = re.compile(r"transaction.*date.*amount")
_SUMMARY_WORDS = re.compile(r"\b(opening|closing|brought|carried|total)\b")
_DELIMITERS = [",", ";", "\t", "|"]

# Checked in this order; first match per column wins.
COLUMN_SYNONYMS: List[Tuple[str, List[str]]] = [
    ("type", ["dr/cr", "cr/dr", "transaction type", "txn type", "type"]),
    ("date", ["transaction date", "txn date", "value date", "posting date", "date", "dt"]),
    ("balance", ["balance", "bal"]),
    ("debit", ["debit", "withdrawal", "dr"]),
    ("credit", ["credit", "deposit", "cr"]),
    ("reference", ["reference", "ref no", "ref", "cheque", "chq", "utr", "transaction id"]),
    ("description", ["description", "narration", "particulars", "details", "remarks"]),
    ("amount", ["amount", "amt"]),
]


@dataclass
class StrategyOutcome:
    candidates: List[CandidateTransaction] = field(default_factory=list)
    issues: List[ImportIssue] = field(default_factory=list)


@dataclass
class RecognitionResult:
    strategy: Optional[str]
    candidates: List[CandidateTransaction] = field(default_factory=list)
    issues: List[ImportIssue] = field(default_factory=list)


# ----------------------------------------------------------------------
# Amount-selection policies
# ----------------------------------------------------------------------

AmountPolicy = Callable[[Sequence[re.Match]], Tuple[re.Match, Optional[re.Match]]]


def last_amount(matches: Sequence[re.Match]) -> Tuple[re.Match, Optional[re.Match]]:
    """Last amount on the line is the transaction; the one before, the balance.

    Fits layouts where the running-balance column precedes the amount.
    """
    balance = matches[-2] if len(matches) >= 2 else None
    return matches[-1], balance


def penultimate_amount(matches: Sequence[re.Match]) -> Tuple[re.Match, Optional[re.Match]]:
    """Amount followed by a running balance at the end of the line."""
    if len(matches) >= 2:
        return matches[-2], matches[-1]
    return matches[-1], None


AMOUNT_POLICIES: Dict[str, AmountPolicy] = {
    "last": last_amount,
    "penultimate": penultimate_amount,
}


def get_amount_policy(name: str) -> AmountPolicy:
    try:
        return AMOUNT_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown amount policy '{name}'. Expected one of: {', '.join(AMOUNT_POLICIES)}"
        )


# ----------------------------------------------------------------------
# Shared helpers
# ----------------------------------------------------------------------


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty lines."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _scan(text: str, profile: BankProfile) -> Tuple[Optional[re.Match], List[re.Match], str]:
    """Find the first date and all amounts; dates are blanked before amounts
    are searched so their digits never count as amounts."""
    date_match = profile.date_pattern.search(text)
    masked = profile.date_pattern.sub(lambda m: " " * len(m.group(0)), text)
    amounts = list(profile.amount_pattern.finditer(masked))
    return date_match, amounts, masked


def _strip_amounts(text: str, profile: BankProfile) -> str:
    return profile.amount_pattern.sub(" ", text)


def _is_summary_line(description: str, profile: BankProfile) -> bool:
    lowered = description.lower()
    if not _SUMMARY_WORDS.search(lowered):
        return False
    return any(re.search(r"\b" + re.escape(kw) + r"\b", lowered) for kw in profile.balance_keywords)


def _sign_direction(raw_amount: str) -> Optional[str]:
    value = parse_amount(raw_amount)
    if value is not None and value < 0:
        return DEBIT
    return None


def find_header(lines: Sequence[str], profile: BankProfile) -> int:
    """Index of the first line that looks like a column header, or -1."""
    for i, line in enumerate(lines):
        lowered = line.lower()
        if profile.date_pattern.search(line):
            continue
        if _HEADER_TRANSACTION.search(lowered):
            return i
        if (
            _HEADER_DATE.search(lowered)
            and _HEADER_DESCRIPTION.search(lowered)
            and _HEADER_AMOUNT.search(lowered)
        ):
            return i
    return -1


def _sniff_delimiter(header: str) -> Optional[str]:
    counts = {d: header.count(d) for d in _DELIMITERS}
    delimiter, count = max(counts.items(), key=lambda kv: kv[1])
    return delimiter if count >= 2 else None


def map_columns(columns: Sequence[str], profile: BankProfile) -> Dict[str, str]:
    """Map canonical field names (date, debit, ...) to actual column names."""
    synonyms = [
        (name, list(profile.balance_keywords) if name == "balance" else words)
        for name, words in COLUMN_SYNONYMS
    ]

    mapping: Dict[str, str] = {}
    for column in columns:
        col_lower = str(column).lower().strip()
        for name, words in synonyms:
            hit = any(
                re.search(r"\b" + re.escape(w) + r"\b", col_lower) if len(w) <= 4 else w in col_lower
                for w in words
            )
            if hit:
                mapping.setdefault(name, column)
                break
    return mapping


# ----------------------------------------------------------------------
# Strategy 1: tabular
# ----------------------------------------------------------------------


def _parse_columns(
    lines: Sequence[str], header_index: int, delimiter: str, profile: BankProfile
) -> Optional[StrategyOutcome]:
    """Column-aware parse of a delimited block, or None if the header does
    not name a date and an amount column."""
    header_fields = list(
        pd.read_csv(
            io.StringIO(lines[header_index]),
            sep=delimiter,
            nrows=0,
            dtype=str,
            skipinitialspace=True,
            engine="python",
        ).columns
    )
    mapping = map_columns(header_fields, profile)
    if "date" not in mapping or not {"amount", "debit", "credit"} & set(mapping):
        return None

    outcome = StrategyOutcome()

    def _on_bad_line(fields: List[str]) -> None:
        outcome.issues.append(
            ImportIssue(
                message=(
                    f"Row has {len(fields)} columns but expected {len(header_fields)}"
                ),
                severity=WARNING,
            )
        )
        return None

    block = "\n".join(lines[header_index:])
    df = pd.read_csv(
        io.StringIO(block),
        sep=delimiter,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
        index_col=False,
        on_bad_lines=_on_bad_line,
        engine="python",
    ).fillna("")

    def cell(row: pd.Series, name: str) -> str:
        column = mapping.get(name)
        return str(row[column]).strip() if column is not None else ""

    for pos, (_, row) in enumerate(df.iterrows()):
        # 1-based position among non-empty lines, header included
        row_number = header_index + 2 + pos
        try:
            debit_raw = cell(row, "debit")
            credit_raw = cell(row, "credit")
            amount_raw = cell(row, "amount")

            if parse_amount(credit_raw):
                raw_amount, hint = credit_raw, CREDIT
            elif parse_amount(debit_raw):
                raw_amount, hint = debit_raw, DEBIT
            elif parse_amount(amount_raw):
                raw_amount = amount_raw
                hint = direction_cue(cell(row, "type")) or direction_cue(amount_raw)
                if parse_amount(amount_raw) < 0:
                    hint = DEBIT
            else:
                outcome.issues.append(
                    ImportIssue(
                        row=row_number,
                        field="amount",
                        message="Unable to parse transaction amount",
                        severity=WARNING,
                    )
                )
                continue

            description = cell(row, "description")
            outcome.candidates.append(
                CandidateTransaction(
                    raw_date=cell(row, "date"),
                    raw_amount=raw_amount,
                    raw_description=description,
                    line_index=row_number,
                    confidence=COLUMN_CONFIDENCE if description else 0.5,
                    strategy="tabular",
                    direction_hint=hint,
                    raw_balance=cell(row, "balance") or None,
                    reference=cell(row, "reference") or None,
                )
            )
        except Exception as e:
            logger.warning("row_parse_failed", row=row_number, error=str(e))
            outcome.issues.append(
                ImportIssue(
                    row=row_number,
                    message=f"Failed to parse row: {e}",
                    severity=ERROR,
                )
            )

    return outcome


def _parse_text_row(
    line: str, line_number: int, profile: BankProfile, policy: AmountPolicy
) -> Optional[CandidateTransaction]:
    date_match, amounts, masked = _scan(line, profile)
    if not date_match or not amounts:
        return None

    amount_match, balance_match = policy(amounts)
    raw_amount = amount_match.group(0)

    hint = _sign_direction(raw_amount) or direction_cue(_strip_amounts(masked, profile)) or CREDIT

    # Description: tokens between the date and the first selected amount
    start = date_match.end()
    ends = [m.start() for m in (amount_match, balance_match) if m is not None and m.start() >= start]
    end = min(ends) if ends else len(line)
    description = clean_description(
        _strip_amounts(masked[start:end], profile), max_length=DESCRIPTION_MAX_LENGTH
    )

    if not description or not parse_amount(raw_amount):
        return None
    if _is_summary_line(description, profile):
        return None

    return CandidateTransaction(
        raw_date=date_match.group(0),
        raw_amount=raw_amount,
        raw_description=description,
        line_index=line_number,
        confidence=TABULAR_CONFIDENCE,
        strategy="tabular",
        direction_hint=hint,
        raw_balance=balance_match.group(0) if balance_match else None,
    )


def parse_tabular(
    lines: Sequence[str], profile: BankProfile, policy: AmountPolicy = last_amount
) -> StrategyOutcome:
    header_index = find_header(lines, profile)

    if header_index != -1:
        delimiter = _sniff_delimiter(lines[header_index])
        if delimiter:
            outcome = _parse_columns(lines, header_index, delimiter, profile)
            if outcome is not None:
                return outcome
    else:
        # No header: the line before the first dated row with an amount
        # is taken as the header boundary.
        for i, line in enumerate(lines):
            date_match, amounts, _ = _scan(line, profile)
            if date_match and amounts:
                header_index = i - 1
                break

    outcome = StrategyOutcome()
    for i in range(header_index + 1, len(lines)):
        line = lines[i]
        if len(line) < MIN_LINE_LENGTH:
            continue
        candidate = _parse_text_row(line, i + 1, profile, policy)
        if candidate is not None:
            outcome.candidates.append(candidate)
    return outcome


# ----------------------------------------------------------------------
# Strategy 2: line-grouped
# ----------------------------------------------------------------------


def parse_line_grouped(
    lines: Sequence[str], profile: BankProfile, policy: AmountPolicy = last_amount
) -> StrategyOutcome:
    """Rows wrapped over several lines: a dated line opens a window of up to
    three lines, closed early by the next dated line or the end of the text.

    Texts shorter than one window are left to the regex sweep.
    """
    outcome = StrategyOutcome()
    if len(lines) < WINDOW_SIZE:
        return outcome

    for i, line in enumerate(lines):
        if not profile.date_pattern.search(line):
            continue

        window = [line]
        for j in range(i + 1, min(i + WINDOW_SIZE, len(lines))):
            if profile.date_pattern.search(lines[j]):
                break
            window.append(lines[j])

        combined = " ".join(window)
        date_match, amounts, masked = _scan(combined, profile)
        if not date_match or not amounts:
            continue

        raw_amount = amounts[0].group(0)
        outcome.candidates.append(
            CandidateTransaction(
                raw_date=date_match.group(0),
                raw_amount=raw_amount,
                raw_description=_strip_amounts(masked, profile),
                line_index=i + 1,
                confidence=LINE_GROUPED_CONFIDENCE,
                strategy="line_grouped",
                # sign only, no textual cues at this fidelity
                direction_hint=_sign_direction(raw_amount) or CREDIT,
            )
        )

    return outcome


# ----------------------------------------------------------------------
# Strategy 3: regex sweep
# ----------------------------------------------------------------------


def parse_regex_sweep(
    lines: Sequence[str], profile: BankProfile, policy: AmountPolicy = last_amount
) -> StrategyOutcome:
    outcome = StrategyOutcome()

    for i, line in enumerate(lines):
        date_match, amounts, masked = _scan(line, profile)
        if not date_match or not amounts:
            continue

        raw_amount = amounts[-1].group(0)
        remainder = _strip_amounts(masked, profile)
        description = " ".join(profile.description_pattern.findall(remainder))
        if not description:
            continue

        outcome.candidates.append(
            CandidateTransaction(
                raw_date=date_match.group(0),
                raw_amount=raw_amount,
                raw_description=description,
                line_index=i + 1,
                confidence=REGEX_SWEEP_CONFIDENCE,
                strategy="regex_sweep",
                direction_hint=_sign_direction(raw_amount) or direction_cue(remainder) or CREDIT,
            )
        )

    return outcome


Strategy = Callable[[Sequence[str], BankProfile, AmountPolicy], StrategyOutcome]

STRATEGIES: List[Tuple[str, Strategy]] = [
    ("tabular", parse_tabular),
    ("line_grouped", parse_line_grouped),
    ("regex_sweep", parse_regex_sweep),
]


# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------


def _filter_candidates(
    candidates: List[CandidateTransaction],
) -> Tuple[List[CandidateTransaction], List[ImportIssue]]:
    """Drop candidates without a real calendar date or a non-zero amount."""
    kept: List[CandidateTransaction] = []
    issues: List[ImportIssue] = []

    for candidate in candidates:
        if standardize_date(candidate.raw_date) is None:
            issues.append(
                ImportIssue(
                    row=candidate.line_index,
                    field="date",
                    message=f"Unrecognized date '{candidate.raw_date}'",
                    severity=WARNING,
                    suggestion="Dates must be day/month/year, e.g. 01/04/2024",
                )
            )
            continue
        if not parse_amount(candidate.raw_amount):
            continue
        kept.append(candidate)

    return kept, issues


def recognize(
    lines: Sequence[str],
    profile: BankProfile,
    amount_policy: Optional[str] = None,
    strategies: Sequence[Tuple[str, Strategy]] = STRATEGIES,
) -> RecognitionResult:
    """Run strategies in order; the first with any candidates wins."""
    policy = get_amount_policy(amount_policy or profile.amount_policy)
    attempted: List[ImportIssue] = []
    failures: List[ImportIssue] = []

    for name, strategy in strategies:
        try:
            outcome = strategy(lines, profile, policy)
        except Exception as e:
            logger.warning("strategy_failed", strategy=name, error=str(e))
            failure = ImportIssue(message=f"Parsing strategy '{name}' failed: {e}", severity=ERROR)
            failures.append(failure)
            attempted.append(failure)
            continue

        if not outcome.candidates:
            attempted.extend(outcome.issues)
            logger.debug("strategy_empty", strategy=name, bank=profile.code)
            continue

        kept, filtered_issues = _filter_candidates(outcome.candidates)
        issues = failures + outcome.issues + filtered_issues
        logger.info(
            "strategy_selected",
            strategy=name,
            bank=profile.code,
            candidates=len(outcome.candidates),
            kept=len(kept),
        )
        if not kept:
            issues.append(_no_transactions_issue())
        return RecognitionResult(strategy=name, candidates=kept, issues=issues)

    attempted.append(_no_transactions_issue())
    return RecognitionResult(strategy=None, candidates=[], issues=attempted)


def _no_transactions_issue() -> ImportIssue:
    return ImportIssue(
        message=NO_TRANSACTIONS_MESSAGE,
        severity=WARNING,
        suggestion=(
            "This might not be a bank statement, or its layout is not supported. "
            "Try exporting the statement as CSV."
        ),
    )
