"""
Bank Format Detector - picks a parsing profile from statement text.

Supports: HDFC, ICICI, SBI, Axis, Kotak, PNB, Canara, Union Bank,
          Bank of Baroda, Bank of India, and a generic fallback.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import structlog

logger = structlog.get_logger()

DATE_SLASH = r"\b\d{2}/\d{2}/(?:\d{4}|\d{2})\b"
DATE_DASH = r"\b\d{2}-\d{2}-(?:\d{4}|\d{2})\b"
DATE_ANY = r"\b(?:\d{4}-\d{2}-\d{2}|\d{1,2}[/.-]\d{1,2}[/.-](?:\d{4}|\d{2}))\b"

# Signed, optionally comma-grouped (1,200.50 or Indian 1,00,000.00) amounts.
# Digits glued to words, references (#123, UPI-123) or times are not amounts.
AMOUNT = (
    r"(?<![\w/#:-])(?<!\d[.,])[+-]?(?:\d{1,3}(?:,\d{2,3})+|\d+)(?:\.\d{1,2})?"
    r"(?![\d/:]|[.,-]\d)"
)
DESCRIPTION = r"[A-Za-z0-9]+"


@dataclass(frozen=True)
class BankProfile:
    """Named parsing configuration for one bank."""

    code: str
    display_name: Optional[str]
    keywords: Tuple[str, ...] = ()
    date_pattern: "re.Pattern[str]" = field(default=re.compile(DATE_ANY), repr=False)
    amount_pattern: "re.Pattern[str]" = field(default=re.compile(AMOUNT), repr=False)
    description_pattern: "re.Pattern[str]" = field(
        default=re.compile(DESCRIPTION), repr=False
    )
    balance_keywords: Tuple[str, ...] = ("balance", "bal")
    amount_policy: str = "last"

    @property
    def is_generic(self) -> bool:
        return self.code == "generic"


def _profile(code: str, name: str, keywords: List[str], date_pattern: str) -> BankProfile:
    return BankProfile(
        code=code,
        display_name=name,
        keywords=tuple(keywords),
        date_pattern=re.compile(date_pattern),
    )


# Checked in this order; calibrated by how often each bank shows up, and
# longer names sharing a suffix ("state bank of india", "union bank of
# india") come before "bank of india".
BANK_PROFILES: List[BankProfile] = [
    _profile("hdfc", "HDFC Bank", ["hdfc bank", "hdfc"], DATE_SLASH),
    _profile("icici", "ICICI Bank", ["icici bank", "icici"], DATE_DASH),
    _profile(
        "sbi", "State Bank of India", ["state bank of india", "state bank", "sbi"], DATE_DASH
    ),
    _profile("axis", "Axis Bank", ["axis bank", "axis"], DATE_SLASH),
    _profile("kotak", "Kotak Mahindra Bank", ["kotak mahindra", "kotak"], DATE_SLASH),
    _profile("pnb", "Punjab National Bank", ["punjab national bank", "pnb"], DATE_ANY),
    _profile("canara", "Canara Bank", ["canara bank", "canara"], DATE_ANY),
    _profile("union", "Union Bank of India", ["union bank of india", "union bank"], DATE_ANY),
    _profile("bob", "Bank of Baroda", ["bank of baroda", "bob"], DATE_ANY),
    _profile("boi", "Bank of India", ["bank of india", "boi"], DATE_ANY),
]

GENERIC_PROFILE = BankProfile(code="generic", display_name=None)

_PROFILES_BY_CODE: Dict[str, BankProfile] = {p.code: p for p in BANK_PROFILES}
_PROFILES_BY_CODE[GENERIC_PROFILE.code] = GENERIC_PROFILE


def _keyword_regex(keyword: str) -> "re.Pattern[str]":
    # short names ("sbi", "bob") only count as whole words
    if len(keyword) <= 4:
        return re.compile(r"\b" + re.escape(keyword) + r"\b")
    return re.compile(re.escape(keyword))


_KEYWORD_PATTERNS = [
    (profile, [_keyword_regex(kw) for kw in profile.keywords]) for profile in BANK_PROFILES
]


def get_profile(code: str) -> BankProfile:
    """Look up a profile by code (hdfc, icici, sbi, axis, ..., generic)."""
    profile = _PROFILES_BY_CODE.get((code or "").strip().lower())
    if profile is None:
        raise ValueError(
            f"Unknown bank type '{code}'. Expected one of: {', '.join(_PROFILES_BY_CODE)}"
        )
    return profile


def list_profiles() -> List[BankProfile]:
    return BANK_PROFILES + [GENERIC_PROFILE]


class BankFormatDetector:
    """Detects bank format from statement text."""

    @classmethod
    def detect_from_text(cls, text: Optional[str]) -> Optional[BankProfile]:
        """First bank whose name appears in the text, or None."""
        if not text:
            return None

        text_lower = text.lower()
        for profile, patterns in _KEYWORD_PATTERNS:
            if any(p.search(text_lower) for p in patterns):
                return profile
        return None

    @classmethod
    def detect(cls, text: Optional[str], file_name: Optional[str] = None) -> BankProfile:
        """Detect from content first, then from the file name; default generic."""
        profile = cls.detect_from_text(text)
        source = "content"

        if profile is None and file_name:
            # "HDFC_Statement_Apr.csv" style names
            profile = cls.detect_from_text(re.sub(r"[_.\-]+", " ", file_name))
            source = "file_name"

        if profile is None:
            profile = GENERIC_PROFILE
            source = "fallback"

        logger.info("bank_detected", bank=profile.code, source=source)
        return profile
