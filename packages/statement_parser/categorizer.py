"""
Category Classifier - keyword-table categories for transaction descriptions.

Keywords match case-insensitively as substrings; keywords of four
characters or fewer ("atm", "bus", "gas") only match as whole words.
"""

import re
from typing import List, Optional, Tuple

# Ordered: the first category with a keyword hit wins, so income is checked
# before transfer ("salary transfer" is income).
CATEGORY_RULES: List[Tuple[str, List[str]]] = [
    (
        "income",
        ["salary", "payroll", "interest", "dividend", "refund", "cashback", "deposit"],
    ),
    (
        "food",
        [
            "swiggy",
            "zomato",
            "food",
            "restaurant",
            "cafe",
            "dining",
            "delivery",
            "dominos",
            "pizza",
            "mcdonald",
            "starbucks",
            "kfc",
        ],
    ),
    (
        "transport",
        [
            "uber",
            "ola",
            "rapido",
            "taxi",
            "fuel",
            "petrol",
            "diesel",
            "metro",
            "bus",
            "train",
            "irctc",
            "parking",
            "toll",
        ],
    ),
    (
        "shopping",
        [
            "amazon",
            "flipkart",
            "myntra",
            "ajio",
            "mall",
            "store",
            "shop",
            "clothing",
            "fashion",
            "electronics",
        ],
    ),
    (
        "utilities",
        [
            "electricity",
            "power",
            "water",
            "gas",
            "internet",
            "wifi",
            "broadband",
            "mobile",
            "phone",
            "recharge",
            "airtel",
            "jio",
        ],
    ),
    (
        "entertainment",
        [
            "netflix",
            "spotify",
            "prime",
            "hotstar",
            "movie",
            "cinema",
            "theatre",
            "concert",
            "bookmyshow",
            "game",
            "gaming",
        ],
    ),
    ("cash", ["atm", "cash", "withdrawal"]),
    ("transfer", ["transfer", "neft", "imps", "rtgs", "upi"]),
    ("payment", ["payment", "bill", "rent", "emi"]),
    (
        "healthcare",
        ["medical", "hospital", "pharmacy", "doctor", "clinic", "medicine", "apollo"],
    ),
    ("education", ["school", "college", "university", "course", "tuition", "fees"]),
    (
        "groceries",
        [
            "grocery",
            "supermarket",
            "vegetables",
            "milk",
            "bread",
            "provisions",
            "bigbasket",
            "blinkit",
            "dmart",
        ],
    ),
]

DEFAULT_CATEGORY = "other"
CATEGORIES = [category for category, _ in CATEGORY_RULES] + [DEFAULT_CATEGORY]


def _keyword_pattern(keyword: str) -> "re.Pattern[str]":
    # word boundary check for short keywords to avoid false positives
    # (e.g. "ola" inside "cola", "emi" inside "premium")
    if len(keyword) <= 4:
        return re.compile(r"\b" + re.escape(keyword) + r"\b")
    return re.compile(re.escape(keyword))


_COMPILED_RULES = [
    (category, [_keyword_pattern(kw) for kw in keywords])
    for category, keywords in CATEGORY_RULES
]


def match_category(description: Optional[str]) -> Optional[str]:
    """Return the first category whose keywords hit, else None."""
    if not description:
        return None

    text_lower = description.lower()
    for category, patterns in _COMPILED_RULES:
        if any(p.search(text_lower) for p in patterns):
            return category
    return None


def classify(description: Optional[str]) -> str:
    return match_category(description) or DEFAULT_CATEGORY
