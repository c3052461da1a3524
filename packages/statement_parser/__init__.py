"""
Statement Parser

Bank statement import: text extraction, bank detection, transaction
recognition, normalization and categorization.
"""

__version__ = "0.1.0"

from .detector import BankFormatDetector, BankProfile, get_profile, list_profiles
from .errors import StatementRejectedError
from .importer import StatementImporter, import_statement, import_statement_sync
from .models import ImportIssue, ImportReport, ParsedTransaction, RawDocument

__all__ = [
    "BankFormatDetector",
    "BankProfile",
    "get_profile",
    "list_profiles",
    "StatementRejectedError",
    "StatementImporter",
    "import_statement",
    "import_statement_sync",
    "ImportIssue",
    "ImportReport",
    "ParsedTransaction",
    "RawDocument",
]
