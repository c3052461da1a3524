"""Statements service: glue between HTTP uploads and the statement parser."""

from typing import Optional

from apps.api.core.errors import NotFoundError, ValidationError
from packages.statement_parser import (
    BankProfile,
    ImportReport,
    RawDocument,
    StatementImporter,
    get_profile,
    list_profiles,
)
from packages.statement_parser.categorizer import classify


def build_importer(
    bank_type: Optional[str] = None,
    amount_policy: Optional[str] = None,
    password: Optional[str] = None,
) -> StatementImporter:
    """Build an importer, turning bad option values into a 422."""
    try:
        return StatementImporter(
            bank_type=bank_type or None,
            amount_policy=amount_policy or None,
            password=password or None,
        )
    except ValueError as e:
        raise ValidationError(str(e))


async def import_upload(
    file_name: str,
    content: bytes,
    content_type: Optional[str] = None,
    bank_type: Optional[str] = None,
    amount_policy: Optional[str] = None,
    password: Optional[str] = None,
) -> ImportReport:
    """Run one uploaded file through the import pipeline.

    StatementRejectedError propagates to the registered error handler,
    which maps it to 413/415/422/504.
    """
    importer = build_importer(bank_type, amount_policy, password)
    document = RawDocument.from_upload(file_name, content, content_type)
    return await importer.import_document(document)


def bank_to_dict(profile: BankProfile) -> dict:
    return {
        "code": profile.code,
        "name": profile.display_name,
        "keywords": list(profile.keywords),
        "amount_policy": profile.amount_policy,
    }


def list_banks() -> list[dict]:
    return [bank_to_dict(p) for p in list_profiles()]


def get_bank(code: str) -> dict:
    try:
        return bank_to_dict(get_profile(code))
    except ValueError:
        raise NotFoundError(f"Bank profile '{code}' not found")


def categorize(descriptions: list[str]) -> list[dict]:
    return [{"description": d, "category": classify(d)} for d in descriptions]
