"""Statements router — bank statement upload and parsing endpoints.

POST /statements/import accepts a CSV or PDF statement and returns the
parsed transactions together with row-level warnings. Row problems never
fail the request; only document-level rejections (type, size, scanned PDF,
unreadable file, timeout) come back as RFC 7807 errors.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from apps.api.core.config import Settings, get_settings
from apps.api.domains.statements import service
from apps.api.domains.statements.schemas import (
    BankOut,
    CategorizeRequest,
    CategorizeResponse,
    ImportResponse,
)

router = APIRouter(prefix="/statements", tags=["statements"])
logger = structlog.get_logger()


@router.post("/import", response_model=ImportResponse)
async def import_statement(
    file: UploadFile = File(...),
    bank_type: Optional[str] = Form(None),
    amount_policy: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
):
    """Parse an uploaded bank statement into categorized transactions."""
    filename = file.filename or ""
    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)",
        )

    report = await service.import_upload(
        filename,
        contents,
        content_type=file.content_type,
        bank_type=bank_type,
        amount_policy=amount_policy,
        password=password,
    )

    logger.info(
        "statement_import_complete",
        filename=filename,
        bank=report.bank_code,
        count=report.transaction_count,
        issues=len(report.errors),
    )
    return report.to_dict()


@router.get("/banks", response_model=list[BankOut])
async def list_banks():
    """Supported bank profiles, in detection order."""
    return service.list_banks()


@router.get("/banks/{code}", response_model=BankOut)
async def get_bank(code: str):
    return service.get_bank(code)


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize(request: CategorizeRequest):
    """Keyword categories for free-text descriptions."""
    return {"predictions": service.categorize(request.descriptions)}
