"""Health check router — liveness + readiness.

Readiness confirms the PDF text-extraction backend is importable and
reports the parser limits the instance is running with.
"""

import importlib

import structlog
from fastapi import APIRouter

from packages.statement_parser import __version__ as parser_version
from packages.statement_parser.config import get_settings as get_parser_settings

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health")
async def health_liveness():
    """Liveness probe — returns 200 if the API process is running."""
    return {"status": "healthy", "service": "api"}


@router.get("/health/ready")
async def health_readiness():
    """Readiness probe — checks the PDF extraction backend."""
    parser_settings = get_parser_settings()
    status = {
        "status": "healthy",
        "services": {
            "api": "up",
            "pdf_extraction": "unknown",
        },
        "parser": {
            "version": parser_version,
            "max_file_bytes": parser_settings.MAX_FILE_BYTES,
            "extraction_timeout_s": parser_settings.EXTRACTION_TIMEOUT_SECONDS,
        },
    }

    try:
        pdfplumber = importlib.import_module("pdfplumber")
        status["services"]["pdf_extraction"] = "up"
        status["parser"]["pdfplumber"] = getattr(pdfplumber, "__version__", "unknown")
    except ImportError as e:
        status["services"]["pdf_extraction"] = "down"
        status["status"] = "degraded"
        logger.warning("pdf_backend_unavailable", error=str(e))

    return status
