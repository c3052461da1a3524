"""Parser configuration via Pydantic Settings.

Limits and tunables for the import pipeline, loaded from ``STATEMENT_*``
environment variables (or a local ``.env``).
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class ParserSettings(BaseSettings):
    """Statement parser settings loaded from environment variables."""

    MAX_FILE_BYTES: int = Field(
        default=50 * 1024 * 1024,
        description="Hard ceiling on input size, checked before extraction",
    )
    EXTRACTION_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Upper bound on PDF text-layer extraction",
    )
    MAX_PDF_PAGES: int = Field(default=50, description="Pages read per PDF")
    AMOUNT_POLICY: Optional[str] = Field(
        default=None,
        description="Amount-selection policy (last, penultimate) applied to every bank",
    )

    model_config = {"env_prefix": "STATEMENT_", "env_file": ".env", "extra": "ignore"}


def get_settings() -> ParserSettings:
    """Factory for ParserSettings; tests may override it."""
    return ParserSettings()
