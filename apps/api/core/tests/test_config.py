"""Tests for core config module."""

import pytest


class TestSettings:
    """Test Pydantic Settings loads env vars correctly."""

    def test_settings_loads_allowed_origins(self, monkeypatch):
        """Settings should parse ALLOWED_ORIGINS as comma-separated list."""
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000, https://statements.example.com")

        from apps.api.core.config import Settings
        settings = Settings()
        assert settings.allowed_origins == [
            "http://localhost:3000",
            "https://statements.example.com",
        ]

    def test_settings_defaults(self, monkeypatch):
        """Settings should have sensible defaults."""
        for name in ("LOG_LEVEL", "ENVIRONMENT", "ALLOWED_ORIGINS", "MAX_UPLOAD_BYTES"):
            monkeypatch.delenv(name, raising=False)

        from apps.api.core.config import Settings
        settings = Settings()
        assert settings.LOG_LEVEL == "INFO"
        assert settings.ENVIRONMENT == "development"
        assert settings.ALLOWED_ORIGINS == "http://localhost:3000"
        assert settings.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
        assert settings.json_logs is False

    def test_production_uses_json_logs(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")

        from apps.api.core.config import Settings
        assert Settings().json_logs is True

    def test_upload_limit_from_env(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "1024")

        from apps.api.core.config import Settings
        assert Settings().MAX_UPLOAD_BYTES == 1024


class TestParserSettings:
    """Parser limits use the STATEMENT_ prefix."""

    def test_parser_defaults(self, monkeypatch):
        for name in ("STATEMENT_MAX_FILE_BYTES", "STATEMENT_EXTRACTION_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        from packages.statement_parser.config import ParserSettings
        settings = ParserSettings()
        assert settings.MAX_FILE_BYTES == 50 * 1024 * 1024
        assert settings.EXTRACTION_TIMEOUT_SECONDS == pytest.approx(30.0)
        assert settings.AMOUNT_POLICY is None

    def test_parser_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("STATEMENT_EXTRACTION_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("STATEMENT_AMOUNT_POLICY", "penultimate")

        from packages.statement_parser.config import ParserSettings
        settings = ParserSettings()
        assert settings.EXTRACTION_TIMEOUT_SECONDS == pytest.approx(5.0)
        assert settings.AMOUNT_POLICY == "penultimate"
