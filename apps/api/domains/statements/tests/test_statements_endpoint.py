"""Tests for the statements upload and bank lookup endpoints."""

import io

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.api.core.config import Settings, get_settings
from apps.api.core.errors import register_error_handlers
from apps.api.domains.statements.router import router
from packages.statement_parser import extraction


@pytest.fixture
def app():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(router, prefix="/api/v1")
    return app


@pytest.fixture
def client(app):
    c = TestClient(app, raise_server_exceptions=False)
    yield c
    app.dependency_overrides.clear()


CSV_SAMPLE = """Date,Narration,Debit,Credit,Balance
01/04/2024,ATM WDL,500,,1200
02/04/2024,SALARY APR,,50000,51200
03/04/2024,SWIGGY ORDER 8812,450.00,,50750
"""

HDFC_PDF_TEXT = """HDFC BANK LTD
Date Narration Amount Balance
01/04/2024 UPI SWIGGY ORDER 45,210.50 -350.00
06/04/2024 UBER TRIP 44,860.50 -350.00
"""


def _upload(client, name, content, content_type, **data):
    return client.post(
        "/api/v1/statements/import",
        files={"file": (name, io.BytesIO(content), content_type)},
        data=data,
    )


def test_import_csv_returns_200(client):
    response = _upload(client, "statement.csv", CSV_SAMPLE.encode("utf-8"), "text/csv")
    assert response.status_code == 200


def test_import_csv_returns_transactions(client):
    response = _upload(client, "statement.csv", CSV_SAMPLE.encode("utf-8"), "text/csv")
    data = response.json()

    assert data["transaction_count"] == 3
    assert len(data["transactions"]) == 3
    atm = data["transactions"][0]
    assert atm["date"] == "2024-04-01"
    assert atm["direction"] == "debit"
    assert atm["amount"] == 500
    assert atm["category"] == "cash"
    assert atm["is_reconciled"] is False
    assert [t["category"] for t in data["transactions"]] == ["cash", "income", "food"]
    assert data["statement_period"] == {"start_date": "2024-04-01", "end_date": "2024-04-03"}
    assert data["errors"] == []


def test_import_pdf_detects_bank(client, monkeypatch):
    monkeypatch.setattr(extraction, "read_pdf_text", lambda *a: HDFC_PDF_TEXT)

    response = _upload(client, "statement.pdf", b"%PDF-1.4", "application/pdf")

    assert response.status_code == 200
    data = response.json()
    assert data["bank_code"] == "hdfc"
    assert data["bank_name"] == "HDFC Bank"
    assert data["media_type"] == "pdf"
    assert all(t["direction"] == "debit" for t in data["transactions"])


def test_row_warnings_do_not_fail_the_request(client):
    csv = "Date,Description,Amount\n01/04/2024,COFFEE,4.50\n02/04/2024,BROKEN,\n"

    response = _upload(client, "s.csv", csv.encode("utf-8"), "text/csv")

    assert response.status_code == 200
    data = response.json()
    assert data["transaction_count"] == 1
    assert data["errors"][0]["severity"] == "warning"
    assert data["errors"][0]["row"] == 3


def test_scanned_pdf_is_rejected_with_suggestion(client, monkeypatch):
    monkeypatch.setattr(extraction, "read_pdf_text", lambda *a: "")

    response = _upload(client, "scan.pdf", b"%PDF-1.4", "application/pdf")

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "no_text_layer"
    assert "OCR" in body["suggestion"]


def test_unsupported_type_is_415(client):
    response = _upload(client, "statement.xlsx", b"PK\x03\x04", "application/octet-stream")

    assert response.status_code == 415
    assert response.json()["code"] == "unsupported_file_type"


def test_upload_limit_is_413(app, client):
    app.dependency_overrides[get_settings] = lambda: Settings(MAX_UPLOAD_BYTES=64)

    response = _upload(client, "statement.csv", b"x" * 65, "text/csv")

    assert response.status_code == 413
    assert response.json()["title"] == "Payload Too Large"


def test_unknown_bank_type_is_422(client):
    response = _upload(
        client, "statement.csv", CSV_SAMPLE.encode("utf-8"), "text/csv", bank_type="nosuchbank"
    )

    assert response.status_code == 422
    assert "Unknown bank type" in response.json()["detail"]


def test_bank_type_override(client):
    response = _upload(
        client, "statement.csv", CSV_SAMPLE.encode("utf-8"), "text/csv", bank_type="axis"
    )

    assert response.json()["bank_code"] == "axis"


def test_list_banks(client):
    response = client.get("/api/v1/statements/banks")

    assert response.status_code == 200
    codes = [b["code"] for b in response.json()]
    assert codes[0] == "hdfc"
    assert codes[-1] == "generic"


def test_get_bank(client):
    assert client.get("/api/v1/statements/banks/sbi").json()["name"] == "State Bank of India"
    assert client.get("/api/v1/statements/banks/nosuchbank").status_code == 404


def test_categorize(client):
    response = client.post(
        "/api/v1/statements/categorize",
        json={"descriptions": ["UBER TRIP", "SALARY CREDIT APR", "MYSTERY"]},
    )

    assert response.status_code == 200
    categories = [p["category"] for p in response.json()["predictions"]]
    assert categories == ["transport", "income", "other"]
