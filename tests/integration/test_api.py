import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import FakeGroqClient, analysis_json
from filing_intake.api.dependencies import (
    get_document_analyzer,
    get_settings,
    get_submission_store,
    get_upload_store,
)
from filing_intake.config import settings
from filing_intake.main import app
from filing_intake.services.document_analyzer import DocumentAnalyzer
from filing_intake.utils.exceptions import StorageError

CONTACT = {"fullName": "Jane Q. Public", "email": "jane@example.com", "phone": "555-123-4567"}
FILING = {"filingType": "Married Filing Jointly", "isReturningClient": False}
INCOME = {"incomeTypes": ["W-2 Employment", "Rental Income"]}


@pytest.fixture
def groq_client():
    return FakeGroqClient(
        replies={
            "w2_2024": analysis_json(document_type="W-2", summary="401k deferrals in box 12."),
            "1098_mortgage": analysis_json(document_type="1098", summary="Mortgage interest paid."),
        },
        default=analysis_json(document_type="Receipt", summary="Office supply receipt."),
    )


@pytest.fixture
def client(test_settings, upload_store, groq_client):
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_upload_store] = lambda: upload_store
    app.dependency_overrides[get_document_analyzer] = lambda: DocumentAnalyzer(
        upload_store, client=groq_client, config=test_settings
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def multipart(sample_documents):
    return [("files", (name, content, content_type)) for name, content, content_type in sample_documents]


def intake_form(contact=CONTACT, filing=FILING, income=INCOME):
    form = {}
    if contact is not None:
        form["contactInfo"] = json.dumps(contact)
    if filing is not None:
        form["filingInfo"] = json.dumps(filing)
    if income is not None:
        form["incomeInfo"] = json.dumps(income)
    return form


class TestAnalyzeEndpoint:
    def test_analyze_documents(self, client, sample_documents):
        response = client.post("/api/analyze", files=multipart(sample_documents))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [r["filename"] for r in body["results"]] == ["w2_2024.txt", "1098_mortgage.txt", "receipt.png"]
        assert body["results"][0]["analysis"]["documentType"] == "W-2"
        assert body["results"][0]["analysis"]["extractedData"]["year"] == "2024"
        assert "urlOrPath" not in body["results"][0]
        assert [s["title"] for s in body["strategies"]] == [
            "Retirement Contribution Optimization",
            "Itemized Deduction Review",
        ]
        assert "potentialSavings" in body["strategies"][0]
        assert body["summary"].startswith("Analyzed 3 of 3 document(s):")

    def test_failed_analysis_is_reported_per_document(self, client, sample_documents, groq_client):
        groq_client.default = None

        response = client.post("/api/analyze", files=multipart(sample_documents))

        assert response.status_code == 200
        results = response.json()["results"]
        assert results[2]["error"] == "No analysis returned for receipt.png"
        assert results[2].get("analysis") is None
        assert results[0]["analysis"]["documentType"] == "W-2"

    def test_no_files(self, client):
        response = client.post("/api/analyze")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "No files provided", "code": "VALIDATION_ERROR"}

    def test_invalid_file_type(self, client, groq_client):
        files = [("files", ("notes.docx", b"PK\x03\x04", "application/msword"))]

        response = client.post("/api/analyze", files=files)

        assert response.status_code == 400
        assert "Invalid file type for notes.docx" in response.json()["error"]
        assert groq_client.calls == []

    def test_oversized_file(self, client, monkeypatch, upload_store):
        monkeypatch.setattr(settings, "MAX_FILE_SIZE", 8)
        files = [("files", ("w2.txt", b"more than eight bytes", "text/plain"))]

        response = client.post("/api/analyze", files=files)

        assert response.status_code == 400
        assert response.json()["error"].startswith("File size exceeds")
        assert not any(upload_store.upload_dir.iterdir())

    def test_storage_failure(self, client, sample_documents, groq_client, test_settings):
        failing_store = MagicMock()
        failing_store.store = AsyncMock(side_effect=StorageError("Failed to save file: w2_2024.txt. disk full"))
        app.dependency_overrides[get_upload_store] = lambda: failing_store
        app.dependency_overrides[get_document_analyzer] = lambda: DocumentAnalyzer(
            failing_store, client=groq_client, config=test_settings
        )

        response = client.post("/api/analyze", files=multipart(sample_documents))

        assert response.status_code == 500
        assert response.json()["code"] == "FILE_UPLOAD_ERROR"
        assert response.json()["error"].startswith("Failed to save file")
        assert groq_client.calls == []


class TestIntakeEndpoint:
    def test_submission_is_saved(self, client, sample_documents, test_settings, groq_client):
        response = client.post(
            "/api/intake", data=intake_form(), files=multipart(sample_documents[:1]),
            params={"account_id": "acct-42"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Intake submission received successfully"

        record_path = Path(test_settings.DATA_DIR) / "intakes" / f"{body['submissionId']}.json"
        record = json.loads(record_path.read_text(encoding="utf-8"))
        assert record["contactInfo"]["fullName"] == "Jane Q. Public"
        assert record["filingInfo"]["filingType"] == "Married Filing Jointly"
        assert record["accountId"] == "acct-42"
        assert record["documents"][0]["filename"] == "w2_2024.txt"
        assert record["documents"][0]["analysis"] is None
        assert groq_client.calls == []

    def test_analysis_attached_when_enabled(self, client, sample_documents, test_settings):
        test_settings.ENABLE_AI_ANALYSIS = True

        response = client.post("/api/intake", data=intake_form(), files=multipart(sample_documents))

        body = response.json()
        record_path = Path(test_settings.DATA_DIR) / "intakes" / f"{body['submissionId']}.json"
        documents = json.loads(record_path.read_text(encoding="utf-8"))["documents"]
        assert [d["analysis"]["documentType"] for d in documents] == ["W-2", "1098", "Receipt"]

    def test_persistence_failure_does_not_fail_submission(self, client):
        failing_store = MagicMock()
        failing_store.save = AsyncMock(side_effect=StorageError("Failed to save intake submission: disk full"))
        app.dependency_overrides[get_submission_store] = lambda: failing_store

        response = client.post("/api/intake", data=intake_form())

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json().get("submissionId") is None

    def test_documents_are_optional(self, client):
        response = client.post("/api/intake", data=intake_form())

        assert response.status_code == 200
        assert response.json()["submissionId"]

    @pytest.mark.parametrize("form, error", [
        (intake_form(contact=None), "Contact information is required"),
        (intake_form(filing=None), "Filing information is required"),
        (intake_form(income=None), "Income information is required"),
        (intake_form(contact={"fullName": "J", "email": "nope", "phone": "1"}), "Invalid contact information format"),
        (intake_form(filing={"filingType": "Corporate", "isReturningClient": True}), "Invalid filing information format"),
        (intake_form(income={"incomeTypes": []}), "Invalid income information format"),
    ])
    def test_invalid_sections(self, client, form, error):
        response = client.post("/api/intake", data=form)

        assert response.status_code == 400
        assert response.json()["error"] == error

    def test_unparseable_json_section(self, client):
        form = intake_form()
        form["contactInfo"] = "{not json"

        response = client.post("/api/intake", data=form)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid contact information format"


class TestDownloadEndpoint:
    def test_download_stored_document(self, client, upload_store):
        upload_store.upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_store.upload_dir / "abc_1099.pdf").write_bytes(b"%PDF-1.4 statement")

        response = client.get("/api/download", params={"path": "/uploads/abc_1099.pdf", "filename": "1099 copy.pdf"})

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 statement"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="1099_copy.pdf"'

    def test_path_required(self, client):
        response = client.get("/api/download")

        assert response.status_code == 400
        assert response.json()["error"] == "Path required"

    def test_missing_file(self, client):
        response = client.get("/api/download", params={"path": "/uploads/missing.pdf"})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "File not found", "code": "NOT_FOUND"}


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["api_base"] == "/api"
