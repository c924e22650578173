import json
import pytest
import tempfile
from pathlib import Path
from types import SimpleNamespace

from filing_intake.config import Settings
from filing_intake.models.document import AnalysisResult, DocumentAnalysis
from filing_intake.services.upload_store import LocalUploadStore


def make_completion(content):
    """Shape of a Groq chat completion as far as the analyzer reads it"""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeGroqClient:
    """
    Stand-in for groq.AsyncGroq.

    `replies` maps a filename fragment to a reply string or an exception;
    the first fragment found in the request text decides the reply.
    """

    def __init__(self, replies=None, default=None):
        self.replies = replies or {}
        self.default = default
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        text = " ".join(
            part.get("text", "") for part in kwargs["messages"][0]["content"] if part["type"] == "text"
        )
        reply = self.default
        for fragment, candidate in self.replies.items():
            if fragment in text:
                reply = candidate
                break
        if isinstance(reply, Exception):
            raise reply
        return make_completion(reply)


def analysis_json(document_type="W-2", summary="", notes=None, **extra):
    payload = {
        "documentType": document_type,
        "confidence": "high",
        "extractedData": {"year": "2024"},
        "summary": summary,
        "notes": notes or [],
    }
    payload.update(extra)
    return json.dumps(payload)


def make_result(filename="doc.pdf", summary="", notes=None, document_type="W-2", error=None):
    if error:
        return AnalysisResult(filename=filename, error=error)
    return AnalysisResult(
        filename=filename,
        analysis=DocumentAnalysis(document_type=document_type, summary=summary, notes=notes or []),
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)

@pytest.fixture
def test_settings(temp_dir):
    """Settings pointing at temporary directories with a dummy API key"""
    return Settings(
        GROQ_API_KEY="test-key",
        UPLOAD_DIR=str(temp_dir / "uploads"),
        DATA_DIR=str(temp_dir / "data"),
        LOG_FILE=None,
    )

@pytest.fixture
def upload_store(test_settings):
    return LocalUploadStore(upload_dir=test_settings.UPLOAD_DIR)

@pytest.fixture
def fake_groq():
    return FakeGroqClient(default=analysis_json(summary="Standard wage statement."))

@pytest.fixture
def sample_documents():
    """(filename, content, content_type) triples a client would upload"""
    return [
        ("w2_2024.txt", b"Form W-2 Wage and Tax Statement 2024. Box 12 code D: 401k deferrals $8,000.", "text/plain"),
        ("1098_mortgage.txt", b"Form 1098 Mortgage Interest Statement. Mortgage interest received $12,400.", "text/plain"),
        ("receipt.png", b"\x89PNG\r\n\x1a\nfake-image-bytes", "image/png"),
    ]
