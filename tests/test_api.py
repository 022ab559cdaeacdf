"""
Test: HTTP surface, with the OpenAI and Firebase services swapped for fakes.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeGenerator, FakeOcr
from docsum.config import settings
from docsum.errors import SummaryNotFoundError
from docsum.main import app
from docsum.routers import dependencies
from docsum.services.document_processor import DocumentProcessor
from docsum.services.extractor_service import TextExtractor


class FakeSpeech:
    def __init__(self, transcript="We agreed to ship the release on Friday."):
        self.transcript = transcript

    def is_configured(self) -> bool:
        return True

    async def speech_to_text(self, data: bytes, file_name: str = "audio.wav") -> str:
        return self.transcript


class FakeFirebase:
    def __init__(self):
        self.docs: dict[str, dict] = {}

    async def save_summary(self, user_id, data):
        summary_id = f"s{len(self.docs) + 1}"
        self.docs[summary_id] = {"id": summary_id, "user_id": user_id, **data}
        return summary_id

    async def get_user_summaries(self, user_id, limit=50):
        return [d for d in self.docs.values() if d["user_id"] == user_id][:limit]

    async def update_summary(self, summary_id, updates):
        if summary_id not in self.docs:
            raise SummaryNotFoundError(summary_id)
        self.docs[summary_id].update(updates)

    async def delete_summary(self, summary_id):
        if self.docs.pop(summary_id, None) is None:
            raise SummaryNotFoundError(summary_id)


@pytest.fixture
def generator():
    return FakeGenerator(keywords={"apples": ["apples", "fruit"], "pears": ["pears", "fruit"]})


@pytest.fixture
def firebase():
    return FakeFirebase()


@pytest.fixture
def client(generator, firebase):
    extractor = TextExtractor(FakeOcr())
    processor = DocumentProcessor(extractor, generator)
    app.dependency_overrides[dependencies.get_processor] = lambda: processor
    app.dependency_overrides[dependencies.get_extractor] = lambda: extractor
    app.dependency_overrides[dependencies.get_openai_service] = lambda: FakeSpeech()
    app.dependency_overrides[dependencies.get_firebase_service] = lambda: firebase
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    r = client.get("/")

    assert r.status_code == 200
    assert r.json() == {"message": "API is running!"}


def test_summarize_text(client, generator):
    r = client.post("/summarize/text", json={"text": "I like apples a lot.", "length": "short"})

    assert r.status_code == 200
    data = r.json()
    assert data["summary"] == "Summary of: I like apples a lot."
    assert data["keywords"] == ["apples", "fruit"]
    assert data["file_name"] == "pasted-text.txt"
    assert data["word_count"]["original"] == 5


def test_summarize_text_rejects_blank_text(client):
    r = client.post("/summarize/text", json={"text": "   "})

    assert r.status_code == 422


def test_summarize_file_pdf(client, pdf_bytes):
    r = client.post(
        "/summarize/file",
        files={"file": ("report.pdf", pdf_bytes, "application/pdf")},
        data={"length": "long"},
    )

    assert r.status_code == 200
    assert r.json()["original_text"] == "Alpha Beta"
    assert r.json()["file_type"] == "application/pdf"


def test_summarize_file_unsupported(client):
    r = client.post("/summarize/file", files={"file": ("notes.xyz", b"???", "application/x-unknown")})

    assert r.status_code == 415
    assert "notes.xyz" in r.json()["detail"]


def test_summarize_file_too_large(client, monkeypatch):
    monkeypatch.setattr(settings, "max_file_size_mb", 0)

    r = client.post("/summarize/file", files={"file": ("a.txt", b"Hello world", "text/plain")})

    assert r.status_code == 413
    assert r.json()["detail"] == "a.txt is too large. Maximum size: 0MB"


def test_summarize_file_generation_failure(client, generator):
    generator.fail_on = ("apples",)

    r = client.post("/summarize/file", files={"file": ("a.txt", b"apples everywhere", "text/plain")})

    assert r.status_code == 502


def test_summarize_batch(client, generator):
    files = [
        ("files", ("a.txt", b"Red apples", "text/plain")),
        ("files", ("notes.xyz", b"???", "application/x-unknown")),
        ("files", ("b.txt", b"Green pears", "text/plain")),
    ]

    r = client.post("/summarize/batch", files=files, data={"length": "short"})

    assert r.status_code == 200
    data = r.json()
    assert [o["status"] for o in data["outcomes"]] == ["success", "failure", "success"]
    assert data["failed_count"] == 1
    assert data["result"]["document_count"] == 2
    assert data["result"]["file_names"] == ["a.txt", "b.txt"]
    assert data["result"]["keywords"] == ["apples", "fruit", "pears"]
    assert data["result"]["word_count"]["original"] == 4
    assert len(generator.calls) == 3


def test_summarize_batch_single_success(client, generator):
    files = [
        ("files", ("a.txt", b"Red apples", "text/plain")),
        ("files", ("notes.xyz", b"???", "application/x-unknown")),
    ]

    r = client.post("/summarize/batch", files=files)

    assert r.status_code == 200
    result = r.json()["result"]
    assert result["file_name"] == "a.txt"
    assert "document_count" not in result
    assert len(generator.calls) == 1


def test_summarize_batch_all_failed(client):
    files = [("files", (f"f{i}.xyz", b"???", "application/x-unknown")) for i in range(3)]

    r = client.post("/summarize/batch", files=files)

    assert r.status_code == 422
    assert len(r.json()["detail"]["errors"]) == 3


def test_summarize_batch_oversize_file_fails_alone(client, generator, monkeypatch):
    monkeypatch.setattr(settings, "max_file_size_mb", 1)
    files = [
        ("files", ("a.txt", b"Red apples", "text/plain")),
        ("files", ("big.txt", b"word " * 250_000, "text/plain")),
        ("files", ("b.txt", b"Green pears", "text/plain")),
    ]

    r = client.post("/summarize/batch", files=files)

    assert r.status_code == 200
    data = r.json()
    assert [o["status"] for o in data["outcomes"]] == ["success", "failure", "success"]
    assert data["outcomes"][1] == {
        "status": "failure",
        "file_name": "big.txt",
        "error": "big.txt is too large. Maximum size: 1MB",
    }
    assert data["result"]["document_count"] == 2
    assert data["result"]["file_names"] == ["a.txt", "b.txt"]
    assert all("word word" not in text for text, _ in generator.calls)


def test_summarize_batch_all_oversize(client, monkeypatch):
    monkeypatch.setattr(settings, "max_file_size_mb", 0)
    files = [("files", (f"f{i}.txt", b"Hello world", "text/plain")) for i in range(2)]

    r = client.post("/summarize/batch", files=files)

    assert r.status_code == 422
    assert r.json()["detail"]["errors"] == [
        "f0.txt: f0.txt is too large. Maximum size: 0MB",
        "f1.txt: f1.txt is too large. Maximum size: 0MB",
    ]


def test_summarize_speech(client):
    r = client.post("/summarize/speech", files={"audio": ("memo.webm", b"\x1a\x45\xdf\xa3", "audio/webm")})

    assert r.status_code == 200
    assert r.json()["original_text"] == "We agreed to ship the release on Friday."
    assert r.json()["file_name"] == "transcript.txt"


def test_transcribe(client):
    r = client.post("/transcribe", files={"audio": ("memo.wav", b"RIFF", "audio/wav")})

    assert r.status_code == 200
    assert r.json() == {"text": "We agreed to ship the release on Friday.", "word_count": 8}


def test_extract(client, docx_bytes):
    r = client.post("/extract", files={"file": ("contract.docx", docx_bytes, "application/octet-stream")})

    assert r.status_code == 200
    data = r.json()
    assert data["kind"] == "docx"
    assert "Net 30 days" in data["content"]


def test_extract_empty_file(client):
    r = client.post("/extract", files={"file": ("blank.txt", b"   ", "text/plain")})

    assert r.status_code == 422


def test_saved_summaries_crud(client, firebase):
    r = client.post(
        "/summaries",
        json={"user_id": "u1", "summary": "Apples are red.", "keywords": ["apples"], "word_count": {"original": 12}},
    )
    assert r.status_code == 201
    summary_id = r.json()["id"]

    r = client.get("/summaries", params={"user_id": "u1"})
    assert r.status_code == 200
    assert [s["id"] for s in r.json()] == [summary_id]
    assert r.json()[0]["word_count"]["original"] == 12

    r = client.patch(f"/summaries/{summary_id}", json={"title": "Fruit"})
    assert r.status_code == 204
    assert firebase.docs[summary_id]["title"] == "Fruit"

    r = client.delete(f"/summaries/{summary_id}")
    assert r.status_code == 204
    assert client.delete(f"/summaries/{summary_id}").status_code == 404


def test_saved_summary_keeps_original_text_and_file_type(client):
    for file_type, text in [("application/pdf", "Alpha Beta"), ("text/plain", "Hello world")]:
        r = client.post(
            "/summaries",
            json={"user_id": "u1", "summary": "Short.", "original_text": text, "file_type": file_type},
        )
        assert r.status_code == 201

    r = client.get("/summaries", params={"user_id": "u1"})
    assert [(s["file_type"], s["original_text"]) for s in r.json()] == [
        ("application/pdf", "Alpha Beta"),
        ("text/plain", "Hello world"),
    ]

    r = client.get("/summaries", params={"user_id": "u1", "file_type": "application/pdf"})
    assert [s["original_text"] for s in r.json()] == ["Alpha Beta"]


def test_saved_summaries_unavailable_without_firebase(client):
    del app.dependency_overrides[dependencies.get_firebase_service]

    r = client.get("/summaries", params={"user_id": "u1"})

    assert r.status_code == 503
