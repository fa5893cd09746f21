"""Tests for the document store and the FastAPI endpoints.

WHY: The HTTP API is how browser front ends drive the reader. Status
codes, error bodies and frame payloads are a contract with those
clients; the store's TTL and limits keep a long-running server bounded.

HOW: The store is tested directly with explicit clock values. Endpoints
are exercised through the FastAPI TestClient; URL fetches are patched
with AsyncMock so nothing touches the network.

RULES:
- The module-level document store is cleared before and after each test
- Each test is independent: documents are created through the API
"""

from __future__ import annotations

import io
import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from rsvp_reader import __version__
from rsvp_reader.core.pipeline import build_document
from rsvp_reader.server.app import app, document_store
from rsvp_reader.server.store import DocumentStore
from rsvp_reader.sources.errors import SourceError, SourceErrorCategory

from tests.conftest import SAMPLE_TRANSCRIPT


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_document_store():
    """Clear all documents before each test to ensure isolation."""
    document_store._documents.clear()
    yield
    document_store._documents.clear()


@pytest.fixture
def client():
    return TestClient(app)


def _create(client, text: str = SAMPLE_TRANSCRIPT) -> dict:
    resp = client.post("/documents", json={"text": text})
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# DocumentStore
# ---------------------------------------------------------------------------


class TestDocumentStore:
    def test_add_and_get(self, transcript_doc):
        store = DocumentStore()
        stored = store.add(transcript_doc, "text")
        assert len(stored.id) == 32
        assert store.get(stored.id) is stored
        assert len(store) == 1

    def test_get_unknown(self):
        assert DocumentStore().get("nope") is None

    def test_delete(self, transcript_doc):
        store = DocumentStore()
        stored = store.add(transcript_doc, "text")
        assert store.delete(stored.id) is True
        assert store.delete(stored.id) is False
        assert store.get(stored.id) is None

    def test_max_documents(self, transcript_doc):
        store = DocumentStore(max_documents=1)
        store.add(transcript_doc, "text")
        with pytest.raises(ValueError, match="Maximum"):
            store.add(transcript_doc, "text")

    def test_cleanup_expired_uses_last_access(self, transcript_doc):
        store = DocumentStore(ttl_seconds=60)
        old = store.add(transcript_doc, "old")
        fresh = store.add(transcript_doc, "fresh")
        old.accessed_at = 1000.0
        fresh.accessed_at = 1050.0

        assert store.cleanup_expired(now=1100.0) == 1
        assert [d.id for d in store.list_documents()] == [fresh.id]

    def test_get_refreshes_access_time(self, transcript_doc):
        store = DocumentStore(ttl_seconds=60)
        stored = store.add(transcript_doc, "text")
        stored.accessed_at = 0.0
        store.get(stored.id)
        assert stored.accessed_at > 0.0


# ---------------------------------------------------------------------------
# POST /documents*
# ---------------------------------------------------------------------------


class TestCreateDocument:
    def test_text_document(self, client):
        body = _create(client)
        assert body["source"] == "text"
        assert body["is_transcript"] is True
        assert body["total_tokens"] == 25
        assert body["total_paragraphs"] == 3
        assert body["speakers"] == ["Jane Doe", "John Smith"]
        assert body["paragraphs"][2] == {
            "index": 2,
            "speaker": "Jane Doe",
            "start": 16,
            "end": 24,
            "text": "Jane Doe (00:09): So, John Smith, tell us how it works.",
        }

    def test_blank_text_rejected(self, client):
        resp = client.post("/documents", json={"text": "   "})
        assert resp.status_code == 422
        assert "No readable text" in resp.json()["detail"]

    def test_missing_text_field(self, client):
        resp = client.post("/documents", json={})
        assert resp.status_code == 422

    def test_lone_url_is_fetched(self, client):
        fetch = AsyncMock(return_value=SAMPLE_TRANSCRIPT)
        with patch("rsvp_reader.server.app.fetch_url_text", new=fetch):
            resp = client.post("/documents", json={"text": "https://example.com/talk"})
        assert resp.status_code == 201
        assert resp.json()["source"] == "https://example.com/talk"
        fetch.assert_awaited_once_with("https://example.com/talk")

    def test_url_resolution_can_be_disabled(self, client):
        fetch = AsyncMock()
        with patch("rsvp_reader.server.app.fetch_url_text", new=fetch):
            resp = client.post("/documents", json={"text": "https://example.com/talk", "resolve_urls": False})
        assert resp.status_code == 201
        assert resp.json()["total_tokens"] == 1
        fetch.assert_not_awaited()

    def test_url_endpoint(self, client):
        with patch("rsvp_reader.server.app.fetch_url_text", new=AsyncMock(return_value=SAMPLE_TRANSCRIPT)):
            resp = client.post("/documents/url", json={"url": "https://example.com/talk"})
        assert resp.status_code == 201
        assert resp.json()["speakers"] == ["Jane Doe", "John Smith"]

    @pytest.mark.parametrize("category, status", [
        (SourceErrorCategory.INVALID_URL, 400),
        (SourceErrorCategory.EMPTY, 422),
        (SourceErrorCategory.HTTP, 502),
        (SourceErrorCategory.PROXY_EXHAUSTED, 502),
    ])
    def test_source_errors_mapped(self, client, category, status):
        error = SourceError(category, "It failed.")
        with patch("rsvp_reader.server.app.fetch_url_text", new=AsyncMock(side_effect=error)):
            resp = client.post("/documents/url", json={"url": "https://example.com/x"})
        assert resp.status_code == status
        assert resp.json() == {"detail": "It failed.", "category": category.value}

    def test_store_full_returns_429(self, client, monkeypatch):
        monkeypatch.setattr(document_store, "max_documents", 0)
        resp = client.post("/documents", json={"text": SAMPLE_TRANSCRIPT})
        assert resp.status_code == 429


class TestUploadDocument:
    def test_text_upload(self, client):
        files = {"file": ("talk.txt", io.BytesIO(SAMPLE_TRANSCRIPT.encode("utf-8")), "text/plain")}
        resp = client.post("/documents/upload", files=files)
        assert resp.status_code == 201
        assert resp.json()["source"] == "talk.txt"
        assert resp.json()["total_tokens"] == 25

    def test_path_components_stripped(self, client):
        files = {"file": ("../../etc/talk.txt", io.BytesIO(b"Plain words here."), "text/plain")}
        resp = client.post("/documents/upload", files=files)
        assert resp.status_code == 201
        assert resp.json()["source"] == "talk.txt"

    def test_unsupported_type(self, client):
        files = {"file": ("slides.pptx", io.BytesIO(b"PK"), "application/octet-stream")}
        resp = client.post("/documents/upload", files=files)
        assert resp.status_code == 400
        assert resp.json()["category"] == "unsupported"


# ---------------------------------------------------------------------------
# GET /documents/{id}*
# ---------------------------------------------------------------------------


class TestReadDocument:
    def test_get_document(self, client):
        created = _create(client)
        resp = client.get("/documents/{}".format(created["id"]))
        assert resp.status_code == 200
        assert resp.json() == created

    def test_unknown_document(self, client):
        resp = client.get("/documents/doesnotexist")
        assert resp.status_code == 404
        assert "Document not found" in resp.json()["detail"]

    def test_frame(self, client):
        created = _create(client)
        resp = client.get("/documents/{}/frames/18".format(created["id"]))
        assert resp.status_code == 200
        assert resp.json() == {
            "index": 18,
            "text": "John Smith,",
            "advance": 2,
            "next_index": 20,
            "previous_index": 17,
            "pivot": {"left": "John ", "pivot": "S", "right": "mith,"},
            "context": {
                "paragraph_index": 2,
                "before": "Jane Doe: So,",
                "active": "John",
                "after": "Smith, tell us how it works.",
            },
            "progress": {"current": 19, "total_tokens": 25, "paragraph": 3, "total_paragraphs": 3},
            "interval_ms": 171,
        }

    def test_frame_index_clamped_and_wpm(self, client):
        created = _create(client)
        resp = client.get("/documents/{}/frames/500?wpm=600".format(created["id"]))
        body = resp.json()
        assert body["index"] == 24
        assert body["next_index"] == 24
        assert body["interval_ms"] == 100

    def test_frame_invalid_wpm(self, client):
        created = _create(client)
        resp = client.get("/documents/{}/frames/0?wpm=0".format(created["id"]))
        assert resp.status_code == 422

    def test_export_plain_text(self, client):
        created = _create(client)
        resp = client.get("/documents/{}/export/plain_text".format(created["id"]))
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text.startswith("Jane Doe:\nWelcome")
        assert '{}-reader.txt'.format(created["id"]) in resp.headers["content-disposition"]

    def test_export_frames_json(self, client):
        created = _create(client)
        resp = client.get("/documents/{}/export/frames_json".format(created["id"]))
        assert resp.status_code == 200
        assert len(json.loads(resp.text)["frames"]) == 24

    def test_export_unknown_format(self, client):
        created = _create(client)
        resp = client.get("/documents/{}/export/docx".format(created["id"]))
        assert resp.status_code == 422


class TestDeleteDocument:
    def test_delete(self, client):
        created = _create(client)
        assert client.delete("/documents/{}".format(created["id"])).status_code == 204
        assert client.get("/documents/{}".format(created["id"])).status_code == 404

    def test_delete_unknown(self, client):
        assert client.delete("/documents/nope").status_code == 404


# ---------------------------------------------------------------------------
# Formats and health
# ---------------------------------------------------------------------------


class TestMeta:
    def test_formats(self, client):
        resp = client.get("/formats")
        assert resp.status_code == 200
        assert [f["key"] for f in resp.json()] == ["frames_json", "plain_text"]

    def test_health(self, client):
        document_store.add(build_document(SAMPLE_TRANSCRIPT), "text")
        resp = client.get("/health")
        assert resp.json() == {"status": "ok", "version": __version__, "documents": 1}
