"""Unit tests for the serving layer."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from helpdesk_rag.config import settings
from helpdesk_rag.errors import ConfigurationError, ValidationError
from helpdesk_rag.generation.answerer import QueryPipeline
from helpdesk_rag.ingestion.pipeline import IngestionPipeline
from helpdesk_rag.retrieval.models import QueryMatch
from helpdesk_rag.serving.app import app
from helpdesk_rag.serving.dependencies import get_ingestion_pipeline, get_query_pipeline

PDF_BYTES = b"%PDF-1.7 fake body"


@pytest.fixture()
def client(fake_embedder, fake_index, fake_generator) -> Iterator[TestClient]:
    app.dependency_overrides[get_ingestion_pipeline] = lambda: IngestionPipeline(fake_embedder, fake_index)
    app.dependency_overrides[get_query_pipeline] = lambda: QueryPipeline(fake_embedder, fake_index, fake_generator)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_endpoint(client: TestClient) -> None:
    """GET /health should return 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ── /admin/upload ───────────────────────────────────────────────────────


class TestUpload:
    def test_upload_indexes_pdf(self, client: TestClient, fake_index) -> None:
        with patch("helpdesk_rag.serving.app.read_pages", return_value={1: "Vacation policy allows 20 days."}):
            response = client.post(
                "/admin/upload", files={"file": ("HR Policy.pdf", PDF_BYTES, "application/pdf")}
            )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Uploaded and indexed",
            "file": "HR Policy.pdf",
            "pagesCount": 1,
            "chunksIndexed": 1,
            "chunksFailed": 0,
        }
        assert fake_index.records[0].metadata["title"] == "HR Policy"

    def test_partial_failure_is_still_a_success(self, client: TestClient, fake_embedder) -> None:
        fake_embedder.fail_markers = ("FAIL",)
        pages = {
            1: "Vacation policy allows 20 days per year.",
            2: "This page cannot be embedded. FAIL",
            3: "Remote work requires manager approval.",
        }
        with patch("helpdesk_rag.serving.app.read_pages", return_value=pages):
            response = client.post("/admin/upload", files={"file": ("handbook.pdf", PDF_BYTES, "application/pdf")})

        assert response.status_code == 200
        body = response.json()
        assert body["pagesCount"] == 3
        assert body["chunksIndexed"] == 2
        assert body["chunksFailed"] == 1

    def test_missing_file_field(self, client: TestClient) -> None:
        response = client.post("/admin/upload", files={"document": ("a.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded. Use form-data field 'file'."}

    def test_non_pdf_is_rejected(self, client: TestClient, fake_embedder) -> None:
        response = client.post("/admin/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400
        assert response.json() == {"error": "Only PDF files are allowed."}
        assert fake_embedder.calls == []

    def test_extension_check_is_case_insensitive(self, client: TestClient) -> None:
        with patch("helpdesk_rag.serving.app.read_pages", return_value={1: "Vacation policy allows 20 days."}):
            response = client.post("/admin/upload", files={"file": ("POLICY.PDF", PDF_BYTES, "application/pdf")})
        assert response.status_code == 200

    def test_empty_file(self, client: TestClient) -> None:
        response = client.post("/admin/upload", files={"file": ("empty.pdf", b"", "application/pdf")})
        assert response.status_code == 400
        assert response.json() == {"error": "Empty file."}

    def test_oversized_file(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "max_upload_bytes", 8)
        response = client.post("/admin/upload", files={"file": ("big.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 400
        assert response.json()["error"].startswith("File too large.")

    def test_unreadable_pdf(self, client: TestClient) -> None:
        with patch("helpdesk_rag.serving.app.read_pages", side_effect=ValidationError("Could not read PDF: EOF")):
            response = client.post("/admin/upload", files={"file": ("broken.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 400


# ── /api/chat/ask ───────────────────────────────────────────────────────


class TestAsk:
    def test_answer_with_citations(self, client: TestClient, fake_index, fake_generator) -> None:
        fake_index.matches = [
            QueryMatch(
                id="HR_Policy_p1_abc",
                score=0.91,
                metadata={"title": "HR Policy", "page": 1, "snippet": "Vacation policy allows 20 days."},
            )
        ]
        fake_generator.reply = "You get 20 days (HR Policy, p1)."

        response = client.post("/api/chat/ask", json={"question": "How many vacation days?"})

        assert response.status_code == 200
        assert response.json() == {
            "answer": "You get 20 days (HR Policy, p1).",
            "citations": [{"title": "HR Policy", "page": 1, "score": 0.91}],
        }

    def test_fallback_when_nothing_matches(self, client: TestClient) -> None:
        response = client.post("/api/chat/ask", json={"question": "What is the dress code?"})
        assert response.status_code == 200
        assert response.json() == {"answer": "I don't know based on the current documents.", "citations": []}

    @pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "   "}, {"question": None}])
    def test_blank_question(self, client: TestClient, payload: dict) -> None:
        response = client.post("/api/chat/ask", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "question is required"}

    @pytest.mark.parametrize("question", [5, ["vacation?"], {"text": "vacation?"}, True])
    def test_non_string_question(self, client: TestClient, fake_embedder, question) -> None:
        response = client.post("/api/chat/ask", json={"question": question})
        assert response.status_code == 400
        assert response.json() == {"error": "question must be a string"}
        assert fake_embedder.calls == []

    def test_upstream_failure_is_bad_gateway(self, client: TestClient, fake_embedder) -> None:
        fake_embedder.fail_markers = ("vacation",)
        response = client.post("/api/chat/ask", json={"question": "vacation days?"})

        assert response.status_code == 502
        body = response.json()
        assert body["service"] == "embedding"
        assert body["upstream_status"] == 503

    def test_misconfiguration_is_server_error(self, client: TestClient) -> None:
        def _broken() -> QueryPipeline:
            raise ConfigurationError("Pinecone index URL is not configured (PINECONE_INDEX_URL)")

        app.dependency_overrides[get_query_pipeline] = _broken
        response = client.post("/api/chat/ask", json={"question": "anything"})
        assert response.status_code == 500
        assert response.json()["error"] == "Service misconfigured"


def test_cors_allows_dev_frontend(client: TestClient) -> None:
    response = client.options(
        "/api/chat/ask",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
