"""Shared pytest configuration and fixtures.

External services are replaced by in-memory fakes that satisfy the port
protocols, and by ``MagicMock`` HTTP sessions for the REST adapters.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from helpdesk_rag.errors import UpstreamError
from helpdesk_rag.retrieval.models import QueryMatch, VectorRecord


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Port fakes ──────────────────────────────────────────────────────────


class FakeEmbedder:
    """Returns a fixed vector; raises for texts containing a failure marker."""

    def __init__(self, vector: list[float] | None = None, fail_markers: tuple[str, ...] = ()) -> None:
        self.vector = vector or [0.1, 0.2, 0.3]
        self.fail_markers = fail_markers
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def embed(self, text: str) -> list[float]:
        with self._lock:
            self.calls.append(text)
        if any(marker in text for marker in self.fail_markers):
            raise UpstreamError("embedding request failed (503): busy", service="embedding", status=503)
        return list(self.vector)


class FakeIndex:
    """In-memory index that returns canned matches."""

    def __init__(self, matches: list[QueryMatch] | None = None, fail_upserts: int = 0) -> None:
        self.matches = matches or []
        self.records: list[VectorRecord] = []
        self.fail_upserts = fail_upserts
        self.last_top_k: int | None = None
        self._lock = threading.Lock()

    def upsert(self, record: VectorRecord) -> None:
        with self._lock:
            if self.fail_upserts > 0:
                self.fail_upserts -= 1
                raise UpstreamError("upsert failed (500)", service="vector-index", status=500)
            self.records.append(record)

    def query(self, vector: list[float], top_k: int) -> list[QueryMatch]:
        self.last_top_k = top_k
        return self.matches[:top_k]


class FakeGenerator:
    """Echoes a canned reply and remembers the prompts it was given."""

    def __init__(self, reply: str = "canned answer") -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    def complete(self, system_instructions: str, user_content: str) -> str:
        self.calls.append((system_instructions, user_content))
        return self.reply


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def fake_index() -> FakeIndex:
    return FakeIndex()


@pytest.fixture()
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


# ── HTTP session mocks ─────────────────────────────────────────────────


def _response(status: int = 200, body: Any = None, text: str | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    if text is None:
        resp.text = json.dumps(body)
        resp.json.return_value = body
    else:
        resp.text = text
        resp.json.side_effect = ValueError("Expecting value")
    return resp


@pytest.fixture()
def make_session() -> Callable[..., MagicMock]:
    """Build a mock ``requests.Session`` whose ``post`` returns one canned response."""

    def _make(status: int = 200, body: Any = None, text: str | None = None) -> MagicMock:
        session = MagicMock()
        session.headers = {}
        session.post.return_value = _response(status, body, text)
        return session

    return _make
