"""Pinecone implementation of the vector-index contract (data-plane REST API)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from helpdesk_rag.config import settings
from helpdesk_rag.errors import ConfigurationError, ParseError, ValidationError
from helpdesk_rag.http_client import post_json
from helpdesk_rag.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

SERVICE = "vector-index"


def decode_matches(body: Any) -> list[QueryMatch]:
    """Turn a ``/query`` response body into ranked :class:`QueryMatch` objects.

    A body without a ``matches`` key means nothing matched.
    """
    if not isinstance(body, dict):
        raise ParseError("query response is not a JSON object", service=SERVICE, body=repr(body)[:500])

    matches: list[QueryMatch] = []
    for raw in body.get("matches") or []:
        try:
            matches.append(
                QueryMatch(
                    id=str(raw["id"]),
                    score=float(raw["score"]),
                    metadata=raw.get("metadata") or {},
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"malformed query match: {exc}", service=SERVICE, body=repr(raw)[:500]) from exc
    return matches


class PineconeIndex:
    """Pinecone index addressed by its host URL.

    Parameters
    ----------
    index_url:
        Base URL of the index, e.g. ``https://<index>.svc.<region>.pinecone.io``.
    api_key:
        Pinecone API key, sent in the ``Api-Key`` header.
    timeout:
        Per-call timeout in seconds.
    session:
        Optional pre-built session (tests inject a mock here).
    """

    def __init__(
        self,
        index_url: str = settings.pinecone_index_url,
        *,
        api_key: str = settings.pinecone_api_key,
        timeout: float = settings.http_timeout_seconds,
        session: requests.Session | None = None,
    ) -> None:
        if not index_url:
            raise ConfigurationError("Pinecone index URL is not configured (PINECONE_INDEX_URL)")
        self.index_url = index_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers["Api-Key"] = api_key

    def upsert(self, record: VectorRecord) -> None:
        payload = {
            "vectors": [
                {"id": record.id, "values": record.vector, "metadata": record.metadata},
            ]
        }
        post_json(
            self._session,
            f"{self.index_url}/vectors/upsert",
            payload,
            service=SERVICE,
            timeout=self.timeout,
        )

    def query(self, vector: list[float], top_k: int) -> list[QueryMatch]:
        if top_k <= 0:
            raise ValidationError(f"top_k ({top_k}) must be positive")
        body = post_json(
            self._session,
            f"{self.index_url}/query",
            {"vector": vector, "topK": top_k, "includeMetadata": True},
            service=SERVICE,
            timeout=self.timeout,
        )
        matches = decode_matches(body)
        logger.info("Pinecone query returned %d match(es)", len(matches))
        return matches[:top_k]
