"""Chroma implementation of the vector-index contract."""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from helpdesk_rag.config import settings
from helpdesk_rag.errors import UpstreamError, ValidationError
from helpdesk_rag.retrieval.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

SERVICE = "vector-index"


class ChromaIndex:
    """Chroma-backed vector index.

    Scores are Chroma distances (lower = closer) and are passed through
    unchanged.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Optional pre-built client (tests inject a mock here).
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        client: Any = None,
    ) -> None:
        self.collection_name = collection_name
        self._client = client or chromadb.HttpClient(host=host, port=port)
        self._collection = self._client.get_or_create_collection(collection_name)

    def upsert(self, record: VectorRecord) -> None:
        try:
            self._collection.upsert(
                ids=[record.id],
                embeddings=[record.vector],
                metadatas=[record.metadata],
                documents=[record.metadata.get("snippet", "")],
            )
        except Exception as exc:
            raise UpstreamError(f"Chroma upsert failed: {exc}", service=SERVICE) from exc

    def query(self, vector: list[float], top_k: int) -> list[QueryMatch]:
        if top_k <= 0:
            raise ValidationError(f"top_k ({top_k}) must be positive")
        try:
            results = self._collection.query(
                query_embeddings=[vector],
                n_results=top_k,
                include=["metadatas", "distances"],
            )
        except Exception as exc:
            raise UpstreamError(f"Chroma query failed: {exc}", service=SERVICE) from exc

        ids = (results.get("ids") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        matches = [
            QueryMatch(id=doc_id, score=float(dist), metadata=meta or {})
            for doc_id, meta, dist in zip(ids, metas, distances)
        ]
        logger.info("Chroma query returned %d match(es)", len(matches))
        return matches
