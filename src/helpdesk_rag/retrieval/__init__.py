"""
Retrieval — vector-index adapters and the records that flow through them.

Public surface
--------------
- :class:`PineconeIndex` — default backend, talks to the Pinecone data-plane API.
- :class:`ChromaIndex` — alternative backend over a Chroma server.
- :class:`VectorRecord`, :class:`QueryMatch`, :class:`Citation`,
  :class:`Answer`, :class:`IngestionSummary` — data models.
"""

from helpdesk_rag.retrieval.models import (
    Answer,
    Citation,
    IngestionSummary,
    QueryMatch,
    VectorRecord,
)
from helpdesk_rag.retrieval.pinecone_index import PineconeIndex

__all__ = [
    "Answer",
    "ChromaIndex",
    "Citation",
    "IngestionSummary",
    "PineconeIndex",
    "QueryMatch",
    "VectorRecord",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaIndex to avoid pulling in chromadb at import time."""
    if name == "ChromaIndex":
        from helpdesk_rag.retrieval.chroma_index import ChromaIndex

        return ChromaIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
