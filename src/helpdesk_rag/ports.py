"""Capability contracts for the three external services.

The pipelines only ever talk to these protocols, so swapping Hugging Face
for another embedding host, or Pinecone for Chroma, never touches pipeline
logic.  Adapters satisfy the protocols structurally; no subclassing needed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from helpdesk_rag.retrieval.models import QueryMatch, VectorRecord


@runtime_checkable
class Embedder(Protocol):
    """Text → fixed-length numeric vector."""

    def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises :class:`~helpdesk_rag.errors.UpstreamError` on a failed call
        and :class:`~helpdesk_rag.errors.ParseError` on an unusable body.
        """
        ...


@runtime_checkable
class VectorIndex(Protocol):
    """Upsert vectors with metadata and run nearest-neighbour queries."""

    def upsert(self, record: VectorRecord) -> None:
        """Store *record*; an existing record with the same id is overwritten."""
        ...

    def query(self, vector: list[float], top_k: int) -> list[QueryMatch]:
        """Return at most *top_k* matches ranked by the index's own scoring."""
        ...


@runtime_checkable
class Generator(Protocol):
    """(system instructions, user content) → generated text."""

    def complete(self, system_instructions: str, user_content: str) -> str:
        ...
