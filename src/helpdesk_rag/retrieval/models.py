"""Domain models for indexed records, query matches, and cited answers."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TITLE = "doc"
DEFAULT_PAGE = -1


class VectorRecord(BaseModel):
    """One embedded chunk on its way into the vector index.

    Attributes
    ----------
    id:
        Globally unique identifier.  The index silently overwrites on
        collision, so callers must never reuse one for a different chunk.
    vector:
        The chunk embedding.
    metadata:
        ``{"title": str, "page": int, "snippet": str}``.
    """

    id: str
    vector: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class QueryMatch(BaseModel):
    """A single ranked hit returned by the vector index.

    ``score`` is whatever the index reports (similarity or distance); it
    is never renormalised here.
    """

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def title(self) -> str:
        title = self.metadata.get("title")
        return title if isinstance(title, str) else DEFAULT_TITLE

    @property
    def page(self) -> int:
        page = self.metadata.get("page")
        # bool is an int subclass; Pinecone hands numbers back as floats
        if isinstance(page, bool) or not isinstance(page, (int, float)):
            return DEFAULT_PAGE
        if isinstance(page, float) and not math.isfinite(page):
            return DEFAULT_PAGE
        return int(page)

    @property
    def snippet(self) -> str:
        snippet = self.metadata.get("snippet")
        return snippet if isinstance(snippet, str) else ""


class Citation(BaseModel):
    """User-facing pointer back to the passage an answer was built from."""

    title: str = DEFAULT_TITLE
    page: int = DEFAULT_PAGE
    score: float

    @classmethod
    def from_match(cls, match: QueryMatch) -> Citation:
        return cls(title=match.title, page=match.page, score=match.score)

    def short_ref(self) -> str:
        """Return the ``[title, pN]`` tag used in the prompt context."""
        return f"[{self.title}, p{self.page}]"


class Answer(BaseModel):
    """Final output of the query pipeline.

    ``citations`` follows the index's ranking order, one per match.
    """

    text: str
    citations: list[Citation] = Field(default_factory=list)


class IngestionSummary(BaseModel):
    """Best-effort outcome of ingesting one document.

    Partial success is not an error: ``chunks_indexed < chunks_total``
    tells the caller how much made it into the index.
    """

    pages_count: int
    chunks_indexed: int
    chunks_total: int = 0
    chunks_skipped: int = 0
    chunks_failed: int = 0
