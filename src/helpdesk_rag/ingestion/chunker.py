"""Fixed-size sliding-window chunking of per-page text."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from helpdesk_rag.errors import ValidationError


@dataclass(frozen=True)
class Chunk:
    """A window of one page's text.

    Attributes
    ----------
    page:
        1-based page number the text came from.
    text:
        The window contents, at most ``max_chars`` long.
    start_offset:
        Character offset of ``text`` within the page.
    """

    page: int
    text: str
    start_offset: int


def chunk_pages(
    pages: Mapping[int, str],
    max_chars: int = 1200,
    overlap: int = 200,
) -> list[Chunk]:
    """Split every page into overlapping windows of at most *max_chars*.

    Parameters
    ----------
    pages:
        Page number → whitespace-normalised page text.
    max_chars:
        Maximum number of characters per chunk.
    overlap:
        Number of characters shared by consecutive chunks of a page.

    Returns
    -------
    list[Chunk]
        Chunks ordered by ascending page number, then offset.  Blank pages
        contribute nothing.

    Raises
    ------
    ValidationError
        When ``max_chars <= 0`` or ``overlap`` is outside ``[0, max_chars)``.
    """
    if max_chars <= 0:
        raise ValidationError(f"max_chars ({max_chars}) must be positive")
    if not 0 <= overlap < max_chars:
        raise ValidationError(f"overlap ({overlap}) must be >= 0 and < max_chars ({max_chars})")

    stride = max_chars - overlap
    chunks: list[Chunk] = []
    for page in sorted(pages):
        text = pages[page] or ""
        if not text.strip():
            continue
        start = 0
        while start < len(text):
            chunks.append(Chunk(page=page, text=text[start : start + max_chars], start_offset=start))
            start += stride
    return chunks
