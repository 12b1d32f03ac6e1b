"""Ingestion pipeline — chunk → embed → upsert, one document at a time.

Every chunk is processed independently and yields a :class:`ChunkResult`.
A failed embedding or upsert is logged and recorded, never raised, so one
bad chunk cannot abort the rest of the document.  :func:`summarize` folds
the results into the counts reported back to the caller.
"""

from __future__ import annotations

import enum
import logging
import re
import uuid
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from helpdesk_rag.errors import ParseError, UpstreamError
from helpdesk_rag.ingestion.chunker import Chunk, chunk_pages
from helpdesk_rag.ports import Embedder, VectorIndex
from helpdesk_rag.retrieval.models import DEFAULT_TITLE, IngestionSummary, VectorRecord

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class ChunkStatus(str, enum.Enum):
    INDEXED = "indexed"
    SKIPPED = "skipped"
    EMBED_FAILED = "embed_failed"
    UPSERT_FAILED = "upsert_failed"


@dataclass(frozen=True)
class ChunkResult:
    """Outcome of pushing one chunk through embed + upsert."""

    chunk: Chunk
    status: ChunkStatus


def make_record_id(document_title: str, page: int) -> str:
    """Return ``<title-slug>_p<page>_<random hex>``, unique per call."""
    slug = _UNSAFE_ID_CHARS.sub("_", document_title).strip("_") or DEFAULT_TITLE
    return f"{slug}_p{page}_{uuid.uuid4().hex}"


def summarize(pages_count: int, results: Iterable[ChunkResult]) -> IngestionSummary:
    """Aggregate per-chunk results; independent of the order they arrive in."""
    counts = dict.fromkeys(ChunkStatus, 0)
    for result in results:
        counts[result.status] += 1
    return IngestionSummary(
        pages_count=pages_count,
        chunks_indexed=counts[ChunkStatus.INDEXED],
        chunks_total=sum(counts.values()),
        chunks_skipped=counts[ChunkStatus.SKIPPED],
        chunks_failed=counts[ChunkStatus.EMBED_FAILED] + counts[ChunkStatus.UPSERT_FAILED],
    )


class IngestionPipeline:
    """Indexes the extracted pages of a document.

    Parameters
    ----------
    embedder:
        Embedding capability used for every chunk.
    index:
        Vector index receiving the records.
    max_chars / overlap:
        Chunking window size and overlap, in characters.
    min_chunk_chars:
        Chunks whose stripped text is shorter than this are skipped.
    snippet_chars:
        Length of the chunk excerpt stored as ``metadata.snippet``.
    max_workers:
        Upper bound on chunks processed concurrently; ``1`` runs sequentially.
    """

    def __init__(
        self,
        embedder: Embedder,
        index: VectorIndex,
        *,
        max_chars: int = 1200,
        overlap: int = 200,
        min_chunk_chars: int = 20,
        snippet_chars: int = 300,
        max_workers: int = 1,
    ) -> None:
        self._embedder = embedder
        self._index = index
        self.max_chars = max_chars
        self.overlap = overlap
        self.min_chunk_chars = min_chunk_chars
        self.snippet_chars = snippet_chars
        self.max_workers = max(1, max_workers)

    def ingest(self, pages: Mapping[int, str], document_title: str) -> IngestionSummary:
        """Chunk, embed, and upsert *pages*; return how much got indexed.

        Raises
        ------
        ValidationError
            When the chunk window settings are invalid (before any work).
        """
        title = document_title.strip() or DEFAULT_TITLE
        chunks = chunk_pages(pages, self.max_chars, self.overlap)
        logger.info("Indexing %d chunks from %s", len(chunks), title)

        if self.max_workers > 1 and len(chunks) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(lambda c: self.process_chunk(c, title), chunks))
        else:
            results = [self.process_chunk(c, title) for c in chunks]

        summary = summarize(len(pages), results)
        logger.info(
            "Indexed %d/%d chunks from %s (%d skipped, %d failed)",
            summary.chunks_indexed,
            summary.chunks_total,
            title,
            summary.chunks_skipped,
            summary.chunks_failed,
        )
        return summary

    def process_chunk(self, chunk: Chunk, document_title: str) -> ChunkResult:
        """Embed and upsert one chunk, converting any failure into a result."""
        if len(chunk.text.strip()) < self.min_chunk_chars:
            return ChunkResult(chunk, ChunkStatus.SKIPPED)

        try:
            vector = self._embedder.embed(chunk.text)
        except ParseError as exc:
            logger.error("Embedding response unusable for %s page %d: %s", document_title, chunk.page, exc)
            return ChunkResult(chunk, ChunkStatus.EMBED_FAILED)
        except Exception as exc:
            logger.error("Embedding failed for %s page %d: %s", document_title, chunk.page, exc)
            return ChunkResult(chunk, ChunkStatus.EMBED_FAILED)

        record = VectorRecord(
            id=make_record_id(document_title, chunk.page),
            vector=vector,
            metadata={
                "title": document_title,
                "page": chunk.page,
                "snippet": chunk.text[: self.snippet_chars],
            },
        )
        try:
            self._index.upsert(record)
        except UpstreamError as exc:
            logger.error("Upsert failed for id %s: %s", record.id, exc)
            return ChunkResult(chunk, ChunkStatus.UPSERT_FAILED)
        except Exception as exc:
            logger.exception("Unexpected upsert failure for id %s", record.id)
            return ChunkResult(chunk, ChunkStatus.UPSERT_FAILED)

        return ChunkResult(chunk, ChunkStatus.INDEXED)
