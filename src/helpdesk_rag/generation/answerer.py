"""Query pipeline — embed the question, retrieve, assemble context, generate.

Lifecycle of a single question::

    RECEIVED → EMBEDDING → RETRIEVING ─┬─ no matches ─→ FALLBACK
                                       └─ matches ───→ CONTEXT_BUILT → GENERATING → COMPLETED

Any upstream error moves the request straight to ``FAILED`` and is
re-raised; unlike ingestion, nothing here is retried or skipped.
"""

from __future__ import annotations

import enum
import logging

from helpdesk_rag.errors import HelpdeskError, ValidationError
from helpdesk_rag.generation.prompts import NO_ANSWER, SYSTEM_PROMPT, build_context, build_user_prompt
from helpdesk_rag.ports import Embedder, Generator, VectorIndex
from helpdesk_rag.retrieval.models import Answer, Citation

logger = logging.getLogger(__name__)


class QueryStage(str, enum.Enum):
    RECEIVED = "received"
    EMBEDDING = "embedding"
    RETRIEVING = "retrieving"
    FALLBACK = "fallback"
    CONTEXT_BUILT = "context_built"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class QueryPipeline:
    """Answers questions from whatever the vector index currently holds.

    Parameters
    ----------
    embedder:
        Embedding capability used for the question.
    index:
        Vector index to search.
    generator:
        Chat model that writes the answer.
    top_k:
        Number of matches requested from the index.
    """

    def __init__(
        self,
        embedder: Embedder,
        index: VectorIndex,
        generator: Generator,
        *,
        top_k: int = 10,
    ) -> None:
        if top_k <= 0:
            raise ValidationError(f"top_k ({top_k}) must be positive")
        self._embedder = embedder
        self._index = index
        self._generator = generator
        self.top_k = top_k

    def answer(self, question: str) -> Answer:
        """Return a cited answer to *question*.

        Raises
        ------
        ValidationError
            When *question* is empty or whitespace.
        UpstreamError
            When any external call fails (``ParseError`` included).
        """
        if not question or not question.strip():
            raise ValidationError("question is required")

        stage = _advance(QueryStage.RECEIVED)
        try:
            stage = _advance(QueryStage.EMBEDDING)
            vector = self._embedder.embed(question)

            stage = _advance(QueryStage.RETRIEVING)
            matches = self._index.query(vector, self.top_k)
            if not matches:
                _advance(QueryStage.FALLBACK)
                return Answer(text=NO_ANSWER, citations=[])

            citations = [Citation.from_match(m) for m in matches]
            user_prompt = build_user_prompt(question, build_context(matches))
            stage = _advance(QueryStage.CONTEXT_BUILT)

            stage = _advance(QueryStage.GENERATING)
            text = self._generator.complete(SYSTEM_PROMPT, user_prompt)
        except HelpdeskError as exc:
            logger.error("Query %s while %s: %s", QueryStage.FAILED.value, stage.value, exc)
            raise

        _advance(QueryStage.COMPLETED)
        logger.info("Answered with %d citation(s)", len(citations))
        return Answer(text=text, citations=citations)


def _advance(stage: QueryStage) -> QueryStage:
    logger.debug("query stage -> %s", stage.value)
    return stage
