"""Builds the configured adapters and pipelines once per process.

FastAPI routes depend on :func:`get_ingestion_pipeline` and
:func:`get_query_pipeline`; tests replace them through
``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from helpdesk_rag.config import settings
from helpdesk_rag.errors import ConfigurationError
from helpdesk_rag.generation.answerer import QueryPipeline
from helpdesk_rag.generation.llm import HuggingFaceChat, LangChainChat
from helpdesk_rag.ingestion.embedder import HuggingFaceEmbedder
from helpdesk_rag.ingestion.pipeline import IngestionPipeline
from helpdesk_rag.ports import Embedder, Generator, VectorIndex

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    return HuggingFaceEmbedder(
        settings.hf_api_key,
        model=settings.hf_embedding_model,
        url_template=settings.hf_embedding_url,
        timeout=settings.http_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_vector_index() -> VectorIndex:
    """Return the backend selected by ``settings.vector_backend``."""
    backend = settings.vector_backend.lower()
    logger.info("Using %s vector index", backend)
    if backend == "pinecone":
        from helpdesk_rag.retrieval.pinecone_index import PineconeIndex

        return PineconeIndex(
            settings.pinecone_index_url,
            api_key=settings.pinecone_api_key,
            timeout=settings.http_timeout_seconds,
        )
    if backend == "chroma":
        from helpdesk_rag.retrieval.chroma_index import ChromaIndex

        return ChromaIndex(settings.chroma_collection, host=settings.chroma_host, port=settings.chroma_port)
    raise ConfigurationError(f"Unsupported vector_backend={backend!r}. Choose from: pinecone, chroma.")


@lru_cache(maxsize=1)
def get_generator() -> Generator:
    """Return the chat model selected by ``settings.generation_provider``."""
    provider = settings.generation_provider.lower()
    if provider == "huggingface":
        return HuggingFaceChat(
            settings.hf_api_key,
            model=settings.hf_generation_model,
            url=settings.hf_chat_url,
            max_tokens=settings.generation_max_tokens,
            timeout=settings.http_timeout_seconds,
        )
    if provider == "openai":
        return LangChainChat()
    raise ConfigurationError(f"Unsupported generation_provider={provider!r}. Choose from: huggingface, openai.")


def get_ingestion_pipeline() -> IngestionPipeline:
    return IngestionPipeline(
        get_embedder(),
        get_vector_index(),
        max_chars=settings.chunk_max_chars,
        overlap=settings.chunk_overlap,
        min_chunk_chars=settings.min_chunk_chars,
        snippet_chars=settings.snippet_chars,
        max_workers=settings.ingest_max_workers,
    )


def get_query_pipeline() -> QueryPipeline:
    return QueryPipeline(get_embedder(), get_vector_index(), get_generator(), top_k=settings.query_top_k)
