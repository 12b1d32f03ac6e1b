"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Hugging Face inference
    hf_api_key: str = Field(default="", description="Hugging Face access token")
    hf_embedding_model: str = "nomic-ai/nomic-embed-text-v1"
    hf_embedding_url: str = Field(
        default="https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction",
        description="Feature-extraction endpoint; ``{model}`` is replaced by the model id.",
    )
    hf_generation_model: str = "google/flan-t5-small"
    hf_chat_url: str = "https://router.huggingface.co/v1/chat/completions"
    generation_max_tokens: int = 256

    # Generation provider
    generation_provider: str = Field(
        default="huggingface",
        description="Either 'huggingface' (raw chat endpoint) or 'openai' (LangChain ChatOpenAI).",
    )
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local vLLM)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible API. Leave empty to use OpenAI cloud."
        ),
    )

    # Vector index
    vector_backend: str = Field(default="pinecone", description="Either 'pinecone' or 'chroma'.")
    pinecone_api_key: str = ""
    pinecone_index_url: str = Field(
        default="",
        description="Index host, e.g. 'https://<index>-<project>.svc.<region>.pinecone.io'",
    )
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "helpdesk_docs"

    # Pipeline tuning
    chunk_max_chars: int = 1200
    chunk_overlap: int = 200
    min_chunk_chars: int = 20
    snippet_chars: int = 300
    query_top_k: int = 10
    ingest_max_workers: int = 4
    http_timeout_seconds: float = 30.0

    # Serving
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    max_upload_bytes: int = 50 * 1024 * 1024

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a root handler at ``settings.log_level`` (idempotent)."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    # requests/urllib3 log every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
