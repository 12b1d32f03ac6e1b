"""
Ingestion — PDF text extraction, chunking, and embedding into the vector index.

This module converts an uploaded document into embedded chunks stored in
the vector index, tolerating failures of individual chunks.
"""

from helpdesk_rag.ingestion.chunker import Chunk, chunk_pages
from helpdesk_rag.ingestion.pipeline import ChunkResult, ChunkStatus, IngestionPipeline

__all__ = ["Chunk", "ChunkResult", "ChunkStatus", "IngestionPipeline", "chunk_pages"]
