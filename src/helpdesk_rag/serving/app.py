"""FastAPI application exposing document upload and cited question answering."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from helpdesk_rag import __version__
from helpdesk_rag.config import configure_logging, settings
from helpdesk_rag.errors import ConfigurationError, UpstreamError, ValidationError
from helpdesk_rag.generation.answerer import QueryPipeline
from helpdesk_rag.ingestion.loader import read_pages
from helpdesk_rag.ingestion.pipeline import IngestionPipeline
from helpdesk_rag.retrieval.models import Citation
from helpdesk_rag.serving.dependencies import get_ingestion_pipeline, get_query_pipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    logger.info("Helpdesk API %s started", __version__)
    yield


app = FastAPI(
    title="Helpdesk API",
    version=__version__,
    description="Upload PDF policies and ask questions answered from them, with page citations.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request / Response schemas ────────────────────────────────────────
class AskRequest(BaseModel):
    """Incoming question from the user."""

    question: Any = None


class AskResponse(BaseModel):
    """Answer plus the passages it was grounded on."""

    answer: str
    citations: list[Citation] = []


class UploadResponse(BaseModel):
    """Best-effort indexing summary for one uploaded PDF."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Uploaded and indexed"
    file: str
    pages_count: int = Field(alias="pagesCount")
    chunks_indexed: int = Field(alias="chunksIndexed")
    chunks_failed: int = Field(default=0, alias="chunksFailed")


# ── Error mapping ─────────────────────────────────────────────────────
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    return JSONResponse(status_code=502, content=exc.to_dict())


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Misconfigured service: %s", exc)
    return JSONResponse(status_code=500, content={"error": "Service misconfigured", "detail": str(exc)})


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/admin/upload", response_model=UploadResponse)
def upload(
    file: UploadFile | None = File(default=None),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> UploadResponse:
    """Extract, chunk, embed, and index an uploaded PDF."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded. Use form-data field 'file'.")
    if Path(file.filename).suffix.lower() != ".pdf":
        raise ValidationError("Only PDF files are allowed.")

    data = file.file.read(settings.max_upload_bytes + 1)
    if not data:
        raise ValidationError("Empty file.")
    if len(data) > settings.max_upload_bytes:
        raise ValidationError(f"File too large. Max {settings.max_upload_bytes} bytes.")

    pages = read_pages(data)
    summary = pipeline.ingest(pages, Path(file.filename).stem)
    return UploadResponse(
        file=file.filename,
        pages_count=summary.pages_count,
        chunks_indexed=summary.chunks_indexed,
        chunks_failed=summary.chunks_failed,
    )


@app.post("/api/chat/ask", response_model=AskResponse)
def ask(
    request: AskRequest,
    pipeline: QueryPipeline = Depends(get_query_pipeline),
) -> AskResponse:
    """Answer a question from the indexed documents."""
    question = request.question
    if question is not None and not isinstance(question, str):
        raise ValidationError("question must be a string")
    answer = pipeline.answer(question or "")
    return AskResponse(answer=answer.text, citations=answer.citations)
