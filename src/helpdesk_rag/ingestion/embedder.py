"""Embedding adapter over the Hugging Face feature-extraction endpoint."""

from __future__ import annotations

import enum
import logging
from typing import Any

import requests

from helpdesk_rag.config import settings
from helpdesk_rag.errors import ParseError, ValidationError
from helpdesk_rag.http_client import post_json

logger = logging.getLogger(__name__)

SERVICE = "embedding"


class EmbeddingShape(enum.Enum):
    """Response layouts the feature-extraction endpoint is known to return."""

    FLAT = "flat"  # [0.1, 0.2, ...]
    NESTED = "nested"  # [[0.1, 0.2, ...], ...] — first row is the vector
    UNKNOWN = "unknown"


def detect_shape(body: Any) -> EmbeddingShape:
    if not isinstance(body, list) or not body:
        return EmbeddingShape.UNKNOWN
    if isinstance(body[0], list):
        return EmbeddingShape.NESTED
    return EmbeddingShape.FLAT


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"boolean {value!r} is not a vector component")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value)
    raise ValueError(f"{type(value).__name__} is not a vector component")


def decode_embedding(body: Any) -> list[float]:
    """Normalise any recognised response layout into a flat float vector.

    Numeric strings are coerced; anything else non-numeric is rejected.

    Raises
    ------
    ParseError
        When the body matches no known layout or holds non-numeric values.
    """
    shape = detect_shape(body)
    if shape is EmbeddingShape.UNKNOWN:
        raise ParseError("embedding response did not contain a vector", service=SERVICE, body=repr(body)[:500])

    row = body[0] if shape is EmbeddingShape.NESTED else body
    if not row:
        raise ParseError("embedding response contained an empty vector", service=SERVICE, body=repr(body)[:500])
    try:
        return [_to_float(v) for v in row]
    except (TypeError, ValueError) as exc:
        raise ParseError(
            f"embedding response is not numeric: {exc}", service=SERVICE, body=repr(body)[:500]
        ) from exc


class HuggingFaceEmbedder:
    """Single-attempt embedding client.

    Parameters
    ----------
    api_key:
        Hugging Face access token, sent as a bearer token.
    model:
        Model id substituted into *url_template*.
    url_template:
        Endpoint URL containing a ``{model}`` placeholder.
    timeout:
        Per-call timeout in seconds.
    session:
        Optional pre-built session (tests inject a mock here).
    """

    def __init__(
        self,
        api_key: str = settings.hf_api_key,
        *,
        model: str = settings.hf_embedding_model,
        url_template: str = settings.hf_embedding_url,
        timeout: float = settings.http_timeout_seconds,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            logger.warning("No Hugging Face API key configured; embedding calls will be anonymous")
        self.model = model
        self.url = url_template.format(model=model)
        self.timeout = timeout
        self._session = session or requests.Session()
        if api_key:
            self._session.headers["Authorization"] = f"Bearer {api_key}"

    def embed(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValidationError("cannot embed empty text")
        body = post_json(self._session, self.url, {"inputs": text}, service=SERVICE, timeout=self.timeout)
        try:
            vector = decode_embedding(body)
        except ParseError:
            logger.error("Embedding response parsing failed. URL=%s Body=%.500s", self.url, body)
            raise
        logger.debug("Embedding length: %d", len(vector))
        return vector
