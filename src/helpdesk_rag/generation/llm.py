"""Chat-model adapters — single place to swap generation providers.

Supports two modes:

1. **Hugging Face router** (default) — raw POST to the OpenAI-compatible
   ``/v1/chat/completions`` endpoint with ``HF_API_KEY``.  Older inference
   endpoints answer with ``generated_text`` instead of ``choices``; both
   layouts are decoded by :func:`decode_completion`.
2. **OpenAI-compatible via LangChain** — set ``GENERATION_PROVIDER=openai``
   and ``OPENAI_API_KEY`` (optionally ``LLM_BASE_URL`` for a local vLLM).
"""

from __future__ import annotations

import enum
import logging
from typing import Any

import openai
import requests
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from helpdesk_rag.config import settings
from helpdesk_rag.errors import UpstreamError
from helpdesk_rag.http_client import post_json

logger = logging.getLogger(__name__)

SERVICE = "generation"


class CompletionShape(enum.Enum):
    """Response layouts produced by chat / text-generation endpoints."""

    CHAT = "chat"  # {"choices": [{"message": {"content": ...}}]}
    GENERATED = "generated"  # {"generated_text": ...}
    GENERATED_LIST = "generated_list"  # [{"generated_text": ...}]
    TEXT = "text"  # "..."
    UNKNOWN = "unknown"


def detect_shape(body: Any) -> CompletionShape:
    if isinstance(body, str):
        return CompletionShape.TEXT
    if isinstance(body, dict):
        if "choices" in body:
            return CompletionShape.CHAT
        if "generated_text" in body:
            return CompletionShape.GENERATED
    if isinstance(body, list) and body and isinstance(body[0], dict):
        return CompletionShape.GENERATED_LIST
    return CompletionShape.UNKNOWN


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def decode_completion(body: Any) -> str:
    """Extract the generated string, or ``""`` when the expected field is absent."""
    shape = detect_shape(body)
    if shape is CompletionShape.TEXT:
        return body
    if shape is CompletionShape.GENERATED:
        return _as_text(body["generated_text"])
    if shape is CompletionShape.GENERATED_LIST:
        return _as_text(body[0].get("generated_text"))
    if shape is CompletionShape.CHAT:
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        first = choices[0]
        message = first.get("message")
        if isinstance(message, dict):
            return _as_text(message.get("content"))
        return _as_text(first.get("text"))

    logger.warning("Unrecognised completion response: %.200r", body)
    return ""


class HuggingFaceChat:
    """Chat-completions client for the Hugging Face router.

    Parameters
    ----------
    api_key:
        Hugging Face access token, sent as a bearer token.
    model:
        Chat model id.
    url:
        Chat-completions endpoint.
    max_tokens:
        Generation cap forwarded as ``max_tokens``.
    timeout:
        Per-call timeout in seconds.
    session:
        Optional pre-built session (tests inject a mock here).
    """

    def __init__(
        self,
        api_key: str = settings.hf_api_key,
        *,
        model: str = settings.hf_generation_model,
        url: str = settings.hf_chat_url,
        max_tokens: int = settings.generation_max_tokens,
        timeout: float = settings.http_timeout_seconds,
        session: requests.Session | None = None,
    ) -> None:
        self.model = model
        self.url = url
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._session = session or requests.Session()
        if api_key:
            self._session.headers["Authorization"] = f"Bearer {api_key}"

    def complete(self, system_instructions: str, user_content: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_instructions},
                {"role": "user", "content": user_content},
            ],
            "max_tokens": self.max_tokens,
        }
        body = post_json(self._session, self.url, payload, service=SERVICE, timeout=self.timeout)
        return decode_completion(body)


def get_llm(temperature: float = 0.0) -> ChatOpenAI:
    """Return the configured OpenAI-compatible chat model.

    When ``settings.llm_base_url`` is set the client is pointed at that
    endpoint instead of the OpenAI cloud API, with a dummy key if none
    is configured.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": temperature,
        "max_tokens": settings.generation_max_tokens,
        "timeout": settings.http_timeout_seconds,
        "max_retries": 0,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # self-hosted servers ignore the key; the client requires a non-empty one
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)


class LangChainChat:
    """Generation adapter over a LangChain chat model (``ChatOpenAI`` by default)."""

    def __init__(self, llm: Any = None) -> None:
        self._llm = llm if llm is not None else get_llm()

    def complete(self, system_instructions: str, user_content: str) -> str:
        messages = [SystemMessage(content=system_instructions), HumanMessage(content=user_content)]
        try:
            response = self._llm.invoke(messages)
        except openai.APIStatusError as exc:
            logger.error("Chat failed. Status=%s Body=%s", exc.status_code, exc.body)
            raise UpstreamError(
                f"chat request failed ({exc.status_code}): {exc.message}",
                service=SERVICE,
                status=exc.status_code,
                body=str(exc.body),
            ) from exc
        except openai.APIError as exc:
            logger.error("Chat request failed: %s", exc)
            raise UpstreamError(f"chat request failed: {exc}", service=SERVICE) from exc

        content = response.content
        if isinstance(content, list):
            # multi-part message: keep the text parts only
            return "".join(
                part if isinstance(part, str) else _as_text(part.get("text"))
                for part in content
                if isinstance(part, (str, dict))
            )
        return _as_text(content)
