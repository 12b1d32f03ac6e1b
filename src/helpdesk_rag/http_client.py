"""Thin JSON-over-HTTP helper shared by the REST adapters.

Maps transport failures and non-2xx responses to
:class:`~helpdesk_rag.errors.UpstreamError` and undecodable bodies to
:class:`~helpdesk_rag.errors.ParseError`, logging both with the raw body.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from helpdesk_rag.errors import ParseError, UpstreamError

logger = logging.getLogger(__name__)


def post_json(
    session: requests.Session,
    url: str,
    payload: dict[str, Any],
    *,
    service: str,
    timeout: float,
    headers: dict[str, str] | None = None,
) -> Any:
    """POST *payload* to *url* and return the decoded JSON body.

    Parameters
    ----------
    session:
        HTTP session carrying auth headers.
    url:
        Target endpoint.
    payload:
        JSON-serialisable request body.
    service:
        Short service name recorded on raised errors and in log lines.
    timeout:
        Per-call timeout in seconds.
    headers:
        Extra per-request headers.
    """
    try:
        resp = session.post(url, json=payload, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("%s request failed. URL=%s Error=%s", service, url, exc)
        raise UpstreamError(f"{service} request failed: {exc}", service=service) from exc

    raw = resp.text
    if not resp.ok:
        logger.error("%s failed. URL=%s Status=%s Body=%.500s", service, url, resp.status_code, raw)
        raise UpstreamError(
            f"{service} request failed ({resp.status_code}): {raw}",
            service=service,
            status=resp.status_code,
            body=raw,
        )

    try:
        return resp.json()
    except ValueError as exc:
        logger.error("%s returned non-JSON body. URL=%s Body=%.500s", service, url, raw)
        raise ParseError(
            f"{service} response is not valid JSON",
            service=service,
            status=resp.status_code,
            body=raw,
        ) from exc
