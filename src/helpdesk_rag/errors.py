"""Error taxonomy shared by the pipelines and the adapters.

* :class:`ValidationError` — the caller sent something unusable.
* :class:`UpstreamError` — an external service failed or was unreachable.
* :class:`ParseError` — an external service answered, but not in a shape
  we understand.  Propagates exactly like :class:`UpstreamError`.
* :class:`ConfigurationError` — the process is missing a required setting.
"""

from __future__ import annotations


class HelpdeskError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(HelpdeskError, ValueError):
    """Malformed caller input (empty question, bad upload, bad chunk sizes)."""


class ConfigurationError(HelpdeskError):
    """A required setting (endpoint, key, backend name) is missing or unknown."""


class UpstreamError(HelpdeskError):
    """An external service call returned a non-success status or failed outright.

    Parameters
    ----------
    message:
        Human-readable description.
    service:
        Short name of the failing service (``"embedding"``, ``"vector-index"``, …).
    status:
        HTTP status code when one was received.
    body:
        Raw response body, kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        service: str = "upstream",
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.service = service
        self.status = status
        self.body = body

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"error": self.message, "service": self.service}
        if self.status is not None:
            data["upstream_status"] = self.status
        return data


class ParseError(UpstreamError):
    """A response body could not be interpreted in the expected shape."""
