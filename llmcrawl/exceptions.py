"""Exception hierarchy for the llmcrawl client.

All exceptions inherit from LLMCrawlError, which inherits from Exception.
Callers can catch every client-side failure with a single
``except LLMCrawlError`` clause, or pick specific categories.

Service-level failures (the remote service answering ``success: false``)
are NOT exceptions: they come back as ``ErrorResponse`` values.

Hierarchy::

    LLMCrawlError
    +-- ConfigurationError      -- missing/blank API key, bad base URL
    +-- ValidationError         -- request options violate the schema
    +-- TransportError          -- network failure, unexpected HTTP status
    |   +-- MalformedResponseError -- body is not JSON or not a known envelope
    +-- CrawlStateError         -- crawl status observations break the job protocol
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

__all__ = [
    "LLMCrawlError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "MalformedResponseError",
    "CrawlStateError",
]


class LLMCrawlError(Exception):
    """Base exception for all llmcrawl errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (URL, status code, etc.).
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(LLMCrawlError):
    """Raised when the client configuration is invalid.

    Raised synchronously while constructing the client, before any
    request can be made.

    Examples:
        - ``api_key`` missing or only whitespace
        - ``base_url`` that is not an absolute http(s) URL
        - Unknown configuration field passed to ``load_config()``
    """

    pass


class ValidationError(LLMCrawlError):
    """Raised when caller-supplied request options violate the schema.

    Every violated field is reported, not just the first one. Nothing has
    been sent over the network when this is raised.

    Attributes:
        errors: One entry per violation, each a dict with ``loc`` (dotted
                field path using wire names), ``msg`` and ``type``.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        details: dict | None = None,
    ) -> None:
        self.errors = list(errors or [])
        combined = dict(details or {})
        if self.errors:
            combined["fields"] = [e["loc"] for e in self.errors]
        super().__init__(message, combined)

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        lines = [f"{self.message}:"]
        lines.extend(f"  {e['loc'] or '<root>'}: {e['msg']}" for e in self.errors)
        return "\n".join(lines)


class TransportError(LLMCrawlError):
    """Raised when the exchange with the service fails below the envelope level.

    Covers connection failures, timeouts, and HTTP statuses that do not
    come with a well-formed error envelope. Distinct from an
    ``ErrorResponse``, which means the service understood the request and
    declined it.

    Examples:
        - DNS resolution failure or connection refused
        - HTTP 502 from a proxy with an HTML body
        - Read timeout configured on the client
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ) -> None:
        combined = dict(details or {})
        if url is not None:
            combined["url"] = url
        if status_code is not None:
            combined["status_code"] = status_code
        super().__init__(message, combined)
        self.url = url
        self.status_code = status_code


class MalformedResponseError(TransportError):
    """Raised when a response body cannot be decoded into a known envelope.

    Examples:
        - Body is not JSON
        - JSON document has no ``success`` tag, or the tag is not a boolean
        - Tag says success but the payload lacks required fields
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
        details: dict | None = None,
    ) -> None:
        combined = dict(details or {})
        if body is not None:
            combined["body"] = body[:500]  # Truncate for readability
        super().__init__(message, url=url, status_code=status_code, details=combined)
        self.body = body


class CrawlStateError(LLMCrawlError):
    """Raised when crawl status observations contradict the job lifecycle.

    A job never leaves a terminal status, and its ``completed``/``total``
    counters never go down while it is scraping.
    """

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        details: dict | None = None,
    ) -> None:
        combined = dict(details or {})
        if job_id is not None:
            combined["job_id"] = job_id
        super().__init__(message, combined)
        self.job_id = job_id
