"""Typed response envelopes.

Every endpoint answers with exactly one of two shapes, told apart by the
boolean ``success`` tag:

- a success model specific to the endpoint (``success`` is ``Literal[True]``),
- the shared ``ErrorResponse`` (``success`` is ``Literal[False]``).

Branch on the tag and the type narrows::

    resp = await client.scrape("https://example.com")
    if resp.success:
        print(resp.data.markdown)      # ScrapeSuccessResponse
    else:
        print(resp.error)              # ErrorResponse

Success models have no ``error`` attribute, and ``ErrorResponse`` has no
payload attributes. Unknown keys in a response are dropped, so the two
branches never bleed into each other.
"""

from __future__ import annotations

import logging
from typing import Any, List, Literal, Optional, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from llmcrawl.exceptions import MalformedResponseError
from llmcrawl.models import CrawlStatus, Document

__all__ = [
    "ErrorResponse",
    "ScrapeSuccessResponse",
    "CrawlSuccessResponse",
    "CrawlStatusSuccessResponse",
    "CrawlCancelSuccessResponse",
    "MapSuccessResponse",
    "ScrapeResponse",
    "CrawlResponse",
    "CrawlStatusResponse",
    "CrawlCancelResponse",
    "MapResponse",
    "parse_response",
]

logger = logging.getLogger(__name__)

SuccessT = TypeVar("SuccessT", bound="_Envelope")


class _Envelope(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ErrorResponse(_Envelope):
    """The service reported a failure for a well-formed request.

    Attributes:
        success: Always ``False``.
        error: Non-empty, human-readable message from the service.
        details: Optional structured details (validation errors, etc.).
        return_code: Optional service-specific return code.
        status_code: HTTP status the envelope arrived with. Filled in by
                     the client and left out of ``model_dump()``.
    """

    success: Literal[False]
    error: str = Field(..., min_length=1)
    details: Any = None
    return_code: Optional[int] = None
    status_code: Optional[int] = Field(default=None, exclude=True)


class ScrapeSuccessResponse(_Envelope):
    """Result of ``POST /v1/scrape``."""

    success: Literal[True]
    data: Document
    warning: Optional[str] = None
    scrape_id: Optional[str] = None


class CrawlSuccessResponse(_Envelope):
    """A crawl job was accepted. ``id`` is the handle for status and cancel calls."""

    success: Literal[True]
    id: str = Field(..., min_length=1)
    url: str


class CrawlStatusSuccessResponse(_Envelope):
    """Snapshot of a crawl job.

    Attributes:
        status: Lifecycle state. Only ``"scraping"`` is non-terminal.
        completed: Pages scraped so far.
        total: Pages attempted so far.
        credits_used: Credits charged so far, when reported.
        expires_at: When the service drops the job's results.
        next: Opaque URL for the next chunk of ``data``. ``None`` means
              everything available for the current state has been delivered.
        data: Documents in this chunk.
    """

    success: Literal[True]
    status: CrawlStatus
    completed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    credits_used: Optional[int] = None
    expires_at: Optional[str] = None
    next: Optional[str] = None
    data: List[Document] = Field(default_factory=list)

    @property
    def has_more(self) -> bool:
        """True if another page of results is waiting behind ``next``."""
        return self.next is not None


class CrawlCancelSuccessResponse(_Envelope):
    """The service accepted the cancellation."""

    success: Literal[True]
    message: Optional[str] = None


class MapSuccessResponse(_Envelope):
    """Links found under the mapped site."""

    success: Literal[True]
    links: List[str]
    scrape_id: Optional[str] = None


ScrapeResponse = Union[ScrapeSuccessResponse, ErrorResponse]
CrawlResponse = Union[CrawlSuccessResponse, ErrorResponse]
CrawlStatusResponse = Union[CrawlStatusSuccessResponse, ErrorResponse]
CrawlCancelResponse = Union[CrawlCancelSuccessResponse, ErrorResponse]
MapResponse = Union[MapSuccessResponse, ErrorResponse]


def parse_response(
    body: Any,
    success_model: Type[SuccessT],
    *,
    url: Optional[str] = None,
    status_code: Optional[int] = None,
) -> Union[SuccessT, ErrorResponse]:
    """Decode a JSON body into *success_model* or ``ErrorResponse``.

    The ``success`` tag alone selects the branch; the body is then
    validated against that branch only.

    Args:
        body: The decoded JSON document.
        success_model: Success envelope class for the endpoint.
        url: Request URL, for error context.
        status_code: HTTP status, for error context and ``ErrorResponse.status_code``.

    Returns:
        The validated success model, or an ``ErrorResponse``.

    Raises:
        MalformedResponseError: If the body is not an object, the tag is
            missing or not a boolean, or the body does not match the branch
            its tag selects.
    """
    if not isinstance(body, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(body).__name__}",
            url=url,
            status_code=status_code,
        )
    if "success" not in body:
        raise MalformedResponseError(
            "Response has no 'success' tag",
            url=url,
            status_code=status_code,
            details={"keys": sorted(body)},
        )

    tag = body["success"]
    if not isinstance(tag, bool):
        raise MalformedResponseError(
            f"'success' tag must be a boolean, got {tag!r}",
            url=url,
            status_code=status_code,
        )

    model: Type[_Envelope] = success_model if tag else ErrorResponse
    try:
        envelope = model.model_validate(body)
    except pydantic.ValidationError as exc:
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors(include_url=False)]
        logger.debug("%s did not validate: %s", model.__name__, fields)
        raise MalformedResponseError(
            f"Response does not match {model.__name__}",
            url=url,
            status_code=status_code,
            details={"fields": fields},
        ) from exc

    if isinstance(envelope, ErrorResponse) and status_code is not None:
        envelope = envelope.model_copy(update={"status_code": status_code})
    return envelope  # type: ignore[return-value]
