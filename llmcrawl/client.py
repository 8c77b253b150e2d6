"""Public API for the llmcrawl client.

This module provides the primary interface that users interact with:

- **LLMCrawl**: Async client with one method per remote operation.
- **scrape_sync()** / **map_sync()**: Synchronous wrappers for simple scripts.

Usage::

    from llmcrawl import LLMCrawl

    client = LLMCrawl(api_key="sk-...")

    # Single page
    resp = await client.scrape("https://example.com", {"formats": ["markdown"]})
    if resp.success:
        print(resp.data.markdown)

    # Crawl job
    job = await client.crawl("https://example.com", limit=50)
    if job.success:
        status = await client.get_crawl_status(job.id)

    # Site map
    links = await client.map("https://example.com", limit=100)

Each call validates its options locally (raising ``ValidationError``
before any I/O), performs exactly one HTTP exchange, and decodes the body
into a typed envelope. Nothing is retried or cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from llmcrawl.config import ClientConfig, load_config
from llmcrawl.exceptions import MalformedResponseError, TransportError, ValidationError
from llmcrawl.models import check_absolute_url
from llmcrawl.responses import (
    CrawlCancelResponse,
    CrawlCancelSuccessResponse,
    CrawlResponse,
    CrawlStatusResponse,
    CrawlStatusSuccessResponse,
    CrawlSuccessResponse,
    ErrorResponse,
    MapResponse,
    MapSuccessResponse,
    ScrapeResponse,
    ScrapeSuccessResponse,
    parse_response,
)
from llmcrawl.validation import (
    Options,
    build_crawl_request,
    build_map_request,
    build_scrape_request,
    require_job_id,
    to_payload,
)

__all__ = [
    "LLMCrawl",
    "scrape_sync",
    "map_sync",
]

logger = logging.getLogger(__name__)

SuccessT = TypeVar("SuccessT", bound=BaseModel)


class LLMCrawl:
    """Async client for the crawling service.

    The client holds only immutable configuration, so one instance can be
    shared by concurrent tasks.

    Args:
        api_key: Bearer credential. Required and non-blank.
        base_url: Service root. Defaults to ``https://api.llmcrawl.dev``.
        timeout: Transport timeout in seconds (default 60).
        http_client: Optional ``httpx.AsyncClient`` to send requests with.
                     The caller owns it and is responsible for closing it.
                     Without one, each call opens and closes its own client.

    Raises:
        ConfigurationError: If the key is missing or blank, or another
            setting is invalid.

    Examples:
        >>> client = LLMCrawl(api_key="sk-test")
        >>> client.base_url
        'https://api.llmcrawl.dev'
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = load_config(api_key=api_key, base_url=base_url, timeout=timeout)
        self._http_client = http_client

    @property
    def config(self) -> ClientConfig:
        """Return the client configuration (read-only)."""
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def __repr__(self) -> str:
        return f"LLMCrawl(base_url={self.base_url!r})"

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _send(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Perform one HTTP exchange.

        Raises:
            TransportError: On any network-level failure.
        """
        logger.debug("%s %s", method, url)
        try:
            if self._http_client is not None:
                return await self._http_client.request(
                    method,
                    url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self._config.timeout,
                )
            async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                return await client.request(method, url, json=payload, headers=self._headers())
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"Request failed: {exc}", url=url) from exc

    def _decode(
        self,
        response: httpx.Response,
        url: str,
        success_model: Type[SuccessT],
    ) -> Union[SuccessT, ErrorResponse]:
        """Turn an HTTP response into a typed envelope.

        A 2xx response must carry a valid envelope. A non-2xx response is
        accepted only if it carries a valid failure envelope; anything else
        is a transport problem.
        """
        status = response.status_code
        logger.debug("%s -> HTTP %d", url, status)

        try:
            body = response.json()
        except ValueError as exc:
            if not response.is_success:
                raise TransportError(
                    f"Service returned HTTP {status}",
                    url=url,
                    status_code=status,
                ) from exc
            raise MalformedResponseError(
                "Response body is not valid JSON",
                url=url,
                status_code=status,
                body=response.text,
            ) from exc

        if response.is_success:
            return parse_response(body, success_model, url=url, status_code=status)

        if isinstance(body, dict) and body.get("success") is False:
            try:
                return parse_response(body, success_model, url=url, status_code=status)
            except MalformedResponseError as exc:
                raise TransportError(
                    f"Service returned HTTP {status}",
                    url=url,
                    status_code=status,
                ) from exc

        raise TransportError(
            f"Service returned HTTP {status}",
            url=url,
            status_code=status,
            details={"body": response.text[:500]},
        )

    async def _call(
        self,
        method: str,
        path_or_url: str,
        success_model: Type[SuccessT],
        payload: Optional[Dict[str, Any]] = None,
    ) -> Union[SuccessT, ErrorResponse]:
        if path_or_url.startswith("/"):
            url = f"{self._config.base_url}{path_or_url}"
        else:
            url = path_or_url
        response = await self._send(method, url, payload)
        return self._decode(response, url, success_model)

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------

    async def scrape(self, url: str, options: Options = None, **kwargs: Any) -> ScrapeResponse:
        """Scrape a single page.

        Args:
            url: Absolute URL of the page.
            options: Mapping of ScrapeRequest fields other than ``url``
                     (``formats``, ``onlyMainContent``, ``timeout``, ...),
                     or a ``ScrapeOptions`` model.
            **kwargs: Option values overriding *options*.

        Returns:
            ``ScrapeSuccessResponse`` with the Document, or ``ErrorResponse``.

        Raises:
            ValidationError: If the options are invalid (nothing is sent).
            TransportError: On network failure or an undecodable response.
        """
        request = build_scrape_request(url, options, **kwargs)
        return await self._call("POST", "/v1/scrape", ScrapeSuccessResponse, to_payload(request))

    async def crawl(self, url: str, options: Options = None, **kwargs: Any) -> CrawlResponse:
        """Submit a crawl job.

        The job runs on the service. Use the returned ``id`` with
        ``get_crawl_status()`` and ``cancel_crawl()``, or wrap it in
        ``llmcrawl.jobs.CrawlJob``.

        Raises:
            ValidationError: If the options are invalid (nothing is sent).
            TransportError: On network failure or an undecodable response.
        """
        request = build_crawl_request(url, options, **kwargs)
        return await self._call("POST", "/v1/crawl", CrawlSuccessResponse, to_payload(request))

    async def get_crawl_status(self, job_id: str) -> CrawlStatusResponse:
        """Fetch the current state of a crawl job.

        Read-only and safe to repeat. An unknown id comes back as an
        ``ErrorResponse`` from the service.

        Raises:
            ValidationError: If *job_id* is blank.
            TransportError: On network failure or an undecodable response.
        """
        job_id = require_job_id(job_id)
        return await self._call(
            "GET", f"/v1/crawl/{quote(job_id, safe='')}", CrawlStatusSuccessResponse
        )

    async def get_crawl_status_page(self, next_url: str) -> CrawlStatusResponse:
        """Fetch the chunk of crawl results behind a ``next`` cursor.

        The cursor is used exactly as the service returned it.

        Raises:
            ValidationError: If *next_url* is not an absolute URL.
            TransportError: On network failure or an undecodable response.
        """
        try:
            check_absolute_url(next_url)
        except (AttributeError, TypeError, ValueError) as exc:
            raise ValidationError(
                "Pagination cursor must be an absolute URL",
                errors=[{"loc": "next", "msg": str(exc), "type": "url_parsing"}],
            ) from exc
        return await self._call("GET", next_url, CrawlStatusSuccessResponse)

    async def cancel_crawl(self, job_id: str) -> CrawlCancelResponse:
        """Ask the service to cancel a running crawl job.

        A job that already finished comes back as an ``ErrorResponse``.

        Raises:
            ValidationError: If *job_id* is blank.
            TransportError: On network failure or an undecodable response.
        """
        job_id = require_job_id(job_id)
        return await self._call(
            "DELETE", f"/v1/crawl/{quote(job_id, safe='')}/cancel", CrawlCancelSuccessResponse
        )

    async def map(self, url: str, options: Options = None, **kwargs: Any) -> MapResponse:
        """List the links under a site. Completes in a single response.

        Raises:
            ValidationError: If the options are invalid (``limit`` outside
                1-5000, ...). Nothing is sent.
            TransportError: On network failure or an undecodable response.
        """
        request = build_map_request(url, options, **kwargs)
        return await self._call("POST", "/v1/map", MapSuccessResponse, to_payload(request))


# ---------------------------------------------------------------------------
# Module-level sync helpers
# ---------------------------------------------------------------------------


def scrape_sync(
    url: str,
    options: Options = None,
    *,
    api_key: str,
    base_url: Optional[str] = None,
    **kwargs: Any,
) -> ScrapeResponse:
    """Synchronous convenience function for a single scrape.

    Must not be called from inside a running event loop.

    Examples:
        >>> from llmcrawl import scrape_sync
        >>> resp = scrape_sync("https://example.com", api_key="sk-...", formats=["markdown"])
        >>> resp.success
        True
    """
    client = LLMCrawl(api_key=api_key, base_url=base_url)

    async def _run() -> ScrapeResponse:
        return await client.scrape(url, options, **kwargs)

    return asyncio.run(_run())


def map_sync(
    url: str,
    options: Options = None,
    *,
    api_key: str,
    base_url: Optional[str] = None,
    **kwargs: Any,
) -> MapResponse:
    """Synchronous convenience function for a single map call."""
    client = LLMCrawl(api_key=api_key, base_url=base_url)

    async def _run() -> MapResponse:
        return await client.map(url, options, **kwargs)

    return asyncio.run(_run())
