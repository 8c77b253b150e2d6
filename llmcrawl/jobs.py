"""Crawl job lifecycle as observed by the client.

A crawl job lives on the service. The client creates it, then watches it
through repeated status calls; it never changes state locally. The
observable lifecycle is::

    scraping --> completed
             --> failed
             --> cancelled   (also reachable through cancel_crawl())

``completed``/``total`` never decrease while the job is scraping, and no
transition leaves a terminal state. ``CrawlJob.observe()`` checks both and
raises ``CrawlStateError`` when the service contradicts them.

Polling cadence belongs to the caller, so ``poll_crawl()`` takes the
interval as an argument. Pagination cursors (``next``) are never followed
automatically; ``CrawlJob.next_page()`` fetches one chunk when asked.

Usage::

    job = await CrawlJob.start(client, "https://example.com", limit=50)
    if isinstance(job, ErrorResponse):
        raise SystemExit(job.error)

    async for status in job.poll(interval=5.0):
        print(status)

    if job.status == "completed":
        pages = list(job.last.data)
        while job.next is not None:
            chunk = await job.next_page()
            ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, AsyncGenerator, Optional, Union

from llmcrawl.exceptions import CrawlStateError, ValidationError
from llmcrawl.models import CrawlStatus
from llmcrawl.responses import (
    CrawlCancelResponse,
    CrawlStatusResponse,
    CrawlStatusSuccessResponse,
    ErrorResponse,
)
from llmcrawl.validation import Options, require_job_id

if TYPE_CHECKING:
    from llmcrawl.client import LLMCrawl

__all__ = [
    "TERMINAL_STATUSES",
    "is_terminal",
    "CrawlJob",
    "poll_crawl",
]

logger = logging.getLogger(__name__)

INITIAL_STATUS: CrawlStatus = "scraping"

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed", "cancelled"})
"""Statuses a job never leaves."""


def is_terminal(status: str) -> bool:
    """Return True if *status* ends the job's lifecycle."""
    return status in TERMINAL_STATUSES


class CrawlJob:
    """Client-side view of one remote crawl job.

    Attributes:
        id: Opaque job id returned by the service.
        url: Seed URL echoed by the service, if known.
    """

    def __init__(self, client: LLMCrawl, job_id: str, url: Optional[str] = None) -> None:
        self._client = client
        self.id = require_job_id(job_id)
        self.url = url
        self._last: Optional[CrawlStatusSuccessResponse] = None

    @classmethod
    async def start(
        cls,
        client: LLMCrawl,
        url: str,
        options: Options = None,
        **kwargs: Any,
    ) -> Union[CrawlJob, ErrorResponse]:
        """Submit a crawl and wrap the accepted job.

        Returns:
            A CrawlJob, or the service's ErrorResponse if it refused the crawl.
        """
        resp = await client.crawl(url, options, **kwargs)
        if not resp.success:
            logger.info("Crawl of %s refused: %s", url, resp.error)
            return resp
        logger.info("Crawl job %s started for %s", resp.id, resp.url)
        return cls(client, resp.id, url=resp.url)

    def __repr__(self) -> str:
        return f"CrawlJob(id={self.id!r}, status={self.status!r}, completed={self.completed}, total={self.total})"

    # ------------------------------------------------------------------
    # Observed state
    # ------------------------------------------------------------------

    @property
    def last(self) -> Optional[CrawlStatusSuccessResponse]:
        """The most recent successful status snapshot, if any."""
        return self._last

    @property
    def status(self) -> CrawlStatus:
        """Last observed status; ``"scraping"`` until the first observation."""
        return self._last.status if self._last is not None else INITIAL_STATUS

    @property
    def completed(self) -> int:
        return self._last.completed if self._last is not None else 0

    @property
    def total(self) -> int:
        return self._last.total if self._last is not None else 0

    @property
    def next(self) -> Optional[str]:
        """Cursor for the next chunk of results in the last snapshot."""
        return self._last.next if self._last is not None else None

    @property
    def is_done(self) -> bool:
        return is_terminal(self.status)

    def observe(self, snapshot: CrawlStatusSuccessResponse) -> None:
        """Record a status snapshot after checking it against the lifecycle.

        Raises:
            CrawlStateError: If the snapshot leaves a terminal status or
                lowers a counter while the job is scraping.
        """
        previous = self._last
        if previous is not None:
            if is_terminal(previous.status) and snapshot.status != previous.status:
                raise CrawlStateError(
                    f"Crawl job moved from terminal status '{previous.status}' "
                    f"to '{snapshot.status}'",
                    job_id=self.id,
                )
            if previous.status == "scraping" and snapshot.status == "scraping":
                if snapshot.completed < previous.completed or snapshot.total < previous.total:
                    raise CrawlStateError(
                        "Crawl job counters decreased",
                        job_id=self.id,
                        details={
                            "completed": (previous.completed, snapshot.completed),
                            "total": (previous.total, snapshot.total),
                        },
                    )

        self._last = snapshot
        if is_terminal(snapshot.status) and (previous is None or not is_terminal(previous.status)):
            logger.info(
                "Crawl job %s %s (%d/%d pages)",
                self.id,
                snapshot.status,
                snapshot.completed,
                snapshot.total,
            )

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    async def refresh(self) -> CrawlStatusResponse:
        """Fetch and record the current status.

        Error envelopes are returned as-is and leave the recorded state alone.
        """
        resp = await self._client.get_crawl_status(self.id)
        if resp.success:
            self.observe(resp)
        return resp

    async def next_page(self) -> Optional[CrawlStatusResponse]:
        """Fetch the chunk behind the current ``next`` cursor.

        Returns:
            The status response for that chunk, or None if there is no cursor.
        """
        cursor = self.next
        if cursor is None:
            return None
        resp = await self._client.get_crawl_status_page(cursor)
        if resp.success:
            self.observe(resp)
        return resp

    async def cancel(self) -> CrawlCancelResponse:
        """Ask the service to cancel the job.

        The recorded status is not changed; the next ``refresh()`` shows
        whether the job reached ``cancelled``. A job that already finished
        comes back as an ErrorResponse.
        """
        resp = await self._client.cancel_crawl(self.id)
        if resp.success:
            logger.info("Cancellation of crawl job %s accepted", self.id)
        return resp

    async def poll(
        self,
        interval: float = 2.0,
        max_polls: Optional[int] = None,
    ) -> AsyncGenerator[CrawlStatusResponse, None]:
        """Refresh repeatedly, yielding each response.

        Stops after a terminal status, an error envelope, or *max_polls*
        refreshes, whichever comes first.

        Args:
            interval: Seconds to sleep between refreshes.
            max_polls: Upper bound on refreshes; None polls until terminal.

        Raises:
            ValidationError: If *interval* is negative or *max_polls* < 1.
        """
        if interval < 0:
            raise ValidationError(
                "Poll interval must not be negative",
                errors=[{"loc": "interval", "msg": "must be >= 0", "type": "greater_than_equal"}],
            )
        if max_polls is not None and max_polls < 1:
            raise ValidationError(
                "max_polls must be at least 1",
                errors=[{"loc": "max_polls", "msg": "must be >= 1", "type": "greater_than_equal"}],
            )

        polls = 0
        while True:
            resp = await self.refresh()
            polls += 1
            yield resp
            if not resp.success or is_terminal(resp.status):
                return
            if max_polls is not None and polls >= max_polls:
                return
            await asyncio.sleep(interval)

    async def wait(
        self,
        interval: float = 2.0,
        max_polls: Optional[int] = None,
    ) -> CrawlStatusResponse:
        """Poll until the job stops and return the last response.

        Raises:
            ValidationError: If *interval* is negative or *max_polls* < 1.
        """
        polls = self.poll(interval=interval, max_polls=max_polls)
        # poll() always yields at least once or raises.
        last = await polls.__anext__()
        async for resp in polls:
            last = resp
        return last


async def poll_crawl(
    client: LLMCrawl,
    job_id: str,
    interval: float = 2.0,
    max_polls: Optional[int] = None,
) -> AsyncGenerator[CrawlStatusResponse, None]:
    """Poll an existing crawl job by id. See ``CrawlJob.poll``."""
    job = CrawlJob(client, job_id)
    async for resp in job.poll(interval=interval, max_polls=max_polls):
        yield resp
