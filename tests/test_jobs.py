"""Tests for llmcrawl.jobs (crawl job lifecycle)."""

from __future__ import annotations

import pytest

from conftest import FakeService, status_body
from llmcrawl.exceptions import CrawlStateError, ValidationError
from llmcrawl.jobs import CrawlJob, is_terminal, poll_crawl
from llmcrawl.responses import CrawlStatusSuccessResponse, ErrorResponse

URL = "https://example.com"


def _snapshot(status: str, completed: int, total: int, **extra) -> CrawlStatusSuccessResponse:
    return CrawlStatusSuccessResponse.model_validate(status_body(status, completed, total, **extra))


class TestIsTerminal:
    @pytest.mark.parametrize("status", ["completed", "failed", "cancelled"])
    def test_terminal(self, status):
        assert is_terminal(status)

    def test_scraping_not_terminal(self):
        assert not is_terminal("scraping")


class TestObserve:
    def _job(self, service: FakeService) -> CrawlJob:
        return CrawlJob(service.client(), "job-1")

    def test_initial_state(self, service):
        job = self._job(service)
        assert job.status == "scraping"
        assert (job.completed, job.total) == (0, 0)
        assert job.next is None
        assert job.last is None
        assert not job.is_done

    def test_progress_recorded(self, service):
        job = self._job(service)
        job.observe(_snapshot("scraping", 1, 5))
        job.observe(_snapshot("scraping", 3, 8))
        assert (job.completed, job.total) == (3, 8)

    def test_equal_counters_allowed(self, service):
        job = self._job(service)
        job.observe(_snapshot("scraping", 2, 5))
        job.observe(_snapshot("scraping", 2, 5))
        assert job.completed == 2

    @pytest.mark.parametrize("completed, total", [(1, 5), (2, 4)])
    def test_decreasing_counters_rejected(self, service, completed, total):
        job = self._job(service)
        job.observe(_snapshot("scraping", 2, 5))
        with pytest.raises(CrawlStateError) as exc_info:
            job.observe(_snapshot("scraping", completed, total))
        assert exc_info.value.job_id == "job-1"
        assert job.completed == 2

    def test_leaving_terminal_rejected(self, service):
        job = self._job(service)
        job.observe(_snapshot("completed", 5, 5))
        with pytest.raises(CrawlStateError, match="terminal"):
            job.observe(_snapshot("scraping", 5, 5))
        assert job.status == "completed"

    def test_terminal_to_other_terminal_rejected(self, service):
        job = self._job(service)
        job.observe(_snapshot("cancelled", 2, 5))
        with pytest.raises(CrawlStateError):
            job.observe(_snapshot("completed", 5, 5))

    def test_repeated_terminal_allowed(self, service):
        job = self._job(service)
        job.observe(_snapshot("completed", 5, 5))
        job.observe(_snapshot("completed", 5, 5, next="https://api.llmcrawl.dev/v1/crawl/job-1?skip=3"))
        assert job.is_done
        assert job.next is not None

    def test_blank_id_rejected(self, service):
        with pytest.raises(ValidationError):
            CrawlJob(service.client(), "")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_crawl_then_poll_until_completed(self, service: FakeService):
        client = service.client()
        service.add("POST", "/v1/crawl", {"success": True, "id": "job-1", "url": URL})
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 0, 3))
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 2, 3))
        service.add(
            "GET",
            "/v1/crawl/job-1",
            status_body("completed", 3, 3, data=[{"markdown": "a"}, {"markdown": "b"}, {"markdown": "c"}]),
        )

        job = await CrawlJob.start(client, URL, limit=50)
        assert isinstance(job, CrawlJob)
        assert job.id == "job-1"
        assert job.url == URL
        assert service.last_body() == {"url": URL, "limit": 50}

        seen = [resp async for resp in job.poll(interval=0)]

        assert [(r.status, r.completed, r.total) for r in seen] == [
            ("scraping", 0, 3),
            ("scraping", 2, 3),
            ("completed", 3, 3),
        ]
        assert job.is_done
        assert [d.markdown for d in job.last.data] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_counters_never_decrease_between_polls(self, service):
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 1, 4))
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 1, 4))
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 3, 6))
        job = CrawlJob(service.client(), "job-1")

        previous = None
        async for resp in job.poll(interval=0, max_polls=3):
            if previous is not None:
                assert resp.completed >= previous.completed
                assert resp.total >= previous.total
            previous = resp
        assert len(service.requests) == 3

    @pytest.mark.asyncio
    async def test_start_refused(self, service):
        service.add("POST", "/v1/crawl", {"success": False, "error": "Invalid URL"}, status=400)
        result = await CrawlJob.start(service.client(), URL)
        assert isinstance(result, ErrorResponse)
        assert result.error == "Invalid URL"

    @pytest.mark.asyncio
    async def test_poll_stops_on_error_envelope(self, service):
        job = CrawlJob(service.client(), "expired")
        seen = [resp async for resp in job.poll(interval=0)]
        assert len(seen) == 1
        assert isinstance(seen[0], ErrorResponse)
        assert job.last is None

    @pytest.mark.asyncio
    async def test_poll_crawl_by_id(self, service):
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 0, 1))
        service.add("GET", "/v1/crawl/job-1", status_body("failed", 0, 1))
        statuses = [resp.status async for resp in poll_crawl(service.client(), "job-1", interval=0)]
        assert statuses == ["scraping", "failed"]

    @pytest.mark.asyncio
    async def test_wait_returns_final_status(self, service):
        service.add("GET", "/v1/crawl/job-1", status_body("cancelled", 1, 9))
        final = await CrawlJob(service.client(), "job-1").wait(interval=0)
        assert final.status == "cancelled"

    @pytest.mark.asyncio
    async def test_wait_returns_last_of_several_polls(self, service):
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 1, 3))
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 2, 3))
        service.add("GET", "/v1/crawl/job-1", status_body("completed", 3, 3))
        job = CrawlJob(service.client(), "job-1")
        final = await job.wait(interval=0)
        assert (final.status, final.completed) == ("completed", 3)
        assert len(service.requests) == 3
        assert job.is_done

    @pytest.mark.asyncio
    async def test_wait_stops_at_max_polls(self, service):
        service.add("GET", "/v1/crawl/job-1", status_body("scraping", 1, 3))
        final = await CrawlJob(service.client(), "job-1").wait(interval=0, max_polls=2)
        assert final.status == "scraping"
        assert len(service.requests) == 2

    @pytest.mark.asyncio
    async def test_wait_returns_error_envelope(self, service):
        final = await CrawlJob(service.client(), "expired").wait(interval=0)
        assert isinstance(final, ErrorResponse)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [{"interval": -1}, {"max_polls": 0}])
    async def test_wait_arguments_validated(self, service, kwargs):
        with pytest.raises(ValidationError):
            await CrawlJob(service.client(), "job-1").wait(**kwargs)
        assert service.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [{"interval": -1}, {"max_polls": 0}])
    async def test_poll_arguments_validated(self, service, kwargs):
        job = CrawlJob(service.client(), "job-1")
        with pytest.raises(ValidationError):
            async for _ in job.poll(**kwargs):
                pass
        assert service.requests == []


class TestCancelAndPaginate:
    @pytest.mark.asyncio
    async def test_cancel_running_job(self, service):
        service.add("DELETE", "/v1/crawl/job-1/cancel", {"success": True, "message": "Cancelled"})
        service.add("GET", "/v1/crawl/job-1", status_body("cancelled", 1, 4))
        job = CrawlJob(service.client(), "job-1")

        resp = await job.cancel()
        assert resp.success is True
        assert job.status == "scraping"

        await job.refresh()
        assert job.status == "cancelled"

    @pytest.mark.asyncio
    async def test_cancel_completed_job_is_error_envelope(self, service):
        service.add("GET", "/v1/crawl/job-1", status_body("completed", 4, 4))
        service.add(
            "DELETE",
            "/v1/crawl/job-1/cancel",
            {"success": False, "error": "Crawl job already completed"},
            status=409,
        )
        client = service.client()
        job = CrawlJob(client, "job-1")
        await job.refresh()

        resp = await job.cancel()

        assert isinstance(resp, ErrorResponse)
        assert resp.success is False
        assert resp.error == "Crawl job already completed"
        assert not hasattr(resp, "message")

    @pytest.mark.asyncio
    async def test_next_page_follows_cursor_on_request(self, service):
        cursor = "https://api.llmcrawl.dev/v1/crawl/job-1/page?skip=2"
        service.add(
            "GET",
            "/v1/crawl/job-1",
            status_body("completed", 3, 3, next=cursor, data=[{"markdown": "a"}, {"markdown": "b"}]),
        )
        service.add("GET", "/v1/crawl/job-1/page", status_body("completed", 3, 3, data=[{"markdown": "c"}]))
        job = CrawlJob(service.client(), "job-1")

        await job.refresh()
        assert len(service.requests) == 1
        assert job.next == cursor

        chunk = await job.next_page()
        assert str(service.last_request.url) == cursor
        assert [d.markdown for d in chunk.data] == ["c"]
        assert job.next is None
        assert await job.next_page() is None
        assert len(service.requests) == 2
