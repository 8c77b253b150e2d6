"""Tests for llmcrawl.responses (tagged success/error envelopes)."""

from __future__ import annotations

import pytest

from llmcrawl.exceptions import MalformedResponseError, TransportError
from llmcrawl.responses import (
    CrawlCancelSuccessResponse,
    CrawlStatusSuccessResponse,
    CrawlSuccessResponse,
    ErrorResponse,
    MapSuccessResponse,
    ScrapeSuccessResponse,
    parse_response,
)

SUCCESS_BODIES = [
    (
        ScrapeSuccessResponse,
        {"success": True, "data": {"markdown": "# Hi", "metadata": {"title": "Hi"}}},
        "data",
    ),
    (
        CrawlSuccessResponse,
        {"success": True, "id": "job-1", "url": "https://example.com"},
        "id",
    ),
    (
        CrawlStatusSuccessResponse,
        {
            "success": True,
            "status": "completed",
            "completed": 3,
            "total": 3,
            "expiresAt": "2026-10-20T00:00:00Z",
            "data": [{"markdown": "a"}, {"markdown": "b"}, {"markdown": "c"}],
        },
        "status",
    ),
    (
        CrawlCancelSuccessResponse,
        {"success": True, "message": "Crawl job cancelled"},
        "message",
    ),
    (
        MapSuccessResponse,
        {"success": True, "links": ["https://example.com/a"]},
        "links",
    ),
]

ENDPOINT_MODELS = [model for model, _, _ in SUCCESS_BODIES]


class TestTagExclusivity:
    @pytest.mark.parametrize("model, body, payload_field", SUCCESS_BODIES)
    def test_success_branch_has_no_error_fields(self, model, body, payload_field):
        resp = parse_response({**body, "error": "ignored", "details": {"x": 1}}, model)
        assert isinstance(resp, model)
        assert resp.success is True
        assert hasattr(resp, payload_field)
        assert not hasattr(resp, "error")
        assert not hasattr(resp, "details")

    @pytest.mark.parametrize("model, body, payload_field", SUCCESS_BODIES)
    def test_error_branch_has_no_payload_fields(self, model, body, payload_field):
        error_body = {**body, "success": False, "error": "Job not found"}
        resp = parse_response(error_body, model)
        assert isinstance(resp, ErrorResponse)
        assert resp.success is False
        assert resp.error == "Job not found"
        assert not hasattr(resp, payload_field)

    @pytest.mark.parametrize("model", ENDPOINT_MODELS)
    def test_error_details_and_code(self, model):
        resp = parse_response(
            {"success": False, "error": "Bad request", "details": [{"path": "url"}], "returnCode": 42},
            model,
        )
        assert resp.details == [{"path": "url"}]
        assert resp.return_code == 42


class TestMalformedBodies:
    @pytest.mark.parametrize("model", ENDPOINT_MODELS)
    def test_missing_tag(self, model):
        with pytest.raises(MalformedResponseError, match="no 'success' tag"):
            parse_response({"data": {}}, model)

    @pytest.mark.parametrize("tag", ["true", 1, None])
    def test_non_boolean_tag(self, tag):
        with pytest.raises(MalformedResponseError, match="must be a boolean"):
            parse_response({"success": tag, "links": []}, MapSuccessResponse)

    @pytest.mark.parametrize("body", [[], "ok", 3, None])
    def test_not_an_object(self, body):
        with pytest.raises(MalformedResponseError, match="Expected a JSON object"):
            parse_response(body, ScrapeSuccessResponse)

    def test_success_without_payload(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_response({"success": True}, CrawlSuccessResponse)
        assert set(exc_info.value.details["fields"]) == {"id", "url"}

    def test_error_without_message(self):
        with pytest.raises(MalformedResponseError):
            parse_response({"success": False}, ScrapeSuccessResponse)

    def test_error_with_empty_message(self):
        with pytest.raises(MalformedResponseError):
            parse_response({"success": False, "error": ""}, ScrapeSuccessResponse)

    def test_unknown_crawl_status(self):
        with pytest.raises(MalformedResponseError):
            parse_response(
                {"success": True, "status": "paused", "completed": 0, "total": 0},
                CrawlStatusSuccessResponse,
            )

    def test_is_a_transport_error(self):
        with pytest.raises(TransportError):
            parse_response({}, MapSuccessResponse)


class TestPayloads:
    def test_scrape_document(self):
        resp = parse_response(
            {
                "success": True,
                "warning": "Partial content",
                "scrape_id": "s-1",
                "data": {
                    "markdown": "# Hi",
                    "metadata": {"title": "Hi", "pageStatusCode": 200, "x-robots": "noindex"},
                },
            },
            ScrapeSuccessResponse,
        )
        assert resp.data.markdown == "# Hi"
        assert resp.data.metadata.page_status_code == 200
        assert resp.data.metadata.unknown_fields == {"x-robots": "noindex"}
        assert resp.warning == "Partial content"
        assert resp.scrape_id == "s-1"

    def test_crawl_status_cursor_preserved(self):
        cursor = "https://api.llmcrawl.dev/v1/crawl/job-1?skip=10&token=a%2Fb"
        resp = parse_response(
            {"success": True, "status": "scraping", "completed": 10, "total": 40, "next": cursor},
            CrawlStatusSuccessResponse,
        )
        assert resp.next == cursor
        assert resp.has_more is True
        assert resp.data == []

    def test_crawl_status_without_cursor(self):
        resp = parse_response(
            {"success": True, "status": "completed", "completed": 1, "total": 1, "creditsUsed": 1},
            CrawlStatusSuccessResponse,
        )
        assert resp.next is None
        assert resp.has_more is False
        assert resp.credits_used == 1

    def test_status_code_attached_to_error(self):
        resp = parse_response(
            {"success": False, "error": "Job not found"},
            CrawlStatusSuccessResponse,
            status_code=404,
        )
        assert resp.status_code == 404
        assert "status_code" not in resp.model_dump()

    def test_cancel_message_optional(self):
        resp = parse_response({"success": True}, CrawlCancelSuccessResponse)
        assert resp.message is None
