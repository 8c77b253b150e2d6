"""Shared fixtures: an in-memory stand-in for the crawling service."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from llmcrawl import LLMCrawl

API_KEY = "test-api-key"


class FakeService:
    """Queue canned responses per (method, path) and record every request.

    The last queued response for a route is repeated once the queue is
    down to one entry. Unknown routes answer 404 with an error envelope.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        *,
        status: int = 200,
        content: Optional[bytes] = None,
    ) -> None:
        self._routes.setdefault((method, path), []).append(
            {"status": status, "json": json_body, "content": content}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        if canned["content"] is not None:
            return httpx.Response(canned["status"], content=canned["content"])
        return httpx.Response(canned["status"], json=canned["json"])

    def client(self, **kwargs: Any) -> LLMCrawl:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return LLMCrawl(api_key=API_KEY, http_client=http_client, **kwargs)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def client(service: FakeService) -> LLMCrawl:
    return service.client()


def status_body(status: str, completed: int, total: int, **extra: Any) -> Dict[str, Any]:
    body = {
        "success": True,
        "status": status,
        "completed": completed,
        "total": total,
        "expiresAt": "2026-10-20T00:00:00Z",
        "data": [],
    }
    body.update(extra)
    return body
