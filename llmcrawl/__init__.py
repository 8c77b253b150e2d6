"""llmcrawl -- A typed client for the LLMCrawl scraping and crawling service.

Quick start::

    from llmcrawl import LLMCrawl

    client = LLMCrawl(api_key="sk-...")

    resp = await client.scrape("https://example.com", {"formats": ["markdown"]})
    if resp.success:
        print(resp.data.markdown)
    else:
        print(resp.error)

    # Sync usage (simple scripts)
    from llmcrawl import scrape_sync
    resp = scrape_sync("https://example.com", api_key="sk-...", formats=["markdown"])

Five remote operations:

1. **Scrape** (``client.scrape()``): One page, one Document.
2. **Crawl** (``client.crawl()``): Submit a multi-page job, get its id.
3. **Status** (``client.get_crawl_status()``): Snapshot of a job's progress and pages.
4. **Cancel** (``client.cancel_crawl()``): Stop a running job.
5. **Map** (``client.map()``): List the links under a site.

Every operation returns either a success envelope or an ``ErrorResponse``;
test ``resp.success`` to tell them apart. Invalid options raise
``ValidationError`` before anything is sent.
"""

from llmcrawl.client import LLMCrawl, map_sync, scrape_sync
from llmcrawl.config import DEFAULT_BASE_URL, ClientConfig, load_config
from llmcrawl.exceptions import (
    ConfigurationError,
    CrawlStateError,
    LLMCrawlError,
    MalformedResponseError,
    TransportError,
    ValidationError,
)
from llmcrawl.jobs import TERMINAL_STATUSES, CrawlJob, is_terminal, poll_crawl
from llmcrawl.models import (
    CrawlerOptions,
    CrawlRequest,
    CrawlStatus,
    Document,
    DocumentMetadata,
    ExtractionOptions,
    Format,
    MapRequest,
    ScrapeOptions,
    ScrapeRequest,
    SummarizerOptions,
)
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
    build_crawl_request,
    build_map_request,
    build_scrape_request,
    to_payload,
)

__all__ = [
    # Primary API
    "LLMCrawl",
    "scrape_sync",
    "map_sync",
    # Crawl jobs
    "CrawlJob",
    "poll_crawl",
    "is_terminal",
    "TERMINAL_STATUSES",
    # Request models
    "Format",
    "CrawlStatus",
    "ScrapeOptions",
    "ScrapeRequest",
    "CrawlerOptions",
    "CrawlRequest",
    "MapRequest",
    "ExtractionOptions",
    "SummarizerOptions",
    "build_scrape_request",
    "build_crawl_request",
    "build_map_request",
    "to_payload",
    # Response models
    "Document",
    "DocumentMetadata",
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
    # Config
    "ClientConfig",
    "load_config",
    "DEFAULT_BASE_URL",
    # Exceptions
    "LLMCrawlError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "MalformedResponseError",
    "CrawlStateError",
]

__version__ = "0.1.0"
