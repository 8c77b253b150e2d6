"""Pydantic data models for the llmcrawl client.

This module defines the request and payload shapes exchanged with the
service:

- **ScrapeOptions** / **ScrapeRequest**: What to scrape from a single page.
- **CrawlerOptions** / **CrawlRequest**: Scope of a multi-page crawl job.
- **MapRequest**: Scope of a site map (link enumeration) call.
- **ExtractionOptions** / **SummarizerOptions**: Server-side AI directives.
- **Document** / **DocumentMetadata**: One scraped page as returned by the service.

Python attributes are snake_case; the wire uses camelCase. Every model
accepts either spelling on input and serializes with the wire names.

All models use Pydantic v2. Request models reject unknown options and
out-of-range values instead of clamping them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, get_args
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel

__all__ = [
    "Format",
    "ExtractionMode",
    "SummarizerMode",
    "CrawlStatus",
    "FORMATS",
    "DEFAULT_FORMATS",
    "DEFAULT_SYSTEM_PROMPT",
    "ExtractionOptions",
    "SummarizerOptions",
    "ScrapeOptions",
    "ScrapeRequest",
    "CrawlerOptions",
    "CrawlRequest",
    "MapRequest",
    "DocumentMetadata",
    "Document",
    "check_absolute_url",
]

# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------

Format = Literal[
    "markdown",
    "html",
    "rawHtml",
    "links",
    "screenshot",
    "screenshot@fullPage",
    "text",
    "extract",
    "summary",
]
"""Output formats a scrape can produce. ``screenshot@fullPage`` is the full-page screenshot."""

ExtractionMode = Literal["llm"]
SummarizerMode = Literal["llm"]

CrawlStatus = Literal["scraping", "completed", "failed", "cancelled"]
"""Lifecycle states of a crawl job. ``scraping`` is the only non-terminal one."""

FORMATS: frozenset[str] = frozenset(get_args(Format))

DEFAULT_FORMATS: tuple[str, ...] = ("markdown", "html")

DEFAULT_SYSTEM_PROMPT: str = (
    "Based on the information on the page, extract all the information from "
    "the schema. Try to extract all the fields even those that might not be "
    "marked as required."
)


def check_absolute_url(value: str) -> str:
    """Return *value* unchanged if it is an absolute http(s) URL.

    The URL is kept as the caller wrote it (no trailing-slash normalization),
    so it is echoed to the service byte for byte.

    Raises:
        ValueError: If the scheme is not http/https or the host is missing.
    """
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"'{value}' is not an absolute http(s) URL")
    return value


class _WireModel(BaseModel):
    """Base for request models: camelCase on the wire, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


# ---------------------------------------------------------------------------
# AI directives
# ---------------------------------------------------------------------------


class ExtractionOptions(_WireModel):
    """Server-side structured extraction directive.

    Attributes:
        mode: Extraction engine. Only ``"llm"`` is supported.
        prompt: Free-form instruction used when no schema is given.
        system_prompt: System prompt for the extraction model.
        json_schema: A JSON Schema object describing the data to pull out.
                     Sent on the wire as ``schema``.
    """

    mode: ExtractionMode = "llm"
    prompt: Optional[str] = None
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    json_schema: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class SummarizerOptions(_WireModel):
    """Server-side page summarization directive."""

    mode: SummarizerMode = "llm"
    prompt: Optional[str] = None


# ---------------------------------------------------------------------------
# Scrape
# ---------------------------------------------------------------------------


class ScrapeOptions(_WireModel):
    """Per-page scraping options.

    Used directly for ``scrape`` (via ScrapeRequest) and nested as
    ``scrapeOptions`` in a crawl. The per-request ``timeout`` lives on
    ScrapeRequest only.

    Attributes:
        formats: Non-empty list of output formats. Duplicates are collapsed.
        only_main_content: Drop headers, navigation and footers.
        wait_for: Delay in milliseconds before the page is captured (0-60000).
        include_tags: CSS selectors to keep.
        exclude_tags: CSS selectors to remove.
        headers: Extra HTTP headers the service sends to the target page.
        convert_paths_to_absolute: Rewrite relative links/images to absolute URLs.
        parse_pdf: Convert PDF targets to text.
        extraction: Optional structured extraction directive.
        summarizer: Optional summarization directive.
    """

    formats: List[Format] = Field(
        default_factory=lambda: list(DEFAULT_FORMATS),
        min_length=1,
    )
    only_main_content: bool = True
    wait_for: int = Field(default=0, ge=0, le=60000)
    include_tags: Optional[List[str]] = None
    exclude_tags: Optional[List[str]] = None
    headers: Optional[Dict[str, str]] = None
    convert_paths_to_absolute: bool = True
    parse_pdf: bool = Field(default=True, alias="parsePDF")
    extraction: Optional[ExtractionOptions] = None
    summarizer: Optional[SummarizerOptions] = None

    @field_validator("formats")
    @classmethod
    def dedupe_formats(cls, v: List[str]) -> List[str]:
        """Collapse repeated formats, keeping first-seen order."""
        return list(dict.fromkeys(v))


class ScrapeRequest(ScrapeOptions):
    """Body of ``POST /v1/scrape``."""

    url: str
    timeout: int = Field(default=30000, ge=1000, le=90000)
    origin: str = "api"
    webhook_urls: Optional[List[str]] = None
    metadata: Any = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return check_absolute_url(v)

    @field_validator("webhook_urls")
    @classmethod
    def validate_webhook_urls(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [check_absolute_url(u) for u in v]


# ---------------------------------------------------------------------------
# Crawl / map
# ---------------------------------------------------------------------------


class CrawlerOptions(_WireModel):
    """Scope options shared by crawl and map requests.

    Attributes:
        include_paths: Path globs a URL must match to be visited.
        exclude_paths: Path globs that exclude a URL.
        max_depth: Link depth relative to the seed URL.
        limit: Page budget. No upper bound is enforced client-side for crawls.
        allow_backward_links: Follow links that point above the seed path.
        allow_external_links: Follow links to other domains.
        ignore_sitemap: Do not seed the crawl from sitemap.xml.
    """

    include_paths: List[str] = Field(default_factory=list)
    exclude_paths: List[str] = Field(default_factory=list)
    max_depth: int = Field(default=10, ge=0)
    limit: int = Field(default=10000, ge=1)
    allow_backward_links: bool = False
    allow_external_links: bool = False
    ignore_sitemap: bool = True


class CrawlRequest(CrawlerOptions):
    """Body of ``POST /v1/crawl``."""

    url: str
    origin: str = "api"
    scrape_options: ScrapeOptions = Field(default_factory=ScrapeOptions)
    webhook_urls: Optional[List[str]] = None
    webhook_metadata: Any = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return check_absolute_url(v)

    @field_validator("webhook_urls")
    @classmethod
    def validate_webhook_urls(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [check_absolute_url(u) for u in v]


class MapRequest(CrawlerOptions):
    """Body of ``POST /v1/map``. Mapping is synchronous: links come back in one response."""

    url: str
    origin: str = "api"
    include_subdomains: bool = True
    search: Optional[str] = None
    limit: int = Field(default=5000, ge=1, le=5000)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return check_absolute_url(v)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class DocumentMetadata(BaseModel):
    """Page metadata: an open map overlaid with well-known SEO fields.

    Well-known keys are typed and checked strictly, so a numeric
    ``pageStatusCode`` is never turned into a string and a string title is
    never turned into a number. Any other key the service sends is kept
    as-is in ``unknown_fields`` and written back out by ``to_dict()``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    language: Optional[StrictStr] = None
    keywords: Optional[StrictStr] = None
    robots: Optional[StrictStr] = None
    og_title: Optional[StrictStr] = None
    og_description: Optional[StrictStr] = None
    og_url: Optional[StrictStr] = None
    og_image: Optional[StrictStr] = None
    og_audio: Optional[StrictStr] = None
    og_determiner: Optional[StrictStr] = None
    og_locale: Optional[StrictStr] = None
    og_locale_alternate: Optional[List[StrictStr]] = None
    og_site_name: Optional[StrictStr] = None
    og_video: Optional[StrictStr] = None
    dcterms_created: Optional[StrictStr] = None
    dc_date_created: Optional[StrictStr] = None
    dc_date: Optional[StrictStr] = None
    dcterms_type: Optional[StrictStr] = None
    dc_type: Optional[StrictStr] = None
    dcterms_audience: Optional[StrictStr] = None
    dcterms_subject: Optional[StrictStr] = None
    dc_subject: Optional[StrictStr] = None
    dc_description: Optional[StrictStr] = None
    dcterms_keywords: Optional[StrictStr] = None
    modified_time: Optional[StrictStr] = None
    published_time: Optional[StrictStr] = None
    article_tag: Optional[StrictStr] = None
    article_section: Optional[StrictStr] = None
    source_url: Optional[StrictStr] = Field(default=None, alias="sourceURL")
    page_status_code: Optional[StrictInt] = None
    page_error: Optional[StrictStr] = None

    @property
    def unknown_fields(self) -> Dict[str, Any]:
        """Keys the service sent that are not well-known fields."""
        return dict(self.model_extra or {})

    def to_dict(self) -> Dict[str, Any]:
        """Wire-shaped dict: well-known keys that were set plus every unknown key."""
        data = {
            field.alias or name: getattr(self, name)
            for name, field in type(self).model_fields.items()
            if name in self.model_fields_set
        }
        data.update(self.unknown_fields)
        return data


class Document(BaseModel):
    """One scraped page.

    Which body fields are populated depends on the requested formats.
    ``extraction`` holds whatever structure the caller's schema asked for.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    url: Optional[str] = None
    markdown: Optional[str] = None
    html: Optional[str] = None
    raw_html: Optional[str] = None
    text: Optional[str] = None
    links: Optional[List[str]] = None
    screenshot: Optional[str] = None
    full_page_screenshot: Optional[str] = None
    summary: Optional[str] = None
    extraction: Any = None
    num_tokens: Optional[int] = None
    content_trimmed: Optional[bool] = None
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    children_links: Optional[List[str]] = None
    provider: Optional[str] = None
    warning: Optional[str] = None
    index: Optional[int] = None
