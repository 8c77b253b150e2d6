"""Request building and serialization.

Pure functions that turn a URL plus caller options into a validated,
fully-defaulted request model, and a request model into a wire body.
Nothing here performs I/O, so every rule can be unit tested directly.

Options may be given as:

- a mapping using wire (``onlyMainContent``) or Python (``only_main_content``) names,
- an already-built options model (``ScrapeOptions``, ``CrawlerOptions``, ...),
- keyword arguments, which override entries of the above.

Every violated constraint is collected into a single ``ValidationError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel

from llmcrawl.exceptions import ValidationError
from llmcrawl.models import CrawlRequest, MapRequest, ScrapeRequest

__all__ = [
    "Options",
    "build_request",
    "build_scrape_request",
    "build_crawl_request",
    "build_map_request",
    "to_payload",
    "require_job_id",
]

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)

Options = Union[Mapping[str, Any], BaseModel, None]


def _options_to_dict(options: Options) -> Dict[str, Any]:
    """Flatten caller options into a plain dict of explicitly-set values."""
    if options is None:
        return {}
    if isinstance(options, BaseModel):
        # Only what the caller actually set, so defaults stay implicit on the wire.
        return options.model_dump(exclude_unset=True)
    if isinstance(options, Mapping):
        return dict(options)
    raise ValidationError(
        f"Options must be a mapping or an options model, got {type(options).__name__}",
        errors=[{"loc": "", "msg": "invalid options type", "type": "type_error"}],
    )


def _to_field_names(model: Type[BaseModel], values: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename wire keys to field names so either spelling addresses the same field.

    Unknown keys are kept as given and rejected later by the model.
    """
    by_alias = {field.alias or name: name for name, field in model.model_fields.items()}
    return {by_alias.get(key, key): value for key, value in values.items()}


def _format_errors(exc: pydantic.ValidationError) -> List[Dict[str, Any]]:
    """Convert pydantic error entries to ``{loc, msg, type}`` dicts."""
    errors: List[Dict[str, Any]] = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in err["loc"])
        errors.append({"loc": loc, "msg": err["msg"], "type": err["type"]})
    return errors


def build_request(
    model: Type[RequestT],
    url: str,
    options: Options = None,
    **overrides: Any,
) -> RequestT:
    """Validate *url* and options against *model* and return the request.

    Args:
        model: The request model class (ScrapeRequest, CrawlRequest, MapRequest).
        url: Target URL. Must be an absolute http(s) URL.
        options: Mapping or options model; see module docstring.
        **overrides: Option values that take precedence over *options*.

    Returns:
        A frozen, fully-defaulted instance of *model*.

    Raises:
        ValidationError: Listing every field that violates the schema.
    """
    values = _to_field_names(model, _options_to_dict(options))
    values.update(_to_field_names(model, overrides))
    if "url" in values:
        raise ValidationError(
            "The target URL is passed positionally, not as an option",
            errors=[{"loc": "url", "msg": "unexpected option", "type": "extra_forbidden"}],
        )

    try:
        request = model.model_validate({"url": url, **values})
    except pydantic.ValidationError as exc:
        errors = _format_errors(exc)
        logger.debug("%s rejected with %d error(s)", model.__name__, len(errors))
        raise ValidationError(
            f"Invalid {model.__name__}: {len(errors)} validation error(s)",
            errors=errors,
        ) from exc

    return request


def build_scrape_request(url: str, options: Options = None, **overrides: Any) -> ScrapeRequest:
    """Build a ScrapeRequest. See ``build_request``.

    Examples:
        >>> req = build_scrape_request("https://example.com", {"formats": ["markdown"]})
        >>> req.formats
        ['markdown']
        >>> req.timeout
        30000
    """
    return build_request(ScrapeRequest, url, options, **overrides)


def build_crawl_request(url: str, options: Options = None, **overrides: Any) -> CrawlRequest:
    """Build a CrawlRequest. See ``build_request``."""
    return build_request(CrawlRequest, url, options, **overrides)


def build_map_request(url: str, options: Options = None, **overrides: Any) -> MapRequest:
    """Build a MapRequest. See ``build_request``."""
    return build_request(MapRequest, url, options, **overrides)


def to_payload(request: BaseModel) -> Dict[str, Any]:
    """Serialize a request model to its JSON wire body.

    Only fields the caller set are emitted. The service applies the same
    defaults as the models, so omitted fields mean the same thing on both
    sides. ``url`` is always set and therefore always present.
    """
    return request.model_dump(mode="json", by_alias=True, exclude_unset=True)


def require_job_id(job_id: Optional[str]) -> str:
    """Return *job_id* stripped of surrounding whitespace.

    Raises:
        ValidationError: If the id is missing or blank.
    """
    if not isinstance(job_id, str) or not job_id.strip():
        raise ValidationError(
            "Crawl job id must be a non-empty string",
            errors=[{"loc": "jobId", "msg": "must be a non-empty string", "type": "value_error"}],
        )
    return job_id.strip()
