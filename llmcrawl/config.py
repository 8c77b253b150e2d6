"""Configuration for the llmcrawl client.

This module provides:

- **ClientConfig**: Immutable settings fixed at client construction.
- **load_config()**: Factory that validates overrides and reports problems
  as ``ConfigurationError``.

Configuration comes only from arguments. The client reads no environment
variables and no files.
"""

from __future__ import annotations

from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from llmcrawl.exceptions import ConfigurationError
from llmcrawl.models import check_absolute_url

__all__ = [
    "DEFAULT_BASE_URL",
    "ClientConfig",
    "load_config",
]

DEFAULT_BASE_URL: str = "https://api.llmcrawl.dev"


class ClientConfig(BaseModel):
    """Settings for an ``LLMCrawl`` client.

    Attributes:
        api_key: Bearer credential sent with every request. Required.
        base_url: Service root, without a trailing slash.
        timeout: Transport timeout in seconds for each HTTP exchange. This
                 bounds the socket, it does not retry.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., description="Bearer credential for the service")
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Service root URL",
    )
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Transport timeout in seconds",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Reject blank keys."""
        if not v.strip():
            raise ValueError("api_key must not be empty")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute URL and drop trailing slashes."""
        return check_absolute_url(v).rstrip("/")

    def __repr__(self) -> str:
        return f"ClientConfig(api_key='***', base_url={self.base_url!r}, timeout={self.timeout!r})"


def load_config(**overrides: Any) -> ClientConfig:
    """Create a ClientConfig from keyword arguments.

    ``None`` values are treated as "not given", so callers can forward
    optional arguments without filtering them.

    Args:
        **overrides: Keyword arguments matching ClientConfig field names.

    Returns:
        A validated, frozen ClientConfig.

    Raises:
        ConfigurationError: If a key is unknown, the API key is missing or
            blank, or any value is invalid.

    Examples:
        >>> config = load_config(api_key="sk-test")
        >>> config.base_url
        'https://api.llmcrawl.dev'
    """
    valid_fields = set(ClientConfig.model_fields.keys())
    invalid = set(overrides.keys()) - valid_fields
    if invalid:
        raise ConfigurationError(
            f"Unknown config fields: {sorted(invalid)}. "
            f"Valid fields: {sorted(valid_fields)}"
        )

    values = {k: v for k, v in overrides.items() if v is not None}
    if "api_key" not in values:
        raise ConfigurationError("Missing api_key")

    try:
        return ClientConfig(**values)
    except pydantic.ValidationError as exc:
        problems = {
            ".".join(str(p) for p in err["loc"]): err["msg"]
            for err in exc.errors(include_url=False)
        }
        raise ConfigurationError("Invalid client configuration", details=problems) from exc
