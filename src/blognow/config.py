"""BlogNow client configuration.

`ClientConfig` is the immutable configuration every client is built from.
`Settings` loads the same values from environment variables with the
BLOGNOW_ prefix.

Example:
    >>> from blognow.config import ClientConfig
    >>> config = ClientConfig.create(api_key="test-key")
    >>> config.base_url
    'https://api.blognow.com'
    >>> config.timeout
    30.0
    >>> config.max_retries
    3
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from blognow.errors import BlogNowError, configuration_error

DEFAULT_BASE_URL = "https://api.blognow.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RATE_LIMIT = 10.0


class ClientConfig(BaseModel):
    """Immutable client configuration.

    Strict validation: values of the wrong type are rejected rather than
    coerced. Use `ClientConfig.create` to get validation failures as
    CONFIGURATION_ERROR.

    Attributes:
        api_key: API key sent as a bearer token
        base_url: Base URL of the BlogNow API
        timeout: Per-call timeout in seconds
        max_retries: Retries after the first attempt
        rate_limit: Maximum requests per second
        debug: Log requests and responses at DEBUG level
        custom_headers: Extra headers sent with every request
    """

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
    )

    api_key: str = Field(..., description="API key")
    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    rate_limit: float = Field(default=DEFAULT_RATE_LIMIT, gt=0)
    debug: bool = False
    custom_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("API key must be a non-empty string")
        return v

    @field_validator("base_url")
    @classmethod
    def _base_url_is_http(cls, v: str) -> str:
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"Base URL is not a valid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("Base URL must be an absolute http(s) URL")
        return v

    @classmethod
    def create(cls, **values: Any) -> ClientConfig:
        """Validate and build a configuration.

        Options passed as None are treated as absent and get their defaults.

        Raises:
            BlogNowError: CONFIGURATION_ERROR describing the first invalid field

        Example:
            >>> from blognow.config import ClientConfig
            >>> from blognow.errors import BlogNowError
            >>> try:
            ...     ClientConfig.create(api_key="")
            ... except BlogNowError as e:
            ...     e.kind.value
            'CONFIGURATION_ERROR'
        """
        if values.get("api_key") is None:
            raise configuration_error("API key is required")
        present = {k: v for k, v in values.items() if v is not None}
        try:
            return cls(**present)
        except ValidationError as e:
            raise _to_configuration_error(e) from e

    def snapshot(self) -> ClientConfig:
        """Return an independent copy safe to hand to callers."""
        return self.model_copy(deep=True)


def _to_configuration_error(exc: ValidationError) -> BlogNowError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "config"
    message = first.get("msg", "invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return configuration_error(
        f"Invalid configuration for {field}: {message}",
        details=exc.errors(include_url=False, include_context=False),
    )


class Settings(BaseSettings):
    """Client settings loaded from the environment.

    Loads from environment variables with BLOGNOW_ prefix.

    Example:
        >>> from blognow.config import Settings
        >>> s = Settings(api_key="from-code", rate_limit=5.0)
        >>> s.to_client_config().rate_limit
        5.0
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOGNOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="API key")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Timeout in seconds")
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES)
    rate_limit: float = Field(default=DEFAULT_RATE_LIMIT, description="Requests per second")
    debug: bool = False
    custom_headers: dict[str, str] = Field(default_factory=dict)

    def to_client_config(self, **overrides: Any) -> ClientConfig:
        """Build a validated `ClientConfig`, applying overrides on top."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ClientConfig.create(**values)


def get_settings(**overrides: Any) -> Settings:
    """Get settings with optional overrides.

    Example:
        >>> from blognow.config import get_settings
        >>> get_settings(timeout=5.0).timeout
        5.0
    """
    return Settings(**overrides)


__all__ = [
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_TIMEOUT",
    "Settings",
    "get_settings",
]
