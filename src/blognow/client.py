"""BlogNow client.

Entry point of the SDK: validates configuration, owns the transport and
exposes the endpoint services.

Example:
    >>> from blognow import BlogNowClient
    >>>
    >>> async with BlogNowClient(api_key="my-key", rate_limit=5.0) as client:
    ...     health = await client.health_check()
    ...     page = await client.posts.get_published_posts()
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from blognow.config import ClientConfig, Settings
from blognow.errors import configuration_error
from blognow.http.backoff import BackoffPolicy
from blognow.http.client import HttpClient
from blognow.services.posts import PostsService

logger = logging.getLogger("blognow.client")

HEALTH_PATH = "/api/v1/health"


class BlogNowClient:
    """Async client for the BlogNow API.

    Configuration errors are raised here, before any network activity.

    Example:
        >>> client = BlogNowClient(api_key="my-key", timeout=10.0)
        >>> client.get_config().timeout
        10.0
        >>> await client.close()

    Attributes:
        posts: Posts endpoints
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff: BackoffPolicy | None = None,
        **options: Any,
    ):
        """Initialize the client.

        Args:
            api_key: API key (ignored when ``config`` is given)
            config: Prebuilt configuration
            transport: Optional httpx transport, mainly for tests
            backoff: Delay policy between retries
            **options: ClientConfig fields (base_url, timeout, max_retries,
                rate_limit, debug, custom_headers)

        Raises:
            BlogNowError: CONFIGURATION_ERROR for missing or invalid options
        """
        if config is None:
            config = ClientConfig.create(api_key=api_key, **options)
        elif options or api_key is not None:
            raise configuration_error("Pass either config or individual options, not both")

        self._http = HttpClient(config, transport=transport, backoff=backoff)
        self.posts = PostsService(self._http)

        if config.debug:
            logger.debug(
                f"BlogNowClient created for {config.base_url} "
                f"(timeout={config.timeout}s, retries={config.max_retries}, "
                f"rate_limit={config.rate_limit}/s)"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> BlogNowClient:
        """Build a client from BLOGNOW_* environment variables.

        Keyword overrides take precedence over the environment. ``transport``
        and ``backoff`` are passed through to the client.

        Example:
            >>> # BLOGNOW_API_KEY=... BLOGNOW_TIMEOUT=10
            >>> client = BlogNowClient.from_env(debug=True)
        """
        transport = overrides.pop("transport", None)
        backoff = overrides.pop("backoff", None)
        try:
            settings = Settings()
        except ValidationError as e:
            raise configuration_error(f"Invalid environment configuration: {e}") from e
        config = settings.to_client_config(**overrides)
        return cls(config=config, transport=transport, backoff=backoff)

    @property
    def http(self) -> HttpClient:
        """The underlying transport."""
        return self._http

    async def health_check(self) -> dict[str, Any]:
        """Check API availability.

        Returns:
            Mapping with ``status`` and ``timestamp``
        """
        return await self._http.get(HEALTH_PATH)

    def get_config(self) -> ClientConfig:
        """Return a read-only snapshot of the configuration."""
        return self._http.config.snapshot()

    async def close(self) -> None:
        """Stop the rate limiter and release connections. Safe to call twice."""
        await self._http.close()

    async def __aenter__(self) -> BlogNowClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = [
    "BlogNowClient",
]
