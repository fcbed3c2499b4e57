"""HTTP transport with rate limiting, retries and error classification.

Every SDK call goes through `HttpClient.request`, which:
- Waits for rate limiter permission
- Enforces the configured timeout on each attempt
- Retries 5xx responses and connection failures with capped exponential backoff
- Honors Retry-After on 429 responses
- Converts every failure into a `BlogNowError`

Example:
    >>> from blognow.config import ClientConfig
    >>> from blognow.http import HttpClient
    >>>
    >>> config = ClientConfig.create(api_key="my-key")
    >>> async with HttpClient(config) as http:
    ...     posts = await http.get("/api/v1/posts/", {"page": 1, "size": 10})
    ...     created = await http.post("/api/v1/posts/", {"title": "Hi", "content": "..."})
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from datetime import UTC, date, datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from blognow.config import ClientConfig
from blognow.errors import (
    BlogNowError,
    ErrorKind,
    configuration_error,
    create_error_from_response,
    kind_for_status,
    network_error,
    timeout_error,
)
from blognow.http.backoff import BackoffPolicy
from blognow.http.rate_limiter import RateLimiter

logger = logging.getLogger("blognow.http")

USER_AGENT = "blognow-python/1.0.0"
HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})
REDACTED = "[REDACTED]"
_TOKEN_SEPARATORS = re.compile(r"([\s,;=:]+)")


class HttpClient:
    """Async transport for the BlogNow API.

    One instance owns one rate limiter; all concurrent calls made through
    it share the same queue.

    Example:
        >>> async with HttpClient(config) as http:
        ...     post = await http.get("/api/v1/posts/hello-world")

    Attributes:
        config: The validated client configuration
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff: BackoffPolicy | None = None,
    ):
        """Initialize the transport.

        Args:
            config: Validated client configuration
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
            backoff: Delay policy between retries
        """
        self._config = config
        self._rate_limiter = RateLimiter(config.rate_limit)
        self._backoff = backoff or BackoffPolicy()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._closed = False

    @property
    def config(self) -> ClientConfig:
        """Client configuration."""
        return self._config

    @property
    def rate_limiter(self) -> RateLimiter:
        """Rate limiter shared by all calls on this client."""
        return self._rate_limiter

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._closed:
            raise configuration_error("Client has been closed")
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Stop the rate limiter and close connections. Idempotent."""
        self._closed = True
        await self._rate_limiter.aclose()
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> HttpClient:
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def build_url(
        self,
        path: str,
        params: Mapping[str, Any] | BaseModel | None = None,
    ) -> str:
        """Resolve a path against the base URL and append query parameters.

        List values become repeated keys; None values are dropped.

        Example:
            >>> http.build_url("/posts", {"tags": ["a", "b"], "page": None})
            'https://api.blognow.com/posts?tags=a&tags=b'
        """
        url = httpx.URL(self._config.base_url).join(path)
        query = _query_items(params)
        if query:
            url = url.copy_merge_params(query)
        return str(url)

    def build_headers(self, overrides: Mapping[str, str] | None = None) -> httpx.Headers:
        """Build request headers. Later sources win, case-insensitively."""
        headers = httpx.Headers(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._config.api_key}",
                "User-Agent": USER_AGENT,
            }
        )
        for source in (self._config.custom_headers, overrides or {}):
            for key, value in source.items():
                headers[key] = value
        return headers

    def sanitize_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        """Copy headers with the API key redacted."""
        api_key = self._config.api_key
        sanitized: dict[str, str] = {}
        for key, value in headers.items():
            if key.lower() == "authorization":
                sanitized[key] = f"Bearer {REDACTED}"
            else:
                # Whole tokens only; a short key must not mangle other values.
                sanitized[key] = "".join(
                    REDACTED if part == api_key else part
                    for part in _TOKEN_SEPARATORS.split(value)
                )
        return sanitized

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | BaseModel | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Execute one API call, retrying transparently.

        Args:
            method: GET, POST, PUT, PATCH or DELETE
            path: Path relative to the base URL
            params: Query parameters
            body: JSON-serializable body or pydantic model
            headers: Per-call header overrides

        Returns:
            The unwrapped ``data`` of a JSON envelope, the decoded JSON body,
            the raw text body, or None for an empty body

        Raises:
            BlogNowError: On timeout, network failure or error status, and
                VALIDATION_ERROR for a body that cannot be JSON encoded
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        client = await self._ensure_client()
        url = self.build_url(path, params)
        request_headers = self.build_headers(headers)
        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        content = _encode_body(body)

        max_attempts = self._config.max_retries + 1

        for attempt in range(1, max_attempts + 1):
            await self._rate_limiter.acquire()

            if self._config.debug:
                logger.debug(
                    f"{method} {url} headers={self.sanitize_headers(request_headers)} "
                    f"body={body!r}"
                )

            try:
                response = await asyncio.wait_for(
                    client.request(method, url, headers=request_headers, content=content),
                    timeout=self._config.timeout,
                )
            except (TimeoutError, httpx.TimeoutException) as e:
                raise timeout_error(
                    f"Request timed out after {self._config.timeout}s", cause=e
                ) from e
            except httpx.RequestError as e:
                if attempt < max_attempts:
                    await self._backoff_sleep(attempt, max_attempts, f"{type(e).__name__}: {e}")
                    continue
                raise network_error("Network request failed", e) from e

            if self._config.debug:
                logger.debug(
                    f"Response {response.status_code} {response.reason_phrase} "
                    f"headers={dict(response.headers)}"
                )

            if response.is_success:
                return _parse_body(response)

            status = response.status_code
            if status == 429:
                retry_after = _parse_retry_after(response.headers.get("retry-after"))
                if retry_after is not None and attempt < max_attempts:
                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} rate limited. "
                        f"Retrying in {retry_after:.1f}s..."
                    )
                    await asyncio.sleep(retry_after)
                    continue
            elif status >= 500 and attempt < max_attempts:
                await self._backoff_sleep(attempt, max_attempts, f"HTTP {status}")
                continue

            raise _error_from_response(response)

        # Unreachable: the last attempt always returns or raises.
        raise network_error("Retry attempts exhausted")

    async def _backoff_sleep(self, attempt: int, max_attempts: int, reason: str) -> None:
        delay = self._backoff.calculate_delay(attempt)
        logger.warning(
            f"Attempt {attempt}/{max_attempts} failed: {reason}. "
            f"Retrying in {delay:.1f}s..."
        )
        await asyncio.sleep(delay)

    async def get(self, path: str, params: Mapping[str, Any] | BaseModel | None = None) -> Any:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Make a POST request."""
        return await self.request("POST", path, body=body, headers=headers)

    async def put(
        self,
        path: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Make a PUT request."""
        return await self.request("PUT", path, body=body, headers=headers)

    async def patch(
        self,
        path: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Make a PATCH request."""
        return await self.request("PATCH", path, body=body, headers=headers)

    async def delete(self, path: str, headers: Mapping[str, str] | None = None) -> Any:
        """Make a DELETE request."""
        return await self.request("DELETE", path, headers=headers)


def _format_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _query_items(params: Mapping[str, Any] | BaseModel | None) -> list[tuple[str, str]]:
    if params is None:
        return []
    if isinstance(params, BaseModel):
        params = params.model_dump(mode="json", by_alias=True, exclude_none=True)

    items: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            items.extend((key, _format_param(v)) for v in value if v is not None)
        else:
            items.append((key, _format_param(value)))
    return items


def _encode_body(body: Any) -> bytes | None:
    if body is None:
        return None
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise BlogNowError(
            ErrorKind.VALIDATION_ERROR,
            f"Request body is not JSON serializable: {e}",
            cause=e,
        ) from e


def _is_json(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def _parse_body(response: httpx.Response) -> Any:
    if not _is_json(response):
        return response.text
    if not response.content:
        return None
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


def _parse_retry_after(value: str | None) -> float | None:
    """Parse Retry-After as delta-seconds or an HTTP-date."""
    if value is None:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        seconds = (when - datetime.now(UTC)).total_seconds()
        return max(0.0, seconds)
    return seconds if seconds >= 0 else None


def _error_from_response(response: httpx.Response) -> BlogNowError:
    details: Any = None
    if _is_json(response):
        try:
            details = response.json()
        except ValueError:
            details = None
    if details is None and response.text:
        details = response.text

    message: str | None = None
    if isinstance(details, dict):
        message = details.get("message") or details.get("error")
        if message is not None and not isinstance(message, str):
            message = str(message)
    elif isinstance(details, str):
        message = details

    # Mapped kinds keep their default messages; others fall back to the reason phrase.
    if not message and kind_for_status(response.status_code) is ErrorKind.HTTP_ERROR:
        message = response.reason_phrase or None

    return create_error_from_response(
        response.status_code,
        message,
        details,
        retry_after=_parse_retry_after(response.headers.get("retry-after")),
    )


__all__ = [
    "HttpClient",
    "USER_AGENT",
]
