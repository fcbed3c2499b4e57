"""Error taxonomy for the BlogNow SDK.

Every failure surfaced by the SDK is a `BlogNowError` tagged with an
`ErrorKind`. Callers branch on ``error.kind`` instead of on exception
subclasses or message text.

Example:
    >>> from blognow.errors import ErrorKind, create_error_from_response
    >>> err = create_error_from_response(404)
    >>> err.kind
    <ErrorKind.NOT_FOUND: 'NOT_FOUND'>
    >>> err.message
    'Resource not found'
    >>> err.status
    404
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure categories.

    Example:
        >>> from blognow.errors import ErrorKind
        >>> ErrorKind.TIMEOUT.value
        'TIMEOUT'
    """

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_API_KEY = "INVALID_API_KEY"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"


DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.CONFIGURATION_ERROR: "SDK configuration error",
    ErrorKind.INVALID_API_KEY: "Invalid or missing API key",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.VALIDATION_ERROR: "Request validation failed",
    ErrorKind.RATE_LIMIT_EXCEEDED: "Rate limit exceeded",
    ErrorKind.SERVER_ERROR: "Internal server error",
    ErrorKind.NETWORK_ERROR: "Network connectivity issue",
    ErrorKind.TIMEOUT: "Request timeout",
    ErrorKind.HTTP_ERROR: "HTTP error",
}

SERVER_ERROR_STATUSES = frozenset({500, 502, 503, 504})

_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.INVALID_API_KEY,
    404: ErrorKind.NOT_FOUND,
    422: ErrorKind.VALIDATION_ERROR,
    429: ErrorKind.RATE_LIMIT_EXCEEDED,
    **{status: ErrorKind.SERVER_ERROR for status in SERVER_ERROR_STATUSES},
}


class BlogNowError(Exception):
    """Typed failure raised by every SDK operation.

    Attributes are fixed at construction and exposed read-only.

    Example:
        >>> from blognow.errors import BlogNowError, ErrorKind
        >>> err = BlogNowError(ErrorKind.RATE_LIMIT_EXCEEDED, status=429, retry_after=5)
        >>> err.message
        'Rate limit exceeded'
        >>> err.retry_after
        5.0
        >>> err.code
        'RATE_LIMIT_EXCEEDED'
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        status: int | None = None,
        details: Any = None,
        retry_after: float | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self._kind = kind
        self._message = message or DEFAULT_MESSAGES[kind]
        self._status = status
        self._details = details
        self._retry_after = float(retry_after) if retry_after is not None else None
        self._cause = cause
        super().__init__(self._message)

    @property
    def kind(self) -> ErrorKind:
        """Failure category."""
        return self._kind

    @property
    def code(self) -> str:
        """Machine-readable error code."""
        return self._kind.value

    @property
    def message(self) -> str:
        """Human-readable message."""
        return self._message

    @property
    def status(self) -> int | None:
        """HTTP status, when the failure came from a response."""
        return self._status

    @property
    def details(self) -> Any:
        """Decoded error body or other structured detail."""
        return self._details

    @property
    def retry_after(self) -> float | None:
        """Server-provided retry hint in seconds."""
        return self._retry_after

    @property
    def cause(self) -> BaseException | None:
        """Underlying low-level exception, if any."""
        return self._cause

    def __repr__(self) -> str:
        parts = [f"kind={self._kind.value}", f"message={self._message!r}"]
        if self._status is not None:
            parts.append(f"status={self._status}")
        if self._retry_after is not None:
            parts.append(f"retry_after={self._retry_after}")
        return f"BlogNowError({', '.join(parts)})"

    def __reduce__(self):
        return (
            _rebuild_error,
            (self._kind, self._message, self._status, self._details, self._retry_after),
        )


def _rebuild_error(kind, message, status, details, retry_after) -> BlogNowError:
    return BlogNowError(
        kind, message, status=status, details=details, retry_after=retry_after
    )


def _coerce_retry_after(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def kind_for_status(status: int) -> ErrorKind:
    """Map an HTTP status to its error kind; unmapped statuses are HTTP_ERROR."""
    return _STATUS_KINDS.get(status, ErrorKind.HTTP_ERROR)


def create_error_from_response(
    status: int,
    message: str | None = None,
    details: Any = None,
    retry_after: float | None = None,
) -> BlogNowError:
    """Classify an HTTP failure into a `BlogNowError`.

    Total over all integer statuses: never raises. Unmapped statuses become
    ``HTTP_ERROR`` with the message taken as given.

    Args:
        status: HTTP status code
        message: Message decoded from the response, if any
        details: Decoded error body
        retry_after: Retry hint in seconds (429 only). Falls back to a
            ``retryAfter``/``retry-after`` entry in ``details``.

    Returns:
        The classified error (not raised)

    Example:
        >>> from blognow.errors import create_error_from_response
        >>> create_error_from_response(503).kind.value
        'SERVER_ERROR'
        >>> create_error_from_response(418, "I'm a teapot").message
        "I'm a teapot"
    """
    kind = kind_for_status(status)

    hint: float | None = None
    if kind is ErrorKind.RATE_LIMIT_EXCEEDED:
        hint = _coerce_retry_after(retry_after)
        if hint is None and isinstance(details, Mapping):
            hint = _coerce_retry_after(
                details.get("retryAfter", details.get("retry-after"))
            )

    if kind is ErrorKind.HTTP_ERROR and not message:
        message = f"HTTP {status}"

    return BlogNowError(
        kind,
        message,
        status=status,
        details=details,
        retry_after=hint,
    )


def configuration_error(message: str, details: Any = None) -> BlogNowError:
    """Build a CONFIGURATION_ERROR."""
    return BlogNowError(ErrorKind.CONFIGURATION_ERROR, message, details=details)


def network_error(message: str, cause: BaseException | None = None) -> BlogNowError:
    """Build a NETWORK_ERROR wrapping the transport failure."""
    return BlogNowError(
        ErrorKind.NETWORK_ERROR,
        message,
        details=str(cause) if cause is not None else None,
        cause=cause,
    )


def timeout_error(message: str, cause: BaseException | None = None) -> BlogNowError:
    """Build a TIMEOUT error."""
    return BlogNowError(ErrorKind.TIMEOUT, message, cause=cause)


__all__ = [
    "BlogNowError",
    "DEFAULT_MESSAGES",
    "ErrorKind",
    "SERVER_ERROR_STATUSES",
    "configuration_error",
    "create_error_from_response",
    "kind_for_status",
    "network_error",
    "timeout_error",
]
