"""BlogNow HTTP transport.

Provides the rate limiter, backoff policy and the retrying transport
every SDK call goes through.

Example:
    >>> from blognow.http import HttpClient, RateLimiter
    >>>
    >>> # Rate limiting
    >>> limiter = RateLimiter(rate=10.0)  # 10 requests/second
    >>> await limiter.acquire()
    >>>
    >>> # Transport with rate limiting and retries
    >>> async with HttpClient(config) as http:
    ...     post = await http.get("/api/v1/posts/hello-world")
"""

from blognow.http.backoff import BackoffPolicy
from blognow.http.client import HttpClient
from blognow.http.rate_limiter import RateLimiter

__all__ = [
    "BackoffPolicy",
    "HttpClient",
    "RateLimiter",
]
