"""
BlogNow - Async Python client for the BlogNow content API.

Every call goes through a single transport that rate limits, enforces
timeouts, retries transient failures and turns every failure into a
`BlogNowError` with a machine-readable `ErrorKind`.

Quick Start:
    >>> from blognow import BlogNowClient, GetPostsOptions
    >>> async with BlogNowClient(api_key="my-key") as client:
    ...     page = await client.posts.get_published_posts(GetPostsOptions(size=10))
    ...     for post in page.items:
    ...         print(post.title)

Error handling:
    >>> from blognow import BlogNowError, ErrorKind
    >>> try:
    ...     await client.posts.get_post("missing")
    ... except BlogNowError as e:
    ...     if e.kind is ErrorKind.NOT_FOUND:
    ...         ...
"""

from blognow.client import BlogNowClient
from blognow.config import ClientConfig, Settings, get_settings
from blognow.errors import BlogNowError, ErrorKind, create_error_from_response
from blognow.http import BackoffPolicy, HttpClient, RateLimiter
from blognow.models import (
    Category,
    CreatePostRequest,
    GetPostsOptions,
    PaginatedResponse,
    Post,
    PostsFilterParams,
    PostStatus,
    Tag,
    UpdatePostRequest,
    User,
)
from blognow.services import PostsService

__version__ = "1.0.0"

__all__ = [
    "BackoffPolicy",
    "BlogNowClient",
    "BlogNowError",
    "Category",
    "ClientConfig",
    "CreatePostRequest",
    "ErrorKind",
    "GetPostsOptions",
    "HttpClient",
    "PaginatedResponse",
    "Post",
    "PostStatus",
    "PostsFilterParams",
    "PostsService",
    "RateLimiter",
    "Settings",
    "Tag",
    "UpdatePostRequest",
    "User",
    "__version__",
    "create_error_from_response",
    "get_settings",
]
