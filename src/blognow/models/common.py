"""Shared API types: statuses, authors, categories, tags and pages.

Example:
    >>> from blognow.models.common import PaginatedResponse, PostStatus
    >>> PostStatus.PUBLISHED.value
    'published'
    >>> page = PaginatedResponse[dict].model_validate(
    ...     {"items": [{}], "total": 1, "page": 1, "size": 20, "pages": 1}
    ... )
    >>> page.has_next
    False
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import Field

from blognow.models.base import BlogNowModel

T = TypeVar("T")


class PostStatus(str, Enum):
    """Publication state of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class User(BlogNowModel):
    """Post author."""

    id: str
    name: str
    email: str
    avatar: str | None = None
    bio: str | None = None
    created_at: str
    updated_at: str | None = None


class Category(BlogNowModel):
    """Post category."""

    id: str
    name: str
    slug: str
    description: str | None = None
    color: str | None = None
    created_at: str
    updated_at: str | None = None


class Tag(BlogNowModel):
    """Post tag."""

    id: str
    name: str
    slug: str
    color: str | None = None
    created_at: str
    updated_at: str | None = None


class PaginatedResponse(BlogNowModel, Generic[T]):
    """One page of a listing endpoint.

    Attributes:
        items: Items on this page
        total: Total items across all pages
        page: 1-indexed page number
        size: Page size requested
        pages: Number of pages reported by the server
    """

    items: list[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 0
    pages: int = 0

    @property
    def has_next(self) -> bool:
        """Whether the server reports pages after this one."""
        return self.page < self.pages


__all__ = [
    "Category",
    "PaginatedResponse",
    "PostStatus",
    "Tag",
    "User",
]
