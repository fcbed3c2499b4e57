"""Post models and request/query types.

Example:
    >>> from blognow.models.posts import GetPostsOptions, PostStatus
    >>> GetPostsOptions(page=2, size=10, is_featured=True).to_dict()
    {'page': 2, 'size': 10, 'isFeatured': True}
    >>> GetPostsOptions(status=PostStatus.DRAFT).to_dict()
    {'status': 'draft'}
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from blognow.models.base import BlogNowModel
from blognow.models.common import Category, PostStatus, Tag, User

SortField = Literal["created_at", "updated_at", "published_at"]
SortOrder = Literal["asc", "desc"]


class Post(BlogNowModel):
    """A blog post as returned by the API."""

    id: str
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    og_image_url: str | None = None
    status: PostStatus
    published_at: str | None = None
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    is_featured: bool = False
    is_sticky: bool = False
    workspace_id: str
    author_id: str
    category_id: str | None = None
    created_at: str
    updated_at: str | None = None
    author: User | None = None
    category: Category | None = None
    tags: list[Tag] | None = None


class GetPostsOptions(BlogNowModel):
    """Query options accepted by the listing endpoints."""

    page: int | None = Field(default=None, ge=1)
    size: int | None = Field(default=None, ge=1)
    status: PostStatus | None = None
    category_id: str | None = None
    author_id: str | None = None
    is_featured: bool | None = None
    query: str | None = None
    sort_by: SortField | None = None
    sort_order: SortOrder | None = None


class PostsFilterParams(GetPostsOptions):
    """Extended filters for advanced listing."""

    is_sticky: bool | None = None
    tags: list[str] | None = None
    date_from: str | None = None
    date_to: str | None = None


class CreatePostRequest(BlogNowModel):
    """Body for creating a post."""

    title: str
    content: str
    slug: str | None = None
    excerpt: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    og_image_url: str | None = None
    status: PostStatus | None = None
    published_at: str | None = None
    is_featured: bool | None = None
    is_sticky: bool | None = None
    category_id: str | None = None
    tag_ids: list[str] | None = None


class UpdatePostRequest(BlogNowModel):
    """Body for updating a post. Only ``id`` is required."""

    id: str
    title: str | None = None
    content: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    og_image_url: str | None = None
    status: PostStatus | None = None
    published_at: str | None = None
    is_featured: bool | None = None
    is_sticky: bool | None = None
    category_id: str | None = None
    tag_ids: list[str] | None = None


__all__ = [
    "CreatePostRequest",
    "GetPostsOptions",
    "Post",
    "PostStatus",
    "PostsFilterParams",
    "SortField",
    "SortOrder",
    "UpdatePostRequest",
]
