"""BlogNow API models."""

from blognow.models.base import BlogNowModel
from blognow.models.common import Category, PaginatedResponse, PostStatus, Tag, User
from blognow.models.posts import (
    CreatePostRequest,
    GetPostsOptions,
    Post,
    PostsFilterParams,
    UpdatePostRequest,
)

__all__ = [
    "BlogNowModel",
    "Category",
    "CreatePostRequest",
    "GetPostsOptions",
    "PaginatedResponse",
    "Post",
    "PostStatus",
    "PostsFilterParams",
    "Tag",
    "UpdatePostRequest",
    "User",
]
