"""Endpoint services built on the BlogNow transport."""

from blognow.services.posts import PostPage, PostsService

__all__ = [
    "PostPage",
    "PostsService",
]
