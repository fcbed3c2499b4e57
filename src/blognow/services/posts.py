"""Posts endpoints.

Thin methods over the transport: each builds a path and query parameters
and validates the response into models.

Example:
    >>> async with BlogNowClient(api_key="my-key") as client:
    ...     page = await client.posts.get_published_posts(GetPostsOptions(size=5))
    ...     async for post in client.posts.iterate_all_posts():
    ...         print(post.title)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from blognow.http.client import HttpClient
from blognow.models.common import PaginatedResponse, PostStatus
from blognow.models.posts import (
    CreatePostRequest,
    GetPostsOptions,
    Post,
    PostsFilterParams,
    UpdatePostRequest,
)

POSTS_PATH = "/api/v1/posts/"
ALL_POSTS_PATH = "/api/v1/posts/all"
SEARCH_PATH = "/api/v1/posts/search"

DEFAULT_PAGE_SIZE = 20

PostPage = PaginatedResponse[Post]


def _params(options: GetPostsOptions | None, **overrides: Any) -> dict[str, Any]:
    params = options.to_dict() if options is not None else {}
    params.update(overrides)
    return params


class PostsService:
    """Client for the /api/v1/posts endpoints.

    Example:
        >>> posts = PostsService(http)
        >>> post = await posts.get_post("hello-world")
        >>> post.slug
        'hello-world'
    """

    def __init__(self, http: HttpClient):
        self._http = http

    async def _get_page(self, path: str, params: dict[str, Any]) -> PostPage:
        data = await self._http.get(path, params)
        return PostPage.model_validate(data)

    async def get_published_posts(self, options: GetPostsOptions | None = None) -> PostPage:
        """List published posts."""
        return await self._get_page(
            POSTS_PATH, _params(options, status=PostStatus.PUBLISHED.value)
        )

    async def get_all_posts(self, options: GetPostsOptions | None = None) -> PostPage:
        """List posts in every status."""
        return await self._get_page(ALL_POSTS_PATH, _params(options))

    async def get_posts_by_author(
        self,
        author_id: str,
        options: GetPostsOptions | None = None,
    ) -> PostPage:
        """List posts written by one author."""
        return await self._get_page(
            f"/api/v1/posts/author/{author_id}",
            _params(options, authorId=author_id),
        )

    async def get_post(self, slug: str) -> Post:
        """Fetch a single post by slug.

        Raises:
            BlogNowError: NOT_FOUND if no post has this slug
        """
        data = await self._http.get(f"/api/v1/posts/{slug}")
        return Post.model_validate(data)

    async def create_post(self, post_data: CreatePostRequest) -> Post:
        """Create a post.

        Note that a create retried after a 5xx may be applied twice by the
        server.
        """
        data = await self._http.post(POSTS_PATH, post_data.to_dict())
        return Post.model_validate(data)

    async def update_post(self, post_data: UpdatePostRequest) -> Post:
        """Replace the fields set on ``post_data``; ``id`` selects the post."""
        body = post_data.to_dict()
        post_id = body.pop("id")
        data = await self._http.put(f"/api/v1/posts/{post_id}", body)
        return Post.model_validate(data)

    async def delete_post(self, post_id: str) -> None:
        """Delete a post."""
        await self._http.delete(f"/api/v1/posts/{post_id}")

    async def search_posts(
        self,
        query: str,
        options: GetPostsOptions | None = None,
    ) -> PostPage:
        """Full-text search over posts."""
        return await self._get_page(SEARCH_PATH, _params(options, query=query))

    async def get_featured_posts(self, options: GetPostsOptions | None = None) -> PostPage:
        """List featured posts."""
        return await self._get_page(POSTS_PATH, _params(options, isFeatured=True))

    async def get_posts_by_category(
        self,
        category_id: str,
        options: GetPostsOptions | None = None,
    ) -> PostPage:
        """List posts in a category."""
        return await self._get_page(POSTS_PATH, _params(options, categoryId=category_id))

    async def get_posts_by_status(
        self,
        status: PostStatus,
        options: GetPostsOptions | None = None,
    ) -> PostPage:
        """List posts with the given status."""
        return await self._get_page(
            ALL_POSTS_PATH, _params(options, status=PostStatus(status).value)
        )

    async def get_posts_with_advanced_filtering(self, filters: PostsFilterParams) -> PostPage:
        """List posts matching extended filters.

        Non-published statuses are only served by the /all endpoint.
        """
        if filters.status is not None and filters.status is not PostStatus.PUBLISHED:
            path = ALL_POSTS_PATH
        else:
            path = POSTS_PATH
        return await self._get_page(path, filters.to_dict())

    async def get_post_statistics(self) -> dict[str, int]:
        """Count posts overall and per status.

        Returns:
            Mapping with ``total``, ``published``, ``draft`` and ``archived``
        """
        first = GetPostsOptions(page=1, size=1)
        total, published, draft, archived = await asyncio.gather(
            self.get_all_posts(first),
            self.get_posts_by_status(PostStatus.PUBLISHED, first),
            self.get_posts_by_status(PostStatus.DRAFT, first),
            self.get_posts_by_status(PostStatus.ARCHIVED, first),
        )
        return {
            "total": total.total,
            "published": published.total,
            "draft": draft.total,
            "archived": archived.total,
        }

    async def _iterate(
        self,
        fetch: Callable[[GetPostsOptions], Awaitable[PostPage]],
        options: GetPostsOptions | None,
    ) -> AsyncIterator[Post]:
        options = options or GetPostsOptions()
        page = options.page or 1
        size = options.size or DEFAULT_PAGE_SIZE

        while True:
            response = await fetch(options.model_copy(update={"page": page, "size": size}))
            for post in response.items:
                yield post
            if page >= response.pages:
                return
            page += 1

    def iterate_all_posts(self, options: GetPostsOptions | None = None) -> AsyncIterator[Post]:
        """Yield every post across all pages, one page request at a time."""
        return self._iterate(self.get_all_posts, options)

    def iterate_published_posts(
        self,
        options: GetPostsOptions | None = None,
    ) -> AsyncIterator[Post]:
        """Yield every published post across all pages."""
        return self._iterate(self.get_published_posts, options)

    def iterate_posts_by_author(
        self,
        author_id: str,
        options: GetPostsOptions | None = None,
    ) -> AsyncIterator[Post]:
        """Yield every post by an author across all pages."""

        async def fetch(page_options: GetPostsOptions) -> PostPage:
            return await self.get_posts_by_author(author_id, page_options)

        return self._iterate(fetch, options)


__all__ = [
    "PostPage",
    "PostsService",
]
