"""
Hatena Blog Client
==================

Search, recent-post listing and URL lookup over a single Hatena blog feed.
"""

from typing import List, Optional

from ..ingestion.feed_cache import DEFAULT_REQUEST_TIMEOUT, FeedCache
from ..ingestion.feed_normalizer import Post, extract_posts, matches_keyword
from ..utils.exceptions import PostNotFoundError
from ..utils.logging import get_logger_for_component
from ..utils.validators import InputValidator

DEFAULT_LIMIT = 10

# The feed exposes at most this many recent posts
LOOKBACK_WINDOW = 50

FEED_URL_TEMPLATE = "https://{blog_id}.hatenablog.com/rss"


class HatenaBlogClient:
    """Client for one blog's syndication feed.

    The feed URL and cache duration are fixed for the client's lifetime.
    """

    def __init__(
        self,
        blog_id: str,
        cache_duration: int = 300,
        feed_cache: Optional[FeedCache] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """Initialize blog client.

        Args:
            blog_id: Hatena blog id, the subdomain of hatenablog.com
            cache_duration: Seconds a fetched feed stays fresh
            feed_cache: Pre-built cache; when given, ``cache_duration`` and
                ``request_timeout`` are ignored
            request_timeout: Feed request timeout in seconds
        """
        self.blog_id = InputValidator.validate_blog_id(blog_id)
        self._feed_url = FEED_URL_TEMPLATE.format(blog_id=self.blog_id)
        self.feed_cache = feed_cache or FeedCache(
            cache_duration=cache_duration, request_timeout=request_timeout
        )
        self.logger = get_logger_for_component("blog_client", blog_id=self.blog_id)

    @property
    def feed_url(self) -> str:
        return self._feed_url

    async def _load_posts(self) -> List[Post]:
        document = await self.feed_cache.get(self._feed_url)
        return extract_posts(document)

    async def search(self, keyword: str, limit: int = DEFAULT_LIMIT) -> List[Post]:
        """Return up to ``limit`` posts whose title, summary or categories
        contain ``keyword`` (case-insensitive), in feed order."""
        keyword = InputValidator.validate_keyword(keyword)
        limit = InputValidator.validate_limit(limit)

        posts = await self._load_posts()
        matches = [post for post in posts if matches_keyword(post, keyword)]

        self.logger.info(
            f"Search '{keyword}' matched {len(matches)} of {len(posts)} posts",
            extra={"keyword": keyword, "limit": limit},
        )
        return matches[:limit]

    async def list_recent(self, limit: int = DEFAULT_LIMIT) -> List[Post]:
        """Return the first ``limit`` posts in feed order."""
        limit = InputValidator.validate_limit(limit)

        posts = await self._load_posts()
        return posts[:limit]

    async def get_by_url(self, url: str) -> Post:
        """Return the post whose link equals ``url`` exactly.

        Only the ``LOOKBACK_WINDOW`` most recent posts are searched.

        Raises:
            PostNotFoundError: If no post in the window has that link
        """
        for post in await self.list_recent(LOOKBACK_WINDOW):
            if post.link == url:
                return post

        raise PostNotFoundError(f"Post not found: {url}", url=url)

    def clear_cache(self) -> None:
        self.feed_cache.clear()
