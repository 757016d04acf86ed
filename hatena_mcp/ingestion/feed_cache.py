"""
Feed Cache
==========

Fetches a feed over HTTP, parses it with feedparser and memoizes the parsed
document per URL for a fixed time window.

Concurrent misses for the same URL are not coalesced: each one fetches and
the last write wins.
"""

import asyncio
import ssl
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Mapping, NamedTuple, Optional

import aiohttp
import certifi
import feedparser

from ..utils.exceptions import ErrorCode, FeedFetchError, FeedParseError
from ..utils.logging import PerformanceLogger, get_logger_for_component
from ..utils.validators import URLValidator

DEFAULT_REQUEST_TIMEOUT = 30

REQUEST_HEADERS = {
    "User-Agent": "hatena-blog-mcp/1.0 (+https://hatenablog.com)",
    "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml, */*",
    "Accept-Encoding": "gzip, deflate",
}


class FetchedFeed(NamedTuple):
    """Undecoded response body and its lowercased headers."""

    content: bytes
    headers: Mapping[str, str] = {}


def parse_document(content: bytes, headers: Optional[Mapping[str, str]] = None) -> Any:
    """Parse raw feed bytes without altering entry markup.

    Bytes are always handed over as a document, never as a URL or path,
    and feedparser picks the encoding from ``headers`` and the XML
    declaration. Sanitizing and relative-URI rewriting are off so that
    embeds such as iframes survive in ``summary`` and ``content``.
    """
    return feedparser.parse(
        content,
        response_headers=dict(headers or {}),
        sanitize_html=False,
        resolve_relative_uris=False,
    )


@dataclass(frozen=True)
class CacheEntry:
    """Parsed document plus the wall-clock time (ms) it was stored."""

    document: Any
    stored_at: float


class FeedCache:
    """Time-bounded cache of parsed feed documents keyed by URL."""

    def __init__(
        self,
        cache_duration: float = 300,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize feed cache.

        Args:
            cache_duration: Seconds a fetched document stays fresh; 0 disables caching
            request_timeout: Total HTTP request timeout in seconds
            clock: Wall clock returning seconds since the epoch
        """
        if cache_duration < 0:
            raise ValueError("cache_duration must not be negative")

        self._cache_duration_ms = cache_duration * 1000
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.timeout = request_timeout
        self.logger = get_logger_for_component("feed_cache")

        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @property
    def cache_duration_ms(self) -> float:
        return self._cache_duration_ms

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_fresh(self, entry: Optional[CacheEntry]) -> bool:
        return entry is not None and (self._now_ms() - entry.stored_at) < self._cache_duration_ms

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: str) -> bool:
        """True when ``url`` has a fresh entry."""
        return self._is_fresh(self._entries.get(url))

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Get configured aiohttp session."""
        connector = aiohttp.TCPConnector(ssl=self.ssl_context, limit_per_host=2)
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=REQUEST_HEADERS
        ) as session:
            yield session

    async def get(self, url: str) -> Any:
        """Return the parsed document for ``url``, fetching it when stale.

        Raises:
            FeedFetchError: On network failure, timeout or non-2xx status
            FeedParseError: When the body is not well-formed XML
        """
        URLValidator.validate_feed_url(url)

        cached = self._entries.get(url)
        if self._is_fresh(cached):
            self.logger.debug(f"Cache hit for {url}", extra={"feed_url": url})
            return cached.document

        self.logger.info(f"Fetching feed: {url}", extra={"feed_url": url})

        with PerformanceLogger(self.logger, "feed fetch", feed_url=url):
            fetched = await self._fetch_body(url)
            document = self._parse(url, fetched)

        # Written only after a successful fetch and parse
        self._entries[url] = CacheEntry(document=document, stored_at=self._now_ms())
        return document

    def clear(self) -> None:
        """Drop every cached document."""
        count = len(self._entries)
        self._entries.clear()
        self.logger.info(f"Cleared {count} cached feed(s)")

    async def _fetch_body(self, url: str) -> FetchedFeed:
        try:
            async with self.get_session() as session:
                async with session.get(url) as response:
                    if not 200 <= response.status < 300:
                        raise FeedFetchError(
                            f"Failed to fetch {url}: HTTP error! status: {response.status}",
                            feed_url=url,
                            status=response.status,
                            error_code=self._status_error_code(response.status),
                        )
                    return FetchedFeed(
                        content=await response.read(),
                        headers={k.lower(): v for k, v in response.headers.items()},
                    )

        except asyncio.TimeoutError:
            raise FeedFetchError(
                f"Failed to fetch {url}: request timeout after {self.timeout}s",
                feed_url=url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            )

        except aiohttp.ClientError as e:
            raise FeedFetchError(
                f"Failed to fetch {url}: {e}",
                feed_url=url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

    def _parse(self, url: str, fetched: FetchedFeed) -> Any:
        document = parse_document(fetched.content, fetched.headers)

        if document.get("bozo"):
            cause = document.get("bozo_exception")
            # Declared-vs-actual encoding mismatch still yields a full parse
            if not isinstance(cause, feedparser.CharacterEncodingOverride):
                raise FeedParseError(
                    f"Failed to fetch {url}: malformed feed XML: {cause}",
                    feed_url=url,
                )
            self.logger.warning(f"Feed parsed with encoding warning: {cause}", extra={"feed_url": url})

        self.logger.debug(
            f"Parsed {len(document.get('entries', []))} entries "
            f"({document.get('version') or 'unknown format'})",
            extra={"feed_url": url},
        )
        return document

    @staticmethod
    def _status_error_code(status: int) -> ErrorCode:
        if status in (401, 403):
            return ErrorCode.FEED_ACCESS_DENIED
        if status in (404, 410):
            return ErrorCode.FEED_NOT_FOUND
        return ErrorCode.FEED_HTTP_ERROR
