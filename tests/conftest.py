"""
PyTest Configuration and Fixtures
=================================

Shared sample feeds and client fixtures for Hatena MCP tests.
"""

import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple
from unittest.mock import AsyncMock

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["HATENA_MCP_BLOG__BLOG_ID"] = "example"
os.environ["HATENA_MCP_BLOG__CACHE_DURATION"] = "300"
os.environ["HATENA_MCP_LOGGING__CONSOLE_LOGGING"] = "false"


BLOG_URL = "https://example.hatenablog.com"
FEED_URL = f"{BLOG_URL}/rss"

RUST_POST_URL = f"{BLOG_URL}/entry/2024/09/05/120000"
PYTHON_POST_URL = f"{BLOG_URL}/entry/2024/09/01/090000"
NOTES_POST_URL = f"{BLOG_URL}/entry/2024/08/30/210000"

SAMPLE_RSS_FEED = f'''<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
    <channel>
        <title>Example Blog</title>
        <link>{BLOG_URL}/</link>
        <description>Notes on programming</description>
        <item>
            <title>Learning rust programming</title>
            <link>{RUST_POST_URL}</link>
            <description>&lt;p&gt;Ownership and &lt;b&gt;borrowing&lt;/b&gt;&lt;/p&gt;</description>
            <pubDate>Thu, 05 Sep 2024 12:00:00 +0900</pubDate>
            <category>Rust</category>
            <category>Programming</category>
        </item>
        <item>
            <title>Decorators explained</title>
            <link>{PYTHON_POST_URL}</link>
            <description>Wrapping functions</description>
            <dc:date>2024-09-01T09:00:00+09:00</dc:date>
            <category>Python</category>
        </item>
        <item>
            <title>Weekend notes</title>
            <link>{NOTES_POST_URL}</link>
            <description>Coffee and a long walk</description>
            <pubDate>Fri, 30 Aug 2024 21:00:00 +0900</pubDate>
        </item>
    </channel>
</rss>'''

SAMPLE_ATOM_FEED = f'''<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Example Blog</title>
    <link href="{BLOG_URL}/"/>
    <updated>2024-09-07T00:00:00+09:00</updated>
    <id>hatenablog://blog/1</id>
    <entry>
        <link href="{BLOG_URL}/entry/atom-untitled" rel="alternate" type="text/html"/>
        <id>hatenablog://entry/1</id>
        <published>2024-09-05T12:00:00+09:00</published>
        <updated>2024-09-06T08:00:00+09:00</updated>
        <summary type="html">Short summary</summary>
        <content type="html">&lt;p&gt;Full body&lt;/p&gt;</content>
        <category term="Rust" label="Rust"/>
        <category term="Tooling"/>
    </entry>
    <entry>
        <title>Second entry</title>
        <link href="{BLOG_URL}/entry/atom-second" rel="alternate" type="text/html"/>
        <id>hatenablog://entry/2</id>
        <published>2024-09-04T10:00:00+09:00</published>
        <updated>2024-09-04T10:00:00+09:00</updated>
        <content type="html">&lt;p&gt;Only &lt;em&gt;content&lt;/em&gt; here&lt;/p&gt;</content>
    </entry>
</feed>'''

EMPTY_RSS_FEED = '''<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
    <channel>
        <title>Empty Blog</title>
        <link>https://empty.hatenablog.com/</link>
        <description>Nothing yet</description>
    </channel>
</rss>'''

MALFORMED_RSS_FEED = '''<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
    <channel>
        <title>Broken</title>
        <item>
            <title>Unclosed
        </item>
    </channel>'''


def build_rss_feed(items: Iterable[Tuple[str, str]]) -> str:
    """Build an RSS 2.0 document from (title, link) pairs."""
    body = "".join(
        f"<item><title>{title}</title><link>{link}</link>"
        f"<description>Post {title}</description></item>"
        for title, link in items
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Generated</title>'
        f"<link>{BLOG_URL}/</link><description>Generated feed</description>"
        f"{body}</channel></rss>"
    )


def fetched(feed_text: str, content_type: str = "application/rss+xml; charset=utf-8"):
    """Raw response body as the HTTP layer hands it to the parser."""
    from hatena_mcp.ingestion.feed_cache import FetchedFeed

    return FetchedFeed(feed_text.encode("utf-8"), {"content-type": content_type})


class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_client(feed_text: str, cache_duration: int = 300, clock: Optional[FakeClock] = None):
    """Blog client whose HTTP fetch is replaced with a canned feed body."""
    from hatena_mcp.ingestion.feed_cache import FeedCache
    from hatena_mcp.services.blog_client import HatenaBlogClient

    cache = FeedCache(cache_duration=cache_duration, clock=clock or FakeClock())
    cache._fetch_body = AsyncMock(return_value=fetched(feed_text))
    return HatenaBlogClient("example", feed_cache=cache)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def rss_client():
    return make_client(SAMPLE_RSS_FEED)


@pytest.fixture
def atom_client():
    return make_client(SAMPLE_ATOM_FEED)


@pytest.fixture
def empty_client():
    return make_client(EMPTY_RSS_FEED)
