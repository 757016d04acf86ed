"""
Hatena Blog MCP
===============

Feed client and MCP server for a single Hatena blog.

Main Components:
- Ingestion: time-bounded feed cache and RSS/Atom normalization
- Services: search, recent-post listing and URL lookup
- Delivery: text rendering of posts
- Server: JSON-RPC (MCP) dispatch over aiohttp
"""

__version__ = "1.0.0"
__description__ = "MCP server exposing search over a Hatena blog feed"

from .ingestion.feed_normalizer import Post, extract_posts
from .services.blog_client import HatenaBlogClient
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import (
    HatenaMCPError,
    FeedFetchError,
    FeedParseError,
    PostNotFoundError,
)

__all__ = [
    "HatenaBlogClient",
    "Post",
    "extract_posts",
    "configure_application_logging",
    "get_logger_for_component",
    "HatenaMCPError",
    "FeedFetchError",
    "FeedParseError",
    "PostNotFoundError",
]
