"""
Feed Ingestion
==============

Feed retrieval with a time-bounded cache, and normalization of RSS/Atom
entries into uniform post records.
"""

from .feed_cache import FeedCache, CacheEntry, FetchedFeed, parse_document
from .feed_normalizer import Post, FeedEntries, extract_posts, strip_html

__all__ = ["FeedCache", "CacheEntry", "FetchedFeed", "parse_document", "Post", "FeedEntries", "extract_posts", "strip_html"]
