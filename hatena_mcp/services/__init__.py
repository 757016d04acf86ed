"""Blog client operations."""

from .blog_client import HatenaBlogClient, LOOKBACK_WINDOW

__all__ = ["HatenaBlogClient", "LOOKBACK_WINDOW"]
