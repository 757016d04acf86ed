"""
Hatena MCP Input Validators
===========================

Validation utilities for feed URLs, blog identifiers and operation
arguments.
"""

import re
from urllib.parse import urlparse
from typing import Any

from .exceptions import ValidationError, ErrorCode


class URLValidator:
    """URL validation utilities."""

    ALLOWED_SCHEMES = {"http", "https"}

    @classmethod
    def validate_feed_url(cls, url: str) -> str:
        """Validate a feed URL.

        The URL is returned unchanged; it is also the cache key, so no
        normalization is applied.

        Raises:
            ValidationError: If URL is invalid
        """
        if not url or not isinstance(url, str):
            raise ValidationError(
                "URL is required and must be a string",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="url",
            )

        parsed = urlparse(url)

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise ValidationError(
                "URL scheme must be http or https",
                error_code=ErrorCode.FEED_INVALID_URL,
                field_name="url",
            )

        if not parsed.netloc:
            raise ValidationError(
                "URL must include a hostname",
                error_code=ErrorCode.FEED_INVALID_URL,
                field_name="url",
            )

        return url


class InputValidator:
    """Validators for client operation arguments."""

    # A blog id becomes the leftmost DNS label of {id}.hatenablog.com
    BLOG_ID_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$", re.IGNORECASE)

    @classmethod
    def validate_blog_id(cls, blog_id: str) -> str:
        if not blog_id or not isinstance(blog_id, str):
            raise ValidationError(
                "Blog id is required",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="blog_id",
            )

        blog_id = blog_id.strip()
        if not cls.BLOG_ID_PATTERN.match(blog_id):
            raise ValidationError(
                f"'{blog_id}' is not a valid hostname label",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="blog_id",
            )

        return blog_id

    @classmethod
    def validate_limit(cls, limit: Any) -> int:
        """Validate a result-count limit. Zero is allowed and yields no results."""
        # bool is an int subclass but never a meaningful limit
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError(
                f"limit must be an integer, got {type(limit).__name__}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="limit",
            )

        if limit < 0:
            raise ValidationError(
                f"limit must not be negative, got {limit}",
                error_code=ErrorCode.VALIDATION_OUT_OF_RANGE,
                field_name="limit",
            )

        return limit

    @classmethod
    def validate_keyword(cls, keyword: Any) -> str:
        if not isinstance(keyword, str):
            raise ValidationError(
                "keyword must be a string",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="keyword",
            )

        return keyword
