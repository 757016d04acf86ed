"""
Hatena MCP Custom Exceptions
============================

Exception hierarchy for the Hatena blog client with error codes,
context information, and user-friendly error messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"

    # Feed retrieval errors (F001-F099)
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_ACCESS_DENIED = "F005"
    FEED_NOT_FOUND = "F006"
    FEED_HTTP_ERROR = "F007"

    # Validation errors (V001-V099)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"
    VALIDATION_OUT_OF_RANGE = "V003"

    # Resource errors (R001-R099)
    RESOURCE_NOT_FOUND = "R002"

    # Dispatch errors (M001-M099)
    UNKNOWN_TOOL = "M001"


class HatenaMCPError(Exception):
    """Base exception for all Hatena MCP errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": self.message,
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {self.message}"
        return self.message


def _passthrough(kwargs: Dict[str, Any], *consumed: str) -> Dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k not in consumed}


class ConfigurationError(HatenaMCPError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )


class FeedFetchError(HatenaMCPError):
    """Feed could not be retrieved: network failure, timeout or HTTP status."""

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        status: Optional[int] = None,
        **kwargs,
    ):
        """Initialize feed fetch error.

        Args:
            message: Error message, including the underlying cause
            feed_url: Feed URL that caused the error
            status: HTTP status code when the server answered
            **kwargs: Additional arguments for HatenaMCPError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url
        if status is not None:
            context["status"] = status
        self.feed_url = feed_url
        self.status = status

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.get("user_message", f"Feed retrieval failed: {message}"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


class FeedParseError(FeedFetchError):
    """Feed body was not well-formed XML."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        kwargs.setdefault("recoverable", False)
        super().__init__(message, feed_url=feed_url, **kwargs)


class PostNotFoundError(HatenaMCPError):
    """No post with the requested URL within the lookback window."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if url:
            context["url"] = url
        self.url = url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.RESOURCE_NOT_FOUND),
            context=context,
            user_message=kwargs.get("user_message", "Post not found"),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )


class UnknownToolError(HatenaMCPError):
    """Requested MCP tool is not registered."""

    def __init__(self, tool_name: str, **kwargs):
        self.tool_name = tool_name
        super().__init__(
            message=f"Unknown tool: {tool_name}",
            error_code=kwargs.get("error_code", ErrorCode.UNKNOWN_TOOL),
            context={"tool_name": tool_name},
            **_passthrough(kwargs, "error_code"),
        )


class ValidationError(HatenaMCPError):
    """Input validation errors."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        """Initialize validation error.

        Args:
            message: Error message
            field_name: Field name that failed validation
            **kwargs: Additional arguments for HatenaMCPError
        """
        context = kwargs.get("context", {})
        if field_name:
            context["field_name"] = field_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.VALIDATION_INVALID_FORMAT),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Invalid {field_name or 'input'}: {message}"
            ),
            recoverable=False,
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


def get_user_friendly_message(exception: Exception) -> str:
    """Get user-friendly error message for any exception."""
    if isinstance(exception, HatenaMCPError):
        return exception.user_message

    return "An unexpected error occurred. Please try again later."
