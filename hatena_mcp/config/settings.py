"""
Hatena MCP Configuration System
===============================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.

Examples:
    HATENA_MCP_BLOG__BLOG_ID=myblog
    HATENA_MCP_BLOG__CACHE_DURATION=600
    HATENA_MCP_SERVER__PORT=8080
    HATENA_MCP_LOGGING__LEVEL=DEBUG
"""

from pathlib import Path
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__
from ..utils.exceptions import ConfigurationError, ErrorCode, ValidationError
from ..utils.validators import InputValidator


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BlogSettings(BaseModel):
    """Feed source configuration."""
    blog_id: str = Field(default="example", description="Hatena blog id ({id}.hatenablog.com)")
    cache_duration: int = Field(default=300, ge=0, description="Seconds a fetched feed stays fresh")

    @field_validator("blog_id")
    @classmethod
    def validate_blog_id(cls, v):
        try:
            return InputValidator.validate_blog_id(v)
        except ValidationError as e:
            raise ValueError(e.message)


class ServerSettings(BaseModel):
    """HTTP transport configuration."""
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=3000, ge=1, le=65535, description="TCP port to bind")
    path: str = Field(default="/api/mcp", description="Route serving JSON-RPC requests")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        if not v.startswith("/"):
            raise ValueError("path must start with '/'")
        return v


class LimitsSettings(BaseModel):
    """Request limits."""
    request_timeout: int = Field(default=30, ge=1, le=300, description="Feed request timeout in seconds")
    default_result_limit: int = Field(default=10, ge=1, le=50, description="Results returned when no limit is given")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class HatenaMCPSettings(BaseSettings):
    """Main application settings."""

    blog: BlogSettings = Field(default_factory=BlogSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="hatena-blog-mcp", description="Application name")
    version: str = Field(default=__version__, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        env_prefix="HATENA_MCP_",
        extra="ignore",
    )

    @property
    def feed_url(self) -> str:
        return f"https://{self.blog.blog_id}.hatenablog.com/rss"

    def validate_configuration(self) -> None:
        """Validate cross-field configuration."""
        if self.logging.file_path:
            try:
                Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(
                    f"Invalid log file path: {e}",
                    config_key="logging.file_path",
                    error_code=ErrorCode.CONFIG_INVALID,
                )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings() -> HatenaMCPSettings:
    """Load settings from environment variables, .env and defaults.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = HatenaMCPSettings()
        settings.validate_configuration()
        return settings

    except ConfigurationError:
        raise
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID,
        )


# Global settings instance
_settings: Optional[HatenaMCPSettings] = None


def get_settings(reload: bool = False) -> HatenaMCPSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
