"""
Hatena MCP Logging Configuration
================================

Console and rotating-file logging for the ``hatena_mcp`` logger tree.

Every component logs through ``get_logger_for_component``, which attaches
the component name (and, where known, the blog id and feed URL) to each
record. The JSON formatter lifts those fields to the top level so log
lines can be filtered per blog or per feed.
"""

import logging
import logging.handlers
import sys
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional

ROOT_LOGGER_NAME = "hatena_mcp"

# Context fields promoted to top-level keys in JSON output
CONTEXT_FIELDS = ("component", "blog_id", "feed_url")

# Attributes every LogRecord carries; anything else arrived via ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

NOISY_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.server", "feedparser")


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        extra = _extra_fields(record)
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_FIELDS:
            if key in extra:
                log_data[key] = extra.pop(key)

        if extra:
            log_data["extra"] = extra
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Short coloured lines for interactive use."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        source = getattr(record, "component", record.name)
        blog_id = getattr(record, "blog_id", None)
        if blog_id:
            source = f"{source}@{blog_id}"

        line = f"{color}{timestamp} {record.levelname:<7}{self.RESET} [{source}] {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter whose fixed context is merged with per-call ``extra``."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger_for_component(
    component_name: str,
    blog_id: Optional[str] = None,
    feed_url: Optional[str] = None,
) -> LoggerAdapter:
    """Logger named ``hatena_mcp.<component_name>`` carrying blog context."""
    context: Dict[str, Any] = {"component": component_name}
    if blog_id:
        context["blog_id"] = blog_id
    if feed_url:
        context["feed_url"] = feed_url

    return LoggerAdapter(logging.getLogger(f"{ROOT_LOGGER_NAME}.{component_name}"), context)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Install handlers on the ``hatena_mcp`` logger.

    Calling this again replaces the previous handlers. Console output goes
    to stderr so that stdout stays usable for CLI results. The log file,
    when configured, always receives JSON lines.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Rotating log file path, or None
        enable_console: Attach a stderr handler
        structured_logging: JSON instead of coloured text on the console
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files to keep
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            StructuredFormatter() if structured_logging else ColoredConsoleFormatter()
        )
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


class PerformanceLogger:
    """Times a block and logs its outcome.

    Success is logged at INFO, failure at WARNING. Exceptions are never
    suppressed.
    """

    def __init__(self, logger: logging.LoggerAdapter, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.duration: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration = time.perf_counter() - self._started
        context = {**self.context, "duration_seconds": round(self.duration, 4)}

        if exc_type is None:
            self.logger.info(f"{self.operation} took {self.duration:.3f}s", extra=context)
        else:
            self.logger.warning(
                f"{self.operation} failed after {self.duration:.3f}s: {exc_type.__name__}",
                extra=context,
            )
