"""
Logging Configuration Module for the Video Link Resolver

Provides structured JSON output for deployed environments, readable text output
for local development, and context adapters so that every line written while a
resolution is running carries the platform and strategy it belongs to.

Features:
- JSONFormatter: one JSON object per record, with context fields under "extra"
- StandardFormatter: human-readable lines with context appended as key=value
- setup_logging: root logger, Uvicorn and third-party logger configuration
- add_log_context: LoggerAdapter factory for contextual fields

Usage:
    from app.utils.logger import add_log_context, get_logger, setup_logging

    setup_logging(log_level="INFO", json_logs=False)

    logger = get_logger(__name__)
    ctx_logger = add_log_context(logger, platform="douyin", strategy="tikwm")
    ctx_logger.info("Attempting strategy")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


# =============================================================================
# Constants
# =============================================================================

LOG_LEVEL_MAP: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Chatty libraries held at the third-party level
THIRD_PARTY_LOGGERS: list[str] = [
    "httpx",
    "httpcore",
    "hpack",
    "asyncio",
    "multipart",
]

# Standard LogRecord attributes; anything else on a record is context
RESERVED_ATTRS: frozenset[str] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
        "color_message",
    }
)


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if not key.startswith("_") and key not in RESERVED_ATTRS
    }


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """
    Formatter that renders each LogRecord as a compact JSON object.

    Example output:
        {"timestamp":"2025-01-15T10:30:45.123456+00:00","level":"INFO",
         "logger":"app.services.resolver_service","message":"Strategy succeeded",
         "extra":{"platform":"douyin","strategy":"tikwm"}}
    """

    def __init__(self, include_source_location: bool = False) -> None:
        super().__init__()
        self.include_source_location = include_source_location

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="microseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_source_location:
            log_entry["source"] = {
                "filename": record.filename,
                "lineno": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else "Unknown",
                "message": str(exc_value) if exc_value else "",
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = _extract_extra_fields(record)
        if extra_fields:
            log_entry["extra"] = extra_fields

        # default=str keeps enums and exceptions in context from breaking output
        return json.dumps(log_entry, default=str, ensure_ascii=False, separators=(",", ":"))


class StandardFormatter(logging.Formatter):
    """
    Text formatter for local development.

    Format: [TIMESTAMP] LEVEL logger_name: message key=value ...
    """

    DEFAULT_FORMAT: str = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
    DEFAULT_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(
            fmt=fmt or self.DEFAULT_FORMAT,
            datefmt=datefmt or self.DEFAULT_DATE_FORMAT,
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra_fields = _extract_extra_fields(record)
        if not extra_fields:
            return line
        context = " ".join(f"{key}={value}" for key, value in extra_fields.items())
        # Keep context on the first line so tracebacks stay readable
        head, sep, tail = line.partition("\n")
        return f"{head} [{context}]{sep}{tail}"


# =============================================================================
# Setup
# =============================================================================


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; handlers come from the root logger set up at startup."""
    return logging.getLogger(name)


def _build_formatter(json_logs: bool, level: int) -> logging.Formatter:
    if json_logs:
        return JSONFormatter(include_source_location=level <= logging.DEBUG)
    return StandardFormatter()


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    third_party_level: str = "WARNING",
) -> None:
    """
    Configure application-wide logging.

    Called once from the FastAPI lifespan. Replaces root handlers with a single
    stdout handler, routes Uvicorn's loggers through the same formatter and
    quiets HTTP client libraries.

    Args:
        log_level: Application log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Emit JSON records instead of text
        third_party_level: Level applied to THIRD_PARTY_LOGGERS
    """
    level = LOG_LEVEL_MAP.get(log_level.upper(), logging.INFO)
    formatter = _build_formatter(json_logs, level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
        uvicorn_logger.setLevel(level)

    # Request logging middleware already records every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    third_party_log_level = LOG_LEVEL_MAP.get(third_party_level.upper(), logging.WARNING)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_log_level)

    logging.getLogger(__name__).info(
        f"Logging configured: level={log_level.upper()}, json={json_logs}"
    )


# =============================================================================
# Context Enrichment
# =============================================================================


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    LoggerAdapter that merges its context into each call's ``extra``.

    Values passed explicitly in ``extra`` take precedence over the adapter's
    context.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def add_log_context(
    logger: logging.Logger | logging.LoggerAdapter, **context: Any
) -> ContextLoggerAdapter:
    """
    Wrap a logger so every record carries ``context``.

    Adapters can be stacked: wrapping an existing ContextLoggerAdapter merges
    the new fields over the old ones.

    Example:
        ctx_logger = add_log_context(logger, platform="douyin")
        ctx_logger = add_log_context(ctx_logger, strategy="tikwm")
        ctx_logger.info("Attempting strategy")
    """
    if isinstance(logger, ContextLoggerAdapter):
        merged = dict(logger.extra or {})
        merged.update(context)
        return ContextLoggerAdapter(logger.logger, merged)
    if isinstance(logger, logging.LoggerAdapter):
        logger = logger.logger
    return ContextLoggerAdapter(logger, context)


__all__ = [
    "JSONFormatter",
    "StandardFormatter",
    "ContextLoggerAdapter",
    "LOG_LEVEL_MAP",
    "THIRD_PARTY_LOGGERS",
    "add_log_context",
    "get_logger",
    "setup_logging",
]
