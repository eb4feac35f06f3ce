"""
Centralized logging configuration for the seating service.

Every process (API, CLI, tests that opt in) shares one format:
    2026-01-06T14:05:52Z [source] LEVEL message

While a seating run is in progress the event being seated is attached to
each record, so interleaved logs stay attributable:
    2026-01-06T14:05:52Z [api] INFO (event=65f1c0) Placed 12 guests

Environment Variables:
    LOG_LEVEL: "TRACE", "DEBUG" or "INFO" (default)

Usage:
    from seating.logging_config import configure_logging, get_logger

    configure_logging(source="cli")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime

# Custom TRACE level for per-candidate placement diagnostics
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_current_event: ContextVar[str | None] = ContextVar("seating_current_event", default=None)


def _trace(self: logging.Logger, message: object, *args: object, **kw: object) -> None:
    """Log a message at TRACE level (5)."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kw)  # type: ignore[arg-type]


logging.Logger.trace = _trace  # type: ignore[attr-defined]


@contextmanager
def event_context(event_id: str) -> Iterator[None]:
    """Attach ``event_id`` to every record logged inside the block."""
    token = _current_event.set(event_id)
    try:
        yield
    finally:
        _current_event.reset(token)


class EventContextFilter(logging.Filter):
    """Copies the active event id (if any) onto the record as ``event_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.event_id = _current_event.get()
        return True


class ISO8601Formatter(logging.Formatter):
    """Formatter producing UTC ISO8601 timestamps and a source tag."""

    def __init__(self, source: str = "app"):
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()

        event_id = getattr(record, "event_id", None)
        if event_id:
            message = f"(event={event_id}) {message}"

        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{timestamp} [{self.source}] {record.levelname} {message}"


class HealthCheckFilter(logging.Filter):
    """Drops access-log lines for health probes unless running at DEBUG."""

    HEALTH_PATHS = ("/health", "/api/health")

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno <= logging.DEBUG:
            return True
        message = record.getMessage()
        return not any(path in message and "GET" in message for path in self.HEALTH_PATHS)


def _level_from_env(debug: bool | None) -> int:
    log_level_env = os.getenv("LOG_LEVEL", "").upper()
    if log_level_env == "TRACE":
        return TRACE
    if log_level_env == "DEBUG" or debug:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    source: str = "app",
    level: int | None = None,
    debug: bool | None = None,
) -> logging.Logger:
    """Configure the root logger for a service component.

    Args:
        source: Identifier shown in brackets (e.g., "api", "cli")
        level: Explicit level; otherwise derived from LOG_LEVEL
        debug: Force DEBUG when LOG_LEVEL is unset

    Returns:
        The configured root logger
    """
    if level is None:
        level = _level_from_env(debug)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(EventContextFilter())
    handler.addFilter(HealthCheckFilter())
    root_logger.addHandler(handler)

    # Route uvicorn through the same handler so health probes are filtered too
    for uvicorn_logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name."""
    return logging.getLogger(name)
