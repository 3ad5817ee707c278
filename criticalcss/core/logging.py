"""Logging configuration utilities."""

import logging
import sys
from typing import Optional

import structlog

from .config import settings


def configure_logging(level: int | str | None = None) -> None:
    """Configure structlog on top of stdlib logging with JSON output."""

    log_level = level or (logging.DEBUG if settings.debug else logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Create a structured logger."""

    return structlog.get_logger(name or "criticalcss")


def bind_request_context(**values: object) -> None:
    """Attach per-request fields (url, scope, cache key) to every log line in this context."""

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)
