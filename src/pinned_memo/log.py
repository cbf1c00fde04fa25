"""Structured logging configuration.

Package modules log through stdlib ``logging`` loggers wrapped by structlog, so
nothing is emitted until the host application configures logging.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from typing import Any, cast

import structlog
from structlog.typing import EventDict, WrappedLogger

from pinned_memo.config import LOG_LEVELS, Settings

logging.getLogger("pinned_memo").addHandler(logging.NullHandler())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure stdlib logging and structlog processors."""
    normalized_level = log_level.upper()
    if normalized_level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level {log_level!r}. Valid levels: {', '.join(LOG_LEVELS)}"
        )
    level = getattr(logging, normalized_level)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    processors: Sequence[Callable[[WrappedLogger, str, EventDict], Any]]
    if json_output:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: Settings) -> None:
    """Apply logging options from resolved settings."""
    configure_logging(settings.log_level, json_output=settings.log_json)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger backed by the stdlib logger ``name``."""
    return cast(
        structlog.stdlib.BoundLogger,
        structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger),
    )
