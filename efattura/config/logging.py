"""
Structured logging configuration using structlog.

Events go to stderr as JSON, or as console output in development.  While
a document is being processed its name is bound to every event through
``document_context`` so warnings about single fields can be traced back
to the file they came from.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor

from efattura.config.settings import get_settings

# Loggers of libraries that report font subsetting and parsing at INFO
QUIET_LOGGERS = ("fpdf", "fontTools")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application name and environment to log events."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["environment"] = settings.environment
    return event_dict


def drop_empty_fields(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Remove ``None`` values so optional fields do not clutter events."""
    return {key: value for key, value in event_dict.items() if value is not None}


@contextmanager
def document_context(source: str | None) -> Iterator[None]:
    """Bind ``document=source`` to every event logged inside the block."""
    if not source:
        yield
        return
    with structlog.contextvars.bound_contextvars(document=source):
        yield


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog for the application.

    Args:
        level: Overrides the configured log level (e.g. ``"DEBUG"``).
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        drop_empty_fields,
    ]

    if settings.environment == "development":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        processors = shared_processors + [renderer]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout belongs to command output
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
