"""Structured logging configuration using structlog.

Settings call :func:`configure_logging` once at import time. Modules
obtain loggers with :func:`get_logger` and add request scoped values
through ``structlog.contextvars`` (see ``records.middleware``).
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor


def add_app_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("app", "medford")
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: Optional[str] = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_logs: Render JSON lines instead of the console renderer
        service_name: Bound into every log entry when given
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_app_context,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
