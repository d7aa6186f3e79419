"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog
from structlog.types import EventDict, Processor

from .config import APP_VERSION, SERVICE_NAME
from .settings import settings
from .utils import request_id_ctx


def add_request_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add request ID to log event if available.

    This processor extracts the request ID from context and adds it to every log entry.
    """
    request_id = request_id_ctx.get("")
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service name, environment, and version to every log entry."""
    event_dict["service"] = SERVICE_NAME
    event_dict["environment"] = settings.SENTRY_ENVIRONMENT
    event_dict["version"] = APP_VERSION
    return event_dict


def drop_color_message_key(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Remove the 'color_message' key, which is redundant in JSON output."""
    event_dict.pop("color_message", None)
    return event_dict


HANDLER_NAME = "structlog"


def configure_structlog(json_logs: bool = False, stream: IO[str] | None = None) -> None:
    """
    Configure structlog and route stdlib logging through the same processors.

    Library modules log with ``logging.getLogger(__name__)``; their records are
    rendered by a ``ProcessorFormatter`` so they carry the request ID and app
    context just like ``get_logger`` events.

    Args:
        json_logs: If True, output JSON logs. If False, use human-readable console format.
                   Defaults to JSON in production (non-DEBUG mode).
        stream: Where the log handler writes; defaults to stdout.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        add_app_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if json_logs or not settings.DEBUG:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))
        renderers: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            drop_color_message_key,
            structlog.processors.JSONRenderer(),
        ]
    else:
        shared_processors.append(structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"))
        renderers = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    # Replace only our own handler so reconfiguring never stacks output.
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    # Set log levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("itinerary_complete", legs=3, session=token)
    """
    return structlog.get_logger(name)


__all__ = ["configure_structlog", "get_logger"]
