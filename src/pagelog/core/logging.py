"""
Structured logging for pagelog.

Manifesto:
    Every completed request, every recorder failure, and every subscriber
    error should land in the logs as a structured event that a log
    aggregator can index.  This module configures structlog once at
    startup and hands out bound loggers everywhere else.

    - **Correlates:** the request id is bound as ``transaction_id`` for the
      length of one request cycle (see :func:`request_context`)
    - **Indexes:** JSON output renames request-cycle fields to their ECS
      names (``http.request.method``, ``url.path``, ``event.duration`` ...)
    - **Flexes:** colored console output for development

Configuration Flow:
    ::

        configure_logging(level="INFO", json_format=True, service="pagelog")
            ↓
        1. merge_contextvars        transaction_id of the running request
        2. add_log_level / add_logger_name
        3. TimeStamper (iso, UTC)
        4. ServiceMetadata          service.name / service.version
        5. ecs_request_fields       JSON only
        6. JSONRenderer (or ConsoleRenderer for dev)

Examples:
    >>> from pagelog.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True, service="pagelog")
    >>> get_logger(__name__).info("request_completed", path="/page_requests", status=200)

Tags:
    logging, structlog, observability, ecs, json-logging

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from pagelog import __version__

#: Request-cycle keys and their ECS field names.
ECS_FIELDS = {
    "timestamp": "@timestamp",
    "level": "log.level",
    "logger": "log.logger",
    "transaction_id": "transaction.id",
    "method": "http.request.method",
    "status": "http.response.status_code",
    "path": "url.path",
    "format": "http.response.mime_type",
}


class ServiceMetadata:
    """Processor stamping every entry with the service name and version."""

    def __init__(self, name: str, version: str = __version__) -> None:
        self.name = name
        self.version = version

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", self.name)
        event_dict.setdefault("service.version", self.version)
        return event_dict


def ecs_request_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename request-cycle fields to ECS names.

    ``duration`` is logged in milliseconds; ECS ``event.duration`` is
    nanoseconds.
    """
    for key, ecs_key in ECS_FIELDS.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    duration = event_dict.pop("duration", None)
    if duration is not None:
        event_dict["event.duration"] = int(duration * 1_000_000)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "pagelog",
) -> None:
    """Configure structlog (and the stdlib root logger) for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for JSON when
            stdout is not a TTY
        service: ``service.name`` stamped on every entry
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()
    numeric_level = getattr(logging, level.upper())

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        ServiceMetadata(service),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            ecs_request_fields,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn and sqlalchemy.engine log through the stdlib.
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


@contextmanager
def request_context(transaction_id: str) -> Iterator[None]:
    """Bind ``transaction_id`` to every log entry written inside the block."""
    with structlog.contextvars.bound_contextvars(transaction_id=transaction_id):
        yield


__all__ = [
    "ECS_FIELDS",
    "ServiceMetadata",
    "configure_logging",
    "ecs_request_fields",
    "get_logger",
    "request_context",
]
