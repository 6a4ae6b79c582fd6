"""Structured logging setup."""

from __future__ import annotations

import logging
import sys

import structlog

from mediagate.shared.observability.redaction import redact_event


def configure_logging(*, log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog (and stdlib logging underneath it).

    JSON output is meant for production; development gets the console renderer.
    Proxy credentials are scrubbed from every event before rendering.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer: structlog.types.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_event,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
