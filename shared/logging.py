"""structlog configuration.

JSON lines in deployed environments, colored console output locally.
Request IDs are merged in from contextvars (see RequestIdMiddleware).
"""

import logging

import structlog

from shared.config import settings


def configure_logging(json_output: bool | None = None, level: str | None = None) -> None:
    if json_output is None:
        json_output = settings.log_json
    log_level = getattr(logging, (level or settings.log_level).upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
