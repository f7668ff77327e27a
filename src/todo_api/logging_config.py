from __future__ import annotations

import logging

import structlog

from .settings import Settings


# PUBLIC_INTERFACE
def configure_logging(settings: Settings) -> None:
    """
    Configure structlog for the service.

    - ISO 8601 timestamps and the log level on every event
    - Events below settings.log_level are dropped
    - JSON output when settings.log_format == "json", console output otherwise
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
            if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
