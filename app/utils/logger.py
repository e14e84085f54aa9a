"""Logging utilities for the application.

Renderer and level come from Settings: console output for local development,
JSON lines everywhere else so log collectors can parse them.
"""

import logging
import sys

import structlog
from structlog.stdlib import BoundLogger

from app.config import Settings


def configure_logger(settings: Settings) -> None:
    """Configure structlog for the given settings.

    Processors:
    - Context variables merging
    - Log level addition
    - Stack info rendering
    - Exception info
    - ISO timestamp format
    - Console rendering when ENVIRONMENT=local, JSON otherwise
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.ENVIRONMENT == "local"
        else structlog.processors.JSONRenderer()
    )
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> BoundLogger:
    """Get a structlog logger, bound lazily to the configuration in effect.

    Args:
        name: The name of the logger, typically __name__

    Returns:
        A structlog BoundLogger instance
    """
    return structlog.get_logger(name)
