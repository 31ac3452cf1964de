"""
Structured Logging Module
=========================

Provides structured logging using structlog with JSON output for CI runs
and colored console output for local development.

Usage:
    from harness.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Acquiring mobile session", provider="local", platform="android")
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

from harness import __version__
from harness.config import Settings, get_settings


def add_harness_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Add harness context to log entries.

    Args:
        logger: The wrapped logger object.
        method_name: The name of the log method called.
        event_dict: The event dictionary to process.

    Returns:
        The modified event dictionary.
    """
    event_dict["app"] = "device-harness"
    event_dict["version"] = __version__
    return event_dict


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structured logging for the harness.

    Sets up structlog with appropriate processors based on the environment:
    - Development: Colored console output with pretty printing
    - CI: JSON output for log aggregation

    This should be called once, before the first session is acquired.
    The pytest plugin calls it at session start.

    Args:
        settings: Settings to read the log section from (defaults to cached settings).
    """
    settings = settings or get_settings()
    is_debug = settings.log.debug
    level = getattr(logging, settings.log.log_level)

    # Shared processors for all environments
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        add_harness_context,
    ]

    if is_debug:
        processors: list[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.rich_traceback,
            ),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Also configure standard library logging for third-party libs
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    # Reduce noise from common libraries
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: The name for the logger, typically __name__.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LogContext(test_id="login_spec::test_valid_user", provider="browserstack"):
            logger.info("Acquiring session")  # includes test_id and provider
    """

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize log context.

        Args:
            **kwargs: Key-value pairs to add to log context.
        """
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        """Enter the context, binding variables."""
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, unbinding variables."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())
