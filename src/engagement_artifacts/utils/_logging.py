"""Logging utilities for the artifacts service.

This module provides a standalone structlog logger factory that writes
JSON-formatted or text-formatted logs to a file or stderr. Each logger is
self-contained and does not modify global structlog configuration.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog

from engagement_artifacts.config import LogFormat, LoggingConfig

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

DEBUG_ENV = "ARTIFACTS_DEBUG"


def _log_level_from_string(level: str, *, respect_env: bool = True) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, ARTIFACTS_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv(DEBUG_ENV, None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def create_service_logger(
    config: LoggingConfig | None = None,
    *,
    component: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger for a service component.

    The log level is determined by (in order of precedence):
    1. ARTIFACTS_DEBUG environment variable (if set, enables DEBUG level)
    2. ``config.level``
    3. Default: INFO

    Args:
        config: Logging section of the service configuration. Defaults apply
            when None.
        component: Component name bound to every entry (for example
            ``reconcile`` or ``refresh``).

    Returns:
        A configured FilteringBoundLogger instance.
    """
    if config is None:
        config = LoggingConfig()

    effective_level = _log_level_from_string(config.level.value)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.format is LogFormat.JSON:
        # dict_tracebacks gives structured exception info in JSON output
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    logger = cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )

    if component:
        return logger.bind(component=component)
    return logger
