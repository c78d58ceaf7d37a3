"""Centralized logging configuration for headless runs."""

from __future__ import annotations

import logging
import os
from typing import Iterable

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    *,
    level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    quiet_loggers: Iterable[str] | None = None,
) -> logging.Logger:
    """Configure application logging.

    Args:
        level: Explicit log level. Falls back to the ``NURSERY_LOG_LEVEL`` env
            var, then INFO.
        format: Log format string.
        datefmt: Date format string.
        quiet_loggers: Logger names held at WARNING regardless of ``level``.

    Returns:
        The package logger (``nursery``).
    """
    raw_level = level if level is not None else os.getenv("NURSERY_LOG_LEVEL")
    resolved_level = (raw_level or "INFO").upper()
    logging.basicConfig(level=resolved_level, format=format, datefmt=datefmt)

    app_logger = logging.getLogger("nursery")
    app_logger.setLevel(resolved_level)

    for logger_name in quiet_loggers or ():
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    app_logger.debug("Logging configured", extra={"level": resolved_level})
    return app_logger
