"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from booking_backend.utils.config import get_settings


_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    ``level`` overrides ``LOG_LEVEL`` from settings; later calls are no-ops.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format=(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        ),
        stream=sys.stdout,
    )
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)


def log_failure(
    logger: logging.Logger,
    origin: str,
    error: BaseException,
    severity: str = "ERROR",
) -> None:
    """Record a failure with the operation it surfaced from.

    Callers re-raise after logging; this never swallows the error.
    """
    level = logging.getLevelName(severity.upper())
    if not isinstance(level, int):
        level = logging.ERROR
    logger.log(
        level,
        "%s failed: %s: %s",
        origin,
        type(error).__name__,
        error,
        exc_info=error if level >= logging.ERROR else None,
    )
