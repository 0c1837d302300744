"""Logging setup for the givingbook logger hierarchy."""

__all__ = ["configure_logging", "reset_logging"]

import logging
import sys
from typing import Any

_LOGGER_PREFIX = "givingbook"

_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(*, level: int = logging.WARNING, stream: Any = None) -> None:
    """Send givingbook log records at or above level to stream (stderr by default).

    Calling it again replaces the previous handler, so the stream is always
    the one current at the time of the call.
    """
    reset_logging()
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)


def reset_logging() -> None:
    """Remove the handler installed by configure_logging."""
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
