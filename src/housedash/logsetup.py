"""Logging setup for housedash.

All modules log through the shared loguru ``logger``.  The command line
calls :func:`setup` once with the number of ``-v`` flags; library users
who never call it get loguru's default stderr sink.
"""

from __future__ import annotations

import sys

from loguru import logger

_LEVELS = ["WARNING", "INFO", "DEBUG", "TRACE"]

_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>"
)


def level_for_verbosity(verbosity: int) -> str:
    """Map a ``-v`` count to a loguru level name."""
    if verbosity < 0:
        verbosity = 0
    return _LEVELS[min(verbosity, len(_LEVELS) - 1)]


def setup(verbosity: int = 0, sink=None) -> int:
    """Replace the default handler with a single formatted sink.

    Returns the loguru handler id so callers (tests) can remove it again.
    """
    logger.remove()
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=level_for_verbosity(verbosity),
        format=_FORMAT,
        colorize=sink is None,
        backtrace=False,
        diagnose=False,
    )


__all__ = ["setup", "level_for_verbosity", "logger"]
