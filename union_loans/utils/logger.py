"""
Package logging.

The ``union_loans`` logger carries a NullHandler, so the library stays quiet
until an application configures logging. Scripts call `setup_logger()` to get
console output at the level named by ``UNION_LOANS_LOG_LEVEL``.
"""

import logging
import sys
from typing import Optional, Union

from union_loans.utils.config import log_level

LOGGER_NAME = "union_loans"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = log_level()
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(level: Union[int, str, None] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger (once) and set its level.

    Args:
        level: Level number or name; None reads UNION_LOANS_LOG_LEVEL (default INFO).

    Returns:
        The package logger.
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(_resolve_level(level))
    if any(not isinstance(h, logging.NullHandler) for h in log.handlers):
        return log

    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    log.addHandler(h)
    return log


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Package logger, or a child of it (``union_loans.<name>``)."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)
