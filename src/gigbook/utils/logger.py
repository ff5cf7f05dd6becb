"""
utils/logger.py
---------------
Logging configuration for the gigbook CLI.
Library modules only call ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once per invocation.
"""

import logging
import os
import sys
from typing import Optional, Union

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV = "GIGBOOK_LOG_LEVEL"

_handler: Optional[logging.Handler] = None


class StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever sys.stderr is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def resolve_level(verbose: bool = False) -> int:
    """Pick the log level: GIGBOOK_LOG_LEVEL wins, then --verbose, else WARNING."""
    name = os.environ.get(LOG_LEVEL_ENV)
    if name:
        level = logging.getLevelName(name.strip().upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if verbose else logging.WARNING


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Attach a single stderr handler to the ``gigbook`` logger.

    Calling it again only changes the level.

    Returns:
        The package logger.
    """
    global _handler
    logger = logging.getLogger("gigbook")
    if _handler is None:
        _handler = StderrHandler()
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        logger.addHandler(_handler)
    logger.setLevel(level)
    return logger
