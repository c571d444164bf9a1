"""
utils/logger.py
---------------
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.
Output goes to stdout under the ``reminding`` logger; the level comes from
``LOG_LEVEL`` unless ``configure_logging`` is called with another one.
"""

import logging
import sys
from typing import Optional, TextIO

from reminding.config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_PACKAGE_LOGGER = "reminding"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    (Re)configure the package logger.

    Replaces the handler installed by a previous call, so calling this more
    than once never duplicates output.

    Args:
        level: Level name such as "DEBUG"; defaults to ``LOG_LEVEL``.
        stream: Where to write; defaults to stdout.

    Returns:
        The package-level logger.
    """
    global _handler
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    if _handler is not None:
        package_logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream or sys.stdout)
    _handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    package_logger.addHandler(_handler)

    level_name = (level or LOG_LEVEL).upper()
    package_logger.setLevel(getattr(logging, level_name, logging.INFO))
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    if _handler is None:
        configure_logging()
    return logging.getLogger(name)
