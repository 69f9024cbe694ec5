"""Logging configuration for the ghrest client.

The library logs through the ``ghrest`` logger hierarchy and stays silent
until the application configures logging.

Example:
    >>> import logging
    >>> logging.getLogger("ghrest").setLevel(logging.DEBUG)

"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

logger = logging.getLogger("ghrest")

logger.setLevel(logging.WARNING)

# Prevent "No handler found" warnings
logger.addHandler(logging.NullHandler())


def configure_logging(
    level: int | str | None = None,
    format_string: str | None = None,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Attach a stream handler to the ``ghrest`` logger.

    Args:
        level: Logging level. Falls back to ``GHREST_LOG_LEVEL``, then INFO.
        format_string: Custom format string for log messages.
        stream: Output stream (defaults to sys.stderr).

    Returns:
        The handler that was attached.

    Example:
        >>> from ghrest.utils.logger import configure_logging
        >>> configure_logging(level=logging.DEBUG)

    """
    if level is None:
        level = os.environ.get("GHREST_LOG_LEVEL", "INFO").upper()

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(format_string))

    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
