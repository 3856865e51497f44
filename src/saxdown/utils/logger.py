"""Minimal logging utilities for saxdown.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from saxdown.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Forced close of <p>")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "saxdown." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'saxdown.mymodule'
    """
    if not (name == "saxdown" or name.startswith("saxdown.")):
        name = f"saxdown.{name}"
    return logging.getLogger(name)
