"""Utility modules for saxdown.

Provides:
- logger: get_logger for logging
"""

from saxdown.utils.logger import get_logger

__all__ = ["get_logger"]
