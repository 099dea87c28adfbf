"""Utility modules for Rivulet.

Provides:
- logger: get_logger for namespaced logging
"""

from rivulet.utils.logger import get_logger

__all__ = [
    "get_logger",
]
