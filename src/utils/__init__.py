"""Utility functions and classes"""

from .position import Position
from .log_setup import ensure_logging, configure_debug

__all__ = [
    'Position',
    'ensure_logging',
    'configure_debug',
]
