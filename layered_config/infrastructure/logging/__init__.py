"""
Logging infrastructure for the configuration library.
"""

from .setup import InterceptHandler, setup_logging

__all__ = [
    "InterceptHandler",
    "setup_logging",
]
