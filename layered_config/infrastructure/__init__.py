"""
Infrastructure layer: configuration holder, sources and logging setup.
"""

from .config import ConfigHolder
from .logging import setup_logging

__all__ = [
    "ConfigHolder",
    "setup_logging",
]
