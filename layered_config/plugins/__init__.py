"""
Pluggable loader discovery.

This module provides the registry through which additional configuration
sources are contributed ahead of the built-in default source.
"""

from .registry import ENTRY_POINT_GROUP, LoaderRegistry

__all__ = [
    "ENTRY_POINT_GROUP",
    "LoaderRegistry",
]
