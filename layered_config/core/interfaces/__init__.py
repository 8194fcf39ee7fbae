"""
Core interfaces for configuration sources and pluggable loaders.
"""

from .sources import IConfigSource
from .loaders import IConfigurationLoader

__all__ = [
    "IConfigSource",
    "IConfigurationLoader",
]
