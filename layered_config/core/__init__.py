"""
Core contracts and exception types for the configuration layer.
"""

from .interfaces import IConfigSource, IConfigurationLoader
from .exceptions import (
    ConfigurationError,
    ConversionError,
    MissingPropertyError,
    ReadOnlyConfigurationError,
)

__all__ = [
    "IConfigSource",
    "IConfigurationLoader",
    "ConfigurationError",
    "ConversionError",
    "MissingPropertyError",
    "ReadOnlyConfigurationError",
]
