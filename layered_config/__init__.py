"""
layered-config - process-wide layered configuration with touchfile reloads.

This package composes framework defaults, application properties and local
overrides with sources contributed by pluggable loaders, exposes the result as
a read-only snapshot and reloads it when a touchfile changes.
"""

__version__ = "0.1.0"

# Public API exports
from .core.exceptions import (
    ConfigurationError,
    ConversionError,
    MissingPropertyError,
    ReadOnlyConfigurationError,
)
from .core.interfaces import IConfigSource, IConfigurationLoader
from .infrastructure.config import (
    BootstrapSettings,
    CompositeSource,
    ConfigHolder,
    DefaultSourceKind,
    LayeredFileSource,
    LoggingConfig,
    MapSource,
    ReadOnlySource,
    Touchfile,
    load_bootstrap_settings,
)
from .infrastructure.logging import setup_logging
from .plugins import LoaderRegistry
from . import config

__all__ = [
    "ConfigurationError",
    "ConversionError",
    "MissingPropertyError",
    "ReadOnlyConfigurationError",
    "IConfigSource",
    "IConfigurationLoader",
    "BootstrapSettings",
    "CompositeSource",
    "ConfigHolder",
    "DefaultSourceKind",
    "LayeredFileSource",
    "LoggingConfig",
    "MapSource",
    "ReadOnlySource",
    "Touchfile",
    "load_bootstrap_settings",
    "setup_logging",
    "LoaderRegistry",
    "config",
]
