"""
Configuration management infrastructure.

This module provides the configuration holder together with the sources,
touchfile monitor and bootstrap settings it is built from.
"""

from .bootstrap import BootstrapLoader, load_bootstrap_settings
from .holder import ConfigHolder, Generation
from .layered import LayeredFileSource
from .models import BootstrapSettings, DefaultSourceKind, LoggingConfig
from .sources import CompositeSource, MapSource, ReadOnlySource, copy_configuration
from .touchfile import Touchfile

__all__ = [
    "BootstrapLoader",
    "load_bootstrap_settings",
    "ConfigHolder",
    "Generation",
    "LayeredFileSource",
    "BootstrapSettings",
    "DefaultSourceKind",
    "LoggingConfig",
    "CompositeSource",
    "MapSource",
    "ReadOnlySource",
    "copy_configuration",
    "Touchfile",
]
