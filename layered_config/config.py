"""
Process-wide access to the configuration.

The functions here delegate to a single ``ConfigHolder`` which is created
lazily from the bootstrap settings on first use. Applications that assemble
their own holder (custom registry, settings or default source) install it
with ``install_holder`` before the first read.

Example:
    from layered_config import config

    timeout = config.get_instance().get_int("app.timeout", 30)
"""

import logging
import threading
from typing import Optional

from .core.interfaces.sources import IConfigSource
from .infrastructure.config.holder import ConfigHolder, ConfigListener
from .infrastructure.config.sources import MapSource

logger = logging.getLogger(__name__)

_holder: Optional[ConfigHolder] = None
_holder_lock = threading.Lock()


def get_holder() -> ConfigHolder:
    """Get the process-wide holder, creating it on first use."""
    global _holder
    holder = _holder
    if holder is None:
        with _holder_lock:
            if _holder is None:
                _holder = ConfigHolder()
                logger.debug("Created process-wide configuration holder")
            holder = _holder
    return holder


def install_holder(holder: Optional[ConfigHolder]) -> None:
    """
    Replace the process-wide holder.

    Passing None drops the current holder so the next access creates a new one.
    """
    global _holder
    with _holder_lock:
        _holder = holder


def get_instance() -> IConfigSource:
    """Get the current configuration."""
    return get_holder().get_instance()


def reset() -> None:
    """Reload the configuration, discarding programmatic changes."""
    get_holder().reset()


def set_configuration(configuration: IConfigSource) -> None:
    """Install a configuration directly. Configuration loaders are ignored."""
    get_holder().set_configuration(configuration)


def copy_configuration(configuration: IConfigSource) -> MapSource:
    """Create a mutable deep copy of a configuration."""
    return ConfigHolder.copy_configuration(configuration)


def notify_listeners() -> None:
    """Notify all listeners that the configuration has changed."""
    get_holder().notify_listeners()


def add_property_change_listener(listener: ConfigListener) -> None:
    """Register a listener for configuration changes."""
    get_holder().add_property_change_listener(listener)
