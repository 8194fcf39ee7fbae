"""
Configuration holder for runtime configuration access.

The holder owns the active configuration and the touchfile that guards it.
It composes loader-supplied sources with the default source, reloads when the
touchfile changes, and notifies registered listeners after every change.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ...core.exceptions import ConfigurationError
from ...core.interfaces.sources import IConfigSource
from ...plugins.registry import LoaderRegistry
from .bootstrap import load_bootstrap_settings
from .layered import LayeredFileSource
from .models import BootstrapSettings, DefaultSourceKind
from .sources import CompositeSource, MapSource, ReadOnlySource, copy_configuration
from .touchfile import DEFAULT_INTERVAL_MS, Touchfile

logger = logging.getLogger(__name__)

ConfigListener = Callable[[], None]
DefaultSourceFactory = Callable[[], IConfigSource]


def _layered_source(settings: BootstrapSettings) -> IConfigSource:
    return LayeredFileSource(
        namespace=settings.namespace,
        resource_names=settings.resource_names,
        search_paths=settings.search_paths
    )


def _empty_source(settings: BootstrapSettings) -> IConfigSource:
    return MapSource()


DEFAULT_SOURCE_FACTORIES: Dict[DefaultSourceKind, Callable[[BootstrapSettings], IConfigSource]] = {
    DefaultSourceKind.LAYERED: _layered_source,
    DefaultSourceKind.EMPTY: _empty_source,
}


@dataclass(frozen=True)
class Generation:
    """An installed configuration together with its touchfile."""
    number: int
    configuration: IConfigSource
    touchfile: Touchfile


class ConfigHolder:
    """
    Lock-guarded holder of the active configuration.

    The configuration is loaded lazily on first access. Every change installs
    a new ``Generation`` with a single reference swap, so readers never see a
    partially built configuration. All changes happen under one re-entrant
    lock; plain reads take no lock.
    """

    def __init__(
        self,
        settings: Optional[BootstrapSettings] = None,
        registry: Optional[LoaderRegistry] = None,
        default_factory: Optional[DefaultSourceFactory] = None,
        clock: Callable[[], float] = time.time
    ) -> None:
        """
        Initialize the holder.

        Args:
            settings: Bootstrap settings (loaded from file/environment if omitted)
            registry: Loader registry (a fresh one if omitted)
            default_factory: Overrides the default source selected by settings
            clock: Wall clock passed to touchfiles
        """
        self._settings = settings if settings is not None else load_bootstrap_settings()
        self._registry = registry if registry is not None else LoaderRegistry(
            use_entry_points=self._settings.entry_points_enabled)
        self._default_factory = default_factory
        self._clock = clock
        self._lock = threading.RLock()
        self._listeners: List[ConfigListener] = []
        self._generation: Optional[Generation] = None
        self._generation_count = 0

    @property
    def settings(self) -> BootstrapSettings:
        """Get the bootstrap settings."""
        return self._settings

    @property
    def registry(self) -> LoaderRegistry:
        """Get the loader registry."""
        return self._registry

    @property
    def generation(self) -> Optional[Generation]:
        """Get the active generation, or None before the first load."""
        return self._generation

    @property
    def touchfile(self) -> Optional[Touchfile]:
        """Get the active touchfile monitor."""
        generation = self._generation
        return generation.touchfile if generation is not None else None

    @property
    def listeners(self) -> List[ConfigListener]:
        """Get the registered listeners."""
        return list(self._listeners)

    def get_instance(self) -> IConfigSource:
        """
        Get the current configuration.

        Loads the configuration on first use. If a touchfile is configured and
        its polling interval has elapsed, the file is checked and the
        configuration reloaded when it has changed.

        Returns:
            Read-only view of the active configuration

        Raises:
            ConfigurationError: If a required load or reload fails
        """
        generation = self._generation

        if generation is None:
            with self._lock:
                if self._generation is None:
                    self._load_configuration()
                generation = self._generation
        elif generation.touchfile.is_due():
            with self._lock:
                current = self._generation
                assert current is not None
                if current.touchfile.has_changed():
                    logger.info("Reloading configuration after touchfile change")
                    self._load_configuration()
                generation = self._generation

        assert generation is not None
        return generation.configuration

    def reset(self) -> None:
        """
        Reload the configuration from scratch.

        All programmatic changes are discarded. Intended mainly for tests.
        """
        with self._lock:
            self._load_configuration()

    def set_configuration(self, configuration: IConfigSource) -> None:
        """
        Install the given configuration as the active one.

        Warning: this ignores any pluggable loaders. Use it for tests or when
        the application assembles the whole configuration itself.

        Args:
            configuration: Configuration to install
        """
        with self._lock:
            if self._settings.plugins_enabled:
                logger.debug("Installing configuration directly; configuration loaders are ignored")
            self._install(configuration)
            logger.info(f"Configuration generation {self._generation_count} set programmatically")
            self.notify_listeners()

    @staticmethod
    def copy_configuration(configuration: IConfigSource) -> MapSource:
        """
        Create a mutable deep copy of a configuration.

        Args:
            configuration: Configuration to copy

        Returns:
            Independent mutable copy
        """
        return copy_configuration(configuration)

    def notify_listeners(self) -> None:
        """
        Notify all registered listeners that the configuration has changed.

        Listeners are called in turn on the calling thread. An exception from
        a listener propagates and the remaining listeners are not called.
        """
        if not self._listeners:
            return

        for listener in list(self._listeners):
            listener()

    def add_property_change_listener(self, listener: ConfigListener) -> None:
        """
        Register a listener for configuration changes.

        Listeners are notified only when the holder installs a new
        configuration. Changes made inside a configuration after it was
        installed need a manual ``notify_listeners`` call.

        Args:
            listener: Zero-argument callable
        """
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)
                logger.debug(f"Registered configuration listener: {getattr(listener, '__name__', listener)!r}")

    def _load_configuration(self) -> None:
        """Compose and install a new configuration. Caller holds the lock."""
        try:
            configuration = self._check_plugin_configuration()
            if configuration is None:
                configuration = self._get_default_configuration()
            self._install(configuration)
        except ConfigurationError as e:
            if self._generation is None:
                logger.error(f"Failed to load configuration: {e}")
            else:
                logger.error(
                    f"Failed to reload configuration, keeping generation {self._generation.number}: {e}")
            raise

        logger.info(f"Configuration generation {self._generation_count} loaded")
        self.notify_listeners()

    def _check_plugin_configuration(self) -> Optional[IConfigSource]:
        """Build a composite from the discovered loaders, or None if there are none."""
        if not self._settings.plugins_enabled:
            return None

        loaders = self._registry.discover()
        if not loaders:
            return None

        composite = CompositeSource(MapSource())
        for loader in loaders:
            try:
                source = loader.get_configuration()
            except ConfigurationError:
                raise
            except Exception as e:
                raise ConfigurationError(
                    f"Configuration loader {type(loader).__name__} failed", cause=e) from e
            if not isinstance(source, IConfigSource):
                raise ConfigurationError(
                    f"Configuration loader {type(loader).__name__} returned "
                    f"{type(source).__name__}, not a configuration source")
            composite.add_source(source)

        # The default source goes last so every loader overrides it
        if self._settings.append_default:
            composite.add_source(self._get_default_configuration())

        return composite

    def _get_default_configuration(self) -> IConfigSource:
        """Build the default source."""
        kind = self._settings.default_source
        try:
            if self._default_factory is not None:
                source = self._default_factory()
            else:
                source = DEFAULT_SOURCE_FACTORIES[kind](self._settings)
        except Exception as e:
            raise ConfigurationError(
                f"Failed to instantiate default configuration '{kind.value}': {e}", cause=e) from e

        if not isinstance(source, IConfigSource):
            raise ConfigurationError(
                f"Default configuration factory returned {type(source).__name__}, not a configuration source")
        return source

    def _install(self, configuration: IConfigSource) -> None:
        """Swap in a new generation built from the configuration."""
        view = configuration if isinstance(configuration, ReadOnlySource) else ReadOnlySource(configuration)
        touchfile = self._config_touchfile(view)
        self._generation_count += 1
        self._generation = Generation(self._generation_count, view, touchfile)

    def _config_touchfile(self, configuration: IConfigSource) -> Touchfile:
        """Create the touchfile described by a configuration."""
        path = configuration.get_string(self._settings.touchfile_key)
        if not path or not path.strip():
            return Touchfile(None, clock=self._clock)

        interval = configuration.get_int(self._settings.touchfile_interval_key, DEFAULT_INTERVAL_MS)
        logger.debug(f"Watching touchfile {path} every {interval} ms")
        return Touchfile(path.strip(), interval, clock=self._clock)
