"""
Registry of pluggable configuration loaders.

Loaders are found in two places. Classes registered explicitly by the
embedding application come first, then classes published by installed
distributions under the ``layered_config.loaders`` entry-point group. Discovery
runs again on every reload, so installing or registering a loader takes
effect at the next reload.
"""

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import Callable, List, Sequence

from ..core.exceptions import ConfigurationError
from ..core.interfaces.loaders import IConfigurationLoader

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "layered_config.loaders"

LoaderFactory = Callable[[], IConfigurationLoader]


class LoaderRegistry:
    """
    Registry of configuration loader implementations.

    Registrations live for the lifetime of the registry. Each call to
    ``discover`` builds fresh loader instances.
    """

    def __init__(self, use_entry_points: bool = True, group: str = ENTRY_POINT_GROUP) -> None:
        self._factories: List[LoaderFactory] = []
        self.use_entry_points = use_entry_points
        self.group = group

    @property
    def registered(self) -> List[LoaderFactory]:
        """Get the explicitly registered loader factories."""
        return list(self._factories)

    def register(self, factory: LoaderFactory) -> None:
        """
        Register a loader class or zero-argument factory.

        Args:
            factory: Callable returning an IConfigurationLoader
        """
        if factory not in self._factories:
            self._factories.append(factory)
            logger.debug(f"Registered configuration loader: {_describe(factory)}")

    def discover(self) -> List[IConfigurationLoader]:
        """
        Instantiate all available loaders.

        Returns:
            Loaders in discovery order: explicit registrations first, then
            entry points

        Raises:
            ConfigurationError: If a loader cannot be loaded or constructed
        """
        factories: List[LoaderFactory] = list(self._factories)

        if self.use_entry_points:
            for entry_point in self._entry_points():
                factory = self._load_entry_point(entry_point)
                if factory not in factories:
                    factories.append(factory)

        loaders = [self._instantiate(factory) for factory in factories]

        if loaders:
            logger.info(f"Discovered {len(loaders)} configuration loader(s)")
        return loaders

    def _entry_points(self) -> Sequence[EntryPoint]:
        return list(entry_points(group=self.group))

    def _load_entry_point(self, entry_point: EntryPoint) -> LoaderFactory:
        try:
            factory = entry_point.load()
        except Exception as e:
            logger.error(f"Failed to load configuration loader entry point {entry_point.name}: {e}")
            raise ConfigurationError(
                f"Failed to load configuration loader '{entry_point.name}' ({entry_point.value})",
                cause=e
            ) from e

        if not callable(factory):
            raise ConfigurationError(
                f"Configuration loader entry point '{entry_point.name}' is not callable")
        return factory  # type: ignore[no-any-return]

    def _instantiate(self, factory: LoaderFactory) -> IConfigurationLoader:
        try:
            loader = factory()
        except Exception as e:
            logger.error(f"Failed to instantiate configuration loader {_describe(factory)}: {e}")
            raise ConfigurationError(
                f"Failed to instantiate configuration loader {_describe(factory)}",
                cause=e
            ) from e

        if not isinstance(loader, IConfigurationLoader):
            raise ConfigurationError(
                f"{_describe(factory)} did not produce an IConfigurationLoader")
        return loader


def _describe(factory: LoaderFactory) -> str:
    module = getattr(factory, '__module__', None)
    name = getattr(factory, '__qualname__', None) or repr(factory)
    return f"{module}.{name}" if module else name
