"""
Pluggable configuration loader interface.

Loaders contribute extra configuration sources which are layered ahead of the
built-in default source. Implementations are registered with a
``LoaderRegistry`` or published through the ``layered_config.loaders``
entry-point group, and must be constructible without arguments.
"""

from abc import ABC, abstractmethod

from .sources import IConfigSource


class IConfigurationLoader(ABC):
    """Interface for pluggable configuration loaders."""

    @abstractmethod
    def get_configuration(self) -> IConfigSource:
        """
        Build the configuration source supplied by this loader.

        Called once per reload, on a freshly constructed loader.

        Returns:
            Configuration source to layer ahead of the default source
        """
        pass
