"""
Concrete configuration sources.

This module provides the in-memory, read-only and composite sources that the
configuration holder layers together, plus helpers for copying and flattening
configuration data.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ...core.interfaces.sources import IConfigSource

logger = logging.getLogger(__name__)


def flatten_mapping(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten nested mappings into dotted keys.

    Args:
        data: Possibly nested mapping
        prefix: Key prefix for the current nesting level

    Returns:
        Flat dictionary keyed by dotted paths
    """
    result: Dict[str, Any] = {}

    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            result.update(flatten_mapping(value, full_key))
        elif isinstance(value, (list, tuple)):
            result[full_key] = list(value)
        else:
            result[full_key] = value

    return result


class MapSource(IConfigSource):
    """Mutable configuration source backed by a dictionary."""

    def __init__(self, properties: Optional[Mapping[str, Any]] = None) -> None:
        self._properties: Dict[str, Any] = dict(properties or {})

    def get_property(self, key: str) -> Any:
        return self._properties.get(key)

    def get_keys(self) -> Iterator[str]:
        return iter(list(self._properties))

    def set_property(self, key: str, value: Any) -> None:
        if value is None:
            self._properties.pop(key, None)
        else:
            self._properties[key] = value

    def clear_property(self, key: str) -> None:
        self._properties.pop(key, None)

    def __repr__(self) -> str:
        return f"MapSource({len(self._properties)} properties)"


class ReadOnlySource(IConfigSource):
    """
    Read-only view over another source.

    Reads are delegated to the wrapped source, so changes made to it by its
    owner stay visible. Writes through the view raise
    ``ReadOnlyConfigurationError``.
    """

    def __init__(self, delegate: IConfigSource) -> None:
        self._delegate = delegate

    def get_property(self, key: str) -> Any:
        value = self._delegate.get_property(key)
        if isinstance(value, list):
            # Lists are handed out as copies so callers cannot edit them in place
            return list(value)
        return value

    def get_keys(self) -> Iterator[str]:
        return self._delegate.get_keys()

    def __repr__(self) -> str:
        return f"ReadOnlySource({self._delegate!r})"


class CompositeSource(IConfigSource):
    """
    Ordered stack of sources resolved by first match.

    Sources added first take precedence. The in-memory base passed at
    construction is always consulted last and receives all writes made
    through the composite.
    """

    def __init__(self, in_memory: Optional[IConfigSource] = None) -> None:
        self._in_memory = in_memory if in_memory is not None else MapSource()
        self._sources: List[IConfigSource] = [self._in_memory]

    @property
    def in_memory(self) -> IConfigSource:
        """Get the in-memory base source."""
        return self._in_memory

    @property
    def sources(self) -> List[IConfigSource]:
        """Get the sources in resolution order."""
        return list(self._sources)

    def add_source(self, source: IConfigSource) -> None:
        """
        Add a source with lower precedence than those already added.

        Args:
            source: Source to add
        """
        if source is self._in_memory or source in self._sources:
            return
        self._sources.insert(len(self._sources) - 1, source)

    def get_property(self, key: str) -> Any:
        for source in self._sources:
            value = source.get_property(key)
            if value is not None:
                return value
        return None

    def get_keys(self) -> Iterator[str]:
        seen: Dict[str, None] = {}
        for source in self._sources:
            for key in source.get_keys():
                seen.setdefault(key, None)
        return iter(list(seen))

    def set_property(self, key: str, value: Any) -> None:
        self._in_memory.set_property(key, value)

    def clear_property(self, key: str) -> None:
        self._in_memory.clear_property(key)

    def __repr__(self) -> str:
        return f"CompositeSource({len(self._sources)} sources)"


def copy_configuration(original: IConfigSource) -> MapSource:
    """
    Create an independent, mutable copy of a configuration.

    List values are copied by value so edits to the copy never reach the
    original.

    Args:
        original: Configuration to copy

    Returns:
        Mutable copy of the resolved properties
    """
    copy = MapSource()

    for key in original.get_keys():
        value = original.get_property(key)
        if isinstance(value, list):
            value = list(value)
        copy.set_property(key, value)

    logger.debug(f"Copied configuration with {len(copy.as_dict())} properties")
    return copy
