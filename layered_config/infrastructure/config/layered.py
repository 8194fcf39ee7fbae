"""
Layered file configuration source.

The default source reads up to three resource files, lowest precedence first:

- ``<namespace>-defaults.yaml`` - framework defaults
- ``<namespace>-app.yaml`` - application properties
- ``<namespace>-local.yaml`` - local developer overrides

Nested mappings are flattened to dotted keys and later files override earlier
ones key by key. String values may reference other properties (or, failing
that, environment variables) with ``${name}``. Setting
``<namespace>.config.dump`` to true logs every resolved property after load.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Union

from ...core.interfaces.sources import IConfigSource
from .loader import find_resource, load_file
from .models import DEFAULT_NAMESPACE, default_resource_names, namespace_key
from .sources import MapSource, flatten_mapping

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"\$\{([^}]+)\}")


class LayeredFileSource(IConfigSource):
    """Read-only source merged from the layered resource files."""

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        resource_names: Optional[Sequence[str]] = None,
        search_paths: Optional[Sequence[Union[str, Path]]] = None
    ):
        self.namespace = namespace
        self.resource_names: List[str] = list(resource_names or default_resource_names(namespace))
        self.search_paths: List[str] = [str(p) for p in (search_paths or ["."])]
        self.loaded_files: List[Path] = []
        self._properties: Dict[str, Any] = {}

        self._load()

    @property
    def dump_key(self) -> str:
        """Property enabling the property dump on load."""
        return namespace_key(self.namespace, "dump")

    def get_property(self, key: str) -> Any:
        return self._properties.get(key)

    def get_keys(self) -> Iterator[str]:
        return iter(list(self._properties))

    def _load(self) -> None:
        """Load and merge all resource files."""
        merged: Dict[str, Any] = {}

        for name in self.resource_names:
            path = find_resource(name, self.search_paths)
            if path is None:
                logger.debug(f"Configuration resource not found, skipping: {name}")
                continue

            merged.update(flatten_mapping(load_file(path)))
            self.loaded_files.append(path)
            logger.debug(f"Loaded configuration resource: {path}")

        self._properties = {
            key: self._interpolate(value, merged, {key})
            for key, value in merged.items()
        }

        logger.info(
            f"Loaded {len(self._properties)} properties from "
            f"{len(self.loaded_files)} of {len(self.resource_names)} resources")

        if MapSource(self._properties).get_boolean(self.dump_key, False):
            self._dump()

    def _interpolate(self, value: Any, properties: Dict[str, Any], seen: Set[str]) -> Any:
        """Resolve ${name} references in a value."""
        if isinstance(value, list):
            return [self._interpolate(item, properties, seen) for item in value]
        if not isinstance(value, str) or "${" not in value:
            return value

        def replace(match: "re.Match[str]") -> str:
            name = match.group(1).strip()
            if name in seen:
                return match.group(0)
            if name in properties and properties[name] is not None:
                resolved = self._interpolate(properties[name], properties, seen | {name})
                if isinstance(resolved, list):
                    resolved = ",".join(str(item) for item in resolved)
                if isinstance(resolved, bool):
                    return 'true' if resolved else 'false'
                return str(resolved)
            return os.environ.get(name, match.group(0))

        return _REFERENCE.sub(replace, value)

    def _dump(self) -> None:
        """Log all loaded properties."""
        logger.info("Properties loaded start")
        for key in sorted(self._properties):
            logger.info(f"{key}={self._properties[key]}")
        logger.info("Properties loaded end")

    def __repr__(self) -> str:
        return f"LayeredFileSource({self.namespace!r}, files={[str(p) for p in self.loaded_files]})"
