"""
Bootstrap settings loading.

Bootstrap settings decide how the configuration itself is assembled: whether
pluggable loaders are used, whether the default source is layered under
them, which default source implementation to build and where its files live.
They are read once from an optional ``<namespace>-config.yaml`` (or
``.json``) file and then overridden by environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ...core.exceptions import ConfigurationError
from ...core.interfaces.sources import FALSE_VALUES, TRUE_VALUES
from .loader import find_resource, load_file, split_list
from .models import DEFAULT_NAMESPACE, BootstrapSettings, DefaultSourceKind
from .sources import flatten_mapping

logger = logging.getLogger(__name__)


class BootstrapLoader:
    """Loader for bootstrap settings from file and environment variables."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._namespace = namespace
        self._env_prefix = f"{namespace.upper().replace('.', '_').replace('-', '_')}_"

    @property
    def bootstrap_file_names(self) -> List[str]:
        """Names looked up for the bootstrap file, in order."""
        return [f"{self._namespace}-config.yaml", f"{self._namespace}-config.json"]

    def load_settings(
        self,
        config_file: Optional[Union[str, Path]] = None,
        search_paths: Optional[Sequence[Union[str, Path]]] = None
    ) -> BootstrapSettings:
        """
        Load bootstrap settings.

        Args:
            config_file: Explicit bootstrap file (must exist if given)
            search_paths: Directories searched for the bootstrap and resource
                files; overrides any search path from file or environment

        Returns:
            Validated bootstrap settings
        """
        settings_data: Dict[str, Any] = {'namespace': self._namespace}
        env_search_paths = self._env_search_paths()
        lookup_paths = [str(p) for p in (search_paths or env_search_paths or ["."])]

        bootstrap_path = self._locate(config_file, lookup_paths)
        if bootstrap_path is not None:
            logger.debug(f"Loading bootstrap settings from {bootstrap_path}")
            file_data = flatten_mapping(load_file(bootstrap_path))
            settings_data.update(self._from_file(file_data))

        settings_data.update(self._load_from_environment())

        if search_paths:
            settings_data['search_paths'] = [str(p) for p in search_paths]
        elif 'search_paths' not in settings_data:
            settings_data['search_paths'] = lookup_paths

        settings = BootstrapSettings.from_dict(settings_data)
        logger.debug(f"Bootstrap settings: {settings.to_dict()}")
        return settings

    def _locate(self, config_file: Optional[Union[str, Path]], lookup_paths: List[str]) -> Optional[Path]:
        """Find the bootstrap file."""
        if config_file is not None:
            path = Path(config_file)
            if not path.is_file():
                raise ConfigurationError(f"Bootstrap configuration file not found: {config_file}")
            return path

        for name in self.bootstrap_file_names:
            path = find_resource(name, lookup_paths)
            if path is not None:
                return path
        return None

    def _file_mappings(self) -> Dict[str, Tuple[str, Callable[[str, Any], Any]]]:
        ns = self._namespace
        return {
            f"{ns}.config.plugins.enabled": ('plugins_enabled', self._parse_bool),
            f"{ns}.config.plugins.append.default": ('append_default', self._parse_bool),
            f"{ns}.config.plugins.entry.points": ('entry_points_enabled', self._parse_bool),
            f"{ns}.config.default.source": ('default_source', self._parse_kind),
            f"{ns}.config.resource.order": ('resource_names', self._parse_list),
            f"{ns}.config.search.path": ('search_paths', self._parse_list),
        }

    def _from_file(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Map bootstrap file properties to settings fields."""
        result: Dict[str, Any] = {}

        for key, (field_name, converter) in self._file_mappings().items():
            if key in data and data[key] is not None:
                result[field_name] = converter(key, data[key])

        return result

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load settings overrides from environment variables."""
        result: Dict[str, Any] = {}

        env_mappings = {
            f"{self._env_prefix}CONFIG_PLUGINS_ENABLED": ('plugins_enabled', self._parse_bool),
            f"{self._env_prefix}CONFIG_APPEND_DEFAULT": ('append_default', self._parse_bool),
            f"{self._env_prefix}CONFIG_ENTRY_POINTS": ('entry_points_enabled', self._parse_bool),
            f"{self._env_prefix}CONFIG_DEFAULT_SOURCE": ('default_source', self._parse_kind),
            f"{self._env_prefix}CONFIG_RESOURCE_ORDER": ('resource_names', self._parse_list),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                result[field_name] = converter(env_var, value)

        env_search_paths = self._env_search_paths()
        if env_search_paths:
            result['search_paths'] = env_search_paths

        return result

    def _env_search_paths(self) -> List[str]:
        value = os.getenv(f"{self._env_prefix}CONFIG_SEARCH_PATH")
        return split_list(value, os.pathsep) if value else []

    def _parse_bool(self, name: str, value: Any) -> bool:
        """Parse boolean value from a file or environment value."""
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise ConfigurationError(f"Invalid boolean value for {name}: {value!r}")

    def _parse_kind(self, name: str, value: Any) -> DefaultSourceKind:
        return DefaultSourceKind.parse(value)

    def _parse_list(self, name: str, value: Any) -> List[str]:
        return split_list(value)


def load_bootstrap_settings(
    namespace: str = DEFAULT_NAMESPACE,
    config_file: Optional[Union[str, Path]] = None,
    search_paths: Optional[Sequence[Union[str, Path]]] = None
) -> BootstrapSettings:
    """
    Load bootstrap settings for a namespace.

    Args:
        namespace: Configuration namespace
        config_file: Explicit bootstrap file
        search_paths: Directories searched for configuration files

    Returns:
        Bootstrap settings
    """
    return BootstrapLoader(namespace).load_settings(config_file, search_paths)
