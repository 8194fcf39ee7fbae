"""
Configuration file loading utilities.

This module reads YAML and JSON configuration files into dictionaries and
locates resource files on a list of search directories.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from ...core.exceptions import ConfigurationError

YAML_SUFFIXES = ('.yaml', '.yml')
JSON_SUFFIXES = ('.json',)


def load_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a configuration file, choosing the parser from its suffix.

    Args:
        file_path: Path to a YAML or JSON file

    Returns:
        Parsed mapping (empty for an empty file)

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(file_path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        data = _load_yaml(path)
    elif suffix in JSON_SUFFIXES:
        data = _load_json(path)
    else:
        raise ConfigurationError(
            f"Unsupported configuration file format: {path.suffix}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _load_yaml(path: Path) -> Any:
    """Load YAML configuration file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", cause=e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading {path}: {e}", cause=e) from e


def _load_json(path: Path) -> Any:
    """Load JSON configuration file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}", cause=e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading {path}: {e}", cause=e) from e


def find_resource(name: str, search_paths: Sequence[Union[str, Path]]) -> Optional[Path]:
    """
    Find a resource file on the search paths.

    Absolute names are used as-is. Relative names resolve against each
    search directory in turn and the first existing file wins.

    Args:
        name: File name or path
        search_paths: Directories to search

    Returns:
        Path of the first match, or None
    """
    candidate = Path(name)
    if candidate.is_absolute():
        return candidate if candidate.is_file() else None

    for directory in search_paths:
        path = Path(directory) / candidate
        if path.is_file():
            return path

    return None


def split_list(value: Any, separator: str = ",") -> List[str]:
    """Split a delimited string (or pass through a list) into stripped items."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(separator) if item.strip()]
