"""
Configuration models and data structures.

This module defines the bootstrap settings that control how the configuration
holder composes its sources, and the logging settings used by embedding
applications.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ...core.exceptions import ConfigurationError

DEFAULT_NAMESPACE = "layered"

# Level names understood by loguru sinks
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class DefaultSourceKind(Enum):
    """Built-in implementations available for the default source."""
    LAYERED = "layered"
    EMPTY = "empty"

    @classmethod
    def parse(cls, value: Any) -> 'DefaultSourceKind':
        """Parse a kind from its tag, raising ConfigurationError if unknown."""
        if isinstance(value, cls):
            return value
        tag = str(value).strip().lower()
        for kind in cls:
            if kind.value == tag:
                return kind
        allowed = ", ".join(kind.value for kind in cls)
        raise ConfigurationError(
            f"Unknown default configuration source '{value}' (expected one of: {allowed})")


def namespace_key(namespace: str, name: str) -> str:
    """Get the full key of a library property within a namespace."""
    return f"{namespace}.config.{name}"


def default_resource_names(namespace: str) -> List[str]:
    """Get the layered resource names for a namespace, lowest precedence first."""
    return [
        f"{namespace}-defaults.yaml",
        f"{namespace}-app.yaml",
        f"{namespace}-local.yaml",
    ]


@dataclass
class BootstrapSettings:
    """Flags resolved once at start-up that control configuration loading."""
    namespace: str = DEFAULT_NAMESPACE
    plugins_enabled: bool = True
    append_default: bool = True
    entry_points_enabled: bool = True
    default_source: DefaultSourceKind = DefaultSourceKind.LAYERED
    resource_names: List[str] = field(default_factory=list)
    search_paths: List[str] = field(default_factory=lambda: ["."])

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not self.namespace or not self.namespace.strip():
            raise ConfigurationError("Configuration namespace must not be empty")
        self.namespace = self.namespace.strip()
        self.default_source = DefaultSourceKind.parse(self.default_source)
        if not self.resource_names:
            self.resource_names = default_resource_names(self.namespace)
        if not self.search_paths:
            self.search_paths = ["."]

    @property
    def touchfile_key(self) -> str:
        """Property naming the touchfile."""
        return namespace_key(self.namespace, "touchfile")

    @property
    def touchfile_interval_key(self) -> str:
        """Property holding the touchfile interval in milliseconds."""
        return namespace_key(self.namespace, "touchfile.interval")

    @property
    def dump_key(self) -> str:
        """Property enabling the property dump on load."""
        return namespace_key(self.namespace, "dump")

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            'namespace': self.namespace,
            'plugins_enabled': self.plugins_enabled,
            'append_default': self.append_default,
            'entry_points_enabled': self.entry_points_enabled,
            'default_source': self.default_source.value,
            'resource_names': list(self.resource_names),
            'search_paths': list(self.search_paths),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BootstrapSettings':
        """Create settings from dictionary."""
        namespace = data.get('namespace', DEFAULT_NAMESPACE)
        return cls(
            namespace=namespace,
            plugins_enabled=data.get('plugins_enabled', True),
            append_default=data.get('append_default', True),
            entry_points_enabled=data.get('entry_points_enabled', True),
            default_source=data.get('default_source', DefaultSourceKind.LAYERED),
            resource_names=list(data.get('resource_names') or []),
            search_paths=list(data.get('search_paths') or ["."]),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = ("{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
                   "{name}:{function}:{line} - {message}")
    log_directory: str = "logs"
    log_file: str = "config.log"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False

    def __post_init__(self) -> None:
        self.level = self.level.upper()
        if self.level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")
        if self.backup_count < 0:
            raise ValueError(f"backup_count must not be negative, got {self.backup_count}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'LoggingConfig':
        """Create logging configuration from dictionary."""
        return cls(**(data or {}))
