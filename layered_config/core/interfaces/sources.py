"""
Configuration source interface.

A source is a read-only origin of key-value pairs. Keys are dotted strings and
values are strings, lists of strings, booleans or numbers. Typed access is
implemented once here on top of the two abstract primitives so every concrete
source converts values the same way.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..exceptions import ConversionError, MissingPropertyError, ReadOnlyConfigurationError

TRUE_VALUES = frozenset({'true', '1', 'yes', 'on', 'enabled'})
FALSE_VALUES = frozenset({'false', '0', 'no', 'off', 'disabled'})

# Sentinel for "no default supplied"
_REQUIRED: Any = object()


class IConfigSource(ABC):
    """Interface for key-value configuration sources."""

    @abstractmethod
    def get_property(self, key: str) -> Any:
        """
        Get the raw value of a property.

        Args:
            key: Property key

        Returns:
            The stored value, or None if the key is not defined
        """
        pass

    @abstractmethod
    def get_keys(self) -> Iterator[str]:
        """
        Iterate over all defined keys.

        Returns:
            Iterator of property keys
        """
        pass

    def contains_key(self, key: str) -> bool:
        """Check if a key is defined."""
        return self.get_property(key) is not None

    def is_empty(self) -> bool:
        """Check if the source defines no keys."""
        for _ in self.get_keys():
            return False
        return True

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a property as a string.

        Lists resolve to their first element.

        Args:
            key: Property key
            default: Value returned when the key is not defined

        Returns:
            String value or the default
        """
        value = self.get_property(key)
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            return default
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return str(value)

    def get_boolean(self, key: str, default: Any = _REQUIRED) -> bool:
        """
        Get a property as a boolean.

        Args:
            key: Property key
            default: Value returned when the key is not defined

        Returns:
            Boolean value or the default

        Raises:
            MissingPropertyError: If the key is not defined and no default was given
            ConversionError: If the value is not a recognised boolean
        """
        found, value = self._scalar(key, default)
        if not found:
            return bool(default)
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
        raise ConversionError(key, value, "bool")

    def get_int(self, key: str, default: Any = _REQUIRED) -> int:
        """
        Get a property as an integer.

        Raises:
            MissingPropertyError: If the key is not defined and no default was given
            ConversionError: If the value is not an integer
        """
        found, value = self._scalar(key, default)
        if not found:
            return int(default)
        if isinstance(value, bool):
            raise ConversionError(key, value, "int")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise ConversionError(key, value, "int")

    def get_float(self, key: str, default: Any = _REQUIRED) -> float:
        """
        Get a property as a float.

        Raises:
            MissingPropertyError: If the key is not defined and no default was given
            ConversionError: If the value is not numeric
        """
        found, value = self._scalar(key, default)
        if not found:
            return float(default)
        if isinstance(value, bool):
            raise ConversionError(key, value, "float")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise ConversionError(key, value, "float")

    def get_list(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        """
        Get a property as a list of strings.

        Scalars are returned as a one element list.
        """
        value = self.get_property(key)
        if value is None:
            return list(default) if default is not None else []
        if isinstance(value, list):
            return [str(item) for item in value]
        return [self.get_string(key) or ""]

    def as_dict(self) -> Dict[str, Any]:
        """Get all resolved properties as a dictionary."""
        return {key: self.get_property(key) for key in self.get_keys()}

    def set_property(self, key: str, value: Any) -> None:
        """Set a property value."""
        raise ReadOnlyConfigurationError(
            f"Cannot set '{key}': {type(self).__name__} is read-only")

    def clear_property(self, key: str) -> None:
        """Remove a property."""
        raise ReadOnlyConfigurationError(
            f"Cannot clear '{key}': {type(self).__name__} is read-only")

    def _scalar(self, key: str, default: Any) -> Tuple[bool, Any]:
        """Get a single value, unwrapping lists. Returns (found, value)."""
        value = self.get_property(key)
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            if default is _REQUIRED:
                raise MissingPropertyError(key)
            return False, default
        return True, value
