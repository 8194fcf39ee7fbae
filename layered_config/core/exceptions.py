"""
Exception types raised by the configuration layer.
"""

from typing import Optional


class ConfigurationError(Exception):
    """Base exception for configuration failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ReadOnlyConfigurationError(ConfigurationError):
    """Raised when a read-only configuration is modified."""
    pass


class MissingPropertyError(ConfigurationError, KeyError):
    """Raised when a required property is not defined."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Property '{key}' is not defined")
        self.key = key

    def __str__(self) -> str:
        return self.message


class ConversionError(ConfigurationError, ValueError):
    """Raised when a property value cannot be converted to the requested type."""

    def __init__(self, key: str, value: object, target: str) -> None:
        super().__init__(f"Property '{key}' with value {value!r} cannot be converted to {target}")
        self.key = key
        self.value = value
        self.target = target
