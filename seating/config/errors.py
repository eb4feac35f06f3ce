"""Configuration error classes.

Raised when an event's stored seating settings cannot be turned into a
valid ``SeatingSettings``.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ValidationError(ConfigError):
    """Raised when a setting value has the wrong type or is out of range."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Invalid seating setting '{key}': {reason}")
        self.key = key
        self.reason = reason


class UnknownKeyError(ConfigError):
    """Raised when the stored settings contain a key no collaborator owns."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown seating setting '{key}'")
        self.key = key
