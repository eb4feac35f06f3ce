"""Configuration type definitions.

Defines the schema for seating settings keys including types, defaults and
validation rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ConfigType(Enum):
    """Supported setting value types."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"


@dataclass(frozen=True)
class ConfigKey:
    """
    Definition of one seating setting.

    Attributes:
        key: Name of the setting as stored on the event (camelCase)
        field: Attribute name on ``SeatingSettings``
        config_type: Expected value type
        default: Value used when the event does not store the key
        description: Human-readable description
        min_value: Minimum allowed value (numeric types)
        max_value: Maximum allowed value (numeric types)
        allowed_values: Allowed values (string types)
    """

    key: str
    field: str
    config_type: ConfigType
    default: Any
    description: str = ""
    min_value: float | None = None
    max_value: float | None = None
    allowed_values: tuple[str, ...] | None = None

    def validate(self, value: Any) -> str | None:
        """
        Validate an already-coerced value against this key's rules.

        Returns:
            None if valid, error message string if invalid
        """
        if self.config_type in (ConfigType.INT, ConfigType.FLOAT):
            if self.min_value is not None and value < self.min_value:
                return f"value {value} below minimum {self.min_value}"
            if self.max_value is not None and value > self.max_value:
                return f"value {value} above maximum {self.max_value}"

        if self.allowed_values is not None and value not in self.allowed_values:
            return f"value {value!r} not in allowed values {list(self.allowed_values)}"

        return None
