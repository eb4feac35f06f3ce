"""
Seating settings - schema, validation and defaults.

Usage:
    from seating.config import SettingsLoader

    settings = SettingsLoader().load(event.seating_settings)
    settings.seats_per_table
"""

from __future__ import annotations

from .errors import ConfigError, UnknownKeyError, ValidationError
from .loader import SeatingSettings, SettingsLoader
from .schema import FOREIGN_KEYS, SETTINGS_SCHEMA, get_schema_key
from .types import ConfigKey, ConfigType

__all__ = [
    "SettingsLoader",
    "SeatingSettings",
    "ConfigError",
    "UnknownKeyError",
    "ValidationError",
    "SETTINGS_SCHEMA",
    "FOREIGN_KEYS",
    "ConfigKey",
    "ConfigType",
    "get_schema_key",
]
