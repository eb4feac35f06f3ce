"""
SettingsLoader - turns an event's stored seating settings into SeatingSettings.

Settings are validated and defaulted exactly once per run. Environment
variables named ``SEATING_<KEY>`` (e.g. ``SEATING_MAXTABLESPERRUN``) override
stored values, which is how operators tighten safety bounds without touching
event data.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from seating.models import AdjacencyPolicy

from .errors import UnknownKeyError, ValidationError
from .schema import FOREIGN_KEYS, SETTINGS_SCHEMA
from .types import ConfigType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeatingSettings:
    """Validated per-event seating settings with every default applied."""

    seats_per_table: int = 12
    adjacency_policy: AdjacencyPolicy = AdjacencyPolicy.FORBID_SAME_TABLE_ONLY
    kids_table_enabled: bool = False
    kids_table_min_count: int = 6
    kids_table_name: str = "שולחן ילדים"
    avoid_singles_alone: bool = True
    couple_heavy_ratio: float = 0.5
    couple_heavy_max_singles: int = 1
    zone_placement_enabled: bool = False
    max_tables_per_run: int = 500
    generic_table_label: str = "שולחן"

    @property
    def forbids_adjacent(self) -> bool:
        return self.adjacency_policy == AdjacencyPolicy.FORBID_SAME_AND_ADJACENT


class SettingsLoader:
    """
    Validating loader for seating settings.

    Usage:
        settings = SettingsLoader().load(event.seating_settings)
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def load(self, raw: Mapping[str, Any] | None) -> SeatingSettings:
        """
        Validate stored settings and apply defaults.

        Raises:
            UnknownKeyError: If a key is neither in the schema nor owned elsewhere
            ValidationError: If a value has the wrong type or is out of range
        """
        raw = raw or {}
        for key in raw:
            if key not in SETTINGS_SCHEMA and key not in FOREIGN_KEYS:
                raise UnknownKeyError(key)

        values: dict[str, Any] = {}
        for key, schema in SETTINGS_SCHEMA.items():
            env_value = self._environ.get(self._get_env_key(key))
            if env_value is not None:
                raw_value: Any = env_value
            elif raw.get(key) is not None:
                raw_value = raw[key]
            else:
                values[schema.field] = schema.default
                continue

            try:
                typed_value = self._convert_type(raw_value, schema.config_type)
            except (ValueError, TypeError) as e:
                raise ValidationError(key, f"type conversion failed - {e}") from e

            error = schema.validate(typed_value)
            if error:
                raise ValidationError(key, error)
            values[schema.field] = typed_value

        values["adjacency_policy"] = AdjacencyPolicy(values["adjacency_policy"])
        settings = SeatingSettings(**values)
        logger.debug(f"Loaded seating settings: {settings}")
        return settings

    def _get_env_key(self, key: str) -> str:
        # seatsPerTable -> SEATING_SEATSPERTABLE
        return "SEATING_" + key.upper()

    def _convert_type(self, value: Any, config_type: ConfigType) -> Any:
        """Convert a raw value to the specified type."""
        if config_type == ConfigType.INT:
            if isinstance(value, bool):
                raise TypeError(f"expected an integer, got {value!r}")
            return int(value)
        elif config_type == ConfigType.FLOAT:
            return float(value)
        elif config_type == ConfigType.BOOL:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                return value.lower() in ("true", "1", "yes", "on")
            return bool(value)
        return str(value)
