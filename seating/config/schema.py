"""Seating settings schema registry.

Every setting the engine reads is defined here with its default. Defaults
are applied once, when an event's settings are loaded - nothing downstream
falls back to inline literals.
"""

from __future__ import annotations

from .types import ConfigKey, ConfigType

SETTINGS_SCHEMA: dict[str, ConfigKey] = {
    # =========================================================================
    # TABLE SIZING
    # =========================================================================
    "seatsPerTable": ConfigKey(
        key="seatsPerTable",
        field="seats_per_table",
        config_type=ConfigType.INT,
        default=12,
        description="Capacity of tables the engine creates",
        min_value=1,
        max_value=20,
    ),
    # =========================================================================
    # APART PREFERENCES
    # =========================================================================
    "adjacencyPolicy": ConfigKey(
        key="adjacencyPolicy",
        field="adjacency_policy",
        config_type=ConfigType.STRING,
        default="forbidSameTableOnly",
        description="Whether 'apart' pairs may sit at neighbouring tables",
        allowed_values=("forbidSameTableOnly", "forbidSameAndAdjacent"),
    ),
    # =========================================================================
    # CHILDREN'S TABLE
    # =========================================================================
    "enableKidsTable": ConfigKey(
        key="enableKidsTable",
        field="kids_table_enabled",
        config_type=ConfigType.BOOL,
        default=False,
        description="Seat children together at a shared kids table",
    ),
    "kidsTableMinCount": ConfigKey(
        key="kidsTableMinCount",
        field="kids_table_min_count",
        config_type=ConfigType.INT,
        default=6,
        description="Minimum number of children before a kids table is used",
        min_value=1,
    ),
    "kidsTableName": ConfigKey(
        key="kidsTableName",
        field="kids_table_name",
        config_type=ConfigType.STRING,
        default="שולחן ילדים",
        description="Display name of a kids table created by the engine",
    ),
    # =========================================================================
    # SINGLES PLACEMENT
    # =========================================================================
    "avoidSinglesAlone": ConfigKey(
        key="avoidSinglesAlone",
        field="avoid_singles_alone",
        config_type=ConfigType.BOOL,
        default=True,
        description="Avoid seating a single as the only single at a couples table",
    ),
    "coupleHeavyRatio": ConfigKey(
        key="coupleHeavyRatio",
        field="couple_heavy_ratio",
        config_type=ConfigType.FLOAT,
        default=0.5,
        description="Share of couples at which a table counts as couple-heavy",
        min_value=0.0,
        max_value=1.0,
    ),
    "coupleHeavyMaxSingles": ConfigKey(
        key="coupleHeavyMaxSingles",
        field="couple_heavy_max_singles",
        config_type=ConfigType.INT,
        default=1,
        description="Most singles a table may hold and still count as couple-heavy",
        min_value=0,
    ),
    # =========================================================================
    # HALL ZONES
    # =========================================================================
    "enableZonePlacement": ConfigKey(
        key="enableZonePlacement",
        field="zone_placement_enabled",
        config_type=ConfigType.BOOL,
        default=False,
        description="Bias placement towards each guest's preferred hall zone",
    ),
    # =========================================================================
    # TABLE CREATION
    # =========================================================================
    "maxTablesPerRun": ConfigKey(
        key="maxTablesPerRun",
        field="max_tables_per_run",
        config_type=ConfigType.INT,
        default=500,
        description="Safety bound on tables created by one run",
        min_value=1,
    ),
    "genericTableLabel": ConfigKey(
        key="genericTableLabel",
        field="generic_table_label",
        config_type=ConfigType.STRING,
        default="שולחן",
        description="Name prefix for tables that belong to no group",
    ),
}

# Stored on the same settings document but owned by other collaborators
FOREIGN_KEYS: frozenset[str] = frozenset({"mode", "autoRecalcPolicy", "simulationEnabled", "kidsTableMinAge"})


def get_schema_key(key: str) -> ConfigKey | None:
    """Get the schema definition for a setting, or None if unknown."""
    return SETTINGS_SCHEMA.get(key)
