"""
Seating engine - deterministic, greedy table allocation.

This package contains:
- auto_seating: Entry points (run, group-only recalculation, read-only summary)
- snapshot: One run's indexed working set
- oracle / placement: Per-guest placement rules and the placement loop
- sequencer: Group order, priority renumbering, stable two-phase renumbering
- kids_table / together / overflow: Special passes around the main loop
- verification: Conflict reporting
- persistence: Ordered write-back to the store
"""

from .auto_seating import get_seating_assignments, recalculate_group_seating, run_auto_seating
from .group_keys import UNGROUPED, ByFamilyLabel, ByGroupId, GroupKey, Ungrouped, resolve_group_key
from .run_log import PlacementLog
from .snapshot import SeatingSnapshot, load_snapshot

__all__ = [
    "run_auto_seating",
    "recalculate_group_seating",
    "get_seating_assignments",
    "load_snapshot",
    "SeatingSnapshot",
    "PlacementLog",
    # Group keys
    "ByGroupId",
    "ByFamilyLabel",
    "Ungrouped",
    "UNGROUPED",
    "GroupKey",
    "resolve_group_key",
]
