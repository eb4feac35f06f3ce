"""
Seating - automatic table allocation for event guests.

This package contains:
- models: Domain models (Guest, Table, SeatAssignment, preferences, results)
- config: Per-event seating settings with validation and defaults
- store: Storage collaborators (PocketBase, in-memory)
- engine: The allocation engine and its entry points
- cli: Command-line entry point
"""

from seating.engine import get_seating_assignments, recalculate_group_seating, run_auto_seating
from seating.models import AutoSeatingResult, Channel, RecalcStrategy, SeatingConflict

__all__ = [
    "AutoSeatingResult",
    "Channel",
    "RecalcStrategy",
    "SeatingConflict",
    "get_seating_assignments",
    "recalculate_group_seating",
    "run_auto_seating",
]
