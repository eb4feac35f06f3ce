"""Storage collaborator interface consumed by the seating engine.

Implementations own persistence. The engine reads one snapshot per run,
then writes back in a fixed order; it never assumes the store is
transactional across calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from seating.models import (
    Channel,
    Event,
    GroupPriority,
    Guest,
    GuestGroup,
    SeatAssignment,
    SeatingPreference,
    Table,
    TableAdjacency,
)


class SeatingStore(Protocol):
    """Read/write operations the engine needs from the storage layer."""

    # Reads
    def read_event(self, event_id: str) -> Event | None: ...

    def read_guests(self, event_id: str) -> list[Guest]: ...

    def read_tables(self, event_id: str) -> list[Table]: ...

    def read_assignments(self, event_id: str, channel: Channel) -> list[SeatAssignment]: ...

    def read_preferences(self, event_id: str) -> list[SeatingPreference]: ...

    def read_adjacency(self, event_id: str) -> list[TableAdjacency]: ...

    def read_groups(self, event_id: str) -> list[GuestGroup]: ...

    def read_group_priorities(self, event_id: str) -> list[GroupPriority]: ...

    # Writes
    def create_table(self, table: Table) -> Table: ...

    def update_table_number(self, table_id: str, number: int) -> None: ...

    def delete_tables(self, table_ids: Sequence[str]) -> None: ...

    def bulk_insert_assignments(self, rows: Sequence[SeatAssignment]) -> None: ...

    def delete_assignments(self, event_id: str, channel: Channel, assignment_ids: Sequence[str]) -> None: ...

    def move_assignment(self, guest_id: str, from_table_id: str, to_table_id: str, channel: Channel) -> None: ...

    def set_table_guest_list(self, table_id: str, guest_ids: Sequence[str]) -> None: ...
