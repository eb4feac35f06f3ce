"""In-memory SeatingStore.

Holds one or more events entirely in dictionaries. Used by the test suite,
the CLI's snapshot mode and the API when no PocketBase is configured. It
enforces the same uniqueness rule as the database index: table numbers are
unique per event at every moment.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from seating.errors import StoreError, TableNumberConflictError
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

logger = logging.getLogger(__name__)


class InMemorySeatingStore:
    """Dictionary-backed store, keyed by event id."""

    def __init__(self) -> None:
        self.events: dict[str, Event] = {}
        self.guests: dict[str, list[Guest]] = {}
        self.tables: dict[str, Table] = {}
        self.assignments: dict[str, SeatAssignment] = {}
        self.preferences: dict[str, list[SeatingPreference]] = {}
        self.adjacency: dict[str, list[TableAdjacency]] = {}
        self.groups: dict[str, list[GuestGroup]] = {}
        self.group_priorities: dict[str, list[GroupPriority]] = {}
        self.write_log: list[tuple[str, Any]] = []

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_event(
        self,
        event: Event,
        guests: Sequence[Guest] = (),
        tables: Sequence[Table] = (),
        assignments: Sequence[SeatAssignment] = (),
        preferences: Sequence[SeatingPreference] = (),
        adjacency: Sequence[TableAdjacency] = (),
        groups: Sequence[GuestGroup] = (),
        group_priorities: Sequence[GroupPriority] = (),
    ) -> None:
        """Register an event and its data."""
        self.events[event.id] = event
        self.guests[event.id] = list(guests)
        self.preferences[event.id] = list(preferences)
        self.adjacency[event.id] = list(adjacency)
        self.groups[event.id] = list(groups)
        self.group_priorities[event.id] = list(group_priorities)
        for table in tables:
            self._check_number_free(table.event_id, table.number, exclude_id=table.id)
            self.tables[table.id] = table.model_copy(deep=True)
        for assignment in assignments:
            self.assignments[assignment.id] = assignment.model_copy()

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemorySeatingStore:
        """Load a single-event snapshot file.

        The file holds an ``event`` object plus optional lists named after
        the ``add_event`` arguments.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        store = cls()
        store.add_event(
            Event.model_validate(data["event"]),
            guests=[Guest.model_validate(g) for g in data.get("guests", [])],
            tables=[Table.model_validate(t) for t in data.get("tables", [])],
            assignments=[SeatAssignment.model_validate(a) for a in data.get("assignments", [])],
            preferences=[SeatingPreference.model_validate(p) for p in data.get("preferences", [])],
            adjacency=[TableAdjacency.model_validate(a) for a in data.get("adjacency", [])],
            groups=[GuestGroup.model_validate(g) for g in data.get("groups", [])],
            group_priorities=[GroupPriority.model_validate(p) for p in data.get("group_priorities", [])],
        )
        return store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_event(self, event_id: str) -> Event | None:
        return self.events.get(event_id)

    def read_guests(self, event_id: str) -> list[Guest]:
        return [g.model_copy() for g in self.guests.get(event_id, [])]

    def read_tables(self, event_id: str) -> list[Table]:
        return [t.model_copy(deep=True) for t in self.tables.values() if t.event_id == event_id]

    def read_assignments(self, event_id: str, channel: Channel) -> list[SeatAssignment]:
        return [
            a.model_copy() for a in self.assignments.values() if a.event_id == event_id and a.channel == channel
        ]

    def read_preferences(self, event_id: str) -> list[SeatingPreference]:
        return [p for p in self.preferences.get(event_id, []) if p.enabled]

    def read_adjacency(self, event_id: str) -> list[TableAdjacency]:
        return list(self.adjacency.get(event_id, []))

    def read_groups(self, event_id: str) -> list[GuestGroup]:
        return list(self.groups.get(event_id, []))

    def read_group_priorities(self, event_id: str) -> list[GroupPriority]:
        return list(self.group_priorities.get(event_id, []))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_table(self, table: Table) -> Table:
        if table.id in self.tables:
            raise StoreError(f"Table {table.id} already exists")
        self._check_number_free(table.event_id, table.number)
        self.tables[table.id] = table.model_copy(deep=True)
        self.write_log.append(("create_table", table.id))
        return table

    def update_table_number(self, table_id: str, number: int) -> None:
        table = self._get_table(table_id)
        self._check_number_free(table.event_id, number, exclude_id=table_id)
        table.number = number
        self.write_log.append(("update_table_number", (table_id, number)))

    def delete_tables(self, table_ids: Sequence[str]) -> None:
        for table_id in table_ids:
            self.tables.pop(table_id, None)
        self.write_log.append(("delete_tables", list(table_ids)))

    def bulk_insert_assignments(self, rows: Sequence[SeatAssignment]) -> None:
        for row in rows:
            if row.table_id not in self.tables:
                raise StoreError(f"Assignment {row.id} references unknown table {row.table_id}")
            self.assignments[row.id] = row.model_copy()
        self.write_log.append(("bulk_insert_assignments", len(rows)))

    def delete_assignments(self, event_id: str, channel: Channel, assignment_ids: Sequence[str]) -> None:
        for assignment_id in assignment_ids:
            assignment = self.assignments.get(assignment_id)
            if assignment and assignment.event_id == event_id and assignment.channel == channel:
                del self.assignments[assignment_id]
        self.write_log.append(("delete_assignments", len(assignment_ids)))

    def move_assignment(self, guest_id: str, from_table_id: str, to_table_id: str, channel: Channel) -> None:
        self._get_table(to_table_id)
        moved = 0
        for assignment in self.assignments.values():
            if (
                assignment.guest_id == guest_id
                and assignment.table_id == from_table_id
                and assignment.channel == channel
            ):
                assignment.table_id = to_table_id
                moved += 1
        if not moved:
            raise StoreError(f"No assignment for guest {guest_id} at table {from_table_id}")
        self.write_log.append(("move_assignment", (guest_id, from_table_id, to_table_id)))

    def set_table_guest_list(self, table_id: str, guest_ids: Sequence[str]) -> None:
        self._get_table(table_id).guest_ids = list(guest_ids)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_table(self, table_id: str) -> Table:
        table = self.tables.get(table_id)
        if table is None:
            raise StoreError(f"Table not found: {table_id}")
        return table

    def _check_number_free(self, event_id: str, number: int, exclude_id: str | None = None) -> None:
        for other in self.tables.values():
            if other.event_id == event_id and other.number == number and other.id != exclude_id:
                raise TableNumberConflictError(event_id, number)
