"""
Seating snapshot - the in-memory working set for one seating run.

``load_snapshot`` reads everything the engine needs for one event and
channel in a single batch and indexes it. The snapshot is owned by exactly
one run: every placement, new table and renumbering is applied here first
and only written back to the store by ``persistence.WritePlan``.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

import networkx as nx

from seating.config import SeatingSettings, SettingsLoader
from seating.errors import EventNotFoundError
from seating.models import (
    Channel,
    Event,
    Guest,
    GuestGroup,
    PreferenceType,
    SeatAssignment,
    SeatingPreference,
    Table,
    TableType,
)

from .group_keys import UNGROUPED, ByFamilyLabel, ByGroupId, GroupKey, resolve_group_key

logger = logging.getLogger(__name__)


def new_record_id() -> str:
    """15-character id in the same shape as PocketBase record ids."""
    return uuid.uuid4().hex[:15]


@dataclass
class SeatingSnapshot:
    """Indexed, mutable view of one event's seating state."""

    event: Event
    channel: Channel
    settings: SeatingSettings
    guests: dict[str, Guest]
    tables: dict[str, Table]
    groups: dict[str, GuestGroup]
    priority_by_group_name: dict[str, int]
    preferences: list[SeatingPreference]
    adjacency: nx.Graph
    assignments: dict[str, SeatAssignment] = field(default_factory=dict)
    table_keys: dict[str, GroupKey | None] = field(default_factory=dict)
    initial_numbers: dict[str, int] = field(default_factory=dict)
    new_table_ids: list[str] = field(default_factory=list)
    loaded_assignment_ids: set[str] = field(default_factory=set)
    cleared_assignment_ids: list[str] = field(default_factory=list)
    cleared_table_ids: set[str] = field(default_factory=set)
    other_channel_table_ids: set[str] = field(default_factory=set)
    moved_assignments: list[tuple[str, str, str]] = field(default_factory=list)  # (guest, from, to)
    _by_table: dict[str, dict[str, SeatAssignment]] = field(default_factory=lambda: defaultdict(dict))
    _by_guest: dict[str, dict[str, SeatAssignment]] = field(default_factory=lambda: defaultdict(dict))

    # ------------------------------------------------------------------
    # Preference indexes
    # ------------------------------------------------------------------

    def apart_preferences(self, guest_id: str) -> list[SeatingPreference]:
        return [
            p
            for p in self.preferences
            if p.type == PreferenceType.APART and guest_id in (p.guest_a_id, p.guest_b_id)
        ]

    def together_preferences(self, guest_id: str | None = None) -> list[SeatingPreference]:
        return [
            p
            for p in self.preferences
            if p.type == PreferenceType.TOGETHER and (guest_id is None or guest_id in (p.guest_a_id, p.guest_b_id))
        ]

    # ------------------------------------------------------------------
    # Assignment queries
    # ------------------------------------------------------------------

    def assignments_at(self, table_id: str) -> list[SeatAssignment]:
        return list(self._by_table.get(table_id, {}).values())

    def assignments_of(self, guest_id: str) -> list[SeatAssignment]:
        return list(self._by_guest.get(guest_id, {}).values())

    def occupied_seats(self, table_id: str) -> int:
        return sum(a.seats for a in self._by_table.get(table_id, {}).values())

    def free_seats(self, table_id: str) -> int:
        return self.tables[table_id].capacity - self.occupied_seats(table_id)

    def seats_held(self, guest_id: str) -> int:
        return sum(a.seats for a in self._by_guest.get(guest_id, {}).values())

    def guests_at(self, table_id: str) -> list[str]:
        """Distinct guest ids at a table, in assignment order."""
        return list(dict.fromkeys(a.guest_id for a in self._by_table.get(table_id, {}).values()))

    def tables_of(self, guest_id: str) -> set[str]:
        return {a.table_id for a in self._by_guest.get(guest_id, {}).values()}

    def is_kids_table(self, table_id: str) -> bool:
        table = self.tables.get(table_id)
        return table is not None and table.table_type == TableType.KIDS

    def apart_tables_of(self, guest_id: str) -> set[str]:
        """Tables that count for apart rules; a children's table seats the children, not the guest."""
        return {tid for tid in self.tables_of(guest_id) if not self.is_kids_table(tid)}

    # ------------------------------------------------------------------
    # Assignment mutation
    # ------------------------------------------------------------------

    def add_assignment(self, table_id: str, guest_id: str, seats: int) -> SeatAssignment:
        """Seat ``seats`` of a guest at a table, merging with a row created this run."""
        for existing in self._by_table.get(table_id, {}).values():
            if existing.guest_id == guest_id and existing.id not in self.loaded_assignment_ids:
                existing.seats += seats
                return existing
        assignment = SeatAssignment(
            id=new_record_id(),
            event_id=self.event.id,
            table_id=table_id,
            guest_id=guest_id,
            seats=seats,
            channel=self.channel,
        )
        self._index(assignment)
        return assignment

    def clear_assignment(self, assignment_id: str) -> SeatAssignment:
        """Drop an assignment; rows that were loaded are deleted on flush."""
        assignment = self.assignments.pop(assignment_id)
        self._by_table[assignment.table_id].pop(assignment_id, None)
        self._by_guest[assignment.guest_id].pop(assignment_id, None)
        if assignment_id in self.loaded_assignment_ids:
            self.cleared_assignment_ids.append(assignment_id)
            self.cleared_table_ids.add(assignment.table_id)
        return assignment

    def move_assignment(self, assignment_id: str, to_table_id: str) -> None:
        assignment = self.assignments[assignment_id]
        from_table_id = assignment.table_id
        self._by_table[from_table_id].pop(assignment_id, None)
        assignment.table_id = to_table_id
        self._by_table[to_table_id][assignment_id] = assignment
        # The store moves all of a guest's rows at a table in one call
        move = (assignment.guest_id, from_table_id, to_table_id)
        if assignment_id in self.loaded_assignment_ids and move not in self.moved_assignments:
            self.moved_assignments.append(move)

    def new_assignments(self) -> list[SeatAssignment]:
        return [a for a in self.assignments.values() if a.id not in self.loaded_assignment_ids]

    def _index(self, assignment: SeatAssignment) -> None:
        self.assignments[assignment.id] = assignment
        self._by_table[assignment.table_id][assignment.id] = assignment
        self._by_guest[assignment.guest_id][assignment.id] = assignment

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def adjacent_tables(self, table_id: str) -> set[str]:
        """Explicitly adjacent tables, else tables numbered one above or below."""
        if table_id in self.adjacency and self.adjacency.degree(table_id) > 0:
            return set(self.adjacency.neighbors(table_id))
        table = self.tables.get(table_id)
        if table is None:
            return set()
        return {t.id for t in self.tables.values() if abs(t.number - table.number) == 1}

    def tables_for_key(self, key: GroupKey) -> list[Table]:
        """Tables in a group's pool, ordered by number."""
        return sorted(
            (self.tables[tid] for tid, k in self.table_keys.items() if k == key and tid in self.tables),
            key=lambda t: t.number,
        )

    def group_name(self, key: GroupKey) -> str | None:
        if isinstance(key, ByGroupId):
            group = self.groups.get(key.group_id)
            return group.name if group else key.group_id
        if isinstance(key, ByFamilyLabel):
            return key.label
        return None

    def group_priority(self, key: GroupKey) -> int:
        """Priority of a group (0 when unranked); name-level priorities win."""
        name = self.group_name(key)
        if name is not None and self.priority_by_group_name.get(name):
            return self.priority_by_group_name[name]
        if isinstance(key, ByGroupId) and key.group_id in self.groups:
            return max(0, self.groups[key.group_id].priority)
        return 0

    def next_cluster_index(self, key: GroupKey) -> int:
        indexes = [t.cluster_index or 0 for t in self.tables_for_key(key)]
        return max(indexes, default=0) + 1

    def max_table_number(self) -> int:
        return max((t.number for t in self.tables.values()), default=0)

    def number_taken(self, number: int) -> Table | None:
        for table in self.tables.values():
            if table.number == number:
                return table
        return None

    def add_table(self, table: Table, key: GroupKey | None) -> Table:
        """Register a table created during this run."""
        if self.number_taken(table.number) is not None:
            raise ValueError(f"Table number {table.number} already in use")
        self.tables[table.id] = table
        self.table_keys[table.id] = key
        self.new_table_ids.append(table.id)
        return table

    def make_room_at(self, number: int) -> int:
        """Free ``number`` by shifting the contiguous run of tables above it.

        Pinned tables never move. A slot held by a pinned table is skipped,
        and each unpinned table in the run moves to the next slot not held
        by a pinned table. Returns the number that is now free.
        """
        while (table := self.number_taken(number)) is not None and table.is_pinned:
            number += 1

        movable: list[Table] = []
        current = number
        while (table := self.number_taken(current)) is not None:
            if not table.is_pinned:
                movable.append(table)
            current += 1
        if not movable:
            return number

        slots = [t.number for t in movable] + [current]
        for index in reversed(range(len(movable))):
            movable[index].number = slots[index + 1]
        return number

    def apply_numbers(self, numbers: dict[str, int]) -> None:
        """Reassign several table numbers at once (a permutation of their slots)."""
        for table_id, number in numbers.items():
            self.tables[table_id].number = number

    def changed_numbers(self) -> dict[str, int]:
        """Existing tables whose number differs from what was loaded."""
        return {
            tid: self.tables[tid].number
            for tid, number in self.initial_numbers.items()
            if tid in self.tables and self.tables[tid].number != number
        }


def table_group_key(table: Table, family_labels: Iterable[str], generic_label: str) -> GroupKey | None:
    """Pool an existing table belongs to, or None when it takes no automatic placements."""
    if table.table_type == TableType.KIDS:
        return None
    if table.group_id:
        return ByGroupId(table.group_id)
    for label in sorted(family_labels, key=len, reverse=True):
        if table.name.startswith(label):
            return ByFamilyLabel(label)
    if table.is_auto or table.name.startswith(generic_label):
        return UNGROUPED
    return None


def load_snapshot(
    store,
    event_id: str,
    channel: Channel,
    settings_loader: SettingsLoader | None = None,
) -> SeatingSnapshot:
    """Read one event's seating state and build the indexed snapshot.

    Raises:
        EventNotFoundError: If the event does not exist
        ConfigError: If the event's stored settings are invalid
    """
    event = store.read_event(event_id)
    if event is None:
        raise EventNotFoundError(event_id)

    settings = (settings_loader or SettingsLoader()).load(event.seating_settings)

    guests = store.read_guests(event_id)
    tables = store.read_tables(event_id)
    assignments = store.read_assignments(event_id, channel)
    other_channel = Channel.SIMULATION if channel == Channel.REAL else Channel.REAL
    other_channel_table_ids = {a.table_id for a in store.read_assignments(event_id, other_channel)}
    preferences = [p for p in store.read_preferences(event_id) if p.enabled]
    adjacency_rows = store.read_adjacency(event_id)
    groups = store.read_groups(event_id)
    priorities = store.read_group_priorities(event_id)

    graph = nx.Graph()
    for row in adjacency_rows:
        if row.table_id != row.adjacent_table_id:
            graph.add_edge(row.table_id, row.adjacent_table_id)

    family_labels = {
        key.label for key in (resolve_group_key(g) for g in guests) if isinstance(key, ByFamilyLabel)
    }

    snapshot = SeatingSnapshot(
        event=event,
        channel=channel,
        settings=settings,
        guests={g.id: g for g in guests},
        tables={t.id: t for t in tables},
        groups={g.id: g for g in groups},
        priority_by_group_name={p.group_name: p.priority for p in priorities},
        preferences=preferences,
        adjacency=graph,
        other_channel_table_ids=other_channel_table_ids,
    )
    for table in tables:
        snapshot.table_keys[table.id] = table_group_key(table, family_labels, settings.generic_table_label)
        snapshot.initial_numbers[table.id] = table.number
    for assignment in assignments:
        if assignment.table_id in snapshot.tables:
            snapshot._index(assignment)
            snapshot.loaded_assignment_ids.add(assignment.id)
        else:
            logger.warning(f"Ignoring assignment {assignment.id} on unknown table {assignment.table_id}")

    logger.info(
        f"Loaded snapshot: {len(guests)} guests, {len(tables)} tables, "
        f"{len(assignments)} {channel.value} assignments, {len(preferences)} preferences"
    )
    return snapshot
