"""
Shared factories for seating engine unit tests.

Builds guests, tables and preferences with sensible defaults and loads
them into an InMemorySeatingStore, so each test states only what matters.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from seating.config import SettingsLoader
from seating.engine import load_snapshot, run_auto_seating
from seating.engine.run_log import PlacementLog
from seating.engine.snapshot import SeatingSnapshot
from seating.models import (
    AutoSeatingResult,
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
from seating.store import InMemorySeatingStore

EVENT_ID = "event-1"

BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


def create_guest(
    guest_id: str,
    name: str | None = None,
    adults: int = 1,
    children: int = 0,
    rsvp: str = "confirmed",
    group_id: str | None = None,
    family_group: str | None = None,
    guest_type: str | None = None,
    locked_seat: bool = False,
    locked_table_id: str | None = None,
    zone_preference: str | None = None,
    expected_party_size: int | None = None,
    invited_count: int = 1,
    created_offset: int = 0,
) -> Guest:
    """Create a test guest; ``created_offset`` is minutes after BASE_TIME."""
    return Guest(
        id=guest_id,
        name=name or guest_id,
        rsvp_status=rsvp,
        adults_attending=adults,
        children_attending=children,
        expected_party_size=expected_party_size,
        invited_count=invited_count,
        group_id=group_id,
        family_group=family_group,
        guest_type=guest_type,
        locked_seat=locked_seat,
        locked_table_id=locked_table_id,
        zone_preference=zone_preference,
        created_at=BASE_TIME + timedelta(minutes=created_offset),
    )


def create_table(
    table_id: str,
    number: int,
    capacity: int = 10,
    name: str | None = None,
    mode: str = "auto",
    group_id: str | None = None,
    locked: bool = False,
    table_type: str = "mixed",
    zone: str = "general",
    cluster_index: int | None = None,
) -> Table:
    """Create a test table; auto mode unless stated otherwise."""
    return Table(
        id=table_id,
        event_id=EVENT_ID,
        name=name or f"שולחן {number}",
        number=number,
        capacity=capacity,
        table_type=table_type,
        mode=mode,
        group_id=group_id,
        cluster_index=cluster_index,
        locked=locked,
        zone=zone,
    )


def create_assignment(
    table_id: str,
    guest_id: str,
    seats: int,
    channel: str = "real",
    assignment_id: str | None = None,
) -> SeatAssignment:
    return SeatAssignment(
        id=assignment_id or f"a-{guest_id}-{table_id}",
        event_id=EVENT_ID,
        table_id=table_id,
        guest_id=guest_id,
        seats=seats,
        channel=channel,
    )


def create_preference(
    pref_id: str,
    guest_a: str,
    guest_b: str,
    pref_type: str = "apart",
    scope: str = "sameTable",
    strength: str = "prefer",
) -> SeatingPreference:
    """Create a test seating preference between two guests."""
    return SeatingPreference(
        id=pref_id,
        guest_a_id=guest_a,
        guest_b_id=guest_b,
        type=pref_type,
        scope=scope,
        strength=strength,
    )


def create_group(group_id: str, name: str, priority: int = 0) -> GuestGroup:
    return GuestGroup(id=group_id, name=name, priority=priority)


def build_store(
    guests: Sequence[Guest] = (),
    tables: Sequence[Table] = (),
    assignments: Sequence[SeatAssignment] = (),
    preferences: Sequence[SeatingPreference] = (),
    adjacency: Sequence[tuple[str, str]] = (),
    groups: Sequence[GuestGroup] = (),
    group_priorities: dict[str, int] | None = None,
    settings: dict[str, Any] | None = None,
) -> InMemorySeatingStore:
    """Build an in-memory store holding one event."""
    store = InMemorySeatingStore()
    store.add_event(
        Event(id=EVENT_ID, name="Test Wedding", seating_settings=settings or {}),
        guests=guests,
        tables=tables,
        assignments=assignments,
        preferences=preferences,
        adjacency=[TableAdjacency(table_id=a, adjacent_table_id=b) for a, b in adjacency],
        groups=groups,
        group_priorities=[GroupPriority(group_name=n, priority=p) for n, p in (group_priorities or {}).items()],
    )
    return store


def build_snapshot(channel: Channel = Channel.REAL, **store_kwargs: Any) -> SeatingSnapshot:
    """Build a store with ``build_store`` and load its snapshot."""
    store = build_store(**store_kwargs)
    return load_snapshot(store, EVENT_ID, channel, SettingsLoader(environ={}))


def run_seating(store: InMemorySeatingStore, channel: str = "real", **kwargs: Any) -> AutoSeatingResult:
    """Run auto seating with settings isolated from the environment."""
    return run_auto_seating(store, EVENT_ID, channel, settings_loader=SettingsLoader(environ={}), **kwargs)


def seats_by_table(store: InMemorySeatingStore, channel: Channel = Channel.REAL) -> dict[str, int]:
    """Occupied seats per table id."""
    occupied: dict[str, int] = {}
    for assignment in store.read_assignments(EVENT_ID, channel):
        occupied[assignment.table_id] = occupied.get(assignment.table_id, 0) + assignment.seats
    return occupied


def seats_by_guest(store: InMemorySeatingStore, channel: Channel = Channel.REAL) -> dict[str, int]:
    held: dict[str, int] = {}
    for assignment in store.read_assignments(EVENT_ID, channel):
        held[assignment.guest_id] = held.get(assignment.guest_id, 0) + assignment.seats
    return held


def tables_of_guest(store: InMemorySeatingStore, guest_id: str, channel: Channel = Channel.REAL) -> set[str]:
    return {a.table_id for a in store.read_assignments(EVENT_ID, channel) if a.guest_id == guest_id}


def assert_capacity_respected(store: InMemorySeatingStore, channel: Channel = Channel.REAL) -> None:
    """No table holds more seats than its capacity."""
    occupied = seats_by_table(store, channel)
    for table in store.read_tables(EVENT_ID):
        assert occupied.get(table.id, 0) <= table.capacity, (
            f"Table {table.name} holds {occupied.get(table.id, 0)} seats but has capacity {table.capacity}"
        )


def assert_unique_numbers(store: InMemorySeatingStore) -> None:
    numbers = [t.number for t in store.read_tables(EVENT_ID)]
    assert len(numbers) == len(set(numbers)), f"Duplicate table numbers: {sorted(numbers)}"


@pytest.fixture
def run_log() -> PlacementLog:
    """A placement log that never writes files."""
    return PlacementLog(debug_mode=False)
