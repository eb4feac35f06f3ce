"""
Automatic seating - entry points for a full or group-only seating run.

Pipeline for one run:
    load snapshot -> clear previous automatic layout -> release seats on
    over-capacity tables -> renumber by priority
    -> children's table -> cross-group "together" pairs -> per-group placement
    -> overflow repair -> empty-table cleanup -> flush -> verification

Constraint failures come back as conflicts on the result. Fatal problems
(unknown event, invalid settings, storage failures, table bound hit) come
back as ``success=False`` with an error message.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from seating.config import ConfigError, SettingsLoader
from seating.errors import EventNotFoundError, SeatingError
from seating.logging_config import event_context
from seating.models import (
    AutoSeatingResult,
    Channel,
    ConflictType,
    Guest,
    RecalcStrategy,
    TableSummary,
    TableSummaryEntry,
)
from seating.store.base import SeatingStore

from .group_keys import ByGroupId, GroupKey, resolve_group_key
from .kids_table import allocate_kids_table, find_kids_table
from .overflow import resolve_overflow
from .persistence import WritePlan
from .placement import PlacementEngine
from .run_log import PlacementLog
from .sequencer import order_groups, renumber_by_priority
from .snapshot import SeatingSnapshot, load_snapshot
from .together import seat_together_pairs
from .verification import verify

logger = logging.getLogger(__name__)


def run_auto_seating(
    store: SeatingStore,
    event_id: str,
    channel: Channel | str = Channel.REAL,
    strategy: RecalcStrategy | str = RecalcStrategy.ALL,
    group_id: str | None = None,
    settings_loader: SettingsLoader | None = None,
) -> AutoSeatingResult:
    """Seat every guest of an event (or of one group) on the given channel."""
    channel = Channel(channel)
    strategy = RecalcStrategy(strategy)
    if strategy == RecalcStrategy.GROUP_ONLY and not group_id:
        return AutoSeatingResult.failure("groupId is required for group-only recalculation")

    with event_context(event_id):
        try:
            return _run(store, event_id, channel, strategy, group_id, settings_loader)
        except (SeatingError, ConfigError) as e:
            logger.exception(f"Auto seating failed: {e}")
            return AutoSeatingResult.failure(str(e))
        except Exception as e:
            logger.exception(f"Auto seating failed with unexpected error: {e}")
            return AutoSeatingResult.failure(str(e) or e.__class__.__name__)


def recalculate_group_seating(
    store: SeatingStore,
    event_id: str,
    group_id: str,
    channel: Channel | str = Channel.REAL,
) -> AutoSeatingResult:
    """Re-run seating for one group's guests and tables only."""
    return run_auto_seating(store, event_id, channel, RecalcStrategy.GROUP_ONLY, group_id=group_id)


def _run(
    store: SeatingStore,
    event_id: str,
    channel: Channel,
    strategy: RecalcStrategy,
    group_id: str | None,
    settings_loader: SettingsLoader | None,
) -> AutoSeatingResult:
    run_log = PlacementLog()
    snapshot = load_snapshot(store, event_id, channel, settings_loader)
    full_run = strategy == RecalcStrategy.ALL

    if full_run:
        scope_guests = list(snapshot.guests.values())
        scope_tables = set(snapshot.tables)
    else:
        scope_key = ByGroupId(group_id)  # type: ignore[arg-type]
        scope_guests = [g for g in snapshot.guests.values() if g.group_id == group_id]
        scope_tables = {t.id for t in snapshot.tables_for_key(scope_key)}
    scope_guest_ids = {g.id for g in scope_guests}

    run_log.log_progress(
        f"Starting {strategy.value} run on {channel.value}: "
        f"{len(scope_guests)} guests, {len(scope_tables)} tables in scope"
    )

    _clear_previous_layout(snapshot, scope_tables, None if full_run else scope_guest_ids)
    _release_overfull_seats(snapshot, scope_guest_ids)

    # Requirements of unlocked guests, net of seats they still hold
    required: dict[str, int] = {}
    remaining: dict[str, int] = {}
    for guest in scope_guests:
        if guest.is_locked:
            continue
        seats = guest.seats_required(channel)
        if seats <= 0:
            continue
        required[guest.id] = seats
        remaining[guest.id] = max(0, seats - snapshot.seats_held(guest.id))

    guest_keys: dict[str, GroupKey] = {g.id: resolve_group_key(g) for g in scope_guests}
    known_keys = set(guest_keys.values()) | {k for k in snapshot.table_keys.values() if k is not None}
    group_order = order_groups(snapshot, known_keys)

    if full_run:
        renumber_by_priority(snapshot)

    ordered_guests = _guests_in_order(snapshot, scope_guests, required, guest_keys, group_order)

    if full_run:
        allocate_kids_table(snapshot, ordered_guests, remaining, run_log)

    engine = PlacementEngine(snapshot, group_order, run_log)
    processed: set[str] = set()
    if full_run:
        eligible = {g.id: g for g in ordered_guests}
        pairs = seat_together_pairs(snapshot, engine, eligible, remaining, processed)
        if pairs:
            run_log.log_progress(f"Seated {pairs} cross-group together pairs")

    for guest in ordered_guests:
        if guest.id in processed or remaining.get(guest.id, 0) <= 0:
            continue
        remaining[guest.id] -= engine.place(guest, remaining[guest.id], guest_keys[guest.id])
        processed.add(guest.id)

    warnings = resolve_overflow(snapshot, run_log)

    empty_tables = [
        tid
        for tid, table in snapshot.tables.items()
        if table.is_auto and not table.locked and snapshot.occupied_seats(tid) == 0
        and tid not in snapshot.other_channel_table_ids
        and (full_run or tid in scope_tables or tid in snapshot.new_table_ids)
    ]

    stats = WritePlan(snapshot, empty_tables).flush(store)
    for table_id in empty_tables:
        snapshot.tables.pop(table_id, None)
        snapshot.table_keys.pop(table_id, None)

    conflicts = verify(snapshot, required, scope_guest_ids)
    success = not any(c.type == ConflictType.NO_AVAILABLE_TABLE for c in conflicts)

    run_log.log_progress(
        f"Finished: {stats.assignments_created} assignments, {stats.tables_created} tables created, "
        f"{stats.tables_deleted} deleted, {len(conflicts)} conflicts"
    )
    if run_log.debug_mode:
        run_log.save_to_file(event_id, channel.value)

    return AutoSeatingResult(
        success=success,
        assignments_created=stats.assignments_created,
        tables_created=stats.tables_created - stats.tables_deleted,
        conflicts=conflicts,
        warnings=warnings,
    )


def _clear_previous_layout(
    snapshot: SeatingSnapshot,
    scope_tables: set[str],
    scope_guest_ids: set[str] | None,
) -> None:
    """Drop unlocked guests' seats at unlocked auto tables in scope.

    ``scope_guest_ids`` limits clearing to one group's guests; None clears
    everyone and also empties a reusable children's table.
    """
    clearable = {tid for tid in scope_tables if snapshot.tables[tid].is_auto and not snapshot.tables[tid].locked}
    if scope_guest_ids is None and snapshot.settings.kids_table_enabled:
        kids_table = find_kids_table(snapshot)
        if kids_table is not None:
            clearable.add(kids_table.id)

    cleared = 0
    for assignment in list(snapshot.assignments.values()):
        if assignment.table_id not in clearable:
            continue
        guest = snapshot.guests.get(assignment.guest_id)
        if guest is not None and guest.is_locked:
            continue
        if scope_guest_ids is not None and assignment.guest_id not in scope_guest_ids:
            continue
        snapshot.clear_assignment(assignment.id)
        cleared += 1
    logger.debug(f"Cleared {cleared} assignments from {len(clearable)} tables")


def _release_overfull_seats(snapshot: SeatingSnapshot, scope_guest_ids: set[str]) -> None:
    """Clear unlocked guests off unlocked tables that hold more than their capacity.

    Those guests are then seated again through their own group's pool, so
    the repair looks the same on every later run.
    """
    released = 0
    for table in sorted(snapshot.tables.values(), key=lambda t: t.number):
        if table.locked or snapshot.occupied_seats(table.id) <= table.capacity:
            continue
        for assignment in snapshot.assignments_at(table.id):
            guest = snapshot.guests.get(assignment.guest_id)
            if guest is None or guest.is_locked or guest.id not in scope_guest_ids:
                continue
            snapshot.clear_assignment(assignment.id)
            released += 1
    if released:
        logger.info(f"Released {released} assignments from over-capacity tables")


def _guests_in_order(
    snapshot: SeatingSnapshot,
    guests: list[Guest],
    required: dict[str, int],
    guest_keys: dict[str, GroupKey],
    group_order: list[GroupKey],
) -> list[Guest]:
    """Unlocked guests needing seats: groups in processing order, then creation order."""
    by_key: dict[GroupKey, list[Guest]] = defaultdict(list)
    for guest in guests:
        if guest.id in required:
            by_key[guest_keys[guest.id]].append(guest)

    ordered: list[Guest] = []
    for key in group_order:
        ordered.extend(sorted(by_key.get(key, []), key=lambda g: (g.created_at, g.id)))
    return ordered


def get_seating_assignments(
    store: SeatingStore,
    event_id: str,
    channel: Channel | str = Channel.REAL,
) -> list[TableSummary]:
    """Per-table view of the current assignments on a channel.

    Raises:
        EventNotFoundError: If the event does not exist
    """
    channel = Channel(channel)
    if store.read_event(event_id) is None:
        raise EventNotFoundError(event_id)

    tables = sorted(store.read_tables(event_id), key=lambda t: t.number)
    assignments = store.read_assignments(event_id, channel)
    guests = {g.id: g for g in store.read_guests(event_id)}
    groups = {g.id: g for g in store.read_groups(event_id)}

    tables_by_guest: dict[str, set[str]] = defaultdict(set)
    for assignment in assignments:
        tables_by_guest[assignment.guest_id].add(assignment.table_id)

    summaries = []
    for table in tables:
        entries = [
            TableSummaryEntry(
                guest_id=a.guest_id,
                guest_name=guests[a.guest_id].name if a.guest_id in guests else a.guest_id,
                seats=a.seats,
                is_split=len(tables_by_guest[a.guest_id]) > 1,
            )
            for a in assignments
            if a.table_id == table.id
        ]
        occupied = sum(e.seats for e in entries)
        group = groups.get(table.group_id) if table.group_id else None
        summaries.append(
            TableSummary(
                table_id=table.id,
                table_name=table.name,
                table_number=table.number,
                capacity=table.capacity,
                group_name=group.name if group else None,
                assignments=entries,
                occupied_seats=occupied,
                free_seats=max(0, table.capacity - occupied),
            )
        )
    return summaries
