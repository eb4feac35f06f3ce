"""
Verification & Conflict Reporter.

Checks the final layout against every guest's requirement and every
pairwise preference. Unsatisfied constraints are returned as structured
conflicts; nothing here raises.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

from seating.models import ConflictType, PreferenceStrength, PreferenceType, SeatingConflict

from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)


def _table_label(snapshot: SeatingSnapshot, table_id: str | None) -> str:
    if table_id is None or table_id not in snapshot.tables:
        return "an unknown table"
    table = snapshot.tables[table_id]
    return f"{table.name} (#{table.number})"


def _guest_name(snapshot: SeatingSnapshot, guest_id: str) -> str:
    guest = snapshot.guests.get(guest_id)
    return guest.name if guest else guest_id


def find_shortfalls(
    snapshot: SeatingSnapshot,
    required: dict[str, int],
) -> list[SeatingConflict]:
    """One conflict per unlocked guest holding fewer seats than required."""
    conflicts = []
    for guest_id, needed in required.items():
        guest = snapshot.guests[guest_id]
        if guest.is_locked or needed <= 0:
            continue
        held = snapshot.seats_held(guest_id)
        if held >= needed:
            continue
        conflicts.append(
            SeatingConflict(
                type=ConflictType.NO_AVAILABLE_TABLE,
                guest_a_id=guest.id,
                guest_a_name=guest.name,
                message=f"{guest.name} needs {needed} seats but only {held} could be assigned",
                suggested_action="Add a table or increase table capacity, then run auto seating again",
            )
        )
    return conflicts


def _shared_or_adjacent(
    snapshot: SeatingSnapshot,
    guest_a: str,
    guest_b: str,
    include_adjacent: bool,
    ignore_kids_tables: bool = False,
) -> str | None:
    """A table of ``guest_a`` that ``guest_b`` shares (or borders), if any."""
    tables_of = snapshot.apart_tables_of if ignore_kids_tables else snapshot.tables_of
    tables_a = sorted(tables_of(guest_a), key=lambda tid: snapshot.tables[tid].number)
    tables_b = tables_of(guest_b)
    for table_id in tables_a:
        if table_id in tables_b:
            return table_id
    if include_adjacent:
        for table_id in tables_a:
            if snapshot.adjacent_tables(table_id) & tables_b:
                return table_id
    return None


def find_preference_conflicts(
    snapshot: SeatingSnapshot,
    scope_guest_ids: Collection[str],
) -> list[SeatingConflict]:
    """Apart pairs seated too close, and "must" together pairs seated apart."""
    conflicts = []
    for pref in sorted(snapshot.preferences, key=lambda p: p.id):
        a, b = pref.guest_a_id, pref.guest_b_id
        if a not in scope_guest_ids and b not in scope_guest_ids:
            continue
        if not snapshot.tables_of(a) or not snapshot.tables_of(b):
            continue
        name_a, name_b = _guest_name(snapshot, a), _guest_name(snapshot, b)

        if pref.type == PreferenceType.APART:
            include_adjacent = snapshot.settings.forbids_adjacent and pref.allows_adjacent
            table_id = _shared_or_adjacent(snapshot, a, b, include_adjacent, ignore_kids_tables=True)
            if table_id is None:
                continue
            where = _table_label(snapshot, table_id)
            conflicts.append(
                SeatingConflict(
                    type=ConflictType.APART_CANNOT_SATISFY,
                    guest_a_id=a,
                    guest_a_name=name_a,
                    guest_b_id=b,
                    guest_b_name=name_b,
                    table_id=table_id,
                    message=f"{name_a} and {name_b} should sit apart but are seated at or next to {where}",
                    suggested_action="Relax the apart rule or reassign one of the guests manually",
                )
            )
        elif pref.strength == PreferenceStrength.MUST:
            if _shared_or_adjacent(snapshot, a, b, pref.allows_adjacent) is not None:
                continue
            where_a = ", ".join(_table_label(snapshot, t) for t in sorted(snapshot.tables_of(a)))
            where_b = ", ".join(_table_label(snapshot, t) for t in sorted(snapshot.tables_of(b)))
            conflicts.append(
                SeatingConflict(
                    type=ConflictType.TOGETHER_CANNOT_SATISFY,
                    guest_a_id=a,
                    guest_a_name=name_a,
                    guest_b_id=b,
                    guest_b_name=name_b,
                    message=f"{name_a} ({where_a}) and {name_b} ({where_b}) must sit together but were separated",
                    suggested_action="Free seats at one of their tables or move one guest manually",
                )
            )
    return conflicts


def verify(
    snapshot: SeatingSnapshot,
    required: dict[str, int],
    scope_guest_ids: Collection[str],
) -> list[SeatingConflict]:
    """All conflicts for the final layout: shortfalls first, then preferences."""
    conflicts = find_shortfalls(snapshot, required) + find_preference_conflicts(snapshot, scope_guest_ids)
    if conflicts:
        logger.warning(f"Verification found {len(conflicts)} conflicts")
    return conflicts
