"""
Constraint Oracle - may a guest sit at a table, and how much would they like it.

``can_place`` returns one of three verdicts. Hard rejections (apart
preferences, adults at the children's table) must never be overridden;
soft rejections (a single at a couple-heavy table) only steer placement
towards other tables and are never reported to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from seating.models import Guest, GuestType, Table, TableType

from .classifier import classify
from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)

ADULTS_IN_KIDS_TABLE = "adults_in_kids_table"
APART_PREFERENCE = "apart_preference"
SINGLES_ALONE = "singles_alone"

SAME_TABLE_SCORE = 100
ADJACENT_TABLE_SCORE = 50


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class SoftRejection:
    reason: str


@dataclass(frozen=True)
class HardRejection:
    reason: str
    blocking_guest_id: str | None = None


Verdict = Allowed | SoftRejection | HardRejection

ALLOWED = Allowed()


def can_place(snapshot: SeatingSnapshot, guest: Guest, table: Table) -> Verdict:
    """Check the hard and soft placement rules for ``guest`` at ``table``."""
    if table.table_type == TableType.KIDS and guest.children_count(snapshot.channel) == 0:
        return HardRejection(ADULTS_IN_KIDS_TABLE)

    blocking = _apart_blocker(snapshot, guest, table)
    if blocking is not None:
        return HardRejection(APART_PREFERENCE, blocking_guest_id=blocking)

    settings = snapshot.settings
    if settings.avoid_singles_alone and classify(guest, snapshot.channel) == GuestType.SINGLE:
        if _would_isolate_single(snapshot, table):
            return SoftRejection(SINGLES_ALONE)

    return ALLOWED


def _apart_blocker(snapshot: SeatingSnapshot, guest: Guest, table: Table) -> str | None:
    """Id of a guest the apart rules keep away from this table, if any.

    Rows at a children's table stand for the children only and are ignored.
    """
    if snapshot.is_kids_table(table.id):
        return None
    at_table = set(snapshot.guests_at(table.id))
    adjacent: set[str] | None = None

    for pref in snapshot.apart_preferences(guest.id):
        other = pref.other(guest.id)
        if other in at_table:
            return other
        if snapshot.settings.forbids_adjacent and pref.allows_adjacent:
            if adjacent is None:
                adjacent = set()
                for adj_id in snapshot.adjacent_tables(table.id):
                    if not snapshot.is_kids_table(adj_id):
                        adjacent.update(snapshot.guests_at(adj_id))
            if other in adjacent:
                return other
    return None


def _would_isolate_single(snapshot: SeatingSnapshot, table: Table) -> bool:
    occupants = [snapshot.guests[gid] for gid in snapshot.guests_at(table.id) if gid in snapshot.guests]
    if not occupants:
        return False

    types = [classify(g, snapshot.channel) for g in occupants]
    couples = types.count(GuestType.COUPLE)
    singles = types.count(GuestType.SINGLE)

    settings = snapshot.settings
    couple_heavy = (
        couples / len(occupants) >= settings.couple_heavy_ratio and singles <= settings.couple_heavy_max_singles
    )
    return couple_heavy and singles == 0


def score(snapshot: SeatingSnapshot, guest: Guest, table: Table) -> int:
    """Affinity of a guest for a table from "together" preferences.

    +100 per partner already at the table, +50 per partner at an adjacent
    table when the preference allows adjacent credit; "must" doubles both.
    """
    prefs = snapshot.together_preferences(guest.id)
    if not prefs:
        return 0

    at_table = set(snapshot.guests_at(table.id))
    adjacent: set[str] = set()
    for adj_id in snapshot.adjacent_tables(table.id):
        adjacent.update(snapshot.guests_at(adj_id))

    total = 0
    for pref in prefs:
        other = pref.other(guest.id)
        if other in at_table:
            total += SAME_TABLE_SCORE * pref.multiplier
        elif pref.allows_adjacent and other in adjacent:
            total += ADJACENT_TABLE_SCORE * pref.multiplier
    return total
