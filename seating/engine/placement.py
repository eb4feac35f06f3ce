"""
Placement Engine - seats one guest's remaining requirement within its group.

For each chunk of the requirement the engine picks the best table in the
guest's pool (zone match, then lowest number), seats as many as fit, and
opens a new table for the group when nothing in the pool has room. Occupied
tables are tried before empty ones, and a soft-rejected occupied table
before an empty one. A new table goes through the same checks as any other;
one that borders an apart partner is left empty and another is opened.
"""

from __future__ import annotations

import logging

from seating.errors import TableLimitExceededError
from seating.models import Guest, Table, TableMode, TableType, Zone, ZonePreference

from .group_keys import ByGroupId, GroupKey, Ungrouped
from .oracle import Allowed, HardRejection, SoftRejection, can_place, score
from .run_log import PlacementLog
from .sequencer import insertion_number
from .snapshot import SeatingSnapshot, new_record_id

logger = logging.getLogger(__name__)


def ensure_table_budget(snapshot: SeatingSnapshot) -> None:
    limit = snapshot.settings.max_tables_per_run
    if len(snapshot.new_table_ids) >= limit:
        raise TableLimitExceededError(limit)


def open_table(
    snapshot: SeatingSnapshot,
    *,
    name: str | None,
    number: int,
    capacity: int,
    key: GroupKey | None,
    run_log: PlacementLog,
    reason: str,
    table_type: TableType = TableType.MIXED,
    cluster_index: int | None = None,
) -> Table:
    """Create an auto table in the snapshot, enforcing the per-run table bound."""
    ensure_table_budget(snapshot)

    table = Table(
        id=new_record_id(),
        event_id=snapshot.event.id,
        name=name or f"{snapshot.settings.generic_table_label} {number}",
        number=number,
        capacity=capacity,
        table_type=table_type,
        mode=TableMode.AUTO,
        group_id=key.group_id if isinstance(key, ByGroupId) else None,
        cluster_index=cluster_index,
        locked=False,
    )
    snapshot.add_table(table, key)
    run_log.log_table_created(table.name, table.number, reason)
    return table


class PlacementEngine:
    """Greedy per-guest placement against one run's snapshot."""

    def __init__(self, snapshot: SeatingSnapshot, group_order: list[GroupKey], run_log: PlacementLog) -> None:
        self.snapshot = snapshot
        self.group_order = group_order
        self.run_log = run_log

    def place(self, guest: Guest, remaining: int, key: GroupKey) -> int:
        """Seat up to ``remaining`` seats for ``guest`` in ``key``'s pool.

        Returns the number of seats placed (always ``remaining`` unless a
        table could not be opened).
        """
        placed = 0
        stale: set[str] = set()
        just_opened: Table | None = None
        while remaining > 0:
            table = self._best_candidate(guest, key, stale)
            if table is None:
                if just_opened is None:
                    just_opened = self._open_group_table(key)
                else:
                    # The new table borders an apart partner; open past the last table
                    just_opened = self._open_group_table(key, self.snapshot.max_table_number() + 1)
                continue
            just_opened = None

            free = self.snapshot.free_seats(table.id)
            if free <= 0:
                # Filled earlier in this pass; look again without it
                stale.add(table.id)
                continue

            seats = min(free, remaining)
            self.snapshot.add_assignment(table.id, guest.id, seats)
            self.run_log.log_placement(guest.name, table.name, seats)
            logger.debug(f"{guest.name} at {table.name}: affinity {score(self.snapshot, guest, table)}")
            remaining -= seats
            placed += seats
        return placed

    def _best_candidate(self, guest: Guest, key: GroupKey, stale: set[str]) -> Table | None:
        allowed: list[Table] = []
        soft: list[Table] = []
        empty: list[Table] = []
        for table in self.snapshot.tables_for_key(key):
            if table.locked or table.id in stale:
                continue
            if self.snapshot.free_seats(table.id) <= 0:
                continue
            if not self._passes_zone_filter(guest, table):
                continue

            verdict = can_place(self.snapshot, guest, table)
            if isinstance(verdict, Allowed):
                if self.snapshot.occupied_seats(table.id) > 0:
                    allowed.append(table)
                else:
                    empty.append(table)
            elif isinstance(verdict, SoftRejection):
                soft.append(table)
                self.run_log.log_rejection("soft", verdict.reason, f"{guest.name} @ {table.name}")
            elif isinstance(verdict, HardRejection):
                self.run_log.log_rejection(
                    "hard",
                    verdict.reason,
                    f"{guest.name} @ {table.name} (blocked by {verdict.blocking_guest_id})",
                )

        # Empty tables rank with tables this pass would open
        pool = allowed or soft or empty
        if not pool:
            return None
        return min(pool, key=lambda t: self._rank(guest, t))

    def _specific_zone(self, guest: Guest) -> ZonePreference | None:
        if not self.snapshot.settings.zone_placement_enabled:
            return None
        if guest.zone_preference in (None, ZonePreference.ANY):
            return None
        return guest.zone_preference

    def _passes_zone_filter(self, guest: Guest, table: Table) -> bool:
        wanted = self._specific_zone(guest)
        if wanted is None:
            return True
        return table.zone.value in (wanted.value, Zone.GENERAL.value)

    def _rank(self, guest: Guest, table: Table) -> tuple[int, int]:
        """Zone match first, then the lowest number.

        Table numbers are unique, so "together" affinity never gets to break
        a tie here; partners are brought together by the pre-pass instead.
        """
        wanted = self._specific_zone(guest)
        zone_rank = 0 if wanted is None or table.zone.value == wanted.value else 1
        return (zone_rank, table.number)

    def _open_group_table(self, key: GroupKey, number: int | None = None) -> Table:
        ensure_table_budget(self.snapshot)
        if number is None:
            number = insertion_number(self.snapshot, key, self.group_order)
        cluster_index = self.snapshot.next_cluster_index(key)
        name = None if isinstance(key, Ungrouped) else f"{self.snapshot.group_name(key)} {cluster_index}"
        return open_table(
            self.snapshot,
            name=name,
            number=number,
            capacity=self.snapshot.settings.seats_per_table,
            key=key,
            run_log=self.run_log,
            reason="no table in group has room",
            cluster_index=cluster_index,
        )
