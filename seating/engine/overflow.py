"""
Overflow Resolver - brings over-capacity tables back within capacity.

Runs after every placement is known. Locked guests never move, and a locked
table keeps everyone already seated at it; such tables are reported as
warnings instead.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from .group_keys import UNGROUPED
from .placement import open_table
from .run_log import PlacementLog
from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)


def resolve_overflow(snapshot: SeatingSnapshot, run_log: PlacementLog) -> list[str]:
    """Move unlocked guests off over-capacity tables onto new tables.

    Returns warnings for tables that are still over capacity.
    """
    warnings: list[str] = []

    for table in sorted(list(snapshot.tables.values()), key=lambda t: t.number):
        if snapshot.occupied_seats(table.id) <= table.capacity:
            continue

        if table.locked:
            warnings.append(_over_capacity_warning(snapshot, table.id, "table is locked"))
            continue

        # Seats per guest at this table
        blocks: dict[str, int] = defaultdict(int)
        for assignment in snapshot.assignments_at(table.id):
            blocks[assignment.guest_id] += assignment.seats

        movable = [
            gid for gid in blocks if not (gid in snapshot.guests and snapshot.guests[gid].is_locked)
        ]
        movable.sort(key=lambda gid: (-blocks[gid], gid))

        for guest_id in movable:
            if snapshot.occupied_seats(table.id) <= table.capacity:
                break
            seats = blocks[guest_id]
            new_table = open_table(
                snapshot,
                name=None,
                number=snapshot.max_table_number() + 1,
                capacity=max(snapshot.settings.seats_per_table, seats),
                key=UNGROUPED,
                run_log=run_log,
                reason=f"overflow from {table.name}",
                cluster_index=snapshot.next_cluster_index(UNGROUPED),
            )
            for assignment in snapshot.assignments_at(table.id):
                if assignment.guest_id == guest_id:
                    snapshot.move_assignment(assignment.id, new_table.id)
            logger.info(f"Moved {seats} seats of guest {guest_id} from {table.name} to {new_table.name}")

        if snapshot.occupied_seats(table.id) > table.capacity:
            warnings.append(_over_capacity_warning(snapshot, table.id, "only locked guests remain"))

    for warning in warnings:
        run_log.log_warning(warning)
    return warnings


def _over_capacity_warning(snapshot: SeatingSnapshot, table_id: str, reason: str) -> str:
    table = snapshot.tables[table_id]
    occupied = snapshot.occupied_seats(table_id)
    return f"Table {table.name} (#{table.number}) is over capacity: {occupied}/{table.capacity} seats ({reason})"
