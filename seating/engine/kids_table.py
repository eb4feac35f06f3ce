"""
Special-Table Allocator - the shared children's table.

When enabled and enough children are attending, children are seated
together before the main pass and each family's remaining requirement
shrinks by the children placed there.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from seating.models import Guest, Table, TableType

from .placement import open_table
from .run_log import PlacementLog
from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)


def find_kids_table(snapshot: SeatingSnapshot) -> Table | None:
    """Lowest-numbered unlocked children's table, if any."""
    candidates = [t for t in snapshot.tables.values() if t.table_type == TableType.KIDS and not t.locked]
    return min(candidates, key=lambda t: t.number, default=None)


def allocate_kids_table(
    snapshot: SeatingSnapshot,
    guests: Sequence[Guest],
    remaining: dict[str, int],
    run_log: PlacementLog,
) -> Table | None:
    """Seat children at the children's table, in the order ``guests`` are given.

    Args:
        snapshot: The run's snapshot
        guests: Unlocked guests to seat, already in group processing order
        remaining: Seats still needed per guest; reduced in place
        run_log: Decision log for the run

    Returns:
        The children's table used, or None when the feature does not apply
    """
    settings = snapshot.settings
    if not settings.kids_table_enabled:
        return None

    channel = snapshot.channel
    total_children = sum(g.children_count(channel) for g in guests)
    if total_children < settings.kids_table_min_count:
        logger.debug(f"Children's table skipped: {total_children} children < {settings.kids_table_min_count}")
        return None

    table = find_kids_table(snapshot)
    if table is None:
        table = open_table(
            snapshot,
            name=settings.kids_table_name,
            number=snapshot.max_table_number() + 1,
            capacity=max(total_children + 2, settings.seats_per_table),
            key=None,
            run_log=run_log,
            reason=f"{total_children} children attending",
            table_type=TableType.KIDS,
        )
    else:
        logger.info(f"Reusing children's table {table.name} (#{table.number})")

    seated = 0
    for guest in guests:
        children = min(guest.children_count(channel), remaining.get(guest.id, 0))
        if children <= 0:
            continue
        free = snapshot.free_seats(table.id)
        if free <= 0:
            break
        seats = min(children, free)
        snapshot.add_assignment(table.id, guest.id, seats)
        remaining[guest.id] -= seats
        seated += seats
        run_log.log_placement(f"{guest.name} (children)", table.name, seats)

    run_log.log_progress(f"Children's table {table.name}: {seated} of {total_children} children seated")
    return table
