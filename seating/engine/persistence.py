"""
Write plan - flushes one run's snapshot changes back to the store.

Writes happen in a fixed order:

1. Delete the assignments cleared at the start of the run
2. Renumber existing tables (two-phase, never a duplicate number)
3. Create new tables
4. Bulk insert new assignments
5. Apply overflow moves of pre-existing assignments
6. Delete tables left empty
7. Refresh the denormalised guest list of every touched table

The store is not transactional across these calls: a failure part-way
leaves the earlier writes in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from seating.store.base import SeatingStore

from .sequencer import stable_renumber
from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)


@dataclass
class FlushStats:
    assignments_created: int = 0
    tables_created: int = 0
    tables_deleted: int = 0
    tables_renumbered: int = 0
    touched_tables: list[str] = field(default_factory=list)


class WritePlan:
    """Computes and applies the store writes for a finished run."""

    def __init__(self, snapshot: SeatingSnapshot, empty_table_ids: list[str]) -> None:
        self.snapshot = snapshot
        self.empty_table_ids = empty_table_ids

    def flush(self, store: SeatingStore) -> FlushStats:
        snapshot = self.snapshot
        event_id = snapshot.event.id
        stats = FlushStats()
        touched: dict[str, None] = {}

        new_table_ids = [tid for tid in snapshot.new_table_ids if tid not in self.empty_table_ids]
        existing_deletes = [tid for tid in self.empty_table_ids if tid not in snapshot.new_table_ids]

        # 1. Cleared assignments
        if snapshot.cleared_assignment_ids:
            store.delete_assignments(event_id, snapshot.channel, snapshot.cleared_assignment_ids)
            logger.debug(f"Deleted {len(snapshot.cleared_assignment_ids)} cleared assignments")

        # 2. Renumbering of existing tables
        changes = snapshot.changed_numbers()
        if changes:
            current = {tid: n for tid, n in snapshot.initial_numbers.items() if tid in snapshot.tables}
            stable_renumber(current, changes, store.update_table_number)
            stats.tables_renumbered = len(changes)

        # 3. New tables
        for table_id in new_table_ids:
            store.create_table(snapshot.tables[table_id])
            touched[table_id] = None
        stats.tables_created = len(new_table_ids)

        # 4. New assignments
        rows = snapshot.new_assignments()
        if rows:
            store.bulk_insert_assignments(rows)
        stats.assignments_created = len(rows)
        for row in rows:
            touched[row.table_id] = None

        # 5. Overflow moves of assignments that already existed
        for guest_id, from_table_id, to_table_id in snapshot.moved_assignments:
            store.move_assignment(guest_id, from_table_id, to_table_id, snapshot.channel)
            touched[from_table_id] = None
            touched[to_table_id] = None

        for table_id in snapshot.cleared_table_ids:
            touched[table_id] = None

        # 6. Empty tables
        if existing_deletes:
            store.delete_tables(existing_deletes)
        stats.tables_deleted = len(existing_deletes)

        # 7. Denormalised guest lists
        for table_id in touched:
            if table_id in snapshot.tables and table_id not in self.empty_table_ids:
                store.set_table_guest_list(table_id, snapshot.guests_at(table_id))
        stats.touched_tables = [tid for tid in touched if tid not in self.empty_table_ids]

        logger.info(
            f"Flushed run: {stats.assignments_created} assignments, {stats.tables_created} new tables, "
            f"{stats.tables_deleted} deleted, {stats.tables_renumbered} renumbered"
        )
        return stats
