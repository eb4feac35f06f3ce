"""
Group & Priority Sequencer.

Decides the order groups are seated in and keeps table numbers in that same
order:

1. Ranked groups (priority > 0), lowest priority number first
2. Unranked groups, alphabetically (case- and accent-insensitive)
3. The ungrouped pool, always last

Renumbering only touches unlocked auto tables. They are permuted within the
set of numbers they already hold, so locked and manual tables keep their
numbers and a second run over the same data changes nothing.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Callable, Iterable

from .group_keys import GroupKey, Ungrouped
from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)


def _name_sort_key(name: str) -> str:
    return unicodedata.normalize("NFKD", name).casefold()


def group_sort_key(snapshot: SeatingSnapshot, key: GroupKey) -> tuple[int, int, str]:
    """Sortable rank of a group: (bucket, priority, name)."""
    if isinstance(key, Ungrouped):
        return (2, 0, "")
    name = snapshot.group_name(key) or ""
    priority = snapshot.group_priority(key)
    if priority > 0:
        return (0, priority, _name_sort_key(name))
    return (1, 0, _name_sort_key(name))


def order_groups(snapshot: SeatingSnapshot, keys: Iterable[GroupKey]) -> list[GroupKey]:
    """Processing order for the given group keys."""
    return sorted(set(keys), key=lambda k: group_sort_key(snapshot, k))


def has_priorities(snapshot: SeatingSnapshot, keys: Iterable[GroupKey]) -> bool:
    return any(snapshot.group_priority(k) > 0 for k in keys if not isinstance(k, Ungrouped))


def renumber_by_priority(snapshot: SeatingSnapshot, table_filter: Callable[[str], bool] | None = None) -> dict[str, int]:
    """Renumber unlocked auto tables so their numbers follow group order.

    Only applies when some group carries a priority. Returns the tables whose
    number changed (id -> new number); the snapshot is updated in place.
    """
    keys = [k for k in snapshot.table_keys.values() if k is not None]
    if not has_priorities(snapshot, keys):
        return {}

    affected = [
        t
        for tid, t in snapshot.tables.items()
        if t.is_auto
        and not t.locked
        and snapshot.table_keys.get(tid) is not None
        and (table_filter is None or table_filter(tid))
    ]
    if not affected:
        return {}

    slots = sorted(t.number for t in affected)
    ordered = sorted(
        affected,
        key=lambda t: (group_sort_key(snapshot, snapshot.table_keys[t.id]), t.number),  # type: ignore[arg-type]
    )

    changes = {t.id: slot for t, slot in zip(ordered, slots, strict=True) if t.number != slot}
    snapshot.apply_numbers(changes)
    if changes:
        logger.info(f"Renumbered {len(changes)} tables to follow group priority order")
    return changes


def stable_renumber(current: dict[str, int], targets: dict[str, int], update: Callable[[str, int], None]) -> None:
    """Apply number changes without ever holding a duplicate number.

    Phase 1 moves every changing table to its own negative placeholder,
    phase 2 assigns the final numbers. ``current`` holds every table's
    number before the change and is used to pick placeholders that collide
    with nothing.
    """
    changing = {tid: n for tid, n in targets.items() if current.get(tid) != n}
    if not changing:
        return

    lowest = min([0, *current.values(), *changing.values()])
    for offset, table_id in enumerate(sorted(changing), start=1):
        update(table_id, lowest - offset)
    for table_id in sorted(changing, key=lambda tid: changing[tid]):
        update(table_id, changing[table_id])
    logger.debug(f"Stable renumbering applied to {len(changing)} tables")


def insertion_number(snapshot: SeatingSnapshot, key: GroupKey, order: list[GroupKey]) -> int:
    """Number for a new table of ``key`` that keeps each group's tables together.

    The slot right after the group's highest table; for a group without
    tables, right after the highest table of the groups seated before it,
    or the first position when none are. Tables in the way are shifted up.
    """
    own = snapshot.tables_for_key(key)
    if own:
        anchor: int | None = own[-1].number
    else:
        preceding = order[: order.index(key)] if key in order else order
        numbers = [t.number for k in preceding for t in snapshot.tables_for_key(k)]
        anchor = max(numbers) if numbers else None

    if anchor is None:
        first = min((t.number for t in snapshot.tables.values()), default=1)
        return snapshot.make_room_at(max(first, 1))
    return snapshot.make_room_at(anchor + 1)
