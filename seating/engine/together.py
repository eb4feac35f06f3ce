"""Cross-group "together" pre-pass.

Pairs from different groups would otherwise land in separate group pools,
so both guests of each such pair are seated in the ungrouped pool first,
one right after the other.
"""

from __future__ import annotations

import logging

from seating.models import Guest, PreferenceStrength

from .group_keys import UNGROUPED, resolve_group_key
from .placement import PlacementEngine
from .snapshot import SeatingSnapshot

logger = logging.getLogger(__name__)


def seat_together_pairs(
    snapshot: SeatingSnapshot,
    engine: PlacementEngine,
    eligible: dict[str, Guest],
    remaining: dict[str, int],
    processed: set[str],
) -> int:
    """Seat cross-group "together" pairs in the ungrouped pool.

    ``processed`` is updated with every guest seated here. Returns the
    number of pairs handled.
    """
    prefs = sorted(
        snapshot.together_preferences(),
        key=lambda p: (p.strength != PreferenceStrength.MUST, p.id),
    )

    pairs = 0
    for pref in prefs:
        guest_a = eligible.get(pref.guest_a_id)
        guest_b = eligible.get(pref.guest_b_id)
        if guest_a is None or guest_b is None:
            continue
        if guest_a.id in processed or guest_b.id in processed:
            continue
        if remaining.get(guest_a.id, 0) <= 0 or remaining.get(guest_b.id, 0) <= 0:
            continue
        if resolve_group_key(guest_a) == resolve_group_key(guest_b):
            continue

        for guest in (guest_a, guest_b):
            remaining[guest.id] -= engine.place(guest, remaining[guest.id], UNGROUPED)
            processed.add(guest.id)
        pairs += 1
        logger.debug(f"Seated together pair {guest_a.name} + {guest_b.name}")

    return pairs
