"""Group keys - which table pool a guest or table belongs to.

A guest's pool is its group reference when set, otherwise its free-text
family label, otherwise the shared ungrouped pool.
"""

from __future__ import annotations

from dataclasses import dataclass

from seating.models import Guest


@dataclass(frozen=True)
class ByGroupId:
    group_id: str


@dataclass(frozen=True)
class ByFamilyLabel:
    label: str


@dataclass(frozen=True)
class Ungrouped:
    pass


GroupKey = ByGroupId | ByFamilyLabel | Ungrouped

UNGROUPED = Ungrouped()


def resolve_group_key(guest: Guest) -> GroupKey:
    """Resolve a guest's pool; group reference takes precedence over the label."""
    if guest.group_id:
        return ByGroupId(guest.group_id)
    label = (guest.family_group or "").strip()
    if label:
        return ByFamilyLabel(label)
    return UNGROUPED
