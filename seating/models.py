"""
Domain models for the seating engine - mirror the storage schema directly.

Guests, groups and preferences are owned by the CRUD layer and only read
here. Tables and assignments in ``auto`` mode are created, renumbered and
deleted by the engine.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Channel(str, Enum):
    """Independent assignment sets kept for one event."""

    REAL = "real"  # confirmed guests only
    SIMULATION = "simulation"  # confirmed + pending, for what-if planning


class RecalcStrategy(str, Enum):
    ALL = "all"
    GROUP_ONLY = "groupOnly"


class RsvpStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class TableType(str, Enum):
    ADULTS = "adults"
    KIDS = "kids"
    MIXED = "mixed"


class TableMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class Zone(str, Enum):
    STAGE = "stage"
    DANCE = "dance"
    QUIET = "quiet"
    GENERAL = "general"


class ZonePreference(str, Enum):
    STAGE = "stage"
    DANCE = "dance"
    QUIET = "quiet"
    ANY = "any"


class PreferenceType(str, Enum):
    TOGETHER = "together"
    APART = "apart"


class PreferenceScope(str, Enum):
    SAME_TABLE = "sameTable"
    ADJACENT_TABLES = "adjacentTables"


class PreferenceStrength(str, Enum):
    MUST = "must"
    PREFER = "prefer"

    @classmethod
    def _missing_(cls, value: object) -> PreferenceStrength | None:
        # Older records store the soft strength as "try"
        if value == "try":
            return cls.PREFER
        return None


class GuestType(str, Enum):
    SINGLE = "single"
    COUPLE = "couple"
    FAMILY = "family"
    GROUP = "group"


class AdjacencyPolicy(str, Enum):
    FORBID_SAME_TABLE_ONLY = "forbidSameTableOnly"
    FORBID_SAME_AND_ADJACENT = "forbidSameAndAdjacent"


class ConflictType(str, Enum):
    APART_CANNOT_SATISFY = "apart_cannot_satisfy"
    TOGETHER_CANNOT_SATISFY = "together_cannot_satisfy"
    NO_AVAILABLE_TABLE = "no_available_table"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Event(BaseModel):
    """The event being seated, with its raw (unvalidated) seating settings."""

    id: str
    name: str = ""
    seating_settings: dict[str, Any] = Field(default_factory=dict)


class Guest(BaseModel):
    """An invitation unit - one RSVP that may bring several attendees."""

    id: str
    name: str
    rsvp_status: RsvpStatus = RsvpStatus.PENDING
    adults_attending: int = Field(default=0, ge=0)
    children_attending: int = Field(default=0, ge=0)
    expected_party_size: int | None = None
    invited_count: int = Field(default=1, ge=1)
    group_id: str | None = None
    family_group: str | None = None  # free-text label, ignored when group_id is set
    guest_type: GuestType | None = None  # explicit type, otherwise inferred
    locked_seat: bool = False
    locked_table_id: str | None = None
    zone_preference: ZonePreference | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_locked(self) -> bool:
        return self.locked_seat or bool(self.locked_table_id)

    def is_active(self, channel: Channel) -> bool:
        """Whether this guest needs seats on the given channel."""
        if self.rsvp_status == RsvpStatus.CONFIRMED:
            return True
        return channel == Channel.SIMULATION and self.rsvp_status == RsvpStatus.PENDING

    def seats_required(self, channel: Channel) -> int:
        """Seats this guest needs on ``channel`` (0 when inactive, otherwise at least 1)."""
        if not self.is_active(channel):
            return 0
        if self.rsvp_status == RsvpStatus.CONFIRMED:
            seats = self.adults_attending + self.children_attending
        else:
            seats = self.expected_party_size or self.invited_count or 1
        return max(1, seats)

    def children_count(self, channel: Channel) -> int:
        """Confirmed child attendees; pending guests have not declared any."""
        if self.is_active(channel) and self.rsvp_status == RsvpStatus.CONFIRMED:
            return self.children_attending
        return 0


class Table(BaseModel):
    id: str
    event_id: str
    name: str
    number: int
    capacity: int = Field(ge=1)
    table_type: TableType = TableType.MIXED
    mode: TableMode = TableMode.MANUAL
    group_id: str | None = None
    cluster_index: int | None = None
    locked: bool = False
    zone: Zone = Zone.GENERAL
    guest_ids: list[str] = Field(default_factory=list)  # denormalised view for the canvas

    @property
    def is_auto(self) -> bool:
        return self.mode == TableMode.AUTO

    @property
    def is_pinned(self) -> bool:
        """Pinned tables are never renumbered or deleted by the engine."""
        return self.locked or self.mode == TableMode.MANUAL


class SeatAssignment(BaseModel):
    """Seats a guest holds at one table. A split guest has several rows."""

    id: str
    event_id: str
    table_id: str
    guest_id: str
    seats: int = Field(ge=1)
    channel: Channel


class SeatingPreference(BaseModel):
    id: str
    guest_a_id: str
    guest_b_id: str
    type: PreferenceType
    scope: PreferenceScope = PreferenceScope.SAME_TABLE
    strength: PreferenceStrength = PreferenceStrength.PREFER
    enabled: bool = True

    def other(self, guest_id: str) -> str:
        """The guest on the other side of the pair."""
        return self.guest_b_id if self.guest_a_id == guest_id else self.guest_a_id

    @property
    def allows_adjacent(self) -> bool:
        return self.scope == PreferenceScope.ADJACENT_TABLES

    @property
    def multiplier(self) -> int:
        return 2 if self.strength == PreferenceStrength.MUST else 1


class GuestGroup(BaseModel):
    id: str
    name: str
    priority: int = 0


class GroupPriority(BaseModel):
    """Priority of a group by name - 1 sits first, 0 means unranked."""

    group_name: str
    priority: int = Field(default=0, ge=0)


class TableAdjacency(BaseModel):
    table_id: str
    adjacent_table_id: str


class SeatingConflict(BaseModel):
    """A constraint the engine could not honour, with a suggested remedy."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: ConflictType
    guest_a_id: str
    guest_a_name: str
    guest_b_id: str | None = None
    guest_b_name: str | None = None
    table_id: str | None = None
    message: str
    suggested_action: str


class AutoSeatingResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    assignments_created: int = 0
    tables_created: int = 0
    conflicts: list[SeatingConflict] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> AutoSeatingResult:
        return cls(success=False, error=error)


class TableSummaryEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    guest_id: str
    guest_name: str
    seats: int
    is_split: bool


class TableSummary(BaseModel):
    """Read-only view of one table and who sits there."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    table_id: str
    table_name: str
    table_number: int
    capacity: int
    group_name: str | None = None
    assignments: list[TableSummaryEntry] = Field(default_factory=list)
    occupied_seats: int = 0
    free_seats: int = 0
