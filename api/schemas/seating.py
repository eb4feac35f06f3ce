"""
Pydantic schemas for seating endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from seating.models import Channel, TableSummary


class AutoSeatingRequest(BaseModel):
    """Request to run automatic seating for an event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: str
    type: Channel = Channel.REAL
    group_id: str | None = None  # set to recalculate one group only


class SeatingAssignmentsResponse(BaseModel):
    """Current table assignments for an event."""

    assignments: list[TableSummary] = Field(default_factory=list)
