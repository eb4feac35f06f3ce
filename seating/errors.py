"""Exception types raised by the seating engine and its storage collaborators.

Constraint failures are never raised - they are reported as conflicts on the
result. These exceptions cover fatal input problems and persistence failures.
"""

from __future__ import annotations


class SeatingError(Exception):
    """Base exception for the seating engine."""

    pass


class EventNotFoundError(SeatingError):
    """Raised when the requested event does not exist."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class StoreError(SeatingError):
    """Raised when a storage collaborator call fails."""

    pass


class TableNumberConflictError(StoreError):
    """Raised by a store when a table number would collide with another table."""

    def __init__(self, event_id: str, table_number: int) -> None:
        super().__init__(f"Table number {table_number} is already in use for event {event_id}")
        self.event_id = event_id
        self.table_number = table_number


class TableLimitExceededError(SeatingError):
    """Raised when a run would create more tables than the configured bound."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Seating run aborted: more than {limit} new tables would be required")
        self.limit = limit
