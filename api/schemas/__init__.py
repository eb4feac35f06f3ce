"""
Pydantic schemas for the Seating API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .seating import AutoSeatingRequest, SeatingAssignmentsResponse

__all__ = [
    "AutoSeatingRequest",
    "SeatingAssignmentsResponse",
]
