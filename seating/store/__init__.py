"""Storage collaborators for the seating engine."""

from .base import SeatingStore
from .memory import InMemorySeatingStore
from .pocketbase_store import PocketBaseSeatingStore

__all__ = ["SeatingStore", "InMemorySeatingStore", "PocketBaseSeatingStore"]
