"""
Shared dependencies for the Seating API.

This module provides:
- PocketBase client management (global instance, authenticated on startup)
- The SeatingStore dependency used by the routers
- Per-event run locks (one seating run per event at a time)
"""

from __future__ import annotations

import asyncio
import logging

from pocketbase import PocketBase
from seating.store import InMemorySeatingStore, PocketBaseSeatingStore, SeatingStore

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


class AuthState:
    """Shared state for the PocketBase client and the snapshot store."""

    pb_client: PocketBase | None = None
    memory_store: InMemorySeatingStore | None = None


auth_state = AuthState()


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        auth_state.pb_client = pb
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Seating Store
# ========================================


def get_store() -> SeatingStore:
    """FastAPI dependency returning the store seating runs read and write."""
    if auth_state.memory_store is not None:
        return auth_state.memory_store
    return PocketBaseSeatingStore(auth_state.pb_client or pb)


# ========================================
# Run Serialization
# ========================================

# The engine assumes nothing else mutates an event's tables during a run
_event_locks: dict[str, asyncio.Lock] = {}


def get_event_lock(event_id: str) -> asyncio.Lock:
    """Lock serializing seating runs for one event within this process."""
    lock = _event_locks.get(event_id)
    if lock is None:
        lock = _event_locks[event_id] = asyncio.Lock()
    return lock


__all__ = [
    "pb",
    "pb_url",
    "auth_state",
    "authenticate_pb",
    "get_store",
    "get_event_lock",
]
