"""
Seating Router - Endpoints for automatic seating.

This router handles:
- Running automatic seating (full or one group)
- Reading the current per-table assignments
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from seating.engine import get_seating_assignments, recalculate_group_seating, run_auto_seating
from seating.errors import EventNotFoundError, StoreError
from seating.models import Channel
from seating.store import SeatingStore

from ..dependencies import get_event_lock, get_store
from ..schemas import AutoSeatingRequest, SeatingAssignmentsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["seating"])


@router.post("/seating/auto")
async def run_seating(request: AutoSeatingRequest, store: SeatingStore = Depends(get_store)) -> dict[str, Any]:
    """Run automatic seating; ``groupId`` limits the run to one group."""
    try:
        event = await asyncio.to_thread(store.read_event, request.event_id)
    except StoreError as e:
        logger.error(f"Failed to read event {request.event_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to run auto seating") from e
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")

    async with get_event_lock(request.event_id):
        if request.group_id:
            logger.info(f"Recalculating group {request.group_id} for event {request.event_id} ({request.type.value})")
            result = await asyncio.to_thread(
                recalculate_group_seating, store, request.event_id, request.group_id, request.type
            )
        else:
            logger.info(f"Running auto seating for event {request.event_id} ({request.type.value})")
            result = await asyncio.to_thread(run_auto_seating, store, request.event_id, request.type)

    return result.model_dump(by_alias=True)


@router.get("/seating/assignments")
async def get_assignments(
    event_id: str = Query(..., alias="eventId"),
    channel: Channel = Query(Channel.REAL, alias="type"),
    store: SeatingStore = Depends(get_store),
) -> dict[str, Any]:
    """Per-table assignments for an event on one channel."""
    try:
        summaries = await asyncio.to_thread(get_seating_assignments, store, event_id, channel)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found") from None
    except StoreError as e:
        logger.error(f"Failed to read seating assignments for {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get seating assignments") from e

    return SeatingAssignmentsResponse(assignments=summaries).model_dump(by_alias=True)
