#!/usr/bin/env python3
"""
Seating API - HTTP API layer for the automatic seating engine.

This is the FastAPI application that serves as the backend-for-frontend (BFF)
for the seating canvas. It exposes:
- Automatic seating runs (full or per group)
- Read-only per-table assignment summaries
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seating.logging_config import configure_logging, get_logger
from seating.store import InMemorySeatingStore

from .dependencies import auth_state, authenticate_pb, pb
from .settings import get_settings

# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if settings.uses_snapshot:
        auth_state.memory_store = InMemorySeatingStore.from_json_file(settings.seating_snapshot_file)
        logger.info(f"Serving seating from snapshot {settings.seating_snapshot_file}")
    elif not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")
        auth_state.pb_client = pb

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Seating API", description="Automatic event seating API", lifespan=lifespan)

    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    from .routers import seating

    app.include_router(seating.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "seating-api"}

    return app


# Create app instance for uvicorn
app = create_app()
