"""API routers for the Seating API."""

from __future__ import annotations

from . import seating

__all__ = ["seating"]
