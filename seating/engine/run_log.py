"""
Placement Log - per-run decision log for the seating engine.

Tracks placements, tables created, constraint rejections and warnings so a
run can be explained after the fact.
"""

from __future__ import annotations

import json
import logging
import os
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class PlacementLog:
    """Collects the decisions made during one seating run."""

    def __init__(self, debug_mode: bool | None = None) -> None:
        if debug_mode is None:
            debug_mode = os.getenv("SEATING_LOG_LEVEL", "").upper() == "DEBUG"
        self.debug_mode = debug_mode
        self.placements: list[str] = []
        self.tables_created: list[str] = []
        self.rejections: dict[str, dict[str, list[str]]] = {
            "hard": defaultdict(list),
            "soft": defaultdict(list),
        }
        self.warnings: list[str] = []
        self.progress: list[str] = []

    def log_placement(self, guest_name: str, table_name: str, seats: int) -> None:
        """Log seats placed for a guest at a table."""
        self.placements.append(f"{guest_name} -> {table_name} ({seats})")
        if self.debug_mode:
            logger.debug(f"[PLACE] {guest_name} -> {table_name} ({seats} seats)")

    def log_table_created(self, table_name: str, number: int, reason: str) -> None:
        self.tables_created.append(f"#{number} {table_name}: {reason}")
        logger.debug(f"[TABLE] Created #{number} {table_name} ({reason})")

    def log_rejection(self, mode: str, reason: str, details: str) -> None:
        """Log a candidate table rejected for a guest ("hard" or "soft")."""
        self.rejections[mode][reason].append(details)
        if self.debug_mode:
            logger.debug(f"[REJECT] {mode.upper()} {reason}: {details}")

    def log_warning(self, warning: str) -> None:
        self.warnings.append(warning)
        logger.warning(f"[SEATING] {warning}")

    def log_progress(self, message: str) -> None:
        self.progress.append(message)
        logger.info(f"[SEATING] {message}")

    def get_summary(self) -> dict[str, Any]:
        """Get summary of all logged information."""
        return {
            "placements": len(self.placements),
            "tables_created": len(self.tables_created),
            "hard_rejections": {k: len(v) for k, v in self.rejections["hard"].items()},
            "soft_rejections": {k: len(v) for k, v in self.rejections["soft"].items()},
            "warnings": self.warnings,
            "progress": self.progress,
        }

    def save_to_file(self, event_id: str, channel: str, logs_dir: str | Path = "logs/seating") -> str:
        """Save the log as JSON and return the file path."""
        logs_dir = Path(logs_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = logs_dir / f"event_{event_id}_{channel}_{timestamp}.json"

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "event_id": event_id,
            "channel": channel,
            "debug_mode": self.debug_mode,
            "summary": self.get_summary(),
            "detailed_logs": {
                "placements": self.placements,
                "tables_created": self.tables_created,
                "rejections": self.rejections,
                "warnings": self.warnings,
            },
        }

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(log_data, f, indent=2, default=str, ensure_ascii=False)

        logger.info(f"Seating logs saved to {filepath}")
        return str(filepath)
