#!/usr/bin/env python3
"""Seating CLI - run automatic seating or inspect assignments from a shell.

Runs against PocketBase by default, or against a JSON snapshot file loaded
into the in-memory store (nothing is written back to the file).

Usage:
    seating-auto run --event EVENT_ID
    seating-auto run --event EVENT_ID --channel simulation --strategy groupOnly --group GROUP_ID
    seating-auto run --event EVENT_ID --snapshot fixtures/wedding.json
    seating-auto show --event EVENT_ID --snapshot fixtures/wedding.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

from pocketbase import PocketBase
from seating.engine import get_seating_assignments, run_auto_seating
from seating.errors import SeatingError
from seating.logging_config import configure_logging, get_logger
from seating.models import Channel, RecalcStrategy
from seating.store import InMemorySeatingStore, PocketBaseSeatingStore, SeatingStore

logger = get_logger(__name__)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(prog="seating-auto", description="Automatic event seating")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--event", required=True, help="Event id")
        sub.add_argument(
            "--channel",
            choices=[c.value for c in Channel],
            default=Channel.REAL.value,
            help="Assignment channel (default: real)",
        )
        sub.add_argument("--snapshot", help="Read event data from this JSON file instead of PocketBase")
        sub.add_argument("--debug", action="store_true", help="Enable debug logging")

    run_parser = subparsers.add_parser("run", help="Run automatic seating")
    add_common(run_parser)
    run_parser.add_argument(
        "--strategy",
        choices=[s.value for s in RecalcStrategy],
        default=RecalcStrategy.ALL.value,
        help="Recalculate everything or one group only",
    )
    run_parser.add_argument("--group", help="Group id (required for --strategy groupOnly)")

    show_parser = subparsers.add_parser("show", help="Print current table assignments")
    add_common(show_parser)

    return parser.parse_args(args)


def load_configuration() -> dict[str, Any]:
    """Load PocketBase connection settings from environment variables.

    Required:
    - POCKETBASE_ADMIN_EMAIL
    - POCKETBASE_ADMIN_PASSWORD

    Optional:
    - POCKETBASE_URL (default: http://127.0.0.1:8090)
    """
    config: dict[str, Any] = {
        "pb_url": os.getenv("POCKETBASE_URL", "http://127.0.0.1:8090"),
        "pb_email": os.getenv("POCKETBASE_ADMIN_EMAIL"),
        "pb_password": os.getenv("POCKETBASE_ADMIN_PASSWORD"),
    }

    if not config["pb_email"] or not config["pb_password"]:
        raise ValueError(
            "Missing required PocketBase credentials. "
            "Set POCKETBASE_ADMIN_EMAIL and POCKETBASE_ADMIN_PASSWORD environment variables."
        )

    return config


def build_store(snapshot_path: str | None) -> SeatingStore:
    if snapshot_path:
        logger.info(f"Using snapshot file {snapshot_path}")
        return InMemorySeatingStore.from_json_file(snapshot_path)

    config = load_configuration()
    pb = PocketBase(config["pb_url"])
    pb.collection("_superusers").auth_with_password(config["pb_email"], config["pb_password"])
    logger.info("Authenticated with PocketBase")
    return PocketBaseSeatingStore(pb)


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)
    configure_logging("cli", logging.DEBUG if args.debug else None)

    try:
        store = build_store(args.snapshot)

        if args.command == "show":
            summaries = get_seating_assignments(store, args.event, args.channel)
            print(json.dumps([s.model_dump(by_alias=True) for s in summaries], indent=2, ensure_ascii=False))
            return 0

        result = run_auto_seating(store, args.event, args.channel, args.strategy, group_id=args.group)
        print(result.model_dump_json(by_alias=True, indent=2))
        return 0 if result.success else 1

    except (SeatingError, ValueError, OSError) as e:
        logger.error(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
