"""PocketBase-backed SeatingStore.

Collections (all snake_case, every record carries an ``event`` relation):
    events, guests, tables, seat_assignments, seating_preferences,
    table_adjacencies, guest_groups, group_priorities

Record ids for new tables and assignments are chosen by the engine, so a
created record keeps the id the in-memory plan already refers to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, TypeVar

from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from pocketbase import PocketBase
from seating.errors import StoreError
from seating.logging_config import TRACE
from seating.models import (
    Channel,
    Event,
    GroupPriority,
    Guest,
    GuestGroup,
    SeatAssignment,
    SeatingPreference,
    Table,
    TableAdjacency,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from an SDK record or a plain dict."""
    if isinstance(record, dict):
        return record.get(name, default)
    value = getattr(record, name, default)
    return default if value == "" and default is None else value


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00").replace(" ", "T"))
    return None


class PocketBaseSeatingStore:
    """Repository-style SeatingStore over the PocketBase SDK."""

    def __init__(self, pb_client: PocketBase) -> None:
        self.pb = pb_client

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_event(self, event_id: str) -> Event | None:
        try:
            record = self.pb.collection("events").get_one(event_id)
        except ClientResponseError as e:
            if getattr(e, "status", None) == 404:
                return None
            raise StoreError(f"Failed to read event {event_id}: {e}") from e
        except Exception as e:
            raise StoreError(f"Failed to read event {event_id}: {e}") from e

        return Event(
            id=record.id,
            name=get_field(record, "name", "") or "",
            seating_settings=get_field(record, "seating_settings", None) or {},
        )

    def read_guests(self, event_id: str) -> list[Guest]:
        return self._read_all("guests", f'event = "{event_id}"', self._map_guest)

    def read_tables(self, event_id: str) -> list[Table]:
        return self._read_all("tables", f'event = "{event_id}"', lambda r: self._map_table(r, event_id))

    def read_assignments(self, event_id: str, channel: Channel) -> list[SeatAssignment]:
        return self._read_all(
            "seat_assignments",
            f'event = "{event_id}" && channel = "{channel.value}"',
            lambda r: SeatAssignment(
                id=r.id,
                event_id=event_id,
                table_id=get_field(r, "table"),
                guest_id=get_field(r, "guest"),
                seats=get_field(r, "seats"),
                channel=Channel(get_field(r, "channel")),
            ),
        )

    def read_preferences(self, event_id: str) -> list[SeatingPreference]:
        return self._read_all(
            "seating_preferences",
            f'event = "{event_id}" && enabled = true',
            lambda r: SeatingPreference(
                id=r.id,
                guest_a_id=get_field(r, "guest_a"),
                guest_b_id=get_field(r, "guest_b"),
                type=get_field(r, "type"),
                scope=get_field(r, "scope", None) or "sameTable",
                strength=get_field(r, "strength", None) or "prefer",
                enabled=bool(get_field(r, "enabled", True)),
            ),
        )

    def read_adjacency(self, event_id: str) -> list[TableAdjacency]:
        return self._read_all(
            "table_adjacencies",
            f'event = "{event_id}"',
            lambda r: TableAdjacency(
                table_id=get_field(r, "table"),
                adjacent_table_id=get_field(r, "adjacent_table"),
            ),
        )

    def read_groups(self, event_id: str) -> list[GuestGroup]:
        return self._read_all(
            "guest_groups",
            f'event = "{event_id}"',
            lambda r: GuestGroup(id=r.id, name=get_field(r, "name"), priority=get_field(r, "priority", None) or 0),
        )

    def read_group_priorities(self, event_id: str) -> list[GroupPriority]:
        return self._read_all(
            "group_priorities",
            f'event = "{event_id}"',
            lambda r: GroupPriority(
                group_name=get_field(r, "group_name"),
                priority=get_field(r, "priority", None) or 0,
            ),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_table(self, table: Table) -> Table:
        data = {
            "id": table.id,
            "event": table.event_id,
            "name": table.name,
            "number": table.number,
            "capacity": table.capacity,
            "table_type": table.table_type.value,
            "mode": table.mode.value,
            "group": table.group_id or "",
            "cluster_index": table.cluster_index,
            "locked": table.locked,
            "zone": table.zone.value,
            "guests": table.guest_ids,
        }
        self._call(f"create table {table.name}", lambda: self.pb.collection("tables").create(data))
        return table

    def update_table_number(self, table_id: str, number: int) -> None:
        self._call(
            f"renumber table {table_id}",
            lambda: self.pb.collection("tables").update(table_id, {"number": number}),
        )

    def delete_tables(self, table_ids: Sequence[str]) -> None:
        for table_id in table_ids:
            self._call(f"delete table {table_id}", lambda tid=table_id: self.pb.collection("tables").delete(tid))

    def bulk_insert_assignments(self, rows: Sequence[SeatAssignment]) -> None:
        collection = self.pb.collection("seat_assignments")
        for row in rows:
            data = {
                "id": row.id,
                "event": row.event_id,
                "table": row.table_id,
                "guest": row.guest_id,
                "seats": row.seats,
                "channel": row.channel.value,
            }
            self._call(f"insert assignment {row.id}", lambda d=data: collection.create(d))
        logger.debug(f"Inserted {len(rows)} seat assignments")

    def delete_assignments(self, event_id: str, channel: Channel, assignment_ids: Sequence[str]) -> None:
        collection = self.pb.collection("seat_assignments")
        for assignment_id in assignment_ids:
            self._call(f"delete assignment {assignment_id}", lambda aid=assignment_id: collection.delete(aid))

    def move_assignment(self, guest_id: str, from_table_id: str, to_table_id: str, channel: Channel) -> None:
        collection = self.pb.collection("seat_assignments")
        records = self._call(
            f"find assignment of {guest_id}",
            lambda: collection.get_full_list(
                query_params={
                    "filter": f'guest = "{guest_id}" && table = "{from_table_id}" && channel = "{channel.value}"'
                }
            ),
        )
        if not records:
            raise StoreError(f"No assignment for guest {guest_id} at table {from_table_id}")
        for record in records:
            self._call(
                f"move assignment {record.id}",
                lambda rid=record.id: collection.update(rid, {"table": to_table_id}),
            )

    def set_table_guest_list(self, table_id: str, guest_ids: Sequence[str]) -> None:
        self._call(
            f"update guest list of {table_id}",
            lambda: self.pb.collection("tables").update(table_id, {"guests": list(guest_ids)}),
        )

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------

    def _read_all(self, collection: str, filter_str: str, mapper: Callable[[Any], T]) -> list[T]:
        logger.log(TRACE, f"Reading {collection} with filter: {filter_str}")
        records = self._call(
            f"read {collection}",
            lambda: self.pb.collection(collection).get_full_list(query_params={"filter": filter_str}),
        )
        return [mapper(record) for record in records]

    def _call(self, description: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except Exception as e:
            logger.error(f"PocketBase call failed ({description}): {e}")
            raise StoreError(f"Failed to {description}: {e}") from e

    def _map_guest(self, record: Any) -> Guest:
        created = _parse_datetime(get_field(record, "created"))
        data: dict[str, Any] = {
            "id": record.id,
            "name": get_field(record, "name", "") or "",
            "rsvp_status": get_field(record, "rsvp_status", None) or "pending",
            "adults_attending": get_field(record, "adults_attending", None) or 0,
            "children_attending": get_field(record, "children_attending", None) or 0,
            "expected_party_size": get_field(record, "expected_party_size", None) or None,
            "invited_count": get_field(record, "invited_count", None) or 1,
            "group_id": get_field(record, "group", None) or None,
            "family_group": get_field(record, "family_group", None) or None,
            "guest_type": get_field(record, "guest_type", None) or None,
            "locked_seat": bool(get_field(record, "locked_seat", False)),
            "locked_table_id": get_field(record, "locked_table", None) or None,
            "zone_preference": get_field(record, "zone_preference", None) or None,
        }
        if created is not None:
            data["created_at"] = created
        return Guest(**data)

    def _map_table(self, record: Any, event_id: str) -> Table:
        return Table(
            id=record.id,
            event_id=event_id,
            name=get_field(record, "name", "") or "",
            number=get_field(record, "number"),
            capacity=get_field(record, "capacity"),
            table_type=get_field(record, "table_type", None) or "mixed",
            mode=get_field(record, "mode", None) or "manual",
            group_id=get_field(record, "group", None) or None,
            cluster_index=get_field(record, "cluster_index", None) or None,
            locked=bool(get_field(record, "locked", False)),
            zone=get_field(record, "zone", None) or "general",
            guest_ids=list(get_field(record, "guests", None) or []),
        )
