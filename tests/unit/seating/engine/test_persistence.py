"""Tests for the ordered write-back of a finished run."""

from __future__ import annotations

from seating.config import SettingsLoader
from seating.engine.group_keys import UNGROUPED
from seating.engine.persistence import WritePlan
from seating.engine.placement import open_table
from seating.engine.snapshot import load_snapshot
from seating.models import Channel

from ..conftest import EVENT_ID, build_store, create_assignment, create_group, create_guest, create_table


def load(store):
    return load_snapshot(store, EVENT_ID, Channel.REAL, SettingsLoader(environ={}))


def make_store():
    return build_store(
        guests=[create_guest("x", group_id="b")],
        tables=[create_table("b1", 1, group_id="b"), create_table("a1", 2, group_id="a")],
        assignments=[create_assignment("b1", "x", 1, assignment_id="ax")],
        groups=[create_group("a", "Alpha"), create_group("b", "Beta")],
    )


class TestWritePlan:
    def test_writes_happen_in_order(self, run_log):
        store = make_store()
        snapshot = load(store)
        snapshot.clear_assignment("ax")
        snapshot.apply_numbers({"a1": 1, "b1": 2})
        new_table = open_table(
            snapshot, name=None, number=3, capacity=10, key=UNGROUPED, run_log=run_log, reason="test"
        )
        snapshot.add_assignment(new_table.id, "x", 1)

        stats = WritePlan(snapshot, empty_table_ids=["b1"]).flush(store)

        ops = [op for op, _ in store.write_log]
        assert ops == [
            "delete_assignments",
            "update_table_number",
            "update_table_number",
            "update_table_number",
            "update_table_number",
            "create_table",
            "bulk_insert_assignments",
            "delete_tables",
        ]
        assert stats.assignments_created == 1
        assert stats.tables_created == 1
        assert stats.tables_deleted == 1
        assert stats.tables_renumbered == 2

    def test_store_reflects_snapshot(self, run_log):
        store = make_store()
        snapshot = load(store)
        snapshot.clear_assignment("ax")
        new_table = open_table(
            snapshot, name=None, number=3, capacity=10, key=UNGROUPED, run_log=run_log, reason="test"
        )
        snapshot.add_assignment(new_table.id, "x", 1)

        WritePlan(snapshot, empty_table_ids=["b1"]).flush(store)

        assert set(store.tables) == {"a1", new_table.id}
        rows = store.read_assignments(EVENT_ID, Channel.REAL)
        assert [(r.table_id, r.guest_id, r.seats) for r in rows] == [(new_table.id, "x", 1)]
        assert store.tables[new_table.id].guest_ids == ["x"]

    def test_empty_new_table_is_never_written(self, run_log):
        store = make_store()
        snapshot = load(store)
        new_table = open_table(
            snapshot, name=None, number=3, capacity=10, key=UNGROUPED, run_log=run_log, reason="test"
        )

        stats = WritePlan(snapshot, empty_table_ids=[new_table.id]).flush(store)

        assert store.write_log == []
        assert stats.tables_created == 0
        assert stats.tables_deleted == 0

    def test_nothing_to_write(self):
        store = make_store()

        stats = WritePlan(load(store), empty_table_ids=[]).flush(store)

        assert store.write_log == []
        assert stats.assignments_created == 0

    def test_guest_with_two_rows_at_one_table_moved_once(self, run_log):
        store = build_store(
            guests=[create_guest("x", adults=3)],
            tables=[create_table("head", 1, capacity=4, mode="manual")],
            assignments=[
                create_assignment("head", "x", 2, assignment_id="x1"),
                create_assignment("head", "x", 1, assignment_id="x2"),
            ],
        )
        snapshot = load(store)
        new_table = open_table(
            snapshot, name=None, number=2, capacity=10, key=UNGROUPED, run_log=run_log, reason="test"
        )
        snapshot.move_assignment("x1", new_table.id)
        snapshot.move_assignment("x2", new_table.id)

        WritePlan(snapshot, empty_table_ids=[]).flush(store)

        assert snapshot.moved_assignments == [("x", "head", new_table.id)]
        assert [op for op, _ in store.write_log].count("move_assignment") == 1
        assert {a.table_id for a in store.read_assignments(EVENT_ID, Channel.REAL)} == {new_table.id}
