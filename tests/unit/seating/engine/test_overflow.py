"""Tests for the overflow resolver."""

from __future__ import annotations

from seating.engine.overflow import resolve_overflow

from ..conftest import build_snapshot, create_assignment, create_guest, create_table


class TestResolveOverflow:
    def test_unlocked_guest_moves_to_new_table(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("locked", adults=2, locked_table_id="t1"), create_guest("x", adults=3)],
            tables=[create_table("t1", 1, capacity=4, mode="manual", name="Head table")],
            assignments=[create_assignment("t1", "locked", 2), create_assignment("t1", "x", 3, assignment_id="ax")],
            settings={"seatsPerTable": 10},
        )

        warnings = resolve_overflow(snapshot, run_log)

        assert warnings == []
        assert snapshot.occupied_seats("t1") == 2
        new_table = snapshot.tables[snapshot.new_table_ids[0]]
        assert new_table.number == 2
        assert new_table.capacity == 10
        assert snapshot.tables_of("x") == {new_table.id}
        assert snapshot.moved_assignments == [("x", "t1", new_table.id)]

    def test_largest_block_moves_first(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("small"), create_guest("big", adults=4), create_guest("mid", adults=2)],
            tables=[create_table("t1", 1, capacity=5, mode="manual")],
            assignments=[
                create_assignment("t1", "small", 1),
                create_assignment("t1", "big", 4),
                create_assignment("t1", "mid", 2),
            ],
        )

        resolve_overflow(snapshot, run_log)

        assert snapshot.occupied_seats("t1") == 3
        assert snapshot.tables_of("big") != {"t1"}
        assert snapshot.tables_of("mid") == {"t1"}

    def test_block_larger_than_table_size_gets_a_fitting_table(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("locked", locked_seat=True), create_guest("clan", adults=15)],
            tables=[create_table("t1", 1, capacity=10, mode="manual")],
            assignments=[create_assignment("t1", "locked", 1), create_assignment("t1", "clan", 15)],
            settings={"seatsPerTable": 10},
        )

        warnings = resolve_overflow(snapshot, run_log)

        assert warnings == []
        new_table = snapshot.tables[snapshot.new_table_ids[0]]
        assert new_table.capacity == 15

    def test_locked_table_reported_not_repaired(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("x", adults=6)],
            tables=[create_table("t1", 1, capacity=4, locked=True, name="VIP")],
            assignments=[create_assignment("t1", "x", 6)],
        )

        warnings = resolve_overflow(snapshot, run_log)

        assert len(warnings) == 1
        assert "VIP" in warnings[0]
        assert "6/4" in warnings[0]
        assert snapshot.new_table_ids == []
        assert run_log.warnings == warnings

    def test_only_locked_guests_remaining_is_reported(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("l1", adults=3, locked_seat=True), create_guest("l2", adults=3, locked_seat=True)],
            tables=[create_table("t1", 1, capacity=4, mode="manual")],
            assignments=[create_assignment("t1", "l1", 3), create_assignment("t1", "l2", 3)],
        )

        warnings = resolve_overflow(snapshot, run_log)

        assert len(warnings) == 1
        assert "only locked guests remain" in warnings[0]

    def test_tables_within_capacity_untouched(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("x", adults=4)],
            tables=[create_table("t1", 1, capacity=4)],
            assignments=[create_assignment("t1", "x", 4)],
        )

        assert resolve_overflow(snapshot, run_log) == []
        assert snapshot.new_table_ids == []
