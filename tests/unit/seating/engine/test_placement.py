"""Tests for the per-guest placement engine."""

from __future__ import annotations

import pytest

from seating.engine.group_keys import UNGROUPED, ByGroupId
from seating.engine.placement import PlacementEngine, ensure_table_budget, open_table
from seating.errors import TableLimitExceededError
from seating.models import TableMode

from ..conftest import (
    build_snapshot,
    create_assignment,
    create_group,
    create_guest,
    create_preference,
    create_table,
)


def make_engine(snapshot, run_log, order=None):
    keys = order if order is not None else [k for k in set(snapshot.table_keys.values()) if k is not None]
    return PlacementEngine(snapshot, keys or [UNGROUPED], run_log)


def seats_at(snapshot, guest_id):
    """Seats of a guest per table number."""
    return {snapshot.tables[a.table_id].number: a.seats for a in snapshot.assignments_of(guest_id)}


class TestGroupTables:
    def test_fills_existing_group_table(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("g1", adults=2, group_id="smith")],
            tables=[create_table("t1", 1, group_id="smith", name="Smith 1")],
            groups=[create_group("smith", "Smith")],
        )
        engine = make_engine(snapshot, run_log)

        placed = engine.place(snapshot.guests["g1"], 2, ByGroupId("smith"))

        assert placed == 2
        assert seats_at(snapshot, "g1") == {1: 2}
        assert snapshot.new_table_ids == []

    def test_splits_across_tables_when_needed(self, run_log):
        """A party larger than the free seats continues at a new group table."""
        snapshot = build_snapshot(
            guests=[create_guest("big", adults=5, group_id="smith"), create_guest("other", adults=1)],
            tables=[create_table("t1", 1, capacity=4, group_id="smith", name="Smith 1", cluster_index=1)],
            assignments=[create_assignment("t1", "other", 1)],
            groups=[create_group("smith", "Smith")],
            settings={"seatsPerTable": 10},
        )
        engine = make_engine(snapshot, run_log)

        placed = engine.place(snapshot.guests["big"], 5, ByGroupId("smith"))

        assert placed == 5
        assert seats_at(snapshot, "big") == {1: 3, 2: 2}
        new_table = snapshot.tables[snapshot.new_table_ids[0]]
        assert new_table.name == "Smith 2"
        assert new_table.capacity == 10
        assert new_table.mode == TableMode.AUTO
        assert new_table.group_id == "smith"
        assert new_table.cluster_index == 2

    def test_locked_tables_are_never_candidates(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("g1", group_id="smith")],
            tables=[create_table("t1", 1, group_id="smith", locked=True)],
            groups=[create_group("smith", "Smith")],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["g1"], 1, ByGroupId("smith"))

        assert "t1" not in snapshot.tables_of("g1")

    def test_new_group_table_follows_group_tables(self, run_log):
        """Tables after the group's last table shift up to make room."""
        snapshot = build_snapshot(
            guests=[create_guest("g1", adults=2, group_id="a"), create_guest("x", adults=2, group_id="a")],
            tables=[
                create_table("a1", 1, capacity=2, group_id="a"),
                create_table("b1", 2, group_id="b"),
                create_table("b2", 3, group_id="b"),
            ],
            assignments=[create_assignment("a1", "x", 2)],
            groups=[create_group("a", "Alpha"), create_group("b", "Beta")],
        )
        engine = make_engine(snapshot, run_log, order=[ByGroupId("a"), ByGroupId("b")])

        engine.place(snapshot.guests["g1"], 2, ByGroupId("a"))

        new_table = snapshot.tables[snapshot.new_table_ids[0]]
        assert new_table.number == 2
        assert snapshot.tables["b1"].number == 3
        assert snapshot.tables["b2"].number == 4


class TestUngroupedPool:
    def test_generic_name_for_ungrouped_table(self, run_log):
        snapshot = build_snapshot(guests=[create_guest("g1")])
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["g1"], 1, UNGROUPED)

        table = snapshot.tables[snapshot.new_table_ids[0]]
        assert table.name == "שולחן 1"
        assert table.number == 1
        assert table.group_id is None

    def test_lowest_number_wins_without_preferences(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("g1", adults=2)],
            tables=[create_table("t3", 3), create_table("t1", 1), create_table("t2", 2)],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["g1"], 2, UNGROUPED)

        assert snapshot.tables_of("g1") == {"t1"}

    def test_occupied_table_before_empty_lower_number(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("a", adults=2), create_guest("b", adults=2)],
            tables=[create_table("t1", 1), create_table("t2", 2)],
            assignments=[create_assignment("t2", "b", 2)],
            preferences=[create_preference("p1", "a", "b", pref_type="together")],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["a"], 2, UNGROUPED)

        assert snapshot.tables_of("a") == {"t2"}

    def test_fill_order_outranks_affinity(self, run_log):
        """Earlier tables fill first, whatever the affinity."""
        snapshot = build_snapshot(
            guests=[create_guest("a", adults=2), create_guest("b", adults=2), create_guest("c", adults=2)],
            tables=[create_table("t1", 1), create_table("t2", 2)],
            assignments=[create_assignment("t1", "c", 2), create_assignment("t2", "b", 2)],
            preferences=[create_preference("p1", "a", "b", pref_type="together")],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["a"], 2, UNGROUPED)

        assert snapshot.tables_of("a") == {"t1"}

    def test_apart_partner_forces_another_table(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("a"), create_guest("b")],
            tables=[create_table("t1", 1)],
            assignments=[create_assignment("t1", "b", 1)],
            preferences=[create_preference("p1", "a", "b")],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["a"], 1, UNGROUPED)

        assert "t1" not in snapshot.tables_of("a")
        assert run_log.rejections["hard"]["apart_preference"]

    def test_new_table_next_to_apart_partner_left_empty(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("a", group_id="a"), create_guest("b", group_id="b")],
            tables=[create_table("a1", 1, group_id="a")],
            assignments=[create_assignment("a1", "a", 1)],
            preferences=[create_preference("p1", "a", "b", scope="adjacentTables")],
            groups=[create_group("a", "Alpha"), create_group("b", "Beta")],
            settings={"adjacencyPolicy": "forbidSameAndAdjacent"},
        )
        engine = make_engine(snapshot, run_log, order=[ByGroupId("a"), ByGroupId("b")])

        placed = engine.place(snapshot.guests["b"], 1, ByGroupId("b"))

        assert placed == 1
        assert seats_at(snapshot, "b") == {3: 1}
        skipped = [tid for tid in snapshot.new_table_ids if snapshot.tables[tid].number == 2]
        assert snapshot.occupied_seats(skipped[0]) == 0
        assert run_log.rejections["hard"]["apart_preference"]

    def test_soft_rejection_used_when_nothing_else_fits(self, run_log):
        """A single still joins a couples table rather than opening a new one."""
        snapshot = build_snapshot(
            guests=[create_guest("s"), create_guest("c1", adults=2)],
            tables=[create_table("t1", 1)],
            assignments=[create_assignment("t1", "c1", 2)],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["s"], 1, UNGROUPED)

        assert snapshot.tables_of("s") == {"t1"}
        assert snapshot.new_table_ids == []
        assert run_log.rejections["soft"]["singles_alone"]

    def test_single_prefers_table_with_other_singles(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("s"), create_guest("c1", adults=2), create_guest("s2")],
            tables=[create_table("t1", 1), create_table("t2", 2)],
            assignments=[create_assignment("t1", "c1", 2), create_assignment("t2", "s2", 1)],
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["s"], 1, UNGROUPED)

        assert snapshot.tables_of("s") == {"t2"}


class TestZones:
    def _snapshot(self, enabled):
        return build_snapshot(
            guests=[create_guest("g1", zone_preference="stage")],
            tables=[
                create_table("general", 1, zone="general"),
                create_table("stage", 2, zone="stage"),
                create_table("dance", 3, zone="dance"),
            ],
            settings={"enableZonePlacement": enabled},
        )

    def test_preferred_zone_wins_when_enabled(self, run_log):
        snapshot = self._snapshot(enabled=True)
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["g1"], 1, UNGROUPED)

        assert snapshot.tables_of("g1") == {"stage"}

    def test_zones_ignored_when_disabled(self, run_log):
        snapshot = self._snapshot(enabled=False)
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["g1"], 1, UNGROUPED)

        assert snapshot.tables_of("g1") == {"general"}

    def test_other_zones_are_excluded(self, run_log):
        snapshot = build_snapshot(
            guests=[create_guest("g1", zone_preference="quiet")],
            tables=[create_table("dance", 1, zone="dance"), create_table("general", 2, zone="general")],
            settings={"enableZonePlacement": True},
        )
        engine = make_engine(snapshot, run_log)

        engine.place(snapshot.guests["g1"], 1, UNGROUPED)

        assert snapshot.tables_of("g1") == {"general"}


class TestTableBudget:
    def test_budget_exhausted_raises(self, run_log):
        snapshot = build_snapshot(guests=[create_guest("g1")], settings={"maxTablesPerRun": 1})
        open_table(snapshot, name=None, number=1, capacity=4, key=UNGROUPED, run_log=run_log, reason="test")

        with pytest.raises(TableLimitExceededError):
            ensure_table_budget(snapshot)

    def test_budget_checked_before_tables_shift(self, run_log):
        """The second table is refused before anything else moves again."""
        snapshot = build_snapshot(
            guests=[create_guest("g1", adults=12, group_id="a")],
            tables=[create_table("b1", 1, group_id="b")],
            groups=[create_group("a", "Alpha"), create_group("b", "Beta")],
            settings={"maxTablesPerRun": 1, "seatsPerTable": 10},
        )
        engine = make_engine(snapshot, run_log, order=[ByGroupId("a"), ByGroupId("b")])

        with pytest.raises(TableLimitExceededError):
            engine.place(snapshot.guests["g1"], 12, ByGroupId("a"))

        assert snapshot.tables["b1"].number == 2
        assert len(snapshot.new_table_ids) == 1
