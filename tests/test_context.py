"""
Tests for projmap.context.
"""

import logging

import pytest

from projmap.context import NO_SELECTION, CalibrationContext
from projmap.preferences import MemoryPreferences
from projmap.types import Vec3


@pytest.fixture
def context(cube_points):
    context = CalibrationContext()
    for i, p in enumerate(cube_points[:7]):
        context.add(p, Vec3(0.1 * i - 0.3, 0.05 * i, 0.0))
    context.clear_selection()
    return context


class TestEditing:
    def test_empty_defaults(self):
        context = CalibrationContext()
        assert len(context) == 0
        assert context.current_selection == NO_SELECTION
        assert context.selected is None
        assert context.calibrated is False
        assert context.last_error is None

    def test_add_selects_new_pair(self):
        context = CalibrationContext()
        index = context.add(Vec3(1.0, 2.0, 3.0), Vec3(0.5, 0.5, 9.0))
        assert index == 0
        assert context.current_selection == 0
        # Projected z is always stored as 0
        assert context.projected_vertices[0] == Vec3(0.5, 0.5, 0.0)
        context.check_invariants()

    def test_index_of_uses_exact_equality(self, context, cube_points):
        assert context.index_of(cube_points[3]) == 3
        p = cube_points[3]
        assert context.index_of(Vec3(p.x + 1e-12, p.y, p.z)) == NO_SELECTION

    def test_move(self, context):
        context.move(2, Vec3(0.9, -0.9))
        assert context.projected_vertices[2] == Vec3(0.9, -0.9, 0.0)
        assert len(context) == 7

    def test_remove_clears_selection(self, context, cube_points):
        context.select(4)
        context.remove(4)
        assert len(context) == 6
        assert context.current_selection == NO_SELECTION
        assert cube_points[4] not in context.model_vertices
        context.check_invariants()

    def test_select_out_of_range(self, context):
        with pytest.raises(IndexError):
            context.select(7)
        with pytest.raises(IndexError):
            context.select(-1)

    def test_check_invariants_detects_mismatch(self, context):
        context.projected_vertices.pop()
        with pytest.raises(AssertionError):
            context.check_invariants()


class TestPersistence:
    def test_save_load_roundtrip_is_exact(self, context, store):
        context.projected_vertices[0] = Vec3(1.0 / 3.0, -2.0 / 7.0, 0.0)

        context.save(store, 0)
        loaded = CalibrationContext()
        loaded.load(store, 0)

        assert loaded.model_vertices == context.model_vertices
        assert loaded.projected_vertices == context.projected_vertices

    def test_keys(self, context, store):
        context.save(store, 3)
        assert store.get_int("calibration.3.N") == 7
        assert store.get_double("calibration.3.0.mx") == context.model_vertices[0].x
        assert store.get_double("calibration.3.6.py") == context.projected_vertices[6].y

    def test_load_clears_state(self, context, store):
        context.save(store, 0)
        target = CalibrationContext()
        target.add(Vec3(9.0, 9.0, 9.0), Vec3(0.0, 0.0))
        target.calibrated = True

        target.load(store, 0)

        assert len(target) == 7
        assert target.current_selection == NO_SELECTION
        assert target.calibrated is False

    def test_missing_count_gives_empty_context(self, context, store):
        context.load(store, 5)
        assert len(context) == 0

    def test_views_are_independent(self, context, store):
        context.save(store, 0)
        CalibrationContext().save(store, 1)

        other = CalibrationContext()
        other.load(store, 1)
        assert len(other) == 0

    def test_corrupt_store_gives_empty_context(self, context, caplog):
        store = MemoryPreferences({"calibration.0.N": "2", "calibration.0.0.mx": "oops"})

        with caplog.at_level(logging.WARNING, logger="projmap.context"):
            context.load(store, 0)

        assert len(context) == 0
        assert "Could not load calibration" in caplog.text

    def test_incomplete_store_gives_empty_context(self, context, store):
        context.save(store, 0)
        store.remove("calibration.0.3.pz")
        store.remove("calibration.0.3.py")

        loaded = CalibrationContext()
        loaded.load(store, 0)
        assert len(loaded) == 0

    def test_failing_store_gives_empty_context(self, context):
        class BrokenStore(MemoryPreferences):
            def get_int(self, key, default=None):
                raise OSError("disk on fire")

        context.load(BrokenStore(), 0)
        assert len(context) == 0
