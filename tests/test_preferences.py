"""
Tests for projmap.preferences.
"""

import logging

import pytest

from projmap import preferences
from projmap.preferences import MemoryPreferences, TomlPreferences, get_store, set_store


class TestMemoryPreferences:
    def test_defaults_for_missing_keys(self, store):
        assert store.get_int("a.b") is None
        assert store.get_int("a.b", 4) == 4
        assert store.get_double("a.c", 1.5) == 1.5

    def test_values_are_strings(self, store):
        store.put_int("n", 3)
        store.put_double("x", 0.1)
        assert store._raw() == {"n": "3", "x": "0.1"}

    def test_double_roundtrip_is_bitwise(self, store):
        value = 0.1 + 0.2
        store.put_double("x", value)
        assert store.get_double("x") == value

    def test_remove_and_keys(self, store):
        store.put_int("b", 1)
        store.put_int("a", 2)
        store.remove("b")
        store.remove("missing")
        assert store.keys() == ["a"]


class TestTomlPreferences:
    def test_flush_and_reload(self, temp_dir):
        path = temp_dir / "nested" / "prefs.toml"
        prefs = TomlPreferences(path)
        prefs.put_int("calibration.0.N", 1)
        prefs.put_double("calibration.0.0.mx", 1.0 / 3.0)
        prefs.flush()

        assert path.exists()
        reloaded = TomlPreferences(path)
        assert reloaded.get_int("calibration.0.N") == 1
        assert reloaded.get_double("calibration.0.0.mx") == 1.0 / 3.0

    def test_missing_file_is_empty(self, temp_dir):
        prefs = TomlPreferences(temp_dir / "absent.toml")
        assert prefs.keys() == []

    def test_unreadable_file_is_empty(self, temp_dir, caplog):
        path = temp_dir / "broken.toml"
        path.write_text("this is = = not toml [[")

        with caplog.at_level(logging.WARNING, logger="projmap.preferences"):
            prefs = TomlPreferences(path)
            assert prefs.get_int("calibration.0.N") is None

        assert "unreadable" in caplog.text


class TestGlobalStore:
    @pytest.fixture(autouse=True)
    def _restore(self):
        saved = preferences._store
        yield
        set_store(saved)

    def test_created_once(self):
        set_store(None)
        first = get_store()
        assert isinstance(first, TomlPreferences)
        assert get_store() is first

    def test_replace(self):
        memory = MemoryPreferences()
        set_store(memory)
        assert get_store() is memory

    def test_path_used_on_creation(self, temp_dir):
        set_store(None)
        first = get_store(temp_dir / "prefs.toml")
        assert first.path == temp_dir / "prefs.toml"
        assert get_store(temp_dir / "other.toml") is first
