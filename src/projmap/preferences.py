"""
String-keyed persistent preferences.

Values are stored as strings, so doubles survive a round trip bit for bit.
The process-wide store is created on first use and never torn down; code
that touches it takes the store as an argument so tests can stay hermetic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import rtoml

from .config import DEFAULT_PREFERENCES_PATH

logger = logging.getLogger(__name__)


class PreferencesStore(Protocol):
    """Hierarchical key/value store addressed by dotted string keys."""

    def put_int(self, key: str, value: int) -> None: ...

    def put_double(self, key: str, value: float) -> None: ...

    def get_int(self, key: str, default: int | None = None) -> int | None: ...

    def get_double(self, key: str, default: float | None = None) -> float | None: ...

    def flush(self) -> None: ...


class MemoryPreferences:
    """In-process preferences store."""

    def __init__(self, values: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(values or {})

    def _raw(self) -> dict[str, str]:
        return self._values

    def put_int(self, key: str, value: int) -> None:
        self._raw()[key] = str(int(value))

    def put_double(self, key: str, value: float) -> None:
        self._raw()[key] = repr(float(value))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self._raw().get(key)
        if value is None:
            return default
        return int(value)

    def get_double(self, key: str, default: float | None = None) -> float | None:
        value = self._raw().get(key)
        if value is None:
            return default
        return float(value)

    def remove(self, key: str) -> None:
        self._raw().pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._raw())

    def flush(self) -> None:
        pass


class TomlPreferences(MemoryPreferences):
    """
    Preferences persisted to a flat TOML table of strings.

    The file is read on first access and written by flush().
    An unreadable file behaves as an empty store.
    """

    def __init__(self, path: Path = DEFAULT_PREFERENCES_PATH):
        super().__init__()
        self.path = Path(path)
        self._loaded = False

    def _raw(self) -> dict[str, str]:
        if not self._loaded:
            self._loaded = True
            self._values = self._read()
        return self._values

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = rtoml.load(self.path)
        except (OSError, rtoml.TomlParsingError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        return {key: str(value) for key, value in data.items() if not isinstance(value, dict)}

    def flush(self) -> None:
        """Write all values to disk."""
        values = self._raw()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            rtoml.dump(values, f)
        logger.info(f"Preferences written to {self.path}")


# ============================================================================
# Process-wide store
# ============================================================================

_store: PreferencesStore | None = None


def get_store(path: Path | None = None) -> PreferencesStore:
    """
    Process-wide preferences store, created on first use.

    `path` only matters for the call that creates the store.
    """
    global _store
    if _store is None:
        _store = TomlPreferences(path or DEFAULT_PREFERENCES_PATH)
    return _store


def set_store(store: PreferencesStore | None) -> None:
    """Replace the process-wide store (None resets to lazy creation)."""
    global _store
    _store = store
