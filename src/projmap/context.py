"""
Per-view editable set of projector correspondences.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .preferences import PreferencesStore
from .types import Vec3

logger = logging.getLogger(__name__)

NO_SELECTION = -1


def _key(view_index: int, *parts: object) -> str:
    return ".".join(["calibration", str(view_index), *(str(p) for p in parts)])


@dataclass
class CalibrationContext:
    """
    Correspondences between model points and NDC points for one view.

    model_vertices[i] pairs with projected_vertices[i]. Projected points are
    NDC with z fixed to 0. current_selection is NO_SELECTION or a valid index.
    """

    model_vertices: list[Vec3] = field(default_factory=list)
    projected_vertices: list[Vec3] = field(default_factory=list)
    current_selection: int = NO_SELECTION
    calibrated: bool = False
    last_error: float | None = None

    def __len__(self) -> int:
        return len(self.model_vertices)

    @property
    def selected(self) -> int | None:
        """Selected index, or None."""
        if self.current_selection == NO_SELECTION:
            return None
        return self.current_selection

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def index_of(self, model_vertex: Vec3) -> int:
        """Index of an exactly equal model vertex, or NO_SELECTION."""
        try:
            return self.model_vertices.index(model_vertex)
        except ValueError:
            return NO_SELECTION

    def add(self, model_vertex: Vec3, projected_vertex: Vec3) -> int:
        """Append a pair and select it."""
        self.model_vertices.append(model_vertex)
        self.projected_vertices.append(Vec3(projected_vertex.x, projected_vertex.y, 0.0))
        self.current_selection = len(self.model_vertices) - 1
        return self.current_selection

    def move(self, index: int, projected_vertex: Vec3) -> None:
        """Replace the projected point of pair `index`."""
        self.projected_vertices[index] = Vec3(projected_vertex.x, projected_vertex.y, 0.0)

    def remove(self, index: int) -> None:
        """Delete pair `index` and clear the selection."""
        del self.model_vertices[index]
        del self.projected_vertices[index]
        self.current_selection = NO_SELECTION

    def select(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"Selection {index} out of range for {len(self)} pairs")
        self.current_selection = index

    def clear_selection(self) -> None:
        self.current_selection = NO_SELECTION

    def check_invariants(self) -> None:
        """Raise AssertionError if the context is inconsistent."""
        assert len(self.model_vertices) == len(self.projected_vertices)
        assert self.current_selection == NO_SELECTION or 0 <= self.current_selection < len(self)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, store: PreferencesStore, view_index: int) -> None:
        """
        Replace the correspondences with the ones stored for `view_index`.

        A missing or unreadable entry leaves the context empty.
        """
        model: list[Vec3] = []
        projected: list[Vec3] = []

        try:
            n = store.get_int(_key(view_index, "N"))
            for i in range(n or 0):
                values = [
                    store.get_double(_key(view_index, i, name))
                    for name in ("mx", "my", "mz", "px", "py")
                ]
                if any(v is None for v in values):
                    raise KeyError(f"Incomplete correspondence {i}")
                mx, my, mz, px, py = values
                model.append(Vec3(mx, my, mz))
                projected.append(Vec3(px, py, 0.0))
        except Exception as e:
            logger.warning(f"Could not load calibration for view {view_index}: {e}")
            model, projected = [], []

        self.model_vertices = model
        self.projected_vertices = projected
        self.current_selection = NO_SELECTION
        self.calibrated = False
        self.last_error = None

        logger.info(f"Loaded {len(model)} correspondences for view {view_index}")

    def save(self, store: PreferencesStore, view_index: int) -> None:
        """Write the correspondences under `view_index`."""
        store.put_int(_key(view_index, "N"), len(self))
        for i, (m, p) in enumerate(zip(self.model_vertices, self.projected_vertices)):
            store.put_double(_key(view_index, i, "mx"), m.x)
            store.put_double(_key(view_index, i, "my"), m.y)
            store.put_double(_key(view_index, i, "mz"), m.z)
            store.put_double(_key(view_index, i, "px"), p.x)
            store.put_double(_key(view_index, i, "py"), p.y)

        logger.info(f"Saved {len(self)} correspondences for view {view_index}")
