"""
Interactive projector calibration tool.

The windowing layer calls key_pressed / mouse_pressed / mouse_dragged on the
event thread. The tool edits the CalibrationContext of the view the event
arrived on, re-solves the camera and pushes the matrices to the view.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence

import numpy as np

from .calibration import BimberRaskarCalibrator, Calibrator
from .config import CalibrationSettings, create_default_settings
from .context import NO_SELECTION, CalibrationContext
from .preferences import PreferencesStore, get_store
from .projection import (
    device_to_screen_x,
    device_to_screen_y,
    pixels_to_device,
    project_to_screen_coordinates,
    screen_to_device_x,
    screen_to_device_y,
)
from .types import Vec3

logger = logging.getLogger(__name__)


# ============================================================================
# Events
# ============================================================================


class Key(Enum):
    """Keys the calibration tool reacts to."""

    C = "c"
    L = "l"
    S = "s"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    BACKSPACE = "backspace"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """A key press. Keys without a Key member carry their native value."""

    key: Key | object


@dataclass(frozen=True, slots=True)
class MouseEvent:
    """Pointer position in window pixels (origin top left, y down)."""

    x: int
    y: int


_NUDGES = {
    Key.UP: (0, 1),
    Key.DOWN: (0, -1),
    Key.LEFT: (-1, 0),
    Key.RIGHT: (1, 0),
}


# ============================================================================
# Collaborators
# ============================================================================


class Scene(Protocol):
    @property
    def views(self) -> Sequence["View"]: ...

    def repaint_all(self) -> None: ...


class View(Protocol):
    width: int
    height: int

    @property
    def scene(self) -> Scene: ...

    @property
    def projection_matrix(self) -> np.ndarray: ...

    @property
    def modelview_matrix(self) -> np.ndarray: ...

    def set_projection_matrix(self, matrix: np.ndarray) -> None: ...

    def set_modelview_matrix(self, matrix: np.ndarray) -> None: ...

    def repaint(self) -> None: ...


class CalibrationModel(Protocol):
    def get_calibration_vertices(self) -> Sequence[float]:
        """Candidate points as consecutive x, y, z triples."""
        ...


class EventHandler(Protocol):
    """Event capabilities the windowing layer dispatches to."""

    def key_pressed(self, event: KeyEvent, view: View) -> None: ...

    def mouse_pressed(self, event: MouseEvent, view: View) -> None: ...

    def mouse_dragged(self, event: MouseEvent, view: View) -> None: ...


# ============================================================================
# Tool
# ============================================================================


class CalibrationTool:
    """
    Edits per-view correspondences from user input and keeps each view's
    camera solved.

    Contexts are keyed by view identity and created on first use. Keys the
    tool does not handle go to `fallback`, if one is given.
    """

    def __init__(
        self,
        model: CalibrationModel,
        calibrator: Calibrator | None = None,
        store: PreferencesStore | None = None,
        settings: CalibrationSettings | None = None,
        fallback: EventHandler | None = None,
    ):
        self.model = model
        self.settings = settings or create_default_settings()
        self.calibrator = calibrator or BimberRaskarCalibrator(
            min_correspondences=self.settings.min_correspondences
        )
        self.fallback = fallback
        self._store = store
        self._contexts: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    @property
    def store(self) -> PreferencesStore:
        if self._store is None:
            return get_store(self.settings.preferences_path)
        return self._store

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def get_context(self, view: View) -> CalibrationContext:
        context = self._contexts.get(view)
        if context is None:
            context = CalibrationContext()
            self._contexts[view] = context
        return context

    def reset(self, view: View) -> CalibrationContext:
        """Replace the view's context with an empty one."""
        context = CalibrationContext()
        self._contexts[view] = context
        return context

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def key_pressed(self, event: KeyEvent, view: View) -> None:
        key = event.key
        if key is Key.C:
            self.reset(view)
        elif key is Key.L:
            self.load_calibration(view)
        elif key is Key.S:
            self.save_calibration(view)
        elif isinstance(key, Key) and key in _NUDGES:
            self.cursor_adjust(view, *_NUDGES[key])
        elif key is Key.BACKSPACE or key is Key.DELETE:
            self.delete_current(view)
        elif self.fallback is not None:
            self.fallback.key_pressed(event, view)
        view.scene.repaint_all()

    def mouse_pressed(self, event: MouseEvent, view: View) -> None:
        context = self.get_context(view)
        context.clear_selection()

        cx = event.x
        cy = view.height - event.y

        # Existing correspondences win over model vertices behind them
        for i, p in enumerate(context.projected_vertices):
            x = device_to_screen_x(view, p.x)
            y = device_to_screen_y(view, p.y)
            if self._snap(cx, cy, x, y):
                context.select(i)
                view.repaint()
                return

        vertices = np.asarray(self.model.get_calibration_vertices(), dtype=np.float64)
        for mx, my, mz in vertices.reshape(-1, 3):
            screen = project_to_screen_coordinates(view, mx, my, mz)
            if screen is None:
                continue
            if not self._snap(cx, cy, int(screen[0]), int(screen[1])):
                continue

            vertex = Vec3(float(mx), float(my), float(mz))
            index = context.index_of(vertex)
            if index != NO_SELECTION:
                context.select(index)
            else:
                cursor = Vec3(screen_to_device_x(view, cx), screen_to_device_y(view, cy))
                context.add(vertex, cursor)
            self.calibrate(view)
            view.repaint()
            return

        view.repaint()

    def mouse_dragged(self, event: MouseEvent, view: View) -> None:
        context = self.get_context(view)
        if context.selected is not None:
            cursor = Vec3(
                screen_to_device_x(view, event.x),
                screen_to_device_y(view, view.height - event.y),
            )
            context.move(context.current_selection, cursor)
            self.calibrate(view)
        view.repaint()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def cursor_adjust(self, view: View, dx: int, dy: int) -> None:
        """Nudge the selected projected point by (dx, dy) pixels."""
        context = self.get_context(view)
        if context.selected is None:
            return
        ndx, ndy = pixels_to_device(view, dx, dy)
        p = context.projected_vertices[context.current_selection]
        context.move(context.current_selection, Vec3(p.x + ndx, p.y + ndy))
        self.calibrate(view)

    def delete_current(self, view: View) -> None:
        context = self.get_context(view)
        if context.selected is None:
            return
        context.remove(context.current_selection)
        self.calibrate(view)

    def load_calibration(self, view: View) -> None:
        """Load every view of the scene from the preferences store and re-solve."""
        store = self.store
        for index, v in enumerate(view.scene.views):
            self.get_context(v).load(store, index)
            self.calibrate(v)

    def save_calibration(self, view: View) -> None:
        """Save every view of the scene to the preferences store."""
        store = self.store
        for index, v in enumerate(view.scene.views):
            self.get_context(v).save(store, index)
        try:
            store.flush()
        except OSError as e:
            logger.warning(f"Could not write preferences: {e}")

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------

    def calibrate(self, view: View) -> bool:
        """
        Re-solve the view's camera.

        Failures are logged at debug level and leave the view's matrices
        untouched.

        Returns:
            True if the view is calibrated afterwards
        """
        context = self.get_context(view)
        context.calibrated = False
        context.last_error = None

        try:
            error = self.calibrator.calibrate(
                context.model_vertices,
                context.projected_vertices,
                self.settings.near,
                self.settings.far,
            )
        except Exception as e:
            logger.debug(f"Calibration with {len(context)} correspondences failed: {e}")
            return False

        context.last_error = error
        if error >= self.settings.max_calibration_error:
            logger.debug(
                f"Calibration error {error:.4f} exceeds "
                f"{self.settings.max_calibration_error} with {len(context)} correspondences"
            )
            return False

        context.calibrated = True
        view.set_projection_matrix(self.calibrator.projection_matrix)
        view.set_modelview_matrix(self.calibrator.modelview_matrix)
        view.repaint()
        return True

    def _snap(self, cx: float, cy: float, tx: float, ty: float) -> bool:
        radius = self.settings.snap_radius
        return abs(cx - tx) <= radius and abs(cy - ty) <= radius
