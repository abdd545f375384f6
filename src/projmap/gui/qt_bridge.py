"""
Adapter from Qt input events to the calibration tool.

The widget owning the bridge implements the View protocol (size, matrices,
repaint) and forwards its keyPressEvent / mousePressEvent / mouseMoveEvent
here. The bridge holds no calibration state of its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Qt, Signal

from ..tool import CalibrationTool, Key, KeyEvent, MouseEvent

if TYPE_CHECKING:
    from PySide6.QtGui import QKeyEvent, QMouseEvent
    from ..tool import View


QT_KEYS: dict[int, Key] = {
    Qt.Key.Key_C.value: Key.C,
    Qt.Key.Key_L.value: Key.L,
    Qt.Key.Key_S.value: Key.S,
    Qt.Key.Key_Up.value: Key.UP,
    Qt.Key.Key_Down.value: Key.DOWN,
    Qt.Key.Key_Left.value: Key.LEFT,
    Qt.Key.Key_Right.value: Key.RIGHT,
    Qt.Key.Key_Backspace.value: Key.BACKSPACE,
    Qt.Key.Key_Delete.value: Key.DELETE,
}


def key_from_qt(qt_key) -> Key | None:
    """Map a Qt key code (enum member or int) to a Key, or None."""
    return QT_KEYS.get(int(getattr(qt_key, "value", qt_key)))


class QtCalibrationBridge(QObject):
    """
    Forwards Qt events of one view to a CalibrationTool.

    Emits calibration_changed with the view's calibrated flag after every
    handled event.
    """

    calibration_changed = Signal(bool)

    def __init__(
        self,
        tool: CalibrationTool,
        view: "View",
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self.tool = tool
        self.view = view

    def key_press(self, event: "QKeyEvent") -> None:
        key = key_from_qt(event.key())
        self.tool.key_pressed(KeyEvent(key if key is not None else event.key()), self.view)
        self._emit()

    def mouse_press(self, event: "QMouseEvent") -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        self.tool.mouse_pressed(MouseEvent(int(pos.x()), int(pos.y())), self.view)
        self._emit()

    def mouse_move(self, event: "QMouseEvent") -> None:
        # Drags only; hover moves are ignored
        if not event.buttons() & Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        self.tool.mouse_dragged(MouseEvent(int(pos.x()), int(pos.y())), self.view)
        self._emit()

    def _emit(self) -> None:
        self.calibration_changed.emit(self.tool.get_context(self.view).calibrated)
