"""
Conversions between normalized device coordinates and view pixels.

Screen coordinates are y-up with the origin in the lower left corner, so
callers flip window y (view.height - y) before using them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .tool import View


def device_to_screen_x(view: "View", x: float) -> int:
    return int((1.0 + x) / 2.0 * view.width)


def device_to_screen_y(view: "View", y: float) -> int:
    return int((1.0 + y) / 2.0 * view.height)


def screen_to_device_x(view: "View", x: float) -> float:
    return 2.0 * x / view.width - 1.0


def screen_to_device_y(view: "View", y: float) -> float:
    return 2.0 * y / view.height - 1.0


def pixels_to_device(view: "View", dx: float, dy: float) -> tuple[float, float]:
    """Convert a pixel offset into an NDC offset."""
    return 2.0 * dx / view.width, 2.0 * dy / view.height


def project_to_screen_coordinates(
    view: "View",
    x: float,
    y: float,
    z: float,
) -> np.ndarray | None:
    """
    Project a model point with the view's current matrices.

    Returns:
        (3,) array of screen x, screen y and depth in [0, 1], or None if
        the point is behind the camera or outside the view frustum
    """
    clip = (
        np.asarray(view.projection_matrix, dtype=np.float64)
        @ np.asarray(view.modelview_matrix, dtype=np.float64)
        @ np.array([x, y, z, 1.0])
    )
    if clip[3] <= 0.0:
        return None

    ndc = clip[:3] / clip[3]
    if np.any(np.abs(ndc) > 1.0):
        return None

    return np.array([
        (ndc[0] + 1.0) / 2.0 * view.width,
        (ndc[1] + 1.0) / 2.0 * view.height,
        (ndc[2] + 1.0) / 2.0,
    ])
