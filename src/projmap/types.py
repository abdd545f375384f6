"""
Core data structures for projmap.

Frozen dataclasses with slots, like the rest of the package.
Logic is in separate pure functions - these are data containers only.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


# ============================================================================
# Points
# ============================================================================


@dataclass(frozen=True, slots=True)
class Vec3:
    """
    Three real numbers.

    Equality is exact (no tolerance), so floating point drift in model data
    defeats deduplication of picked vertices.
    """

    x: float
    y: float
    z: float = 0.0

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


def points_to_array(points: list[Vec3]) -> np.ndarray:
    """
    Stack a list of Vec3 into an (n, 3) float64 array.
    """
    if len(points) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return np.array([(p.x, p.y, p.z) for p in points], dtype=np.float64)


# ============================================================================
# Camera Solution
# ============================================================================


@dataclass(frozen=True, slots=True)
class CameraSolution:
    """
    Result of a projector calibration.

    camera_matrix maps homogeneous model points to homogeneous NDC points,
    scaled so that camera_matrix == intrinsics @ [rotation | translation].
    projection and modelview are 4x4 OpenGL matrices in math index order;
    use as_column_major() to hand them to a renderer.
    """

    camera_matrix: np.ndarray  # 3x4
    intrinsics: np.ndarray  # 3x3 upper triangular, K[2,2] == 1
    rotation: np.ndarray  # 3x3, det == +1
    translation: np.ndarray  # (3,)
    projection: np.ndarray  # 4x4
    modelview: np.ndarray  # 4x4
    error: float  # Mean reprojection error in NDC
    residuals: np.ndarray  # (n,) per-point reprojection distance in NDC


# ============================================================================
# Pure functions
# ============================================================================


def as_column_major(matrix: np.ndarray) -> list[float]:
    """
    Flatten a 4x4 matrix into the 16-float column-major layout used by OpenGL.
    """
    return [float(v) for v in np.asarray(matrix, dtype=np.float64).T.ravel()]


def project_points(camera_matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Project (n, 3) model points through a 3x4 camera matrix.

    Returns:
        (n, 2) array of projected coordinates
    """
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    projected = homogeneous @ camera_matrix.T
    return projected[:, :2] / projected[:, 2:3]


def project_through_gl(
    projection: np.ndarray,
    modelview: np.ndarray,
    points: np.ndarray,
) -> np.ndarray:
    """
    Apply projection @ modelview to (n, 3) model points and return NDC.

    Returns:
        (n, 3) array of normalized device coordinates (x, y, depth)
    """
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    clip = homogeneous @ (projection @ modelview).T
    return clip[:, :3] / clip[:, 3:4]
