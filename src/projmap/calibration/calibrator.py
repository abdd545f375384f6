"""
Bimber-Raskar projector calibration.

solve_camera() is the pure entry point. BimberRaskarCalibrator wraps it
with the stateful calibrate()/getter interface the calibration tool uses.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from ..types import CameraSolution, Vec3, points_to_array
from .decompose import decompose_camera_matrix, opengl_matrices
from .dlt import reprojection_residuals, solve_camera_matrix
from .errors import CalibrationError, InsufficientCorrespondencesError

MIN_CORRESPONDENCES = 6


# ============================================================================
# Pure Solve
# ============================================================================


def solve_camera(
    model_vertices: Sequence[Vec3],
    projected_vertices: Sequence[Vec3],
    near: float,
    far: float,
    min_correspondences: int = MIN_CORRESPONDENCES,
) -> CameraSolution:
    """
    Compute a projector camera from 3D <-> NDC correspondences.

    Args:
        model_vertices: Points in model space
        projected_vertices: Matching points in NDC (z is ignored)
        near: Near clipping plane distance, > 0
        far: Far clipping plane distance, > near
        min_correspondences: Refuse to solve with fewer pairs

    Returns:
        CameraSolution with OpenGL projection and modelview matrices

    Raises:
        InsufficientCorrespondencesError: If there are too few pairs
        DegenerateConfigurationError: If the configuration is singular
        CalibrationError: If the inputs are inconsistent
    """
    if len(model_vertices) != len(projected_vertices):
        raise CalibrationError(
            f"Point count mismatch: {len(model_vertices)} model vs "
            f"{len(projected_vertices)} projected"
        )
    if len(model_vertices) < min_correspondences:
        raise InsufficientCorrespondencesError(
            f"Insufficient correspondences: {len(model_vertices)} "
            f"(need at least {min_correspondences})"
        )
    if not 0.0 < near < far:
        raise CalibrationError(f"Invalid clip planes: near={near}, far={far}")

    model = points_to_array(list(model_vertices))
    ndc = points_to_array(list(projected_vertices))[:, :2]

    m = solve_camera_matrix(model, ndc)
    residuals = reprojection_residuals(m, model, ndc)

    m, k, r, t = decompose_camera_matrix(m)
    projection, modelview = opengl_matrices(k, r, t, model, near, far)

    return CameraSolution(
        camera_matrix=m,
        intrinsics=k,
        rotation=r,
        translation=t,
        projection=projection,
        modelview=modelview,
        error=float(np.mean(residuals)),
        residuals=residuals,
    )


# ============================================================================
# Stateful Calibrator
# ============================================================================


class Calibrator(Protocol):
    """Solves a camera and keeps the matrices of the last successful solve."""

    def calibrate(
        self,
        model_vertices: Sequence[Vec3],
        projected_vertices: Sequence[Vec3],
        near: float,
        far: float,
    ) -> float: ...

    @property
    def projection_matrix(self) -> np.ndarray: ...

    @property
    def modelview_matrix(self) -> np.ndarray: ...


class BimberRaskarCalibrator:
    """
    Linear projector calibration after Bimber and Raskar.

    A failed calibrate() raises and leaves the previous matrices in place.
    """

    def __init__(self, min_correspondences: int = MIN_CORRESPONDENCES):
        self.min_correspondences = min_correspondences
        self._solution: CameraSolution | None = None

    @property
    def solution(self) -> CameraSolution | None:
        """Last successful solution, or None."""
        return self._solution

    @property
    def projection_matrix(self) -> np.ndarray:
        if self._solution is None:
            return np.eye(4, dtype=np.float64)
        return self._solution.projection.copy()

    @property
    def modelview_matrix(self) -> np.ndarray:
        if self._solution is None:
            return np.eye(4, dtype=np.float64)
        return self._solution.modelview.copy()

    def calibrate(
        self,
        model_vertices: Sequence[Vec3],
        projected_vertices: Sequence[Vec3],
        near: float,
        far: float,
    ) -> float:
        """
        Solve and store the camera.

        Returns:
            Mean reprojection error in NDC
        """
        self._solution = solve_camera(
            model_vertices,
            projected_vertices,
            near,
            far,
            min_correspondences=self.min_correspondences,
        )
        return self._solution.error
