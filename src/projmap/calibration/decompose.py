"""
Camera matrix decomposition and OpenGL matrix construction.

Pure functions - numpy arrays in, numpy arrays out.
"""

from __future__ import annotations

import cv2
import numpy as np

from .errors import DegenerateConfigurationError


# ============================================================================
# RQ Decomposition
# ============================================================================


def decompose_camera_matrix(
    camera_matrix: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Split a 3x4 camera matrix into intrinsics, rotation and translation.

    The left 3x3 block is RQ-decomposed into K @ R. Signs are normalized so
    that diag(K) > 0 and det(R) == +1, and K is scaled so K[2, 2] == 1. The
    camera matrix is rescaled by the same factors (it is only defined up to
    scale), which makes t = K^-1 @ M[:, 3] the translation of a rigid
    transform.

    Args:
        camera_matrix: 3x4 camera matrix

    Returns:
        (scaled camera matrix, K, R, t)

    Raises:
        DegenerateConfigurationError: If the left 3x3 block is singular
    """
    m = np.asarray(camera_matrix, dtype=np.float64)
    left = np.ascontiguousarray(m[:, :3])

    try:
        _, k, r, _, _, _ = cv2.RQDecomp3x3(left)
    except cv2.error as exc:
        raise DegenerateConfigurationError(f"RQ decomposition failed: {exc}") from exc

    k = np.asarray(k, dtype=np.float64)
    r = np.asarray(r, dtype=np.float64)

    diagonal = np.diag(k)
    if np.any(np.abs(diagonal) <= 1e-12 * np.abs(diagonal).max(initial=0.0)):
        raise DegenerateConfigurationError("Camera matrix has a singular 3x3 block")

    # D @ D == I, so K @ R == (K @ D) @ (D @ R)
    d = np.diag(np.sign(diagonal))
    k = k @ d
    r = d @ r

    scale = 1.0
    if np.linalg.det(r) < 0:
        # -M == K @ (-R)
        r = -r
        scale = -1.0

    k22 = k[2, 2]
    k = k / k22
    m = scale * m / k22

    t = np.linalg.solve(k, m[:, 3])
    return m, k, r, t


# ============================================================================
# OpenGL Matrices
# ============================================================================


def opengl_matrices(
    intrinsics: np.ndarray,
    rotation: np.ndarray,
    translation: np.ndarray,
    model: np.ndarray,
    near: float,
    far: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Build OpenGL projection and modelview matrices for a decomposed camera.

    The solve works directly in NDC, so the viewport is the centred square
    [-1, 1]^2 and no pixel-to-device offset is applied. The camera frame
    of [R | t] looks down +z or -z depending on the handedness of the
    correspondences; a 180 degree rotation maps it onto the OpenGL eye frame
    (looking down -z) so that the modelview stays a rigid transform.

    Args:
        intrinsics: 3x3 K with K[2, 2] == 1
        rotation: 3x3 rotation matrix
        translation: (3,) translation vector
        model: (n, 3) model points, used to find which side is in front
        near: Near clipping plane distance
        far: Far clipping plane distance

    Returns:
        (projection, modelview) as 4x4 arrays

    Raises:
        DegenerateConfigurationError: If the points sit on the camera plane
    """
    depths = (model @ rotation.T + translation)[:, 2]
    mean_depth = float(np.mean(depths))
    if mean_depth == 0.0 or not np.isfinite(mean_depth):
        raise DegenerateConfigurationError("Model points lie on the camera plane")

    if mean_depth > 0:
        sigma = 1.0
        flip = np.diag([1.0, -1.0, -1.0])
    else:
        sigma = -1.0
        flip = np.diag([-1.0, -1.0, 1.0])

    modelview = np.eye(4, dtype=np.float64)
    modelview[0:3, 0:3] = flip @ rotation
    modelview[0:3, 3] = flip @ translation

    kf = sigma * (intrinsics @ flip)

    projection = np.zeros((4, 4), dtype=np.float64)
    projection[0, 0:3] = kf[0]
    projection[1, 0:3] = kf[1]
    projection[2, 2] = -(far + near) / (far - near)
    projection[2, 3] = -2.0 * far * near / (far - near)
    projection[3, 2] = -1.0

    return projection, modelview
