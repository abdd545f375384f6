"""
Direct Linear Transform solve for a projector camera matrix.

The twelfth camera matrix entry is fixed to 1, which turns the homogeneous
DLT into an inhomogeneous 2N x 11 least-squares problem.
"""

from __future__ import annotations

import numpy as np
from numba import jit

from ..types import project_points
from .errors import DegenerateConfigurationError

# Singular values below RANK_TOLERANCE * s_max count as zero.
RANK_TOLERANCE = 1e-10


# ============================================================================
# Numba Kernel
# ============================================================================


@jit(nopython=True, cache=True)
def _build_dlt_system(
    model: np.ndarray,
    ndc: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Build the 2N x 11 matrix and the right hand side of the DLT system.

    Args:
        model: (n, 3) model space points
        ndc: (n, 2) normalized device coordinates

    Returns:
        (A, b) with A @ p == b for the 11 free camera matrix entries
    """
    n = model.shape[0]
    a = np.zeros((2 * n, 11))
    b = np.zeros(2 * n)

    for i in range(n):
        x = model[i, 0]
        y = model[i, 1]
        z = model[i, 2]
        u = ndc[i, 0]
        v = ndc[i, 1]

        r = 2 * i
        a[r, 0] = x
        a[r, 1] = y
        a[r, 2] = z
        a[r, 3] = 1.0
        a[r, 8] = -u * x
        a[r, 9] = -u * y
        a[r, 10] = -u * z
        b[r] = u

        a[r + 1, 4] = x
        a[r + 1, 5] = y
        a[r + 1, 6] = z
        a[r + 1, 7] = 1.0
        a[r + 1, 8] = -v * x
        a[r + 1, 9] = -v * y
        a[r + 1, 10] = -v * z
        b[r + 1] = v

    return a, b


# ============================================================================
# Solve
# ============================================================================


def solve_camera_matrix(model: np.ndarray, ndc: np.ndarray) -> np.ndarray:
    """
    Least-squares solve for the 3x4 camera matrix.

    Args:
        model: (n, 3) model space points
        ndc: (n, 2) or (n, 3) NDC points; only x and y are used

    Returns:
        3x4 camera matrix with M[2, 3] == 1

    Raises:
        DegenerateConfigurationError: If the system is rank deficient
    """
    model = np.ascontiguousarray(model, dtype=np.float64)
    ndc = np.ascontiguousarray(ndc[:, :2], dtype=np.float64)

    a, b = _build_dlt_system(model, ndc)

    try:
        p, _, rank, _ = np.linalg.lstsq(a, b, rcond=RANK_TOLERANCE)
    except np.linalg.LinAlgError as exc:
        raise DegenerateConfigurationError(f"Least-squares solve failed: {exc}") from exc

    if rank < 11:
        raise DegenerateConfigurationError(
            f"Degenerate correspondences: system rank {rank} (need 11)"
        )
    if not np.all(np.isfinite(p)):
        raise DegenerateConfigurationError("Least-squares solution is not finite")

    return np.append(p, 1.0).reshape(3, 4)


def reprojection_residuals(
    camera_matrix: np.ndarray,
    model: np.ndarray,
    ndc: np.ndarray,
) -> np.ndarray:
    """
    Euclidean NDC distance between projected model points and their targets.

    Returns:
        (n,) array of distances

    Raises:
        DegenerateConfigurationError: If a point projects to infinity
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        projected = project_points(camera_matrix, model)
    residuals = np.linalg.norm(projected - ndc[:, :2], axis=1)

    if not np.all(np.isfinite(residuals)):
        raise DegenerateConfigurationError("Model point projects to infinity")

    return residuals
