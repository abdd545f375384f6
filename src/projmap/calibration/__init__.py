"""
Calibration module for projmap.

Pure functions plus a thin stateful calibrator. No threading, no I/O.
"""

from .errors import (
    CalibrationError,
    InsufficientCorrespondencesError,
    DegenerateConfigurationError,
)

from .dlt import (
    solve_camera_matrix,
    reprojection_residuals,
)

from .decompose import (
    decompose_camera_matrix,
    opengl_matrices,
)

from .calibrator import (
    MIN_CORRESPONDENCES,
    Calibrator,
    BimberRaskarCalibrator,
    solve_camera,
)

__all__ = [
    # Errors
    "CalibrationError",
    "InsufficientCorrespondencesError",
    "DegenerateConfigurationError",
    # DLT
    "solve_camera_matrix",
    "reprojection_residuals",
    # Decomposition
    "decompose_camera_matrix",
    "opengl_matrices",
    # Calibrator
    "MIN_CORRESPONDENCES",
    "Calibrator",
    "BimberRaskarCalibrator",
    "solve_camera",
]
