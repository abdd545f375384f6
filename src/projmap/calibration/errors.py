"""
Exceptions raised by the calibration functions.
"""


class CalibrationError(ValueError):
    """The correspondences cannot be turned into a camera."""


class InsufficientCorrespondencesError(CalibrationError):
    """Fewer correspondences than the linear solve needs."""


class DegenerateConfigurationError(CalibrationError):
    """The linear system or the camera matrix is singular."""
