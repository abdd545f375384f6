"""
Configuration loading/saving.

Pure functions operating on dataclasses.
- TOML for calibration settings
- Correspondences themselves live in the preferences store (see preferences.py)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import rtoml


DEFAULT_PREFERENCES_PATH = Path.home() / ".projmap" / "preferences.toml"
DEFAULT_SETTINGS_PATH = Path.home() / ".projmap" / "settings.toml"


# ============================================================================
# Settings
# ============================================================================


@dataclass(frozen=True, slots=True)
class CalibrationSettings:
    """
    Tunables of the interactive calibration tool.
    Corresponds to the TOML [calibration] and [preferences] sections.
    """

    max_calibration_error: float = 0.5  # NDC units
    snap_radius: int = 8  # Pixels, L-infinity
    min_correspondences: int = 6
    near: float = 0.1  # Clip planes in model units
    far: float = 100.0
    preferences_path: Path = field(default=DEFAULT_PREFERENCES_PATH)

    def __post_init__(self):
        if not 0.0 < self.near < self.far:
            raise ValueError(
                f"Clip planes must satisfy 0 < near < far (got {self.near}, {self.far})"
            )
        if self.snap_radius < 0:
            raise ValueError(f"snap_radius must be >= 0 (got {self.snap_radius})")


def create_default_settings() -> CalibrationSettings:
    """Settings with the stock thresholds."""
    return CalibrationSettings()


# ============================================================================
# TOML
# ============================================================================


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> CalibrationSettings:
    """
    Load calibration settings from a TOML file.

    Missing file or missing keys fall back to the defaults.

    Args:
        path: Path to settings.toml

    Returns:
        CalibrationSettings dataclass
    """
    path = Path(path)
    if not path.exists():
        return create_default_settings()

    data = rtoml.load(path)
    defaults = create_default_settings()

    calibration = data.get("calibration", {})
    preferences = data.get("preferences", {})

    return CalibrationSettings(
        max_calibration_error=float(
            calibration.get("max_calibration_error", defaults.max_calibration_error)
        ),
        snap_radius=int(calibration.get("snap_radius", defaults.snap_radius)),
        min_correspondences=int(
            calibration.get("min_correspondences", defaults.min_correspondences)
        ),
        near=float(calibration.get("near", defaults.near)),
        far=float(calibration.get("far", defaults.far)),
        preferences_path=Path(
            preferences.get("path", str(defaults.preferences_path))
        ).expanduser(),
    )


def save_settings(settings: CalibrationSettings, path: Path = DEFAULT_SETTINGS_PATH) -> None:
    """
    Save calibration settings to a TOML file.

    Args:
        settings: CalibrationSettings dataclass
        path: Path to save settings.toml
    """
    data = {
        "calibration": {
            "max_calibration_error": settings.max_calibration_error,
            "snap_radius": settings.snap_radius,
            "min_correspondences": settings.min_correspondences,
            "near": settings.near,
            "far": settings.far,
        },
        "preferences": {
            "path": str(settings.preferences_path),
        },
    }

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)
