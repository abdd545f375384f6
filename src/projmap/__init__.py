# projmap - Interactive projector calibration

__version__ = "0.1.0"

# Core types
from projmap.types import (
    Vec3,
    CameraSolution,
    as_column_major,
    project_points,
    project_through_gl,
)

# Calibration
from projmap.calibration import (
    MIN_CORRESPONDENCES,
    BimberRaskarCalibrator,
    CalibrationError,
    DegenerateConfigurationError,
    InsufficientCorrespondencesError,
    solve_camera,
)

# Configuration
from projmap.config import (
    CalibrationSettings,
    create_default_settings,
    load_settings,
    save_settings,
)

# Preferences
from projmap.preferences import (
    MemoryPreferences,
    TomlPreferences,
    get_store,
    set_store,
)

# Editing
from projmap.context import (
    NO_SELECTION,
    CalibrationContext,
)
from projmap.tool import (
    CalibrationTool,
    Key,
    KeyEvent,
    MouseEvent,
)

__all__ = [
    # Core types
    "Vec3",
    "CameraSolution",
    "as_column_major",
    "project_points",
    "project_through_gl",
    # Calibration
    "MIN_CORRESPONDENCES",
    "BimberRaskarCalibrator",
    "CalibrationError",
    "DegenerateConfigurationError",
    "InsufficientCorrespondencesError",
    "solve_camera",
    # Configuration
    "CalibrationSettings",
    "create_default_settings",
    "load_settings",
    "save_settings",
    # Preferences
    "MemoryPreferences",
    "TomlPreferences",
    "get_store",
    "set_store",
    # Editing
    "NO_SELECTION",
    "CalibrationContext",
    "CalibrationTool",
    "Key",
    "KeyEvent",
    "MouseEvent",
]
