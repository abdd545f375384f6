"""
Qt integration for projmap.

Usage:
    from projmap.gui import QtCalibrationBridge
"""

from .qt_bridge import QtCalibrationBridge, key_from_qt

__all__ = ["QtCalibrationBridge", "key_from_qt"]
