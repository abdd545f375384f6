#!/usr/bin/env python3
"""
projmap CLI - inspect stored projector calibrations.

Usage:
    projmap show PREFS [VIEW]    - List stored correspondences of a view
    projmap solve PREFS [VIEW]   - Re-solve a stored view and print its matrices
    projmap --help               - Show this help

PREFS is a preferences TOML file written by the calibration tool (key S).
VIEW is the view index within the scene (default 0).
"""

import logging
import sys
from pathlib import Path

import numpy as np

from projmap.calibration import CalibrationError, solve_camera
from projmap.config import load_settings
from projmap.context import CalibrationContext
from projmap.preferences import TomlPreferences


def _load_context(argv: list[str]) -> tuple[CalibrationContext, int] | None:
    if not argv:
        print("Missing preferences file")
        return None

    path = Path(argv[0])
    if not path.exists():
        print(f"No such file: {path}")
        return None

    try:
        view_index = int(argv[1]) if len(argv) > 1 else 0
    except ValueError:
        print(f"Invalid view index: {argv[1]}")
        return None

    context = CalibrationContext()
    context.load(TomlPreferences(path), view_index)
    return context, view_index


def show(argv: list[str]) -> int:
    loaded = _load_context(argv)
    if loaded is None:
        return 1
    context, view_index = loaded

    print(f"View {view_index}: {len(context)} correspondences")
    for i, (m, p) in enumerate(zip(context.model_vertices, context.projected_vertices)):
        print(f"  {i:3d}  ({m.x:.6g}, {m.y:.6g}, {m.z:.6g}) -> ({p.x:.6f}, {p.y:.6f})")
    return 0


def solve(argv: list[str]) -> int:
    loaded = _load_context(argv)
    if loaded is None:
        return 1
    context, view_index = loaded
    settings = load_settings()

    try:
        solution = solve_camera(
            context.model_vertices,
            context.projected_vertices,
            settings.near,
            settings.far,
            min_correspondences=settings.min_correspondences,
        )
    except CalibrationError as e:
        print(f"View {view_index}: calibration failed: {e}")
        return 1

    calibrated = solution.error < settings.max_calibration_error
    with np.printoptions(precision=6, suppress=True):
        print(f"View {view_index}: error {solution.error:.6f} NDC, calibrated: {calibrated}")
        print("Projection:")
        print(solution.projection)
        print("Modelview:")
        print(solution.modelview)
    return 0 if calibrated else 2


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        print(__doc__)
        return 0

    command = sys.argv[1]
    args = sys.argv[2:]

    if command == "show":
        return show(args)

    elif command == "solve":
        return solve(args)

    else:
        print(f"Unknown command: {command}")
        print("Run 'projmap --help' for usage")
        return 1


if __name__ == "__main__":
    sys.exit(main())
