"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest


# ============================================================================
# Cameras
# ============================================================================


def perspective(fovy_deg, aspect, near, far, shift_x=0.0, shift_y=0.0):
    """gluPerspective with an optional principal point shift."""
    f = 1.0 / np.tan(np.radians(fovy_deg) / 2.0)
    p = np.zeros((4, 4), dtype=np.float64)
    p[0, 0] = f / aspect
    p[1, 1] = f
    p[0, 2] = shift_x
    p[1, 2] = shift_y
    p[2, 2] = -(far + near) / (far - near)
    p[2, 3] = -2.0 * far * near / (far - near)
    p[3, 2] = -1.0
    return p


def look_at(eye, target, up=(0.0, 1.0, 0.0)):
    """gluLookAt as a 4x4 modelview matrix."""
    eye = np.asarray(eye, dtype=np.float64)
    forward = np.asarray(target, dtype=np.float64) - eye
    forward /= np.linalg.norm(forward)
    side = np.cross(forward, up)
    side /= np.linalg.norm(side)
    true_up = np.cross(side, forward)

    m = np.eye(4, dtype=np.float64)
    m[0, 0:3] = side
    m[1, 0:3] = true_up
    m[2, 0:3] = -forward
    m[0:3, 3] = -m[0:3, 0:3] @ eye
    return m


@pytest.fixture
def ground_truth():
    """Symmetric projector looking at the origin from (3, 2, 6)."""
    return (
        perspective(45.0, 800.0 / 600.0, 0.1, 100.0),
        look_at((3.0, 2.0, 6.0), (0.0, 0.0, 0.0)),
    )


@pytest.fixture
def shifted_ground_truth():
    """Off-axis projector with a shifted principal point."""
    return (
        perspective(30.0, 1.6, 0.1, 100.0, shift_x=0.1, shift_y=-0.05),
        look_at((-4.0, 3.0, 5.0), (0.2, -0.1, 0.0)),
    )


# ============================================================================
# Points
# ============================================================================


@pytest.fixture
def cube_points():
    """The eight vertices of the cube [-1, 1]^3."""
    from projmap.types import Vec3
    return [
        Vec3(float(x), float(y), float(z))
        for x in (-1, 1)
        for y in (-1, 1)
        for z in (-1, 1)
    ]


@pytest.fixture
def six_cube_points(cube_points):
    """Cube vertices without the (1, 1, 1) / (-1, -1, -1) diagonal."""
    from projmap.types import Vec3
    excluded = {Vec3(1.0, 1.0, 1.0), Vec3(-1.0, -1.0, -1.0)}
    return [p for p in cube_points if p not in excluded]


@pytest.fixture
def ndc_targets():
    """Project Vec3 model points through (projection, modelview) into NDC Vec3s."""
    from projmap.types import Vec3, points_to_array, project_through_gl

    def _targets(camera, points):
        projection, modelview = camera
        ndc = project_through_gl(projection, modelview, points_to_array(points))
        return [Vec3(float(x), float(y), 0.0) for x, y in ndc[:, :2]]

    return _targets


# ============================================================================
# Collaborators
# ============================================================================


class FakeScene:
    def __init__(self):
        self.views = []
        self.repaint_count = 0

    def repaint_all(self):
        self.repaint_count += 1


class FakeView:
    def __init__(self, scene, width=800, height=600, camera=None):
        self.scene = scene
        self.width = width
        self.height = height
        if camera is None:
            camera = (np.eye(4), np.eye(4))
        self.projection_matrix = np.array(camera[0], dtype=np.float64)
        self.modelview_matrix = np.array(camera[1], dtype=np.float64)
        self.repaint_count = 0
        scene.views.append(self)

    def set_projection_matrix(self, matrix):
        self.projection_matrix = np.array(matrix, dtype=np.float64)

    def set_modelview_matrix(self, matrix):
        self.modelview_matrix = np.array(matrix, dtype=np.float64)

    def repaint(self):
        self.repaint_count += 1


class FakeModel:
    def __init__(self, points):
        self.points = points

    def get_calibration_vertices(self):
        return [c for p in self.points for c in (p.x, p.y, p.z)]


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def store():
    from projmap.preferences import MemoryPreferences
    return MemoryPreferences()


@pytest.fixture
def scene():
    return FakeScene()


@pytest.fixture
def make_view(scene):
    def _make(camera=None, width=800, height=600):
        return FakeView(scene, width=width, height=height, camera=camera)
    return _make


@pytest.fixture
def view(make_view, ground_truth):
    return make_view(ground_truth)


@pytest.fixture
def model_points(cube_points):
    """Candidate vertices offered by the model: the origin and the cube."""
    from projmap.types import Vec3
    return [Vec3(0.0, 0.0, 0.0)] + cube_points


@pytest.fixture
def tool(model_points, store):
    from projmap.tool import CalibrationTool
    return CalibrationTool(FakeModel(model_points), store=store)


@pytest.fixture
def make_model():
    return FakeModel
