import math

import numpy as np

from photosphere_app.math.projection import (
    ScreenPoint,
    Viewport,
    device_to_world,
    project_to_screen,
    project_world_point,
    world_to_camera,
)
from photosphere_app.math.rotation import rotation_matrix_from_quaternion
from photosphere_app.math.vector import Attitude, Vector3


def _random_attitudes(count: int, seed: int = 1):
    rng = np.random.default_rng(seed)
    for _ in range(count):
        q = rng.normal(size=4)
        q /= np.linalg.norm(q)
        yield Attitude(rotation_matrix_from_quaternion(*q))


def test_world_camera_roundtrip():
    rng = np.random.default_rng(2)
    for attitude in _random_attitudes(25):
        p = Vector3.from_iterable(rng.normal(size=3) * 4.0)
        back = world_to_camera(device_to_world(p, attitude), attitude)
        assert math.isclose(back.x, p.x, abs_tol=1e-9)
        assert math.isclose(back.y, p.y, abs_tol=1e-9)
        assert math.isclose(back.z, p.z, abs_tol=1e-9)


def test_identity_attitude_leaves_points_unchanged():
    p = Vector3(1.0, -2.0, 0.5)
    assert device_to_world(p, Attitude.identity()) == p
    assert world_to_camera(p, Attitude.identity()) == p


def test_project_point_on_optical_axis_hits_centre():
    point = project_to_screen(Vector3(0.0, 0.0, -1.0), 1000.0, 800.0, 800.0)
    assert point == ScreenPoint(500.0, 400.0)


def test_project_offset_point():
    point = project_to_screen(Vector3(0.5, 0.25, -1.0), 1000.0, 800.0, 800.0)
    assert point is not None
    assert math.isclose(point.x, 900.0)
    assert math.isclose(point.y, 200.0)

    far = project_to_screen(Vector3(0.5, 0.25, -2.0), 1000.0, 800.0, 800.0)
    assert far is not None
    assert math.isclose(far.x, 700.0)
    assert math.isclose(far.y, 300.0)


def test_points_behind_or_near_camera_are_not_visible():
    assert project_to_screen(Vector3(0.0, 0.0, 1.0), 100.0, 100.0, 80.0) is None
    assert project_to_screen(Vector3(0.0, 0.0, -0.1), 100.0, 100.0, 80.0) is None
    assert project_to_screen(Vector3(0.0, 0.0, -0.11), 100.0, 100.0, 80.0) is not None


def test_project_world_point_uses_attitude():
    viewport = Viewport.from_size(1000, 800)
    assert math.isclose(viewport.focal_length, 800.0)
    # camera turned to look along +X: device -Z maps to world +X
    attitude = Attitude(np.array([[0.0, 0.0, -1.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]]))
    ahead = project_world_point(Vector3(1.0, 0.0, 0.0), attitude, viewport)
    assert ahead == ScreenPoint(500.0, 400.0)
    assert project_world_point(Vector3(-1.0, 0.0, 0.0), attitude, viewport) is None


def test_screen_point_distance():
    assert math.isclose(ScreenPoint(0.0, 0.0).distance_to(ScreenPoint(3.0, 4.0)), 5.0)
