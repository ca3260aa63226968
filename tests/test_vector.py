import math

import numpy as np
import pytest

from photosphere_app.math.rotation import (
    attitude_from_rotation_vector,
    look_rotation,
    quaternion_from_matrix,
    quaternion_from_rotation_vector,
    rotation_matrix_from_quaternion,
    rotation_vector_from_axis_angle,
)
from photosphere_app.math.vector import Attitude, DegenerateVectorError, Vector3


def test_vector_arithmetic():
    a = Vector3(1.0, 2.0, 3.0)
    b = Vector3(-2.0, 0.5, 4.0)
    assert a + b == Vector3(-1.0, 2.5, 7.0)
    assert a - b == Vector3(3.0, 1.5, -1.0)
    assert a * 2.0 == Vector3(2.0, 4.0, 6.0)
    assert 2.0 * a == a * 2.0
    assert -a == Vector3(-1.0, -2.0, -3.0)
    assert math.isclose(a.dot(b), -2.0 + 1.0 + 12.0)
    assert math.isclose(Vector3(3.0, 4.0, 0.0).length(), 5.0)


def test_cross_product_is_right_handed():
    x = Vector3(1.0, 0.0, 0.0)
    y = Vector3(0.0, 1.0, 0.0)
    assert x.cross(y) == Vector3(0.0, 0.0, 1.0)
    assert y.cross(x) == Vector3(0.0, 0.0, -1.0)


def test_normalized_has_unit_length():
    v = Vector3(3.0, -4.0, 12.0).normalized()
    assert math.isclose(v.length(), 1.0)
    assert math.isclose(v.x, 3.0 / 13.0)


def test_normalizing_zero_vector_raises():
    with pytest.raises(DegenerateVectorError):
        Vector3(0.0, 0.0, 0.0).normalized()
    with pytest.raises(DegenerateVectorError):
        Vector3(float("nan"), 0.0, 1.0).normalized()


def test_vector_is_immutable():
    v = Vector3(1.0, 0.0, 0.0)
    with pytest.raises(AttributeError):
        v.x = 2.0  # type: ignore[misc]


def test_from_iterable_rejects_wrong_length():
    with pytest.raises(ValueError):
        Vector3.from_iterable([1.0, 2.0])


def test_attitude_matrix_is_read_only():
    attitude = Attitude.identity()
    with pytest.raises(ValueError):
        attitude.matrix[0, 0] = 5.0


def test_attitude_apply_and_transpose():
    attitude = attitude_from_rotation_vector(rotation_vector_from_axis_angle((0.0, 0.0, 1.0), math.pi / 2))
    rotated = attitude.apply(Vector3(1.0, 0.0, 0.0))
    assert math.isclose(rotated.x, 0.0, abs_tol=1e-12)
    assert math.isclose(rotated.y, 1.0, abs_tol=1e-12)
    back = attitude.apply_transpose(rotated)
    assert math.isclose(back.x, 1.0, abs_tol=1e-12)
    assert math.isclose(back.y, 0.0, abs_tol=1e-12)
    assert attitude.is_orthonormal()


def test_blend_then_orthonormalize_returns_rotation():
    a = Attitude.identity()
    b = attitude_from_rotation_vector(rotation_vector_from_axis_angle((1.0, 1.0, 0.0), 1.0))
    blended = a.blend(b, 0.3)
    assert not blended.is_orthonormal(1e-9)
    fixed = blended.orthonormalized()
    assert fixed.is_orthonormal()
    assert math.isclose(float(np.linalg.det(fixed.matrix)), 1.0, abs_tol=1e-9)


def test_rotation_vector_without_scalar_part():
    x, y, z, w = rotation_vector_from_axis_angle((0.0, 1.0, 0.0), 0.4)
    with_w = attitude_from_rotation_vector((x, y, z, w))
    without_w = attitude_from_rotation_vector((x, y, z))
    np.testing.assert_allclose(with_w.matrix, without_w.matrix, atol=1e-12)


def test_rotation_vector_accuracy_component_is_ignored():
    sample = rotation_vector_from_axis_angle((1.0, 0.0, 0.0), 0.7)
    plain = attitude_from_rotation_vector(sample)
    with_accuracy = attitude_from_rotation_vector(sample + (0.1,))
    np.testing.assert_allclose(plain.matrix, with_accuracy.matrix)


def test_degenerate_rotation_vector_raises():
    with pytest.raises(DegenerateVectorError):
        quaternion_from_rotation_vector((0.0, 0.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        quaternion_from_rotation_vector((0.1, 0.2))


def test_quaternion_matrix_roundtrip():
    rng = np.random.default_rng(3)
    for _ in range(20):
        q = rng.normal(size=4)
        q /= np.linalg.norm(q)
        if q[0] < 0:
            q = -q
        matrix = rotation_matrix_from_quaternion(*q)
        np.testing.assert_allclose(quaternion_from_matrix(matrix), q, atol=1e-9)


def test_look_rotation_points_camera_forward():
    for direction in [Vector3(1.0, 0.0, 0.0), Vector3(0.3, -0.4, 0.5), Vector3(0.0, 0.0, 1.0), Vector3(0.0, 0.0, -1.0)]:
        attitude = look_rotation(direction)
        assert attitude.is_orthonormal()
        assert math.isclose(float(np.linalg.det(attitude.matrix)), 1.0, abs_tol=1e-9)
        look = attitude.apply(Vector3(0.0, 0.0, -1.0))
        expected = direction.normalized()
        assert math.isclose(look.dot(expected), 1.0, abs_tol=1e-12)
