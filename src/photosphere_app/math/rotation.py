"""Rotation-vector sensor conversions."""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .vector import EPSILON, UNIT_X, UNIT_Y, UNIT_Z, Attitude, DegenerateVectorError, Vector3


def quaternion_from_rotation_vector(values: Sequence[float]) -> tuple[float, float, float, float]:
    """Return a unit quaternion ``(w, x, y, z)`` for a raw rotation-vector sample.

    The sample carries ``(x, y, z)`` = axis * sin(angle / 2) and optionally the
    scalar part ``w`` as fourth component. A fifth component (heading accuracy)
    is ignored. When ``w`` is missing it is reconstructed from the unit-norm
    constraint.
    """
    if len(values) < 3:
        raise ValueError(f"Rotation sample needs at least three components, got {len(values)}")
    x, y, z = (float(values[0]), float(values[1]), float(values[2]))
    if len(values) >= 4:
        w = float(values[3])
    else:
        w = math.sqrt(max(0.0, 1.0 - (x * x) - (y * y) - (z * z)))

    norm = math.sqrt((w * w) + (x * x) + (y * y) + (z * z))
    if not math.isfinite(norm) or norm <= EPSILON:
        raise DegenerateVectorError(f"Rotation sample has no usable orientation: {tuple(values)}")
    return (w / norm, x / norm, y / norm, z / norm)


def rotation_matrix_from_quaternion(w: float, x: float, y: float, z: float) -> np.ndarray:
    """Row-major rotation matrix for a unit quaternion."""
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=np.float64,
    )


def attitude_from_rotation_vector(values: Sequence[float]) -> Attitude:
    """Instantaneous device-to-world attitude for one rotation-vector sample."""
    return Attitude(rotation_matrix_from_quaternion(*quaternion_from_rotation_vector(values)))


def rotation_vector_from_axis_angle(axis: Sequence[float], angle_rad: float) -> tuple[float, float, float, float]:
    """Build a rotation-vector sample ``(x, y, z, w)`` for a rotation about ``axis``."""
    axis_array = np.asarray(axis, dtype=np.float64).reshape(3)
    norm = float(np.linalg.norm(axis_array))
    if norm <= EPSILON:
        raise DegenerateVectorError("Rotation axis is degenerate.")
    axis_array /= norm
    half = angle_rad / 2.0
    sin_half = math.sin(half)
    return (
        float(axis_array[0] * sin_half),
        float(axis_array[1] * sin_half),
        float(axis_array[2] * sin_half),
        math.cos(half),
    )


def quaternion_from_matrix(matrix: np.ndarray) -> tuple[float, float, float, float]:
    """Unit quaternion ``(w, x, y, z)`` for a proper rotation matrix."""
    m = np.asarray(matrix, dtype=np.float64).reshape(3, 3)
    trace = float(m[0, 0] + m[1, 1] + m[2, 2])
    if trace > 0.0:
        s = math.sqrt(trace + 1.0) * 2.0
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2.0
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2.0
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2.0
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    if w < 0.0:
        w, x, y, z = -w, -x, -y, -z
    return (float(w), float(x), float(y), float(z))


def look_rotation(forward: Vector3, up_hint: Vector3 = UNIT_Z) -> Attitude:
    """Attitude whose device -Z axis points along ``forward`` in the world frame.

    The device +Y axis is tilted towards ``up_hint``; when ``forward`` is
    (anti)parallel to the hint another world axis is used instead.
    """
    back = (-forward).normalized()
    hint = up_hint.normalized()
    if abs(back.dot(hint)) > 0.99:
        hint = UNIT_Y if abs(back.dot(UNIT_Y)) < 0.99 else UNIT_X
    right = hint.cross(back).normalized()
    up = back.cross(right)
    columns = np.column_stack([right.as_array(), up.as_array(), back.as_array()])
    return Attitude(columns)
