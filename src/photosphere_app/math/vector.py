"""Immutable vector and rotation value types used by the guidance core."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Tuple

import numpy as np

EPSILON = 1e-9


class DegenerateVectorError(ValueError):
    """Raised when a zero-length vector is asked for a direction."""


@dataclass(slots=True, frozen=True)
class Vector3:
    """Three-component value used for both positions and directions."""

    x: float
    y: float
    z: float

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> "Vector3":
        items = [float(value) for value in values]
        if len(items) != 3:
            raise ValueError(f"Vector3 expects three components, got {len(items)}")
        return cls(items[0], items[1], items[2])

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def as_array(self) -> np.ndarray:
        return np.array(self.as_tuple(), dtype=np.float64)

    def dot(self, other: "Vector3") -> float:
        return (self.x * other.x) + (self.y * other.y) + (self.z * other.z)

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            (self.y * other.z) - (self.z * other.y),
            (self.z * other.x) - (self.x * other.z),
            (self.x * other.y) - (self.y * other.x),
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> "Vector3":
        """Return the unit vector pointing the same way.

        Raises
        ------
        DegenerateVectorError
            If the vector is (numerically) zero length or not finite.
        """
        length = self.length()
        if not math.isfinite(length) or length <= EPSILON:
            raise DegenerateVectorError(f"Cannot normalise degenerate vector {self.as_tuple()}")
        return Vector3(self.x / length, self.y / length, self.z / length)

    def distance_to(self, other: "Vector3") -> float:
        return (self - other).length()

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scale: float) -> "Vector3":
        return Vector3(self.x * scale, self.y * scale, self.z * scale)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)


def _frozen_matrix(values: np.ndarray) -> np.ndarray:
    matrix = np.array(values, dtype=np.float64).reshape(3, 3)
    matrix.setflags(write=False)
    return matrix


@dataclass(slots=True, frozen=True, eq=False)
class Attitude:
    """Row-major 3x3 rotation mapping device coordinates into world coordinates.

    The wrapped array is read-only so an attitude handed to a renderer can
    never be changed behind the filter's back.
    """

    matrix: np.ndarray

    def __post_init__(self) -> None:
        array = np.asarray(self.matrix, dtype=np.float64)
        if array.size != 9:
            raise ValueError(f"Attitude expects nine matrix entries, got {array.size}")
        object.__setattr__(self, "matrix", _frozen_matrix(array))

    @classmethod
    def identity(cls) -> "Attitude":
        return cls(np.eye(3, dtype=np.float64))

    def row_major(self) -> Tuple[float, ...]:
        return tuple(float(value) for value in self.matrix.reshape(9))

    def apply(self, vector: Vector3) -> Vector3:
        """Rotate a device-frame vector into the world frame."""
        return Vector3.from_iterable(self.matrix @ vector.as_array())

    def apply_transpose(self, vector: Vector3) -> Vector3:
        """Rotate a world-frame vector into the device frame."""
        return Vector3.from_iterable(self.matrix.T @ vector.as_array())

    def transpose(self) -> "Attitude":
        return Attitude(self.matrix.T)

    def blend(self, other: "Attitude", alpha: float) -> "Attitude":
        """Component-wise exponential blend ``self * (1 - alpha) + other * alpha``."""
        return Attitude(self.matrix * (1.0 - alpha) + other.matrix * alpha)

    def orthonormalized(self) -> "Attitude":
        """Closest proper rotation in the Frobenius sense (via SVD)."""
        u, _, vt = np.linalg.svd(self.matrix)
        rotation = u @ vt
        if np.linalg.det(rotation) < 0.0:
            u[:, -1] *= -1.0
            rotation = u @ vt
        return Attitude(rotation)

    def is_orthonormal(self, tolerance: float = 1e-6) -> bool:
        product = self.matrix @ self.matrix.T
        return bool(np.allclose(product, np.eye(3), atol=tolerance))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attitude):
            return NotImplemented
        return bool(np.array_equal(self.matrix, other.matrix))

    def __hash__(self) -> int:
        return hash(self.row_major())


UNIT_X = Vector3(1.0, 0.0, 0.0)
UNIT_Y = Vector3(0.0, 1.0, 0.0)
UNIT_Z = Vector3(0.0, 0.0, 1.0)
