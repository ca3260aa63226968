"""Coordinate transforms between device, world, camera and screen space."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional

from .vector import Attitude, Vector3

MIN_DEPTH = 0.1


@dataclass(slots=True, frozen=True)
class ScreenPoint:
    """Pixel position on the preview surface (origin top-left, y down)."""

    x: float
    y: float

    def distance_to(self, other: "ScreenPoint") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(slots=True, frozen=True)
class Viewport:
    """Preview surface size and the focal length used to project onto it."""

    width: float
    height: float
    focal_length: float

    @classmethod
    def from_size(cls, width: float, height: float, focal_ratio: float = 0.8) -> "Viewport":
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport size must be positive, got {width}x{height}")
        return cls(float(width), float(height), float(width) * focal_ratio)


def device_to_world(point: Vector3, attitude: Attitude) -> Vector3:
    return attitude.apply(point)


def world_to_camera(point: Vector3, attitude: Attitude) -> Vector3:
    # transpose == inverse for a rotation
    return attitude.apply_transpose(point)


def project_to_screen(
    camera_point: Vector3,
    screen_width: float,
    screen_height: float,
    focal_length: float,
) -> Optional[ScreenPoint]:
    """Pinhole projection for a camera looking down its own -Z axis.

    Returns ``None`` when the point is behind the camera or closer than
    ``MIN_DEPTH`` to the image plane; callers treat that as "not visible".
    """
    depth = -camera_point.z
    if depth <= MIN_DEPTH:
        return None
    return ScreenPoint(
        (screen_width / 2.0) + (camera_point.x / depth) * focal_length,
        (screen_height / 2.0) - (camera_point.y / depth) * focal_length,
    )


def project_world_point(point: Vector3, attitude: Attitude, viewport: Viewport) -> Optional[ScreenPoint]:
    """Project a world-space point through the current attitude onto the viewport."""
    return project_to_screen(
        world_to_camera(point, attitude),
        viewport.width,
        viewport.height,
        viewport.focal_length,
    )
