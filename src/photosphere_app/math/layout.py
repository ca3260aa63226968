"""Target layout on the capture sphere.

Targets are arranged as three horizontal rings plus the two poles, all on a
sphere centred on the camera. "Horizontal" is defined by the world-up
direction supplied by the caller, so the rings stay parallel to the floor no
matter how the device was held when the session started.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from ..models.target import Target, TargetRing
from .vector import UNIT_Y, UNIT_Z, Vector3

HELPER_AXIS_SWITCH = 0.9
EQUATOR_COUNT = 8
RING_COUNT = 5
RING_HEIGHT_RATIO = 0.5
SESSION_TARGET_COUNT = EQUATOR_COUNT + 2 * RING_COUNT + 2


def ring_basis(normal: Vector3) -> Tuple[Vector3, Vector3]:
    """Return an orthonormal pair ``(u, v)`` spanning the plane orthogonal to ``normal``."""
    n = normal.normalized()
    helper = UNIT_Z if abs(n.z) < HELPER_AXIS_SWITCH else UNIT_Y
    u = n.cross(helper).normalized()
    v = n.cross(u).normalized()
    return u, v


def generate_ring(
    normal: Vector3,
    center: Vector3 = Vector3(0.0, 0.0, 0.0),
    radius: float = 1.0,
    count: int = 180,
) -> List[Vector3]:
    """Evenly spaced points on the circle of ``radius`` around ``center``.

    Point ``i`` sits at angle ``2*pi*i/count`` measured from ``u`` towards
    ``v`` of :func:`ring_basis`.
    """
    if radius < 0.0:
        raise ValueError(f"Ring radius must be non-negative, got {radius}")
    if count <= 0:
        return []
    u, v = ring_basis(normal)
    points: List[Vector3] = []
    for i in range(count):
        t = 2.0 * math.pi * i / count
        points.append(center + (u * math.cos(t) + v * math.sin(t)) * radius)
    return points


def session_positions(
    world_up: Vector3,
    center: Vector3 = Vector3(0.0, 0.0, 0.0),
    radius: float = 1.0,
    *,
    equator_count: int = EQUATOR_COUNT,
    ring_count: int = RING_COUNT,
    ring_height_ratio: float = RING_HEIGHT_RATIO,
) -> List[Tuple[TargetRing, Vector3]]:
    """Ordered ``(ring, position)`` pairs: equator, upper ring, lower ring, zenith, nadir."""
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    if not 0.0 < ring_height_ratio < 1.0:
        raise ValueError(f"Ring height ratio must lie in (0, 1), got {ring_height_ratio}")
    up = world_up.normalized()
    height = radius * ring_height_ratio
    ring_radius = math.sqrt((radius * radius) - (height * height))

    layout: List[Tuple[TargetRing, Vector3]] = []
    layout.extend((TargetRing.EQUATOR, p) for p in generate_ring(up, center, radius, equator_count))
    layout.extend((TargetRing.UPPER, p) for p in generate_ring(up, center + up * height, ring_radius, ring_count))
    layout.extend((TargetRing.LOWER, p) for p in generate_ring(up, center - up * height, ring_radius, ring_count))
    layout.append((TargetRing.ZENITH, center + up * radius))
    layout.append((TargetRing.NADIR, center - up * radius))
    return layout


def build_session_targets(
    world_up: Vector3,
    center: Vector3 = Vector3(0.0, 0.0, 0.0),
    radius: float = 1.0,
    **layout_options,
) -> List[Target]:
    """Create the fresh, uncaptured target set for one capture session."""
    return [
        Target(index=index, position=position, ring=ring)
        for index, (ring, position) in enumerate(
            session_positions(world_up, center, radius, **layout_options)
        )
    ]


def relayout_targets(
    targets: Sequence[Target],
    world_up: Vector3,
    center: Vector3 = Vector3(0.0, 0.0, 0.0),
    radius: float = 1.0,
    **layout_options,
) -> None:
    """Move existing targets onto a layout for a new ``world_up``.

    Indices, ring labels and captured flags are preserved; only positions change.
    """
    layout = session_positions(world_up, center, radius, **layout_options)
    if len(layout) != len(targets):
        raise ValueError(f"Layout has {len(layout)} slots but session holds {len(targets)} targets")
    for target, (_, position) in zip(targets, layout):
        target.position = position


def ring_members(targets: Iterable[Target], ring: TargetRing) -> List[Target]:
    return [target for target in targets if target.ring is ring]
