"""Synthetic sensor streams for demos and tests."""
from __future__ import annotations

from typing import Iterable, List

from ..math.rotation import look_rotation, quaternion_from_matrix
from ..math.vector import Attitude, Vector3
from .source import SampleKind, SensorSample

STANDARD_GRAVITY = 9.80665


def samples_for_attitude(attitude: Attitude, world_up: Vector3, timestamp_sec: float) -> List[SensorSample]:
    """Rotation + acceleration readings a resting device with ``attitude`` would report."""
    w, x, y, z = quaternion_from_matrix(attitude.matrix)
    # a resting accelerometer measures the reaction to gravity, i.e. world up
    up_device = attitude.apply_transpose(world_up.normalized()) * STANDARD_GRAVITY
    return [
        SensorSample(timestamp_sec, SampleKind.ACCELERATION, up_device.as_tuple()),
        SensorSample(timestamp_sec, SampleKind.ROTATION, (x, y, z, w)),
    ]


def sweep_samples(
    directions: Iterable[Vector3],
    world_up: Vector3,
    *,
    dwell_samples: int = 40,
    rate_hz: float = 50.0,
) -> List[SensorSample]:
    """Hold the camera on each direction in turn for ``dwell_samples`` frames."""
    if dwell_samples < 1:
        raise ValueError(f"dwell_samples must be at least 1, got {dwell_samples}")
    if rate_hz <= 0.0:
        raise ValueError(f"rate_hz must be positive, got {rate_hz}")

    samples: List[SensorSample] = []
    step = 1.0 / rate_hz
    tick = 0
    for direction in directions:
        attitude = look_rotation(direction, world_up)
        for _ in range(dwell_samples):
            samples.extend(samples_for_attitude(attitude, world_up, tick * step))
            tick += 1
    return samples
