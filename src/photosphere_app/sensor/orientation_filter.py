"""Low-pass fusion of rotation-vector and accelerometer samples."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from loguru import logger

from ..config import FilterConfig
from ..math.projection import device_to_world
from ..math.rotation import attitude_from_rotation_vector
from ..math.vector import Attitude, DegenerateVectorError, Vector3

DEFAULT_GRAVITY = Vector3(0.0, 0.0, 1.0)


@dataclass(slots=True)
class SmoothedState:
    """Current attitude and gravity estimate; gravity is in the device frame."""

    attitude: Attitude = field(default_factory=Attitude.identity)
    gravity: Vector3 = DEFAULT_GRAVITY


def blend_attitude(previous: Attitude, sample: Attitude, alpha: float) -> Attitude:
    return previous.blend(sample, alpha)


def blend_gravity(previous: Vector3, sample: Vector3, alpha: float) -> Vector3:
    return previous * (1.0 - alpha) + sample * alpha


class OrientationFilter:
    """Holds the only writable :class:`SmoothedState` of a capture session.

    The instantaneous rotation samples are already stable, so a plain
    exponential filter is enough to damp jitter. Gravity uses a slower factor
    because accelerometer readings include hand motion.
    """

    def __init__(self, config: Optional[FilterConfig] = None) -> None:
        self.config = config or FilterConfig()
        self.config.validate()
        self._state = SmoothedState()
        self.dropped_samples = 0

    @property
    def state(self) -> SmoothedState:
        return self._state

    @property
    def attitude(self) -> Attitude:
        return self._state.attitude

    @property
    def gravity(self) -> Vector3:
        return self._state.gravity

    def reset(self) -> None:
        self._state = SmoothedState()
        self.dropped_samples = 0

    def on_rotation_sample(self, raw: Sequence[float]) -> Attitude:
        try:
            sample = attitude_from_rotation_vector(raw)
        except ValueError:
            self.dropped_samples += 1
            logger.debug("Dropped malformed or degenerate rotation sample {}", tuple(raw))
            return self._state.attitude
        self._state.attitude = blend_attitude(self._state.attitude, sample, self.config.rotation_alpha)
        return self._state.attitude

    def on_acceleration_sample(self, raw: Sequence[float]) -> Vector3:
        try:
            direction = Vector3.from_iterable(raw[:3]).normalized()
        except ValueError:
            self.dropped_samples += 1
            logger.debug("Dropped malformed or degenerate acceleration sample {}", tuple(raw))
            return self._state.gravity
        self._state.gravity = blend_gravity(self._state.gravity, direction, self.config.gravity_alpha)
        return self._state.gravity

    def world_up(self) -> Vector3:
        """Gravity estimate expressed in the world frame, as a unit vector."""
        try:
            return device_to_world(self._state.gravity, self._state.attitude).normalized()
        except DegenerateVectorError:
            # opposite readings can cancel out while blending
            return device_to_world(DEFAULT_GRAVITY, self._state.attitude).normalized()
