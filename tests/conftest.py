from __future__ import annotations

import pytest

from photosphere_app.math.rotation import look_rotation
from photosphere_app.math.vector import Attitude, Vector3


def aim_at(direction: Vector3, world_up: Vector3 = Vector3(0.0, 0.0, 1.0)) -> Attitude:
    """Attitude whose camera (device -Z) points along ``direction``."""
    return look_rotation(direction, world_up)


@pytest.fixture
def up_z() -> Vector3:
    return Vector3(0.0, 0.0, 1.0)


@pytest.fixture
def up_y() -> Vector3:
    return Vector3(0.0, 1.0, 0.0)
