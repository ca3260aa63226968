"""Capture target and session progress models."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..math.vector import Vector3


class TargetRing(Enum):
    """Which part of the sphere layout a target belongs to."""

    EQUATOR = "equator"
    UPPER = "upper"
    LOWER = "lower"
    ZENITH = "zenith"
    NADIR = "nadir"

    def __str__(self) -> str:  # pragma: no cover - user friendly label
        return self.value


@dataclass(slots=True)
class Target:
    """One viewing direction that must be photographed."""

    index: int
    position: Vector3
    ring: TargetRing = TargetRing.EQUATOR
    captured: bool = False

    def mark_captured(self) -> None:
        if self.captured:
            raise ValueError(f"Target {self.index} is already captured")
        self.captured = True


@dataclass(slots=True)
class CaptureSessionState:
    """Targets of one session plus the photos captured so far, in capture order."""

    targets: List[Target] = field(default_factory=list)
    photo_paths: List[str] = field(default_factory=list)

    @property
    def target_count(self) -> int:
        return len(self.targets)

    @property
    def captured_count(self) -> int:
        return sum(1 for target in self.targets if target.captured)

    @property
    def remaining(self) -> List[Target]:
        return [target for target in self.targets if not target.captured]

    @property
    def is_complete(self) -> bool:
        return bool(self.targets) and self.captured_count == self.target_count

    def target(self, index: int) -> Optional[Target]:
        for target in self.targets:
            if target.index == index:
                return target
        return None

    def record_capture(self, index: int, photo_path: str) -> Target:
        target = self.target(index)
        if target is None:
            raise ValueError(f"Unknown target index {index}")
        target.mark_captured()
        self.photo_paths.append(photo_path)
        return target

    def reset(self, targets: List[Target]) -> None:
        self.targets = targets
        self.photo_paths = []
