"""Tunable parameters for sensor smoothing, target layout and capture guidance."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from loguru import logger


@dataclass(slots=True)
class FilterConfig:
    """Exponential smoothing factors for the two sensor streams."""

    rotation_alpha: float = 0.15
    gravity_alpha: float = 0.10

    def validate(self) -> None:
        for name in ("rotation_alpha", "gravity_alpha"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must lie in (0, 1], got {value}")


@dataclass(slots=True)
class LayoutConfig:
    """Shape of the target sphere."""

    radius: float = 1.0
    equator_count: int = 8
    ring_count: int = 5
    ring_height_ratio: float = 0.5

    def validate(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if self.equator_count < 1 or self.ring_count < 1:
            raise ValueError("Ring point counts must be at least 1")
        if not 0.0 < self.ring_height_ratio < 1.0:
            raise ValueError(f"ring_height_ratio must lie in (0, 1), got {self.ring_height_ratio}")

    def layout_options(self) -> Dict[str, Any]:
        return {
            "equator_count": self.equator_count,
            "ring_count": self.ring_count,
            "ring_height_ratio": self.ring_height_ratio,
        }


@dataclass(slots=True)
class CaptureConfig:
    """Alignment scoring.

    ``hit = clamp((alignment - alignment_floor) / alignment_span, 0, 1)``; a
    target lights up once ``hit > 0`` and qualifies for capture at
    ``hit >= capture_threshold``.
    """

    forward_axis: Tuple[float, float, float] = (0.0, 0.0, -1.0)
    alignment_floor: float = 0.9
    alignment_span: float = 0.1
    capture_threshold: float = 0.95

    def validate(self) -> None:
        if len(self.forward_axis) != 3:
            raise ValueError("forward_axis must have three components")
        if not -1.0 <= self.alignment_floor < 1.0:
            raise ValueError(f"alignment_floor must lie in [-1, 1), got {self.alignment_floor}")
        if self.alignment_span <= 0.0:
            raise ValueError(f"alignment_span must be positive, got {self.alignment_span}")
        if not 0.0 < self.capture_threshold <= 1.0:
            raise ValueError(f"capture_threshold must lie in (0, 1], got {self.capture_threshold}")


@dataclass(slots=True)
class OverlayConfig:
    """Screen-space sizes used by the guidance overlay, in pixels."""

    focal_ratio: float = 0.8
    hole_radius: float = 56.0
    look_ratio: float = 0.7

    @property
    def look_radius(self) -> float:
        return self.hole_radius * self.look_ratio

    def validate(self) -> None:
        if self.focal_ratio <= 0.0:
            raise ValueError(f"focal_ratio must be positive, got {self.focal_ratio}")
        if self.hole_radius <= 0.0:
            raise ValueError(f"hole_radius must be positive, got {self.hole_radius}")
        if not 0.0 < self.look_ratio < 1.0:
            raise ValueError(f"look_ratio must lie in (0, 1), got {self.look_ratio}")


@dataclass(slots=True)
class GuidanceConfig:
    """All guidance settings; every section has working defaults."""

    filter: FilterConfig = field(default_factory=FilterConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)

    def validate(self) -> "GuidanceConfig":
        self.filter.validate()
        self.layout.validate()
        self.capture.validate()
        self.overlay.validate()
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GuidanceConfig":
        sections = {
            "filter": FilterConfig,
            "layout": LayoutConfig,
            "capture": CaptureConfig,
            "overlay": OverlayConfig,
        }
        unknown = sorted(set(payload) - set(sections))
        if unknown:
            raise ValueError(f"Unknown configuration sections: {', '.join(unknown)}")

        built: Dict[str, Any] = {}
        for name, section_cls in sections.items():
            raw = payload.get(name) or {}
            allowed = {item.name for item in fields(section_cls)}
            extra = sorted(set(raw) - allowed)
            if extra:
                raise ValueError(f"Unknown keys in [{name}]: {', '.join(extra)}")
            values = dict(raw)
            if "forward_axis" in values:
                values["forward_axis"] = tuple(float(v) for v in values["forward_axis"])
            built[name] = section_cls(**values)
        return cls(**built).validate()


def load_config(path: Optional[Path] = None) -> GuidanceConfig:
    """Read a JSON configuration file, or return defaults when ``path`` is ``None``."""
    if path is None:
        return GuidanceConfig().validate()
    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Configuration file does not exist: {resolved}")
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{resolved.name} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{resolved.name} must contain a JSON object")
    config = GuidanceConfig.from_dict(payload)
    logger.debug("Loaded guidance configuration from {}", resolved)
    return config
