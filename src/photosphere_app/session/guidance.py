"""Screen-space guidance data for whatever draws the capture overlay."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import OverlayConfig
from ..math.layout import generate_ring
from ..math.projection import ScreenPoint, Viewport, project_world_point
from ..math.vector import Attitude, DegenerateVectorError, Vector3
from ..models.target import TargetRing
from .capture_session import CaptureSession, SessionPhase

RING_SEGMENTS = 72


@dataclass(slots=True, frozen=True)
class TargetMarker:
    """Remaining target as seen on screen; ``point`` is ``None`` when off-camera."""

    index: int
    point: Optional[ScreenPoint]
    hit: float


@dataclass(slots=True)
class GuidanceFrame:
    look_point: Optional[ScreenPoint] = None
    nearest_index: Optional[int] = None
    nearest_point: Optional[ScreenPoint] = None
    within_hole: bool = False
    hold: bool = False
    markers: List[TargetMarker] = field(default_factory=list)
    rings: Dict[TargetRing, List[Optional[ScreenPoint]]] = field(default_factory=dict)

    @property
    def arrow(self) -> Optional[tuple[ScreenPoint, ScreenPoint]]:
        """Line from the look marker to the nearest target, when both are visible."""
        if self.look_point is None or self.nearest_point is None:
            return None
        return self.look_point, self.nearest_point

    @property
    def has_visible_target(self) -> bool:
        return self.nearest_point is not None


def ring_polyline(
    normal: Vector3,
    center: Vector3,
    radius: float,
    attitude: Attitude,
    viewport: Viewport,
    segments: int = RING_SEGMENTS,
) -> List[Optional[ScreenPoint]]:
    """Projected ring outline; ``None`` entries break the line behind the camera."""
    return [project_world_point(p, attitude, viewport) for p in generate_ring(normal, center, radius, segments)]


def build_guidance_frame(
    session: CaptureSession,
    attitude: Attitude,
    viewport: Viewport,
    world_up: Optional[Vector3] = None,
    overlay: Optional[OverlayConfig] = None,
) -> GuidanceFrame:
    """Describe the overlay for the current frame.

    Nothing here changes the session; call :meth:`CaptureSession.tick` for that.
    """
    overlay = overlay or session.config.overlay
    frame = GuidanceFrame()
    if session.abandoned:
        return frame

    try:
        look = session.look_direction(attitude)
    except DegenerateVectorError:
        return frame
    for target in session.state.remaining:
        frame.markers.append(
            TargetMarker(
                index=target.index,
                point=project_world_point(target.position, attitude, viewport),
                hit=session.hit_strength(session.alignment(look, target)),
            )
        )

    if world_up is not None:
        up = world_up.normalized()
        layout = session.config.layout
        height = session.radius * layout.ring_height_ratio
        ring_radius = (session.radius ** 2 - height ** 2) ** 0.5
        frame.rings = {
            TargetRing.EQUATOR: ring_polyline(up, session.center, session.radius, attitude, viewport),
            TargetRing.UPPER: ring_polyline(up, session.center + up * height, ring_radius, attitude, viewport),
            TargetRing.LOWER: ring_polyline(up, session.center - up * height, ring_radius, attitude, viewport),
        }

    if session.is_complete:
        return frame

    frame.look_point = project_world_point(session.center + look * session.radius, attitude, viewport)
    nearest = session.nearest_target(look)
    if nearest is not None:
        frame.nearest_index = nearest.index
        frame.nearest_point = project_world_point(nearest.position, attitude, viewport)

    if frame.look_point is not None and frame.nearest_point is not None:
        frame.within_hole = (
            frame.look_point.distance_to(frame.nearest_point) <= overlay.hole_radius - overlay.look_radius
        )
    frame.hold = frame.within_hole or session.phase is SessionPhase.CAPTURING
    return frame
