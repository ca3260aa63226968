"""Capture session state machine.

Each frame the session works out where the camera is pointing, picks the
nearest target that still needs a photo and, when the device is aimed
closely enough, asks the camera collaborator for a capture. Outgoing
messages go to an outbox (and to any subscribed listeners); acknowledgements
come back through :meth:`CaptureSession.acknowledge`.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
import itertools
from typing import Callable, Deque, List, Optional, Tuple
import uuid

from loguru import logger

from ..config import GuidanceConfig
from ..math.layout import build_session_targets, relayout_targets
from ..math.projection import device_to_world
from ..math.vector import Attitude, DegenerateVectorError, Vector3
from ..models.events import (
    CaptureAcknowledgement,
    CaptureFailed,
    CaptureRequested,
    CaptureSucceeded,
    SessionCompleted,
    SessionEvent,
)
from ..models.target import CaptureSessionState, Target

SessionListener = Callable[[SessionEvent], None]


class SessionPhase(Enum):
    AWAITING_ALIGNMENT = "awaiting_alignment"
    CAPTURING = "capturing"
    COMPLETE = "complete"


@dataclass(slots=True, frozen=True)
class TickResult:
    """What the session saw on one frame."""

    look_direction: Vector3
    nearest: Optional[Target]
    alignment: float
    hit: float
    qualifies: bool
    request: Optional[CaptureRequested] = None


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class CaptureSession:
    def __init__(
        self,
        world_up: Vector3,
        config: Optional[GuidanceConfig] = None,
        *,
        center: Vector3 = Vector3(0.0, 0.0, 0.0),
        session_id: Optional[str] = None,
    ) -> None:
        self.config = (config or GuidanceConfig()).validate()
        self.session_id = session_id or uuid.uuid4().hex
        self.center = center
        self.radius = self.config.layout.radius
        self.forward_axis = Vector3.from_iterable(self.config.capture.forward_axis).normalized()

        self.state = CaptureSessionState(
            build_session_targets(
                world_up,
                center,
                self.radius,
                **self.config.layout.layout_options(),
            )
        )
        self._phase = SessionPhase.AWAITING_ALIGNMENT
        self._abandoned = False
        self._outstanding: Optional[CaptureRequested] = None
        self._request_ids = itertools.count(1)
        self._outbox: Deque[SessionEvent] = deque()
        self._listeners: List[SessionListener] = []
        logger.info(
            "Capture session {} started with {} targets",
            self.session_id,
            self.state.target_count,
        )

    # ------------------------------------------------------------------
    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def targets(self) -> List[Target]:
        return self.state.targets

    @property
    def outstanding(self) -> Optional[CaptureRequested]:
        return self._outstanding

    @property
    def is_complete(self) -> bool:
        return self._phase is SessionPhase.COMPLETE

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    @property
    def is_active(self) -> bool:
        return not (self._abandoned or self.is_complete)

    @property
    def photo_paths(self) -> Tuple[str, ...]:
        return tuple(self.state.photo_paths)

    # ------------------------------------------------------------------
    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def drain_events(self) -> List[SessionEvent]:
        events = list(self._outbox)
        self._outbox.clear()
        return events

    def _emit(self, event: SessionEvent) -> None:
        self._outbox.append(event)
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    def look_direction(self, attitude: Attitude) -> Vector3:
        return device_to_world(self.forward_axis, attitude).normalized()

    def nearest_target(self, look_direction: Vector3) -> Optional[Target]:
        """Closest uncaptured target to the look point; ties go to layout order."""
        look_point = self.center + look_direction * self.radius
        best: Optional[Target] = None
        best_distance = float("inf")
        for target in self.state.targets:
            if target.captured:
                continue
            distance = look_point.distance_to(target.position)
            if distance < best_distance:
                best = target
                best_distance = distance
        return best

    def alignment(self, look_direction: Vector3, target: Target) -> float:
        try:
            direction = (target.position - self.center).normalized()
        except DegenerateVectorError:
            return -1.0
        return clamp(look_direction.dot(direction), -1.0, 1.0)

    def hit_strength(self, alignment: float) -> float:
        capture = self.config.capture
        # exact aim must reach 1.0 despite float error in the subtraction
        hit = round((alignment - capture.alignment_floor) / capture.alignment_span, 12)
        return clamp(hit, 0.0, 1.0)

    def qualifies(self, hit: float) -> bool:
        return hit > 0.0 and hit >= self.config.capture.capture_threshold

    # ------------------------------------------------------------------
    def tick(self, attitude: Attitude) -> Optional[TickResult]:
        """Process one frame; returns ``None`` once the session is finished or abandoned."""
        if not self.is_active:
            return None

        try:
            look = self.look_direction(attitude)
        except DegenerateVectorError:
            logger.debug("Skipping frame with degenerate attitude")
            return None

        nearest = self.nearest_target(look)
        if nearest is None:
            return TickResult(look, None, -1.0, 0.0, False)

        alignment = self.alignment(look, nearest)
        hit = self.hit_strength(alignment)
        qualifies = self.qualifies(hit)

        request: Optional[CaptureRequested] = None
        if qualifies and self._phase is SessionPhase.AWAITING_ALIGNMENT and self._outstanding is None:
            request = CaptureRequested(
                session_id=self.session_id,
                request_id=next(self._request_ids),
                target_id=nearest.index,
            )
            self._outstanding = request
            self._phase = SessionPhase.CAPTURING
            logger.info(
                "Requesting capture for target {} (alignment {:.4f})",
                nearest.index,
                alignment,
            )
            self._emit(request)

        return TickResult(look, nearest, alignment, hit, qualifies, request)

    # ------------------------------------------------------------------
    def acknowledge(self, ack: CaptureAcknowledgement) -> bool:
        if isinstance(ack, CaptureSucceeded):
            return self.capture_succeeded(ack.target_id, ack.photo_path)
        if isinstance(ack, CaptureFailed):
            return self.capture_failed(ack.target_id, ack.reason)
        raise TypeError(f"Unsupported acknowledgement: {ack!r}")

    def capture_succeeded(self, target_id: int, photo_path: str) -> bool:
        """Record a saved photo; returns ``False`` if the acknowledgement was ignored."""
        if not self._accepts(target_id, "success"):
            return False

        self.state.record_capture(target_id, photo_path)
        self._outstanding = None
        logger.info(
            "Captured target {} ({}/{}): {}",
            target_id,
            self.state.captured_count,
            self.state.target_count,
            photo_path,
        )

        if self.state.is_complete:
            self._phase = SessionPhase.COMPLETE
            logger.info("Capture session {} complete with {} photos", self.session_id, len(self.state.photo_paths))
            self._emit(SessionCompleted(self.session_id, self.photo_paths))
        else:
            self._phase = SessionPhase.AWAITING_ALIGNMENT
        return True

    def capture_failed(self, target_id: int, reason: str = "") -> bool:
        """Drop the outstanding request so the target can be retried."""
        if not self._accepts(target_id, "failure"):
            return False
        self._outstanding = None
        self._phase = SessionPhase.AWAITING_ALIGNMENT
        logger.warning("Capture for target {} failed: {}", target_id, reason or "unknown reason")
        return True

    def _accepts(self, target_id: int, kind: str) -> bool:
        if self._abandoned:
            logger.debug("Ignoring late capture {} for abandoned session {}", kind, self.session_id)
            return False
        if self._outstanding is None or self._outstanding.target_id != target_id:
            logger.debug("Ignoring capture {} for target {} with no matching request", kind, target_id)
            return False
        return True

    # ------------------------------------------------------------------
    def abandon(self) -> None:
        """Stop the session; any acknowledgement arriving afterwards is a no-op."""
        if self._abandoned:
            return
        self._abandoned = True
        self._outstanding = None
        self._outbox.clear()
        logger.info(
            "Capture session {} abandoned after {}/{} captures",
            self.session_id,
            self.state.captured_count,
            self.state.target_count,
        )

    def reanchor(self, world_up: Vector3) -> None:
        """Re-orient the target layout to a new world-up estimate."""
        if not self.is_active:
            return
        relayout_targets(
            self.state.targets,
            world_up,
            self.center,
            self.radius,
            **self.config.layout.layout_options(),
        )
