"""Glue between a sensor source, the orientation filter, a session and the camera."""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from loguru import logger

from ..config import GuidanceConfig
from ..math.projection import Viewport
from ..math.vector import Vector3
from ..models.events import CaptureRequested, SessionCompleted, SessionEvent
from ..sensor.orientation_filter import OrientationFilter
from ..sensor.source import SensorSource
from .camera import CameraCollaborator
from .capture_session import CaptureSession, TickResult
from .guidance import GuidanceFrame, build_guidance_frame

CompletionCallback = Callable[[List[str]], None]


class CaptureController:
    """Run one capture session at a time on a single event stream.

    Rotation samples drive frames: each one updates the filter and then ticks
    the session. Camera acknowledgements are tied to the session that issued
    the request, so anything arriving after :meth:`stop` or a restart is
    dropped.
    """

    def __init__(
        self,
        source: SensorSource,
        camera: CameraCollaborator,
        config: Optional[GuidanceConfig] = None,
        *,
        on_complete: Optional[CompletionCallback] = None,
        world_up: Optional[Vector3] = None,
        follow_gravity: bool = False,
    ) -> None:
        self.source = source
        self.camera = camera
        self.config = (config or GuidanceConfig()).validate()
        self.on_complete = on_complete
        self.fixed_world_up = world_up
        self.follow_gravity = follow_gravity
        self.filter = OrientationFilter(self.config.filter)
        self.session: Optional[CaptureSession] = None
        self.last_tick: Optional[TickResult] = None
        self.completed_photos: Optional[List[str]] = None

    # ------------------------------------------------------------------
    def start(self) -> CaptureSession:
        if self.session is not None and self.session.is_active:
            self.session.abandon()
        # gravity measured before the session starts anchors the layout
        world_up = self.fixed_world_up or self.filter.world_up()
        self.filter.reset()
        self.completed_photos = None
        self.last_tick = None
        session = CaptureSession(world_up, self.config)
        session.subscribe(self._handle_event)
        self.session = session
        self.source.register(self.on_rotation_sample, self.on_acceleration_sample)
        return session

    def stop(self) -> None:
        self.source.unregister()
        if self.session is not None and self.session.is_active:
            self.session.abandon()

    # ------------------------------------------------------------------
    def on_rotation_sample(self, values: Sequence[float]) -> None:
        self.filter.on_rotation_sample(values)
        self.on_frame()

    def on_acceleration_sample(self, values: Sequence[float]) -> None:
        self.filter.on_acceleration_sample(values)

    def on_frame(self) -> Optional[TickResult]:
        session = self.session
        if session is None or not session.is_active:
            return None
        if self.follow_gravity and self.fixed_world_up is None:
            session.reanchor(self.filter.world_up())
        self.last_tick = session.tick(self.filter.attitude)
        return self.last_tick

    def guidance(self, viewport: Viewport) -> Optional[GuidanceFrame]:
        if self.session is None:
            return None
        return build_guidance_frame(
            self.session,
            self.filter.attitude,
            viewport,
            world_up=self.fixed_world_up or self.filter.world_up(),
        )

    # ------------------------------------------------------------------
    def _handle_event(self, event: SessionEvent) -> None:
        if isinstance(event, CaptureRequested):
            self._dispatch_capture(event)
        elif isinstance(event, SessionCompleted):
            self.completed_photos = list(event.photo_paths)
            self.source.unregister()
            if self.on_complete is not None:
                self.on_complete(list(event.photo_paths))

    def _dispatch_capture(self, request: CaptureRequested) -> None:
        session = self.session

        def on_saved(photo_path: str) -> None:
            if self._is_current(session, request):
                session.capture_succeeded(request.target_id, photo_path)
            else:
                logger.debug("Dropping late photo {} for session {}", photo_path, request.session_id)

        def on_error(reason: str) -> None:
            if self._is_current(session, request):
                session.capture_failed(request.target_id, reason)
            else:
                logger.debug("Dropping late capture error for session {}", request.session_id)

        self.camera.request_capture(request.target_id, on_saved, on_error)

    def _is_current(self, session: Optional[CaptureSession], request: CaptureRequested) -> bool:
        return (
            session is not None
            and session is self.session
            and session.is_active
            and session.outstanding == request
        )
