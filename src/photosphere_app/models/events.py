"""Messages exchanged between the capture session and its collaborators."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(slots=True, frozen=True)
class CaptureRequested:
    """Ask the camera to take a photo for ``target_id``."""

    session_id: str
    request_id: int
    target_id: int


@dataclass(slots=True, frozen=True)
class CaptureSucceeded:
    """Camera confirms a photo for ``target_id`` was written to ``photo_path``."""

    target_id: int
    photo_path: str


@dataclass(slots=True, frozen=True)
class CaptureFailed:
    """Camera could not save a photo for ``target_id``."""

    target_id: int
    reason: str = ""


@dataclass(slots=True, frozen=True)
class SessionCompleted:
    """Every target has been captured; ``photo_paths`` are in capture order."""

    session_id: str
    photo_paths: Tuple[str, ...]


CaptureAcknowledgement = Union[CaptureSucceeded, CaptureFailed]
SessionEvent = Union[CaptureRequested, SessionCompleted]
