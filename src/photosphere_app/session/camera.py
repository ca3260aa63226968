"""Camera collaborator interface and an in-process stand-in."""
from __future__ import annotations

from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Callable, Deque, Optional, Protocol, Tuple

from loguru import logger

SavedCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]


class CameraCollaborator(Protocol):
    """Takes a photo asynchronously and reports back through one of the callbacks."""

    def request_capture(self, target_id: int, on_saved: SavedCallback, on_error: ErrorCallback) -> None:
        ...


def photo_filename(when: Optional[datetime] = None) -> str:
    stamp = (when or datetime.now()).strftime("%Y%m%d_%H%M%S_%f")[:-3]
    return f"IMG_{stamp}.jpg"


class SimulatedCamera:
    """Pretends to expose and save photos under ``photo_dir``.

    With ``deferred=True`` callbacks are queued until :meth:`flush`, which
    models the delay of a real camera pipeline.
    """

    def __init__(self, photo_dir: Path = Path("photos"), *, deferred: bool = False) -> None:
        self.photo_dir = Path(photo_dir)
        self.deferred = deferred
        self.requests: list[int] = []
        self._failures_pending = 0
        self._pending: Deque[Tuple[Callable[[str], None], str]] = deque()

    def fail_next(self, count: int = 1) -> None:
        self._failures_pending += count

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_capture(self, target_id: int, on_saved: SavedCallback, on_error: ErrorCallback) -> None:
        self.requests.append(target_id)
        if self._failures_pending > 0:
            self._failures_pending -= 1
            result = (on_error, f"simulated failure for target {target_id}")
        else:
            path = self.photo_dir / f"{len(self.requests):02d}_{photo_filename()}"
            result = (on_saved, str(path))
        logger.debug("Simulated camera handling target {}", target_id)
        self._pending.append(result)
        if not self.deferred:
            self.flush()

    def flush(self) -> int:
        delivered = 0
        while self._pending:
            callback, payload = self._pending.popleft()
            callback(payload)
            delivered += 1
        return delivered
