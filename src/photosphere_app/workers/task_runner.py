"""Run panorama stitching off the capture thread."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger
from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

from ..io.stitcher import StitchError, StitchResult, stitch_panorama


class StitchSignals(QObject):
    """Signals reported by a background stitch job."""

    finished = pyqtSignal(object)  # StitchResult
    failed = pyqtSignal(object)  # StitchError


class StitchTask(QRunnable):
    """Stitch one project's photos in the Qt thread pool."""

    def __init__(
        self,
        photo_paths: Sequence[str],
        output_dir: Path,
        stitch: Callable[..., StitchResult] = stitch_panorama,
    ) -> None:
        super().__init__()
        self.photo_paths = list(photo_paths)
        self.output_dir = Path(output_dir)
        self._stitch = stitch
        self.signals = StitchSignals()

    def run(self) -> None:
        try:
            result = self._stitch(self.photo_paths, self.output_dir)
        except StitchError as exc:
            self.signals.failed.emit(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Stitch job failed: {}", exc)
            self.signals.failed.emit(StitchError(None, str(exc)))
        else:
            self.signals.finished.emit(result)


class TaskRunner:
    """Thin wrapper around QThreadPool for convenience."""

    def __init__(self, max_threads: Optional[int] = None) -> None:
        self._pool = QThreadPool.globalInstance()
        if max_threads is not None:
            self._pool.setMaxThreadCount(max_threads)

    def submit(self, task: StitchTask) -> None:
        self._pool.start(task)

    def wait(self, timeout_ms: int = -1) -> bool:
        return self._pool.waitForDone(timeout_ms)
