"""Panorama stitching on top of OpenCV's high-level ``Stitcher``."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import cv2
import numpy as np
from loguru import logger

TARGET_HEIGHT = 1000

STATUS_MESSAGES = {
    0: "OK",
    1: "Need more images",
    2: "Homography estimation failed",
    3: "Camera parameters adjustment failed",
}


def status_message(code: Optional[int]) -> str:
    if code is None:
        return "Unknown error"
    return STATUS_MESSAGES.get(int(code), "Unknown error")


class StitchError(Exception):
    """Stitching failed; ``code`` is the stitcher status when one is available."""

    def __init__(self, code: Optional[int], reason: str, log: Sequence[str] = ()) -> None:
        super().__init__(f"Stitching failed ({reason})")
        self.code = code
        self.reason = reason
        self.log = list(log)


@dataclass(slots=True)
class StitchResult:
    image: np.ndarray
    saved_path: Path
    log: List[str] = field(default_factory=list)


def _default_stitcher():
    stitcher = cv2.Stitcher.create(cv2.Stitcher_PANORAMA)
    stitcher.setWaveCorrection(True)
    stitcher.setWaveCorrectKind(cv2.detail.WAVE_CORRECT_HORIZ)
    return stitcher


def prepare_frame(image: np.ndarray, target_height: int = TARGET_HEIGHT) -> np.ndarray:
    """Coerce to 3-channel BGR and shrink frames taller than ``target_height``."""
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

    height, width = image.shape[:2]
    if height > target_height:
        scale = target_height / float(height)
        image = cv2.resize(image, (int(width * scale), int(height * scale)), interpolation=cv2.INTER_AREA)
    return image


def stitch_panorama(
    photo_paths: Sequence[str | Path],
    output_dir: Path,
    *,
    stitcher_factory: Callable[[], object] = _default_stitcher,
    now: Optional[datetime] = None,
) -> StitchResult:
    """Merge captured photos into a panorama saved as PNG under ``output_dir``.

    Raises
    ------
    ValueError
        If fewer than two photos are given.
    StitchError
        If a photo cannot be decoded or the stitcher reports a failure.
    """
    if len(photo_paths) < 2:
        raise ValueError("Need at least two photos to stitch")

    log: List[str] = []
    frames: List[np.ndarray] = []
    for index, path in enumerate(photo_paths, start=1):
        # IMREAD_COLOR honours EXIF orientation
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise StitchError(None, f"Failed to decode {path}", log)
        original_height, original_width = image.shape[:2]
        frame = prepare_frame(image)
        log.append(
            f"Photo {index}: {original_width}x{original_height} -> {frame.shape[1]}x{frame.shape[0]}"
        )
        frames.append(frame)

    try:
        status, panorama = stitcher_factory().stitch(frames)
    except cv2.error as exc:
        logger.error("OpenCV stitcher raised: {}", exc)
        raise StitchError(None, str(exc), log) from exc
    status = int(status)
    log.append(f"Stitch status: {status} ({status_message(status)})")
    if status != 0 or panorama is None or panorama.size == 0:
        logger.warning("Stitching {} photos failed: {}", len(frames), status_message(status))
        raise StitchError(status, status_message(status), log)

    log.append(f"Panorama size: {panorama.shape[1]}x{panorama.shape[0]}")
    output_dir = Path(output_dir).expanduser()
    output_dir.mkdir(parents=True, exist_ok=True)
    saved_path = output_dir / f"pano_{(now or datetime.now()).strftime('%Y%m%d_%H%M%S')}.png"
    if not cv2.imwrite(str(saved_path), panorama):
        raise StitchError(None, f"Failed to write {saved_path}", log)
    log.append(f"Saved to {saved_path}")
    logger.info("Stitched {} photos into {}", len(frames), saved_path)
    return StitchResult(image=panorama, saved_path=saved_path, log=log)
