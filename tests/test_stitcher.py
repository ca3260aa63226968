from datetime import datetime
from pathlib import Path

import cv2
import numpy as np
import pytest

from photosphere_app.io.stitcher import StitchError, prepare_frame, status_message, stitch_panorama


class FakeStitcher:
    def __init__(self, status: int, panorama):
        self.status = status
        self.panorama = panorama
        self.frames = None

    def stitch(self, frames):
        self.frames = frames
        return self.status, self.panorama


def _write_photo(path: Path, height: int = 120, width: int = 160) -> Path:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 2] = 200
    if not cv2.imwrite(str(path), image):
        raise RuntimeError(f"Failed to create test photo at {path}")
    return path


def test_status_messages():
    assert status_message(0) == "OK"
    assert status_message(1) == "Need more images"
    assert status_message(2) == "Homography estimation failed"
    assert status_message(3) == "Camera parameters adjustment failed"
    assert status_message(-1) == "Unknown error"
    assert status_message(None) == "Unknown error"


def test_needs_two_photos(tmp_path: Path):
    with pytest.raises(ValueError):
        stitch_panorama([str(tmp_path / "one.jpg")], tmp_path)


def test_undecodable_photo(tmp_path: Path):
    good = _write_photo(tmp_path / "good.jpg")
    with pytest.raises(StitchError) as info:
        stitch_panorama([good, tmp_path / "missing.jpg"], tmp_path, stitcher_factory=lambda: FakeStitcher(0, None))
    assert info.value.code is None
    assert "Failed to decode" in info.value.reason
    assert info.value.log[0].startswith("Photo 1: 160x120")


def test_stitcher_failure_carries_status_and_log(tmp_path: Path):
    photos = [_write_photo(tmp_path / f"{i}.jpg") for i in range(2)]
    with pytest.raises(StitchError) as info:
        stitch_panorama(photos, tmp_path / "out", stitcher_factory=lambda: FakeStitcher(1, None))
    assert info.value.code == 1
    assert info.value.reason == "Need more images"
    assert "Stitching failed (Need more images)" in str(info.value)
    assert info.value.log[-1] == "Stitch status: 1 (Need more images)"
    assert not (tmp_path / "out").exists()


def test_successful_stitch_is_saved(tmp_path: Path):
    photos = [_write_photo(tmp_path / f"{i}.jpg", height=1500, width=2000) for i in range(3)]
    panorama = np.full((100, 300, 3), 90, dtype=np.uint8)
    fake = FakeStitcher(0, panorama)
    result = stitch_panorama(
        photos,
        tmp_path / "panoramas",
        stitcher_factory=lambda: fake,
        now=datetime(2026, 1, 2, 3, 4, 5),
    )
    assert result.saved_path == tmp_path / "panoramas" / "pano_20260102_030405.png"
    assert result.saved_path.exists()
    assert result.image.shape == (100, 300, 3)
    assert all(frame.shape[0] == 1000 for frame in fake.frames)
    assert "Panorama size: 300x100" in result.log
    assert result.log[-1] == f"Saved to {result.saved_path}"


def test_prepare_frame_normalises_channels_and_size():
    gray = np.zeros((2000, 1000), dtype=np.uint8)
    frame = prepare_frame(gray)
    assert frame.shape == (1000, 500, 3)

    rgba = np.zeros((50, 80, 4), dtype=np.uint8)
    assert prepare_frame(rgba).shape == (50, 80, 3)


class CrashingStitcher:
    def stitch(self, frames):
        raise cv2.error("stitcher blew up")


def test_opencv_exception_becomes_stitch_error(tmp_path: Path):
    photos = [_write_photo(tmp_path / f"p{i}.jpg") for i in range(2)]
    with pytest.raises(StitchError) as excinfo:
        stitch_panorama(photos, tmp_path / "out", stitcher_factory=CrashingStitcher)
    assert excinfo.value.code is None
    assert "stitcher blew up" in excinfo.value.reason
    assert excinfo.value.log[0].startswith("Photo 1:")
    assert not (tmp_path / "out").exists()
