from pathlib import Path

import cv2
import numpy as np

from photosphere_app.io.stitcher import StitchError, StitchResult
from photosphere_app.workers.task_runner import StitchTask


def test_stitch_task_reports_result(tmp_path: Path):
    expected = StitchResult(np.zeros((2, 2, 3), dtype=np.uint8), tmp_path / "pano.png", ["ok"])
    calls = []

    def fake_stitch(paths, output_dir):
        calls.append((paths, output_dir))
        return expected

    task = StitchTask(["a.jpg", "b.jpg"], tmp_path, stitch=fake_stitch)
    finished, failed = [], []
    task.signals.finished.connect(finished.append)
    task.signals.failed.connect(failed.append)
    task.run()

    assert calls == [(["a.jpg", "b.jpg"], tmp_path)]
    assert finished == [expected]
    assert failed == []


def test_stitch_task_reports_failures(tmp_path: Path):
    def failing(paths, output_dir):
        raise StitchError(2, "Homography estimation failed", ["status 2"])

    def missing_input(paths, output_dir):
        raise ValueError("Need at least two photos to stitch")

    failed = []
    for fn in (failing, missing_input):
        task = StitchTask(["a.jpg"], tmp_path, stitch=fn)
        task.signals.failed.connect(failed.append)
        task.run()

    assert [error.code for error in failed] == [2, None]
    assert failed[1].reason == "Need at least two photos to stitch"


def test_stitch_task_wraps_opencv_errors(tmp_path: Path):
    def crashing(paths, output_dir):
        raise cv2.error("stitcher blew up")

    task = StitchTask(["a.jpg", "b.jpg"], tmp_path, stitch=crashing)
    finished, failed = [], []
    task.signals.finished.connect(finished.append)
    task.signals.failed.connect(failed.append)
    task.run()

    assert finished == []
    assert len(failed) == 1
    assert isinstance(failed[0], StitchError)
    assert failed[0].code is None
    assert "stitcher blew up" in failed[0].reason
