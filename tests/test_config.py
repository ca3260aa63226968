import json
from pathlib import Path

import pytest

from photosphere_app.config import FilterConfig, GuidanceConfig, load_config


def test_defaults():
    config = load_config()
    assert config.filter.rotation_alpha == 0.15
    assert config.filter.gravity_alpha == 0.10
    assert config.layout.radius == 1.0
    assert config.capture.forward_axis == (0.0, 0.0, -1.0)
    assert config.overlay.look_radius == pytest.approx(39.2)


def test_load_overrides_from_json(tmp_path: Path):
    path = tmp_path / "guidance.json"
    path.write_text(
        json.dumps(
            {
                "filter": {"gravity_alpha": 0.2},
                "capture": {"forward_axis": [0, 1, 0], "capture_threshold": 0.8},
            }
        ),
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.filter.gravity_alpha == 0.2
    assert config.filter.rotation_alpha == 0.15
    assert config.capture.forward_axis == (0.0, 1.0, 0.0)
    assert config.capture.capture_threshold == 0.8


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError, match="Unknown configuration sections"):
        GuidanceConfig.from_dict({"render": {}})
    with pytest.raises(ValueError, match=r"Unknown keys in \[layout\]"):
        GuidanceConfig.from_dict({"layout": {"rings": 3}})


def test_out_of_range_values_are_rejected():
    with pytest.raises(ValueError):
        FilterConfig(rotation_alpha=0.0).validate()
    with pytest.raises(ValueError):
        GuidanceConfig.from_dict({"layout": {"ring_height_ratio": 1.5}})
    with pytest.raises(ValueError):
        GuidanceConfig.from_dict({"capture": {"alignment_span": 0}})


def test_missing_or_invalid_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.json")
    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(bad)


def test_roundtrip_through_dict():
    config = GuidanceConfig()
    payload = config.to_dict()
    assert GuidanceConfig.from_dict(payload) == config
