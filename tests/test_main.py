import json

import pytest

from pose_tracking.main import build_config, open_feeds, parse_arguments, save_summary
from pose_tracking.tracker.pipeline import PosePipeline
from pose_tracking.utils.config import TrackingConfig


def test_parse_arguments_repeatable_video():
    args = parse_arguments(["--video", "a.mp4", "--video", "b.mp4", "--sender_id", "left"])
    assert args.video == ["a.mp4", "b.mp4"]
    assert args.sender_id == ["left"]
    assert args.verbosity == "errors"


def test_build_config_overrides_yaml(tmp_path):
    path = tmp_path / "tracking.yaml"
    path.write_text("tracking:\n  distanceThreshold: 0.05\n  sampleLimit: 4\n")
    args = parse_arguments(["--video", "a.mp4", "--config", str(path), "--sample_limit", "8"])
    config = build_config(args)
    assert config.distance_threshold == 0.05
    assert config.sample_limit == 8


def test_open_feeds_missing_video(tmp_path):
    args = parse_arguments(["--video", str(tmp_path / "none.mp4")])
    with pytest.raises(ValueError):
        open_feeds(args)


def test_save_summary(tmp_path, clock, make_observation):
    config = TrackingConfig()
    pipeline = PosePipeline(config, clock=clock)
    pipeline.process_frame("cam1", [make_observation(0.3, 0.5, width=0.1, height=0.2)], timestamp=0)
    stats = {'total_frames': 1, 'added': 1, 'unique_guids': ["cam1-x"]}

    path = save_summary(tmp_path, pipeline, config, stats)
    summary = json.loads(path.read_text())
    assert summary['total_frames'] == 1
    assert summary['sender_ids'] == ["cam1"]
    assert summary['identities_per_sender'] == {"cam1": 1}
    assert summary['config']['sample_limit'] == 10
    [pose] = summary['active_poses']
    assert pose['middle'] == pytest.approx([0.3, 0.5])
