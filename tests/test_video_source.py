import cv2
import numpy as np
import pytest

from pose_tracking.utils.video_source import VideoFeed


def test_missing_file_raises(tmp_path):
    with pytest.raises(ValueError):
        VideoFeed.from_path(str(tmp_path / "missing.mp4"))


@pytest.fixture
def video_path(tmp_path):
    path = str(tmp_path / "walk.avi")
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*"MJPG"), 20.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("No video writer backend available")
    for i in range(5):
        frame = np.full((48, 64, 3), i * 40, dtype=np.uint8)
        writer.write(frame)
    writer.release()
    return path


def test_reads_timestamped_frames(video_path):
    with VideoFeed.from_path(video_path) as feed:
        assert feed.sender_id == "walk"
        assert (feed.width, feed.height) == (64, 48)
        frames = list(feed.frames())
    assert len(frames) == 5
    timestamps = [t for _, t in frames]
    assert timestamps[0] == 0.0
    assert timestamps[1] == pytest.approx(1000.0 / feed.fps)


def test_explicit_sender_id(video_path):
    feed = VideoFeed.from_path(video_path, sender_id="cam-left")
    try:
        assert feed.sender_id == "cam-left"
        ok, frame, timestamp = feed.read_frame()
        assert ok and frame.shape == (48, 64, 3)
    finally:
        feed.release()
