from types import SimpleNamespace

import numpy as np
import pytest

from pose_tracking.exceptions import InvalidArgumentError, LandmarkNotFoundError
from pose_tracking.landmarks import LANDMARK_NAMES, ByIndex, ByName, Landmark
from pose_tracking.tracker.pose_track import PointHistoryTrack, make_guid
from pose_tracking.utils.geometry import EMPTY_RECT, Point


@pytest.fixture
def track(clock):
    return PointHistoryTrack("cam1", "A", sample_limit=3, clock=clock)


def test_identity(track):
    assert track.sender_id == "cam1"
    assert track.pose_id == "A"
    assert track.guid == "cam1-A" == make_guid("cam1", "A")


def test_seen_fills_every_landmark(track, make_sample):
    sample = make_sample("A", 0.5, 0.5, timestamp=10.0)
    track.seen(sample)
    assert track.last is sample
    for i, name in enumerate(LANDMARK_NAMES):
        assert track.landmark(name).last == sample.landmarks[i]
        assert track.landmark(name, world=True).last == sample.world_landmarks[i]
    assert len(track.get_point_histories()) == 33
    assert track.get_raw_values() == list(sample.landmarks)


def test_history_is_bounded_per_landmark(track, make_sample):
    for i in range(5):
        track.seen(make_sample("A", 0.1 * (i + 1), 0.5, timestamp=i * 10.0))
    shoulder = track.landmark("left_shoulder")
    assert [round(v.x, 6) for v in shoulder.values] == [0.3, 0.4, 0.5]
    assert len(track.landmark("right_hip", world=True)) == 3


def test_landmark_accepts_name_index_and_tag(track):
    assert track.landmark("nose") is track.landmark(0)
    assert track.landmark(ByName("left_hip")) is track.landmark(ByIndex(23))


@pytest.mark.parametrize("ref", [33, -1, "tail"])
def test_landmark_not_found(track, ref):
    with pytest.raises(LandmarkNotFoundError):
        track.landmark(ref)


def test_landmark_requires_argument(track):
    with pytest.raises(InvalidArgumentError):
        track.landmark(None)


def test_landmark_value_before_data(track):
    with pytest.raises(LandmarkNotFoundError):
        track.landmark_value("nose")
    with pytest.raises(LandmarkNotFoundError):
        track.world_landmark_value("nose")


def test_landmark_value(track, make_sample):
    sample = make_sample("A", 0.5, 0.5, width=0.2, height=0.2)
    track.seen(sample)
    assert track.landmark_value("nose") == sample.landmarks[0]
    assert track.landmark_value(32).x == pytest.approx(0.6)
    assert track.world_landmark_value("nose") == sample.world_landmarks[0]


def test_defaults_before_data(track):
    assert track.centroid == Point(0.5, 0.5)
    assert track.centroid_world == Point(0.5, 0.5)
    assert track.bounding_box is EMPTY_RECT
    assert track.width == 0
    assert track.height == 0
    assert track.middle == Point(0.0, 0.0)
    assert track.last is None


def test_geometry_after_data(track, make_sample):
    track.seen(make_sample("A", 0.3, 0.6, width=0.2, height=0.4))
    assert track.width == pytest.approx(0.2)
    assert track.height == pytest.approx(0.4)
    assert track.middle == Point(pytest.approx(0.3), pytest.approx(0.6))
    assert track.centroid == Point(pytest.approx(0.3), pytest.approx(0.6))


def test_bounding_box_cached_until_seen(track, make_sample):
    track.seen(make_sample("A", 0.3, 0.6, width=0.2, height=0.4))
    box = track.bounding_box
    assert track.bounding_box is box

    track.seen(make_sample("A", 0.7, 0.6, width=0.1, height=0.1))
    assert track.bounding_box is not box
    assert track.width == pytest.approx(0.1)


def test_elapsed_follows_clock(track, clock, make_sample):
    track.seen(make_sample("A", 0.5, 0.5))
    assert track.elapsed == 0
    clock.advance(250)
    assert track.elapsed == 250
    track.seen(make_sample("A", 0.5, 0.5))
    assert track.elapsed == 0


def test_seen_requires_sample(track):
    with pytest.raises(InvalidArgumentError):
        track.seen(None)


def test_reset(track, make_sample):
    track.seen(make_sample("A", 0.5, 0.5))
    track.reset()
    assert track.last is None
    assert track.landmark("nose").is_empty
    assert track.bounding_box is EMPTY_RECT


def test_reset_clears_elapsed(track, make_sample):
    track.seen(make_sample("A", 0.5, 0.5))
    track.reset()
    assert track.elapsed == float("inf")
    assert track.last_seen is None


def test_seen_rejects_malformed_sample_untouched(track):
    point = Landmark(0.5, 0.5)
    sample = SimpleNamespace(pose_id="A", landmarks=[point] * 35,
                             world_landmarks=[point] * 33, timestamp=0.0)
    with pytest.raises(InvalidArgumentError):
        track.seen(sample)
    assert track.landmark("nose").is_empty
    assert track.last is None
    assert track.elapsed == float("inf")


def test_landmark_accepts_numpy_index(track):
    index = np.argmax([0, 5, 1])
    assert track.landmark(index) is track.landmark("left_eye_inner")
