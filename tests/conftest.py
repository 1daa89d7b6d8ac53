"""
Shared fixtures: a manual millisecond clock and synthetic body observations.
"""

import pytest

from pose_tracking.landmarks import LANDMARK_COUNT, Landmark, PoseSample, RawObservation


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


def build_observation(cx: float, cy: float, width: float = 0.0, height: float = 0.0) -> RawObservation:
    """
    A body whose torso centroid and bounding-box middle are both (cx, cy).

    Every landmark sits at (cx, cy) except the nose (top-left corner) and the
    right foot index (bottom-right corner), so the box is `width` x `height`.
    """
    points = [Landmark(cx, cy, 0.0, 1.0) for _ in range(LANDMARK_COUNT)]
    points[0] = Landmark(cx - width / 2, cy - height / 2, 0.0, 1.0)
    points[-1] = Landmark(cx + width / 2, cy + height / 2, 0.0, 1.0)
    world = [Landmark(p.x - 0.5, p.y - 0.5, 0.1, p.visibility) for p in points]
    return RawObservation(landmarks=points, world_landmarks=world)


def build_sample(pose_id: str, cx: float, cy: float, timestamp: float = 0.0,
                 width: float = 0.0, height: float = 0.0) -> PoseSample:
    observation = build_observation(cx, cy, width, height)
    return PoseSample(
        pose_id=pose_id,
        landmarks=observation.landmarks,
        world_landmarks=observation.world_landmarks,
        timestamp=timestamp,
    )


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def make_observation():
    return build_observation


@pytest.fixture
def make_sample():
    return build_sample


@pytest.fixture
def sequential_ids():
    """Id factory yielding A, B, C, ..."""
    names = iter("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
    return lambda: next(names)
