"""
Geometry helpers for landmark sets.
"""

from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Sequence, Tuple

import numpy as np

from pose_tracking.exceptions import InvalidArgumentError
from pose_tracking.landmarks import (
    Landmark,
    LandmarkKey,
    PoseSample,
    TORSO_ANCHORS,
    get_landmark,
)


class Point(NamedTuple):
    """A 2D point."""
    x: float
    y: float


# Returned by centroid queries when no landmarks have been seen yet
NO_DATA_POINT = Point(0.5, 0.5)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle anchored at its top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def middle(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0


EMPTY_RECT = Rect(0.0, 0.0, 0.0, 0.0)


def _as_xy(points: Iterable) -> np.ndarray:
    return np.array([(p.x, p.y) for p in points], dtype=np.float64).reshape(-1, 2)


def centroid(points: Iterable) -> Point:
    """
    Arithmetic mean of the x/y coordinates of `points`.

    Args:
        points: Landmarks or anything with `x` and `y` attributes

    Returns:
        Centroid point; (0, 0) if `points` is empty
    """
    xy = _as_xy(points)
    if len(xy) == 0:
        return Point(0.0, 0.0)
    mean = xy.mean(axis=0)
    return Point(float(mean[0]), float(mean[1]))


def bounding_box(points: Iterable) -> Rect:
    """
    Axis-aligned rectangle enclosing all `points`.

    Returns EMPTY_RECT if `points` is empty.
    """
    xy = _as_xy(points)
    if len(xy) == 0:
        return EMPTY_RECT
    lo = xy.min(axis=0)
    hi = xy.max(axis=0)
    return Rect(float(lo[0]), float(lo[1]), float(hi[0] - lo[0]), float(hi[1] - lo[1]))


def distance(a, b) -> float:
    """Euclidean distance between two 2D points."""
    return float(np.hypot(a.x - b.x, a.y - b.y))


def torso_centroid(landmarks: Sequence[Landmark]) -> Point:
    """Centroid of the shoulder and hip landmarks."""
    return centroid(landmarks[i] for i in TORSO_ANCHORS)


def sample_centroid(sample: PoseSample) -> Point:
    """Centroid of all normalized landmarks of a sample."""
    return centroid(sample.landmarks)


def sample_centroid_world(sample: PoseSample) -> Point:
    """Centroid of all world landmarks of a sample."""
    return centroid(sample.world_landmarks)


def horizontal_sort(samples: Iterable[PoseSample]) -> List[PoseSample]:
    """Sorts raw samples by horizontal position. Leftmost pose comes first."""
    return sorted(samples, key=lambda s: sample_centroid(s).x)


def line_between(sample: PoseSample, a: LandmarkKey, b: LandmarkKey) -> Tuple[Landmark, Landmark]:
    """Returns the pair of landmarks `a` and `b` of a sample."""
    return get_landmark(sample, a), get_landmark(sample, b)


def rough_center(sample: PoseSample) -> Point:
    """
    Rough center of a pose based on the chest.

    Averages the midpoints of the left-shoulder/right-hip and
    right-shoulder/left-hip diagonals.
    """
    if sample is None:
        raise InvalidArgumentError("Param 'sample' is None. Expected PoseSample")
    a1, a2 = line_between(sample, "left_shoulder", "right_hip")
    b1, b2 = line_between(sample, "right_shoulder", "left_hip")
    return centroid([
        Point((a1.x + a2.x) / 2, (a1.y + a2.y) / 2),
        Point((b1.x + b2.x) / 2, (b1.y + b2.y) / 2),
    ])
