"""
Landmark history for one tracked body.
"""

import logging
from typing import Dict, Iterator, List, Optional

from pose_tracking.exceptions import InvalidArgumentError, LandmarkNotFoundError
from pose_tracking.landmarks import (
    LANDMARK_NAMES,
    Landmark,
    LandmarkKey,
    PoseSample,
    landmark_name_by_index,
    resolve_landmark,
)
from pose_tracking.tracker.identity_matcher import Clock, monotonic_ms
from pose_tracking.tracker.point_history import LandmarkHistory
from pose_tracking.utils.geometry import (
    EMPTY_RECT,
    NO_DATA_POINT,
    Point,
    Rect,
    bounding_box,
    centroid,
)

logger = logging.getLogger(__name__)


def make_guid(sender_id: str, pose_id: str) -> str:
    """Globally unique key of a pose: sender id and pose id joined by '-'."""
    return f"{sender_id}-{pose_id}"


class PointHistoryTrack:
    """
    Tracks the landmarks of a single pose (ie. body) over time.

    Holds one LandmarkHistory per landmark name for the normalized landmarks
    and one for the world landmarks. Feed it with `seen()`.
    """

    def __init__(self,
                 sender_id: str,
                 pose_id: str,
                 sample_limit: int = 10,
                 clock: Optional[Clock] = None):
        """
        Initialize a track.

        Args:
            sender_id: Data source of the pose (ie. camera feed)
            pose_id: Pose id assigned by the identity matcher
            sample_limit: Number of historical values kept per landmark
            clock: Millisecond clock used for `elapsed`
        """
        self.sender_id = sender_id
        self.pose_id = pose_id
        self.guid = make_guid(sender_id, pose_id)
        self.sample_limit = sample_limit
        self.clock = clock or monotonic_ms

        self.points: Dict[str, LandmarkHistory] = {
            name: LandmarkHistory(name, sample_limit) for name in LANDMARK_NAMES
        }
        self.world_points: Dict[str, LandmarkHistory] = {
            name: LandmarkHistory(name, sample_limit) for name in LANDMARK_NAMES
        }

        self._last_seen: Optional[float] = None
        self._data: Optional[PoseSample] = None
        self._box: Optional[Rect] = None

    def seen(self, sample: PoseSample) -> None:
        """
        Update this track with a new sample of its pose.

        Args:
            sample: Pose sample carrying 33 normalized and 33 world landmarks
        """
        if sample is None:
            raise InvalidArgumentError("Param 'sample' is None. Expected PoseSample")
        if not isinstance(sample, PoseSample):
            raise InvalidArgumentError(
                f"Param 'sample' must be a PoseSample, got {type(sample).__name__}"
            )
        self._last_seen = self.clock()
        self._data = sample
        self._box = None

        for i, lm in enumerate(sample.landmarks):
            name = landmark_name_by_index(i)
            self.points[name].seen(lm, sample.timestamp)
        for i, lm in enumerate(sample.world_landmarks):
            name = landmark_name_by_index(i)
            self.world_points[name].seen(lm, sample.timestamp)

    def reset(self) -> None:
        """Drop all stored history for this track. `elapsed` reads inf until the next `seen()`."""
        for history in self.points.values():
            history.reset()
        for history in self.world_points.values():
            history.reset()
        self._data = None
        self._last_seen = None
        self._box = None

    def landmark(self, name_or_index: LandmarkKey, world: bool = False) -> LandmarkHistory:
        """
        Returns the history of a landmark by name or index.

        Args:
            name_or_index: Landmark name (eg. 'nose'), index 0..32 or tagged reference
            world: Return the world-landmark history instead of the normalized one

        Raises:
            LandmarkNotFoundError: for an unknown name or out-of-range index
        """
        name = LANDMARK_NAMES[resolve_landmark(name_or_index)]
        return (self.world_points if world else self.points)[name]

    def landmark_value(self, name_or_index: LandmarkKey) -> Landmark:
        """
        Returns the most recent normalized value of a landmark.

        Raises:
            LandmarkNotFoundError: if the landmark is unknown or has no data yet
        """
        history = self.landmark(name_or_index)
        if history.last is None:
            raise LandmarkNotFoundError(f"No data for point '{history.name}'")
        return history.last

    def world_landmark_value(self, name_or_index: LandmarkKey) -> Landmark:
        """Like `landmark_value()`, for world landmarks."""
        history = self.landmark(name_or_index, world=True)
        if history.last is None:
            raise LandmarkNotFoundError(f"No data for world point '{history.name}'")
        return history.last

    def get_point_histories(self) -> List[LandmarkHistory]:
        """All normalized landmark histories, in landmark index order."""
        return [self.points[name] for name in LANDMARK_NAMES]

    def get_raw_values(self) -> List[Optional[Landmark]]:
        """Most recent value of every landmark, in landmark index order."""
        return [self.points[name].last for name in LANDMARK_NAMES]

    @property
    def centroid(self) -> Point:
        """
        Centroid of the most recent landmark set.

        Returns (0.5, 0.5) if no data has been seen; that is not a real position.
        """
        if self._data is None:
            return NO_DATA_POINT
        return centroid(self._data.landmarks)

    @property
    def centroid_world(self) -> Point:
        """Centroid of the most recent world landmark set, or (0.5, 0.5) without data."""
        if self._data is None:
            return NO_DATA_POINT
        return centroid(self._data.world_landmarks)

    @property
    def bounding_box(self) -> Rect:
        """
        Bounding box of the most recent landmarks.

        Cached until the next `seen()`. EMPTY_RECT if there is no data.
        """
        if self._box is not None:
            return self._box
        if self._data is None:
            return EMPTY_RECT
        self._box = bounding_box(self._data.landmarks)
        return self._box

    @property
    def height(self) -> float:
        return self.bounding_box.height

    @property
    def width(self) -> float:
        return self.bounding_box.width

    @property
    def middle(self) -> Point:
        """Middle of the bounding box."""
        return self.bounding_box.middle

    @property
    def elapsed(self) -> float:
        """Milliseconds since this track was last updated."""
        if self._last_seen is None:
            return float("inf")
        return self.clock() - self._last_seen

    @property
    def last_seen(self) -> Optional[float]:
        return self._last_seen

    @property
    def last(self) -> Optional[PoseSample]:
        """The most recent raw sample."""
        return self._data

    def __iter__(self) -> Iterator[LandmarkHistory]:
        return iter(self.get_point_histories())

    def __repr__(self) -> str:
        return f"PointHistoryTrack(guid={self.guid!r})"
