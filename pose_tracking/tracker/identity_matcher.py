"""
Frame-to-frame identity assignment for detected bodies.

The upstream detector attaches no identity to its output. Each observation is
matched to the tracked identity whose torso centroid is nearest; if none is
close enough a new identity is minted.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from pose_tracking.landmarks import PoseSample, RawObservation
from pose_tracking.utils.geometry import Point, distance, torso_centroid

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


def short_guid() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class TrackedIdentity:
    """An identity known to the matcher. Updated in place on every match."""
    id: str
    centroid: Point
    first_seen: float
    last_seen: float


class IdentityMatcher:
    """
    Assigns stable pose ids to raw observations by nearest-centroid matching.

    Stale identities are pruned at most once per `age_threshold_ms`, not on
    every frame, so an identity may stay matchable for up to one extra
    interval after it has expired.
    """

    def __init__(self,
                 distance_threshold: float = 0.1,
                 age_threshold_ms: float = 2000.0,
                 clock: Optional[Clock] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        """
        Initialize the matcher.

        Args:
            distance_threshold: If the closest identity is further than this
                (normalized units), the observation is a different body
            age_threshold_ms: Identities unseen for longer than this are pruned
            clock: Millisecond clock used when no frame timestamp is given
            id_factory: Produces fresh identity ids
        """
        self.distance_threshold = distance_threshold
        self.age_threshold = age_threshold_ms
        self.clock = clock or monotonic_ms
        self.id_factory = id_factory or short_guid

        self.tracked: List[TrackedIdentity] = []
        self.last_prune = 0.0

    def to_poses(self,
                 observations: Iterable[RawObservation],
                 timestamp: Optional[float] = None) -> List[PoseSample]:
        """
        Assign ids to every observation of one frame.

        Args:
            observations: Raw observations from the detector (may be empty)
            timestamp: Frame timestamp in ms; the matcher clock if None

        Returns:
            One PoseSample per observation, in input order
        """
        now = self.clock() if timestamp is None else timestamp
        observations = list(observations)
        if not observations:
            # Nothing to match, but pruning still runs on its own schedule
            self._prune(now)
            return []
        return [self.to_pose(observation, now) for observation in observations]

    def to_pose(self, observation: RawObservation, timestamp: Optional[float] = None) -> PoseSample:
        """
        Assign an id to a single observation.

        Args:
            observation: Raw observation
            timestamp: Observation timestamp in ms; the matcher clock if None

        Returns:
            PoseSample carrying the matched or newly minted pose id
        """
        now = self.clock() if timestamp is None else timestamp
        c = torso_centroid(observation.landmarks)

        self._prune(now)

        # Existing identity with closest centroid
        closest: Optional[TrackedIdentity] = None
        score = float("inf")
        for identity in self.tracked:
            d = distance(identity.centroid, c)
            if d < score:
                score = d
                closest = identity

        if closest is None or score > self.distance_threshold:
            if closest is not None:
                logger.info(
                    f"Closest match exceeds threshold. Score: {score:.4f} "
                    f"Threshold: {self.distance_threshold}"
                )
            else:
                logger.info("No poses")
            target = TrackedIdentity(id=self.id_factory(), centroid=c, first_seen=now, last_seen=now)
            self.tracked.append(target)
        else:
            target = closest
            target.centroid = c
            target.last_seen = now

        return PoseSample(
            pose_id=target.id,
            landmarks=observation.landmarks,
            world_landmarks=observation.world_landmarks,
            timestamp=now,
        )

    def _prune(self, now: float) -> None:
        """Remove identities unseen for longer than the age threshold, at most once per interval."""
        if now - self.last_prune <= self.age_threshold:
            return
        pre = len(self.tracked)
        self.tracked = [t for t in self.tracked if now - t.last_seen <= self.age_threshold]
        self.last_prune = now
        post = len(self.tracked)
        if post < pre:
            logger.debug(f"Pruned: {pre - post} expired pose(s)")

    @property
    def identities(self) -> List[TrackedIdentity]:
        """Snapshot of the currently tracked identities."""
        return list(self.tracked)

    def __len__(self) -> int:
        return len(self.tracked)

    def reset(self) -> None:
        """Forget all identities."""
        self.tracked.clear()
        self.last_prune = 0.0
