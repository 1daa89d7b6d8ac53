"""
Frame path from raw detections to tracked landmark histories.

    raw observations -> IdentityMatcher -> PoseRegistry.seen -> PointHistoryTrack.seen

Each sender gets its own IdentityMatcher, so pose ids from different feeds
are matched independently; the PoseRegistry is shared.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional

from pose_tracking.exceptions import InvalidArgumentError
from pose_tracking.landmarks import RawObservation
from pose_tracking.tracker.identity_matcher import Clock, IdentityMatcher, monotonic_ms
from pose_tracking.tracker.pose_registry import PoseRegistry
from pose_tracking.utils.config import TrackingConfig

logger = logging.getLogger(__name__)


class PosePipeline:
    """
    Connects per-sender identity matching to a shared PoseRegistry.

    Use as a context manager (or call `start()`/`stop()`) so the registry's
    eviction tick is stopped when the pipeline is torn down.
    """

    def __init__(self,
                 config: Optional[TrackingConfig] = None,
                 clock: Optional[Clock] = None,
                 registry: Optional[PoseRegistry] = None):
        """
        Initialize the pipeline.

        Args:
            config: Tracking options; defaults if None
            clock: Millisecond clock shared by matchers and registry
            registry: Registry to feed; one is built from `config` if None
        """
        self.config = (config or TrackingConfig()).validate()
        self.clock = clock or monotonic_ms
        self.registry = registry or PoseRegistry(
            max_age_ms=self.config.registry_max_age_ms,
            sample_limit=self.config.sample_limit,
            eviction_tick_ms=self.config.eviction_tick_ms,
            clock=self.clock,
        )

        # sender_id -> matcher
        self.matchers: Dict[str, IdentityMatcher] = {}
        self._lock = threading.Lock()
        self.frame_count = 0

    def matcher_for(self, sender_id: str) -> IdentityMatcher:
        """Returns the IdentityMatcher of a sender, creating it on first use."""
        with self._lock:
            matcher = self.matchers.get(sender_id)
            if matcher is None:
                matcher = IdentityMatcher(
                    distance_threshold=self.config.distance_threshold,
                    age_threshold_ms=self.config.matcher_age_threshold_ms,
                    clock=self.clock,
                )
                self.matchers[sender_id] = matcher
            return matcher

    def process_frame(self,
                      sender_id: str,
                      observations: Iterable[RawObservation],
                      timestamp: Optional[float] = None) -> List[str]:
        """
        Run one frame of detections through matching and tracking.

        Args:
            sender_id: Id of the source the frame came from
            observations: Raw observations detected in the frame
            timestamp: Frame timestamp in ms; the pipeline clock if None

        Returns:
            Registry keys ('sender-poseid') of the observations, in input order
        """
        if sender_id is None:
            raise InvalidArgumentError("Param 'sender_id' is None")
        if observations is None:
            raise InvalidArgumentError("Param 'observations' is None")

        matcher = self.matcher_for(sender_id)
        with self._lock:
            samples = matcher.to_poses(observations, timestamp)
            self.frame_count += 1
        return [self.registry.seen(sender_id, sample) for sample in samples]

    def start(self) -> None:
        self.registry.start()

    def stop(self) -> None:
        self.registry.stop()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def reset(self) -> None:
        """Forget all identities and tracks."""
        with self._lock:
            self.matchers.clear()
            self.frame_count = 0
        self.registry.clear()
