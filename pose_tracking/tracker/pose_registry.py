"""
Registry of tracked poses across one or more senders.

Tracks are keyed by `sender-poseid`. A periodic eviction tick removes tracks
that have not been updated for `max_age_ms`. All access to the track map is
serialized on one lock, so the frame path and the eviction thread never see
each other's partial updates.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, DefaultDict, Dict, List, Optional

from pose_tracking.exceptions import InvalidArgumentError
from pose_tracking.landmarks import Landmark, LandmarkKey, PoseSample, resolve_landmark
from pose_tracking.tracker.identity_matcher import Clock, monotonic_ms
from pose_tracking.tracker.point_history import LandmarkHistory
from pose_tracking.tracker.pose_track import PointHistoryTrack, make_guid

logger = logging.getLogger(__name__)


class TrackEventKind(Enum):
    """Kinds of registry notifications."""
    ADDED = "added"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TrackEvent:
    """Notification payload carrying the affected track."""
    kind: TrackEventKind
    track: PointHistoryTrack


Listener = Callable[[TrackEvent], None]


class EvictionScheduler:
    """
    Runs a callback on a fixed wall-clock interval on a daemon thread.

    Exceptions from the callback are logged and the schedule continues.
    """

    def __init__(self, callback: Callable[[], object], interval_ms: float = 1000.0,
                 name: str = "pose-eviction"):
        self.callback = callback
        self.interval_ms = interval_ms
        self.name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the tick thread. No-op if already running."""
        if self.is_running:
            return
        # Each run owns its event, so a thread that outlived a timed-out stop() still exits
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name=self.name, daemon=True
        )
        self._thread.start()
        logger.debug(f"Eviction scheduler started ({self.interval_ms} ms)")

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        """Stop the tick thread and wait for it to finish."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive() \
                and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Eviction scheduler did not stop within {timeout} s")
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self, stop_event: threading.Event) -> None:
        interval = self.interval_ms / 1000.0
        while not stop_event.wait(interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Eviction tick failed")


class PoseRegistry:
    """
    Owns the PointHistoryTracks of all poses and their lifecycle.

    Notifications:
        - added: a new `sender-poseid` key was seen
        - expired: a track was removed by the eviction tick

    Enumeration methods return list snapshots; later changes to the
    registry do not affect a list already returned.
    """

    def __init__(self,
                 max_age_ms: float = 10000.0,
                 sample_limit: int = 10,
                 eviction_tick_ms: float = 1000.0,
                 clock: Optional[Clock] = None):
        """
        Initialize the registry. Call `start()` to begin periodic eviction.

        Args:
            max_age_ms: Tracks not updated for longer than this are evicted
            sample_limit: Historical values kept per landmark of each track
            eviction_tick_ms: Interval between eviction scans
            clock: Millisecond clock shared with the tracks
        """
        self.max_age_ms = max_age_ms
        self.sample_limit = sample_limit
        self.eviction_tick_ms = eviction_tick_ms
        self.clock = clock or monotonic_ms

        # PointHistoryTracks keyed by 'sender-poseid'
        self._data: Dict[str, PointHistoryTrack] = {}
        self._lock = threading.RLock()
        self._listeners: DefaultDict[TrackEventKind, List[Listener]] = defaultdict(list)
        self._scheduler = EvictionScheduler(self.evict_expired, eviction_tick_ms)

    # Lifecycle

    def start(self) -> None:
        """Start the periodic eviction tick."""
        self._scheduler.start()

    def stop(self) -> None:
        """Stop the periodic eviction tick."""
        self._scheduler.stop()

    @property
    def is_running(self) -> bool:
        return self._scheduler.is_running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # Notifications

    def add_listener(self, kind: TrackEventKind, listener: Listener) -> None:
        """Register `listener` for events of `kind`."""
        with self._lock:
            self._listeners[kind].append(listener)

    def remove_listener(self, kind: TrackEventKind, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners[kind]:
                self._listeners[kind].remove(listener)

    def on_added(self, listener: Listener) -> None:
        self.add_listener(TrackEventKind.ADDED, listener)

    def on_expired(self, listener: Listener) -> None:
        self.add_listener(TrackEventKind.EXPIRED, listener)

    def _dispatch(self, event: TrackEvent) -> None:
        with self._lock:
            listeners = list(self._listeners[event.kind])
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    f"Listener for '{event.kind.value}' failed on track {event.track.guid}"
                )

    # Updates

    def seen(self, sender_id: str, sample: PoseSample) -> str:
        """
        Track a pose sample.

        Creates a new track and notifies `added` if the sender/pose key is new.

        Args:
            sender_id: Id of the sender of the sample
            sample: Identified pose sample

        Returns:
            The globally unique key of the pose ('sender-poseid')

        Raises:
            InvalidArgumentError: if `sender_id` is missing or `sample` is not a PoseSample
        """
        if sender_id is None:
            raise InvalidArgumentError("Param 'sender_id' is None")
        if sample is None:
            raise InvalidArgumentError("Param 'sample' is None")
        if not isinstance(sample, PoseSample):
            raise InvalidArgumentError(
                f"Param 'sample' must be a PoseSample, got {type(sample).__name__}"
            )

        pose_id = str(sample.pose_id if sample.pose_id is not None else 0)
        guid = make_guid(sender_id, pose_id)

        added = None
        with self._lock:
            track = self._data.get(guid)
            if track is None:
                track = PointHistoryTrack(sender_id, pose_id, self.sample_limit, self.clock)
                track.seen(sample)
                self._data[guid] = track
                added = track
            else:
                track.seen(sample)

        if added is not None:
            logger.debug(f"Added pose {guid}")
            self._dispatch(TrackEvent(TrackEventKind.ADDED, added))
        return guid

    def evict_expired(self) -> List[PointHistoryTrack]:
        """
        Remove every track not updated for longer than `max_age_ms`.

        One `expired` notification is sent per removed track. A failing
        listener does not stop the remaining removals or notifications.

        Returns:
            The removed tracks
        """
        with self._lock:
            expired = [
                (guid, track) for guid, track in self._data.items()
                if track.elapsed > self.max_age_ms
            ]
            for guid, _ in expired:
                del self._data[guid]

        for guid, track in expired:
            logger.debug(f"Expired pose {guid}")
            self._dispatch(TrackEvent(TrackEventKind.EXPIRED, track))
        return [track for _, track in expired]

    def clear(self) -> None:
        """Remove all tracks without notifying `expired`."""
        with self._lock:
            self._data.clear()

    # Queries

    def get(self) -> List[PointHistoryTrack]:
        """All tracks, in insertion order."""
        with self._lock:
            return list(self._data.values())

    def get_by_age(self) -> List[PointHistoryTrack]:
        """All tracks, most recently updated first."""
        with self._lock:
            return sorted(self._data.values(), key=lambda t: t.elapsed)

    def get_by_horizontal(self) -> List[PointHistoryTrack]:
        """All tracks sorted by the middle of their bounding box, leftmost first."""
        with self._lock:
            return sorted(self._data.values(), key=lambda t: t.middle.x)

    def get_raw_poses(self) -> List[PoseSample]:
        """The last raw sample of every track."""
        return [t.last for t in self.get() if t.last is not None]

    def get_raw_poses_by_age(self) -> List[PoseSample]:
        """The last raw sample of every track, most recently updated first."""
        return [t.last for t in self.get_by_age() if t.last is not None]

    def get_raw_landmarks(self, name_or_index: LandmarkKey) -> List[Landmark]:
        """
        The latest value of one landmark across all poses.

        Raises:
            LandmarkNotFoundError: for an unknown name or out-of-range index
        """
        index = resolve_landmark(name_or_index)
        return [pose.landmarks[index] for pose in self.get_raw_poses()]

    def get_point_histories(self, name_or_index: LandmarkKey) -> List[LandmarkHistory]:
        """
        The history of one landmark for every tracked pose.

        Raises:
            LandmarkNotFoundError: for an unknown name or out-of-range index
        """
        resolve_landmark(name_or_index)
        return [t.landmark(name_or_index) for t in self.get()]

    def get_from_sender(self, sender_id: str) -> List[PointHistoryTrack]:
        """All tracks from one sender."""
        return [t for t in self.get() if t.sender_id == sender_id]

    def get_sender_ids(self) -> List[str]:
        """Unique sender ids, in order of first appearance."""
        return list(dict.fromkeys(t.sender_id for t in self.get()))

    def get_by_pose_id(self, pose_id: str) -> Optional[PointHistoryTrack]:
        """
        The first track with this pose id.

        Pose ids are not unique across senders; prefer `get_by_guid()`.
        """
        for track in self.get():
            if track.pose_id == pose_id:
                return track
        return None

    def get_raw_pose_by_pose_id(self, pose_id: str) -> Optional[PoseSample]:
        """The last raw sample for this pose id. Same caveat as `get_by_pose_id()`."""
        track = self.get_by_pose_id(pose_id)
        return track.last if track is not None else None

    def get_guids(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())

    def get_by_guid(self, guid: str) -> Optional[PointHistoryTrack]:
        """The track for a 'sender-poseid' key."""
        with self._lock:
            return self._data.get(guid)

    def get_raw_pose_by_guid(self, guid: str) -> Optional[PoseSample]:
        track = self.get_by_guid(guid)
        return track.last if track is not None else None

    @property
    def size(self) -> int:
        """Number of tracked poses."""
        with self._lock:
            return len(self._data)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, guid: str) -> bool:
        with self._lock:
            return guid in self._data
