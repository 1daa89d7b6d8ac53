"""
Bounded time history for a single landmark.
"""

import math
from collections import deque
from typing import Deque, Optional, Tuple

import numpy as np

from pose_tracking.landmarks import Landmark
from pose_tracking.utils.geometry import Point


class LandmarkHistory:
    """
    FIFO of the most recent values of one landmark, most-recent-last.

    Holds at most `sample_limit` values; the oldest is dropped when a new one
    arrives on a full buffer. The very first value ever seen is kept apart
    so start-relative queries survive eviction.
    """

    def __init__(self, name: str, sample_limit: int = 10):
        """
        Args:
            name: Landmark name
            sample_limit: Maximum number of retained values
        """
        self.name = name
        self.sample_limit = sample_limit
        self._values: Deque[Landmark] = deque(maxlen=sample_limit)
        self._timestamps: Deque[float] = deque(maxlen=sample_limit)
        self.initial: Optional[Landmark] = None
        self.initial_timestamp: Optional[float] = None

    def seen(self, landmark: Landmark, timestamp: float) -> None:
        """Append a value observed at `timestamp` (ms)."""
        if self.initial is None:
            self.initial = landmark
            self.initial_timestamp = timestamp
        self._values.append(landmark)
        self._timestamps.append(timestamp)

    def reset(self) -> None:
        self._values.clear()
        self._timestamps.clear()
        self.initial = None
        self.initial_timestamp = None

    @property
    def last(self) -> Optional[Landmark]:
        """Most recent value, or None if nothing has been seen."""
        return self._values[-1] if self._values else None

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._timestamps[-1] if self._timestamps else None

    @property
    def values(self) -> Tuple[Landmark, ...]:
        """Retained values, oldest first."""
        return tuple(self._values)

    @property
    def timestamps(self) -> Tuple[float, ...]:
        return tuple(self._timestamps)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def is_empty(self) -> bool:
        return not self._values

    @property
    def duration(self) -> float:
        """Time spanned by the retained values, in ms."""
        if len(self._timestamps) < 2:
            return 0.0
        return self._timestamps[-1] - self._timestamps[0]

    def velocity(self) -> Optional[Point]:
        """
        Velocity between the two newest values, in units per ms.

        Returns None with fewer than two values or a non-positive time step.
        """
        if len(self._values) < 2:
            return None
        dt = self._timestamps[-1] - self._timestamps[-2]
        if dt <= 1e-6:
            return None
        a, b = self._values[-2], self._values[-1]
        return Point((b.x - a.x) / dt, (b.y - a.y) / dt)

    def speed(self) -> Optional[float]:
        """Magnitude of `velocity()`."""
        v = self.velocity()
        if v is None:
            return None
        return math.hypot(v.x, v.y)

    def displacement(self) -> Optional[Point]:
        """Newest minus oldest retained value; None if empty."""
        if not self._values:
            return None
        a, b = self._values[0], self._values[-1]
        return Point(b.x - a.x, b.y - a.y)

    def distance_from_start(self) -> Optional[float]:
        """Distance between the first value ever seen and the newest one."""
        if self.initial is None or not self._values:
            return None
        last = self._values[-1]
        return math.hypot(last.x - self.initial.x, last.y - self.initial.y)

    def angle_from_start(self) -> Optional[float]:
        """Angle in radians of the movement from the first value to the newest one."""
        if self.initial is None or not self._values:
            return None
        last = self._values[-1]
        return math.atan2(last.y - self.initial.y, last.x - self.initial.x)

    def trend(self) -> Optional[Point]:
        """
        Least-squares slope of x and y over the retained window, in units per ms.

        Returns None with fewer than two values or when all values share one timestamp.
        """
        if len(self._values) < 2:
            return None
        t = np.asarray(self._timestamps, dtype=np.float64)
        if np.ptp(t) <= 1e-6:
            return None
        xy = np.array([(v.x, v.y) for v in self._values], dtype=np.float64)
        t = t - t[0]
        slope_x = np.polyfit(t, xy[:, 0], 1)[0]
        slope_y = np.polyfit(t, xy[:, 1], 1)[0]
        return Point(float(slope_x), float(slope_y))

    def __repr__(self) -> str:
        return f"LandmarkHistory(name={self.name!r}, samples={len(self)}/{self.sample_limit})"
