"""
Detector adapter interface.
"""

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from pose_tracking.landmarks import RawObservation


class PoseDetector(ABC):
    """
    Pose detection model adapter.

    Implementations take one video frame and return the bodies found in it,
    without identities. Timestamps must increase from call to call.
    """

    @abstractmethod
    def detect(self, frame: np.ndarray, timestamp_ms: float) -> List[RawObservation]:
        """
        Detect bodies in a frame.

        Args:
            frame: Input frame (BGR format)
            timestamp_ms: Frame timestamp in milliseconds

        Returns:
            One RawObservation per detected body
        """

    def close(self) -> None:
        """Release model resources."""

    def __call__(self, frame: np.ndarray, timestamp_ms: float) -> List[RawObservation]:
        return self.detect(frame, timestamp_ms)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
