"""
Video file reader producing timestamped frames for the detector.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple

import cv2
import numpy as np


@dataclass
class VideoFeed:
    """Container for a video capture and its metadata. One feed is one sender."""
    sender_id: str
    path: str
    cap: cv2.VideoCapture
    width: int
    height: int
    fps: float
    frame_count: int
    frame_idx: int = 0

    @classmethod
    def from_path(cls, video_path: str, sender_id: Optional[str] = None) -> "VideoFeed":
        """
        Open a video file.

        Args:
            video_path: Path to the video file
            sender_id: Sender id for the feed; the file stem if None

        Raises:
            ValueError: if the video cannot be opened
        """
        cap = cv2.VideoCapture(video_path)
        if not cap.isOpened():
            raise ValueError(f"Could not open video: {video_path}")

        fps = cap.get(cv2.CAP_PROP_FPS)
        return cls(
            sender_id=sender_id or Path(video_path).stem,
            path=video_path,
            cap=cap,
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=fps if fps and fps > 0 else 30.0,
            frame_count=int(cap.get(cv2.CAP_PROP_FRAME_COUNT)),
        )

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray], float]:
        """
        Read the next frame.

        Returns:
            (ok, frame, timestamp_ms) where the timestamp derives from the frame index and FPS
        """
        ret, frame = self.cap.read()
        if not ret:
            return False, None, 0.0
        timestamp = self.frame_idx / self.fps * 1000.0
        self.frame_idx += 1
        return True, frame, timestamp

    def frames(self) -> Iterator[Tuple[np.ndarray, float]]:
        """Iterate (frame, timestamp_ms) pairs until the video ends."""
        while True:
            ok, frame, timestamp = self.read_frame()
            if not ok:
                return
            yield frame, timestamp

    def release(self) -> None:
        """Release video capture resources."""
        if self.cap.isOpened():
            self.cap.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
