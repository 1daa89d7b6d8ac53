"""
MediaPipe Pose Landmarker adapter.

MediaPipe is an optional dependency (`pip install pose-tracking[detector]`);
it is only imported when a detector is constructed.
"""

import logging
from typing import Any, List, Optional

import cv2
import numpy as np

from pose_tracking.detector.base import PoseDetector
from pose_tracking.landmarks import LANDMARK_COUNT, RawObservation

logger = logging.getLogger(__name__)


def observations_from_result(result: Any) -> List[RawObservation]:
    """
    Convert a PoseLandmarkerResult into RawObservations.

    Bodies without a full set of normalized and world landmarks are skipped.

    Args:
        result: Object with `pose_landmarks` and `pose_world_landmarks` lists

    Returns:
        One RawObservation per complete body
    """
    if result is None:
        return []
    poses = getattr(result, "pose_landmarks", None) or []
    worlds = getattr(result, "pose_world_landmarks", None) or []

    observations = []
    for i, landmarks in enumerate(poses):
        world = worlds[i] if i < len(worlds) else None
        if world is None or len(landmarks) != LANDMARK_COUNT or len(world) != LANDMARK_COUNT:
            logger.debug(f"Skipping incomplete pose {i}")
            continue
        observations.append(RawObservation(landmarks=landmarks, world_landmarks=world))
    return observations


class MediaPipePoseDetector(PoseDetector):
    """Detects up to `num_poses` bodies per frame with MediaPipe in VIDEO mode."""

    def __init__(self,
                 model_path: str = "pose_landmarker_full.task",
                 num_poses: int = 5,
                 min_pose_detection_confidence: float = 0.3,
                 min_pose_presence_confidence: float = 0.3,
                 min_tracking_confidence: float = 0.3,
                 delegate: Optional[str] = None):
        """
        Initialize the MediaPipe pose landmarker.

        Args:
            model_path: Path to a pose_landmarker .task model bundle
            num_poses: Maximum number of bodies detected per frame
            min_pose_detection_confidence: Minimum detection confidence (0.0-1.0)
            min_pose_presence_confidence: Minimum presence confidence (0.0-1.0)
            min_tracking_confidence: Minimum tracking confidence (0.0-1.0)
            delegate: 'CPU' or 'GPU'; MediaPipe default if None
        """
        try:
            import mediapipe as mp
        except ImportError as e:
            raise RuntimeError(
                "MediaPipe is not installed. Install it with: pip install pose-tracking[detector]"
            ) from e

        self._mp = mp
        self.model_path = model_path
        self.num_poses = num_poses

        base_kwargs = {"model_asset_path": model_path}
        if delegate is not None:
            base_kwargs["delegate"] = getattr(mp.tasks.BaseOptions.Delegate, delegate.upper())

        options = mp.tasks.vision.PoseLandmarkerOptions(
            base_options=mp.tasks.BaseOptions(**base_kwargs),
            running_mode=mp.tasks.vision.RunningMode.VIDEO,
            num_poses=num_poses,
            min_pose_detection_confidence=min_pose_detection_confidence,
            min_pose_presence_confidence=min_pose_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
            output_segmentation_masks=False,
        )
        try:
            self._landmarker = mp.tasks.vision.PoseLandmarker.create_from_options(options)
        except Exception as e:
            raise RuntimeError(f"Failed to load pose landmarker model '{model_path}': {e}") from e
        logger.info(f"Pose landmarker loaded: {model_path} (num_poses={num_poses})")

    def detect(self, frame: np.ndarray, timestamp_ms: float) -> List[RawObservation]:
        if frame is None or frame.size == 0:
            logger.warning("Empty frame provided to detector")
            return []
        if self._landmarker is None:
            raise RuntimeError("Detector has been closed")

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=rgb)
        result = self._landmarker.detect_for_video(image, int(timestamp_ms))
        return observations_from_result(result)

    def close(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
