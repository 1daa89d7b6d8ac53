"""
Pose detection module for the pose tracking system.

This module provides the detector adapter interface and a MediaPipe Pose
Landmarker implementation. MediaPipe itself is imported lazily.
"""

from .base import PoseDetector  # noqa: F401
from .mediapipe_detector import MediaPipePoseDetector, observations_from_result  # noqa: F401

__all__ = ['PoseDetector', 'MediaPipePoseDetector', 'observations_from_result']
