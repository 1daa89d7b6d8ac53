"""
Utility functions for the pose tracking system.

This module provides:
- Geometry helpers for landmark sets
- Tracking configuration
- Video file reading
"""

from .config import TrackingConfig  # noqa: F401
from .geometry import EMPTY_RECT, Point, Rect, bounding_box, centroid  # noqa: F401
from .video_source import VideoFeed  # noqa: F401

__all__ = ['TrackingConfig', 'EMPTY_RECT', 'Point', 'Rect', 'bounding_box', 'centroid', 'VideoFeed']
