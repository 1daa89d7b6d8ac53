"""
Tracking module for the pose tracking system.

This module assigns stable identities to detected bodies, keeps per-landmark
history for each identity, and manages track lifecycle across senders.
"""

from .identity_matcher import IdentityMatcher, TrackedIdentity  # noqa: F401
from .point_history import LandmarkHistory  # noqa: F401
from .pose_track import PointHistoryTrack  # noqa: F401
from .pose_registry import EvictionScheduler, PoseRegistry, TrackEvent, TrackEventKind  # noqa: F401
from .pipeline import PosePipeline  # noqa: F401

__all__ = [
    'IdentityMatcher', 'TrackedIdentity', 'LandmarkHistory', 'PointHistoryTrack',
    'EvictionScheduler', 'PoseRegistry', 'TrackEvent', 'TrackEventKind', 'PosePipeline',
]
