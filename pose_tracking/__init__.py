"""
Multi-Body Pose Tracking

Turns per-frame pose landmark detections into a multi-body tracking record:
each body gets a stable identity across frames and each of its 33 landmarks
keeps a bounded time history for motion queries. Supports several
simultaneous senders (eg. camera feeds).
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Import main components for easier access
from .exceptions import InvalidArgumentError, LandmarkNotFoundError, PoseTrackingError  # noqa: F401
from .landmarks import (  # noqa: F401
    LANDMARK_NAMES,
    ByIndex,
    ByName,
    Landmark,
    PoseSample,
    RawObservation,
)
from .tracker import (  # noqa: F401
    IdentityMatcher,
    PointHistoryTrack,
    PosePipeline,
    PoseRegistry,
    TrackEvent,
    TrackEventKind,
)
from .utils.config import TrackingConfig  # noqa: F401
