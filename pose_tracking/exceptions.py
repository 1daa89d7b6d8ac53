"""
Error types raised by the pose tracking core.

Every failure is a deterministic function of its input; nothing here is retried.
"""


class PoseTrackingError(Exception):
    """Base class for all pose tracking errors."""


class InvalidArgumentError(PoseTrackingError, ValueError):
    """
    A required parameter is missing or malformed.

    Raised before any state is mutated, so the call has no effect.
    """


class LandmarkNotFoundError(PoseTrackingError, KeyError):
    """An unknown landmark name, an out-of-range index, or a landmark without data."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""
