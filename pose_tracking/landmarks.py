"""
Landmark definitions shared by the detector adapter and the trackers.

The 33 landmark names follow the MediaPipe pose topology. Their order is the
fixed index of each landmark in a detection and never changes at runtime.
"""

import numbers
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from pose_tracking.exceptions import InvalidArgumentError, LandmarkNotFoundError

LANDMARK_NAMES: Tuple[str, ...] = (
    "nose",
    "left_eye_inner",
    "left_eye",
    "left_eye_outer",
    "right_eye_inner",
    "right_eye",
    "right_eye_outer",
    "left_ear",
    "right_ear",
    "mouth_left",
    "mouth_right",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_pinky",
    "right_pinky",
    "left_index",
    "right_index",
    "left_thumb",
    "right_thumb",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
    "left_heel",
    "right_heel",
    "left_foot_index",
    "right_foot_index",
)

LANDMARK_COUNT = len(LANDMARK_NAMES)

_INDEX_BY_NAME: Dict[str, int] = {name: i for i, name in enumerate(LANDMARK_NAMES)}

# Torso anchors used for identity matching: shoulders and hips
TORSO_ANCHORS: Tuple[int, ...] = (
    _INDEX_BY_NAME["right_shoulder"],
    _INDEX_BY_NAME["left_shoulder"],
    _INDEX_BY_NAME["right_hip"],
    _INDEX_BY_NAME["left_hip"],
)


@dataclass(frozen=True)
class Landmark:
    """
    A single landmark sample.

    For normalized landmarks `x` and `y` are image-relative in [0, 1]; world
    landmarks use metric units.
    """
    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0

    @classmethod
    def from_any(cls, value: Any) -> "Landmark":
        """
        Build a Landmark from another landmark-like value.

        Accepts a Landmark, a mapping with x/y[/z/visibility] keys, an object
        exposing those attributes (e.g. a MediaPipe landmark), or an
        (x, y[, z[, visibility]]) sequence or numpy row.
        """
        if isinstance(value, Landmark):
            return value
        if value is None:
            raise InvalidArgumentError("Landmark value is None")
        if isinstance(value, Mapping):
            try:
                return cls(
                    x=float(value["x"]),
                    y=float(value["y"]),
                    z=float(value.get("z") or 0.0),
                    visibility=float(value.get("visibility") or 0.0),
                )
            except KeyError as e:
                raise InvalidArgumentError(f"Landmark mapping is missing key {e}") from e
        if hasattr(value, "x") and hasattr(value, "y"):
            return cls(
                x=float(value.x),
                y=float(value.y),
                z=float(getattr(value, "z", None) or 0.0),
                visibility=float(getattr(value, "visibility", None) or 0.0),
            )
        if isinstance(value, np.ndarray):
            value = value.ravel().tolist()
        if isinstance(value, Sequence) and not isinstance(value, str) and 2 <= len(value) <= 4:
            return cls(*(float(v) for v in value))
        raise InvalidArgumentError(f"Cannot convert {type(value).__name__} to a Landmark")


LandmarkList = Tuple[Landmark, ...]


def _to_landmark_list(values: Sequence[Any], label: str) -> LandmarkList:
    if values is None:
        raise InvalidArgumentError(f"Param '{label}' is None")
    landmarks = tuple(Landmark.from_any(v) for v in values)
    if len(landmarks) != LANDMARK_COUNT:
        raise InvalidArgumentError(
            f"Expected {LANDMARK_COUNT} {label}, got {len(landmarks)}"
        )
    return landmarks


@dataclass(frozen=True)
class RawObservation:
    """One detected body in one frame, without any identity."""
    landmarks: LandmarkList
    world_landmarks: LandmarkList

    def __post_init__(self):
        object.__setattr__(self, "landmarks", _to_landmark_list(self.landmarks, "landmarks"))
        object.__setattr__(
            self, "world_landmarks", _to_landmark_list(self.world_landmarks, "world_landmarks")
        )


@dataclass(frozen=True)
class PoseSample:
    """An observation after the identity matcher has assigned it a pose id."""
    pose_id: str
    landmarks: LandmarkList
    world_landmarks: LandmarkList
    timestamp: float

    def __post_init__(self):
        object.__setattr__(self, "landmarks", _to_landmark_list(self.landmarks, "landmarks"))
        object.__setattr__(
            self, "world_landmarks", _to_landmark_list(self.world_landmarks, "world_landmarks")
        )


@dataclass(frozen=True)
class ByName:
    """Landmark referenced by its semantic name."""
    name: str


@dataclass(frozen=True)
class ByIndex:
    """Landmark referenced by its position in a detection."""
    index: int


LandmarkRef = Union[ByName, ByIndex]

# What callers may pass wherever a landmark is expected
LandmarkKey = Union[str, int, ByName, ByIndex]


def to_landmark_ref(value: LandmarkKey) -> LandmarkRef:
    """
    Tag a name-or-index parameter.

    Raises:
        InvalidArgumentError: if `value` is None or neither a name nor an index
    """
    if value is None:
        raise InvalidArgumentError(
            "Param 'name_or_index' is None. Expected landmark name or numerical index"
        )
    if isinstance(value, (ByName, ByIndex)):
        return value
    # bool is an int subclass, but True is not a landmark
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Expected landmark name or index, got {value!r}")
    if isinstance(value, numbers.Integral):
        return ByIndex(int(value))
    if isinstance(value, str):
        return ByName(value)
    raise InvalidArgumentError(
        f"Expected landmark name or index, got {type(value).__name__}"
    )


def landmark_index_by_name(name: str) -> Optional[int]:
    """Returns the landmark index for `name`, or None if the name is unknown."""
    return _INDEX_BY_NAME.get(name)


def landmark_name_by_index(index: int) -> str:
    """
    Returns the landmark name at `index`.

    Raises:
        LandmarkNotFoundError: if `index` is outside 0..32
    """
    if index < 0 or index >= LANDMARK_COUNT:
        raise LandmarkNotFoundError(
            f"Landmark index {index} out of range 0..{LANDMARK_COUNT - 1}"
        )
    return LANDMARK_NAMES[index]


def resolve_landmark(value: LandmarkKey) -> int:
    """
    Resolve a name, index or tagged reference to the canonical landmark index.

    Raises:
        InvalidArgumentError: if `value` is None or of the wrong type
        LandmarkNotFoundError: if the name is unknown or the index out of range
    """
    ref = to_landmark_ref(value)
    if isinstance(ref, ByIndex):
        landmark_name_by_index(ref.index)
        return ref.index
    index = landmark_index_by_name(ref.name)
    if index is None:
        raise LandmarkNotFoundError(f"Landmark unknown: '{ref.name}'")
    return index


def get_landmark(sample: PoseSample, ref: LandmarkKey) -> Landmark:
    """Returns a normalized landmark of a raw sample by name or index."""
    return sample.landmarks[resolve_landmark(ref)]


def get_world_landmark(sample: PoseSample, ref: LandmarkKey) -> Landmark:
    """Returns a world landmark of a raw sample by name or index."""
    return sample.world_landmarks[resolve_landmark(ref)]
