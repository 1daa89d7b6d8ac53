"""
Tracking configuration.

Two aging timeouts live at different tiers and are tuned independently:
`matcher_age_threshold_ms` prunes identities inside the IdentityMatcher, while
`registry_max_age_ms` evicts landmark tracks from the PoseRegistry.
"""

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from pose_tracking.exceptions import InvalidArgumentError

# camelCase option names accepted alongside the field names
_ALIASES = {
    "distanceThreshold": "distance_threshold",
    "matcherAgeThreshold": "matcher_age_threshold_ms",
    "registryMaxAgeMs": "registry_max_age_ms",
    "sampleLimit": "sample_limit",
    "evictionTickMs": "eviction_tick_ms",
}


@dataclass(frozen=True)
class TrackingConfig:
    """
    Recognized tracking options.

    Attributes:
        distance_threshold: Maximum torso-centroid displacement (normalized units)
            for two observations to be treated as the same body
        matcher_age_threshold_ms: Identities unseen for longer than this are pruned
        registry_max_age_ms: Tracks not updated for longer than this are evicted
        sample_limit: Number of historical samples kept per landmark
        eviction_tick_ms: Interval between eviction scans
    """
    distance_threshold: float = 0.1
    matcher_age_threshold_ms: float = 2000.0
    registry_max_age_ms: float = 10000.0
    sample_limit: int = 10
    eviction_tick_ms: float = 1000.0

    def validate(self) -> "TrackingConfig":
        """Raises InvalidArgumentError for out-of-range values; returns self."""
        if self.distance_threshold <= 0:
            raise InvalidArgumentError(
                f"distance_threshold must be positive, got {self.distance_threshold}"
            )
        for name in ("matcher_age_threshold_ms", "registry_max_age_ms", "eviction_tick_ms"):
            if getattr(self, name) <= 0:
                raise InvalidArgumentError(f"{name} must be positive, got {getattr(self, name)}")
        if isinstance(self.sample_limit, bool) or not isinstance(self.sample_limit, int) \
                or self.sample_limit < 1:
            raise InvalidArgumentError(
                f"sample_limit must be an integer of at least 1, got {self.sample_limit!r}"
            )
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackingConfig":
        """
        Build a config from a mapping of option names to values.

        Both field names and their camelCase aliases are accepted. Missing
        options keep their defaults.

        Raises:
            InvalidArgumentError: for unknown keys or invalid values
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidArgumentError(
                f"Expected a mapping of tracking options, got {type(data).__name__}"
            )
        known = {f.name: f.type for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InvalidArgumentError(f"Unknown tracking option '{key}'")
            if value is None:
                continue
            try:
                values[name] = int(value) if name == "sample_limit" else float(value)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(f"Invalid value for '{key}': {value!r}") from e
        return cls(**values).validate()

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TrackingConfig":
        """
        Load a config from a YAML file.

        The file may hold the options at the top level or under a `tracking` key.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, Mapping) and "tracking" in data:
            data = data["tracking"]
        return cls.from_dict(data)

    def with_overrides(self, **overrides: Any) -> "TrackingConfig":
        """Returns a copy with the non-None `overrides` applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
