"""Telemetry data models."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import IntEnum


_NUMERIC_FIELDS = (
    "timestamp",
    "forward_velocity",
    "lateral_velocity",
    "yaw_rate",
    "lap_dist_pct",
    "lat_accel",
    "lon_accel",
)


def finite_or_zero(value: float) -> float:
    """Return *value* if it is a finite number, else 0.0."""
    return value if math.isfinite(value) else 0.0


class TrackSurface(IntEnum):
    """Where the player's car currently is, as reported by the sim."""

    OFF_TRACK = 0
    PIT_STALL = 1
    PIT_LANE = 2
    ON_TRACK = 3
    NOT_IN_WORLD = 4

    @classmethod
    def from_raw(cls, value: object) -> TrackSurface:
        """Map a raw SDK value to a member; unknown values become ``NOT_IN_WORLD``."""
        try:
            return cls(int(value))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return cls.NOT_IN_WORLD


@dataclass
class TelemetrySample:
    """A single telemetry sample consumed by the track recorder.

    Every numeric field defaults to zero so that a partially populated feed
    still produces a usable sample.
    """

    timestamp: float = 0.0
    """Sample time in seconds (monotonic or session time)."""

    forward_velocity: float = 0.0
    """Body-frame forward velocity in m/s."""

    lateral_velocity: float = 0.0
    """Body-frame lateral velocity in m/s. Positive = left."""

    yaw_rate: float = 0.0
    """Yaw rate in rad/s. Positive = counterclockwise."""

    lap_dist_pct: float = 0.0
    """Lap distance as fraction [0.0, 1.0)."""

    track_surface: TrackSurface = TrackSurface.NOT_IN_WORLD
    """Surface the car is on."""

    lat_accel: float = 0.0
    """Lateral acceleration in m/s²."""

    lon_accel: float = 0.0
    """Longitudinal acceleration in m/s²."""

    @property
    def speed(self) -> float:
        """Magnitude of the body-frame velocity in m/s."""
        return math.hypot(self.forward_velocity, self.lateral_velocity)

    @property
    def on_track(self) -> bool:
        return self.track_surface == TrackSurface.ON_TRACK

    def is_valid(self) -> bool:
        """Return True if all fields are finite (no NaN/Inf)."""
        return all(math.isfinite(getattr(self, name)) for name in _NUMERIC_FIELDS)

    def sanitized(self) -> TelemetrySample:
        """Return a copy with every NaN/Inf numeric field replaced by 0.

        Returns *self* unchanged when all fields are already finite.
        """
        if self.is_valid():
            return self
        return dataclasses.replace(
            self,
            **{name: finite_or_zero(getattr(self, name)) for name in _NUMERIC_FIELDS},
        )
