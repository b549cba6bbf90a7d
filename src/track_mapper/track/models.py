"""Track modeling data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TrackPoint:
    """A single reconstructed point of the track polyline.

    Coordinates are in the local dead-reckoning frame (metres travelled
    from the first recorded point), not geodetic.
    """

    x: float
    """X coordinate."""

    y: float
    """Y coordinate."""

    lap_dist_pct: float
    """Fraction of lap completed when the point was captured [0.0, 1.0]."""

    heading: float | None = None
    """Integrated heading in radians, if known."""

    curvature: float = 0.0
    """Informational curvature estimate ``lat_accel / speed²`` (1/m)."""

    lon_accel: float = 0.0
    """Longitudinal acceleration at capture time (m/s²), for colouring."""


@dataclass(frozen=True)
class InterpolatedPosition:
    """Car position on the polyline for a given lap distance."""

    x: float
    y: float
    lap_dist_pct: float
    heading: float | None = None


class RecordingState(str, Enum):
    """Lifecycle of a track recording."""

    IDLE = "idle"
    RECORDING = "recording"
    COMPLETE = "complete"


class RecorderStatus(str, Enum):
    """Display status: :class:`RecordingState` plus the invalidation overlay."""

    IDLE = "idle"
    RECORDING = "recording"
    COMPLETE = "complete"
    INVALIDATED = "invalidated"
