"""Lap-distance and planar geometry helpers shared by the track pipeline.

Lap distances are fractions of a lap that wrap at the start/finish line, so
any comparison between two of them must go through these helpers instead of
plain subtraction.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from track_mapper.track.models import TrackPoint

# ---------------------------------------------------------------------------
# Lap-distance arithmetic
# ---------------------------------------------------------------------------


def normalize_lap_dist(pct: float) -> float:
    """Wrap *pct* into ``[0, 1)``."""
    wrapped = pct % 1.0
    # -1e-18 % 1.0 == 1.0 in floating point
    return 0.0 if wrapped >= 1.0 else wrapped


def lap_dist_forward(start: float, pct: float) -> float:
    """Distance travelled forward from *start* to *pct*, in ``[0, 1)``."""
    return normalize_lap_dist(pct - start)


def lap_dist_delta(a: float, b: float) -> float:
    """Shortest wraparound distance between two lap fractions, in ``[0, 0.5]``."""
    d = lap_dist_forward(a, b)
    return min(d, 1.0 - d)


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------


def wrap_angle(angle: float) -> float:
    """Wrap *angle* into ``[-π, π]``."""
    return math.atan2(math.sin(angle), math.cos(angle))


def lerp_angle(a: float, b: float, t: float) -> float:
    """Interpolate from *a* toward *b* along the shortest arc."""
    return a + t * wrap_angle(b - a)


# ---------------------------------------------------------------------------
# Planar helpers
# ---------------------------------------------------------------------------


def distance(p1: TrackPoint, p2: TrackPoint) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def bounding_box(points: Iterable[TrackPoint]) -> tuple[float, float, float, float] | None:
    """Return ``(min_x, min_y, max_x, max_y)`` or None for no points."""
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for p in points:
        min_x = min(min_x, p.x)
        min_y = min(min_y, p.y)
        max_x = max(max_x, p.x)
        max_y = max(max_y, p.y)
    if min_x == math.inf:
        return None
    return min_x, min_y, max_x, max_y
