"""Position interpolation along a reconstructed track."""

from __future__ import annotations

from collections.abc import Sequence

from track_mapper.track.geometry import lerp_angle, normalize_lap_dist
from track_mapper.track.models import InterpolatedPosition, TrackPoint


def interpolate_position(
    points: Sequence[TrackPoint], lap_dist_pct: float
) -> InterpolatedPosition | None:
    """Return the car position on *points* for *lap_dist_pct*.

    The bracketing points are the one with the greatest lap distance at or
    below the query and the one with the smallest lap distance at or above
    it. A query outside the recorded range wraps around the start/finish
    line. Heading is interpolated along the shortest arc when both bracketing
    points carry one.

    Args:
        points: Track points in any order (finished or in-progress track).
        lap_dist_pct: Query lap fraction; wrapped into ``[0, 1)``.

    Returns:
        :class:`InterpolatedPosition`, or None if *points* is empty.
    """
    if not points:
        return None

    query = normalize_lap_dist(lap_dist_pct)

    before: TrackPoint | None = None
    after: TrackPoint | None = None
    for p in points:
        if p.lap_dist_pct <= query and (before is None or p.lap_dist_pct > before.lap_dist_pct):
            before = p
        if p.lap_dist_pct >= query and (after is None or p.lap_dist_pct < after.lap_dist_pct):
            after = p

    # Wrap around the start/finish line
    if before is None:
        before = max(points, key=lambda p: p.lap_dist_pct)
    if after is None:
        after = min(points, key=lambda p: p.lap_dist_pct)

    lo = before.lap_dist_pct
    hi = after.lap_dist_pct
    q = query
    if hi < lo:
        hi += 1.0
        if q < lo:
            q += 1.0

    span = hi - lo
    t = (q - lo) / span if span > 0 else 0.0

    heading = None
    if before.heading is not None and after.heading is not None:
        heading = lerp_angle(before.heading, after.heading, t)

    return InterpolatedPosition(
        x=before.x + t * (after.x - before.x),
        y=before.y + t * (after.y - before.y),
        lap_dist_pct=query,
        heading=heading,
    )


def start_finish_marker(points: Sequence[TrackPoint]) -> tuple[TrackPoint, TrackPoint] | None:
    """Return the point closest to lap distance 0 and the point after it.

    The pair gives renderers the direction of travel at the start/finish
    line. None for fewer than two points.
    """
    if len(points) < 2:
        return None
    idx = min(range(len(points)), key=lambda i: points[i].lap_dist_pct)
    return points[idx], points[(idx + 1) % len(points)]
