"""Track post-processing — turns a raw recording into the finished polyline.

Pipeline (applied once, when a recording completes):
1. Reorder points by lap distance measured from the lap minimum.
2. Append a closing point if a full lap was captured but the ends don't meet.
3. Suppress outliers with a one-pass neighbourhood filter.
4. Translate so the bounding-box center sits at the origin.

Captures with too few points skip the pipeline and are published as-is.
"""

from __future__ import annotations

import dataclasses

from track_mapper.track.config import RecorderConfig
from track_mapper.track.geometry import bounding_box, distance, lap_dist_forward
from track_mapper.track.models import TrackPoint

# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def reorder_by_lap_dist(points: list[TrackPoint]) -> list[TrackPoint]:
    """Sort by ``(lap_dist_pct - min_lap_dist) mod 1``.

    Sorting on the offset from the minimum keeps points that wrapped past the
    start/finish line during capture in driving order.
    """
    if not points:
        return []
    min_pct = min(p.lap_dist_pct for p in points)
    return sorted(points, key=lambda p: lap_dist_forward(min_pct, p.lap_dist_pct))


def is_full_lap(first: TrackPoint, last: TrackPoint, high: float = 0.98, low: float = 0.1) -> bool:
    """True when the two ends sit on opposite sides of the start/finish line."""
    return (last.lap_dist_pct > high and first.lap_dist_pct < low) or (
        last.lap_dist_pct < low and first.lap_dist_pct > high
    )


def close_loop(points: list[TrackPoint], min_gap: float = 2.0) -> list[TrackPoint]:
    """Append a copy of the first point (``lap_dist_pct = 1.0``) when needed.

    The closing point is added only if the capture spans the start/finish line
    and the ends are more than *min_gap* apart.
    """
    if len(points) < 2:
        return list(points)
    first, last = points[0], points[-1]
    if is_full_lap(first, last) and distance(first, last) > min_gap:
        return [*points, dataclasses.replace(first, lap_dist_pct=1.0)]
    return list(points)


def smooth_outliers(
    points: list[TrackPoint],
    half_window: int = 2,
    threshold: float = 5.0,
    blend: float = 0.3,
) -> list[TrackPoint]:
    """Pull outliers toward the mean of their neighbours.

    For each point the mean of up to *half_window* neighbours on each side
    (excluding the point itself) is computed from the unsmoothed input. Points
    further than *threshold* from that mean move *blend* of the way toward
    it; all others are kept unchanged.
    """
    n = len(points)
    smoothed: list[TrackPoint] = []

    for i, pt in enumerate(points):
        lo = max(0, i - half_window)
        hi = min(n - 1, i + half_window)
        neighbours = [points[j] for j in range(lo, hi + 1) if j != i]
        if not neighbours:
            smoothed.append(pt)
            continue

        avg_x = sum(p.x for p in neighbours) / len(neighbours)
        avg_y = sum(p.y for p in neighbours) / len(neighbours)
        dev = ((pt.x - avg_x) ** 2 + (pt.y - avg_y) ** 2) ** 0.5

        if dev > threshold:
            smoothed.append(dataclasses.replace(
                pt,
                x=pt.x * (1.0 - blend) + avg_x * blend,
                y=pt.y * (1.0 - blend) + avg_y * blend,
            ))
        else:
            smoothed.append(pt)

    return smoothed


def center_points(points: list[TrackPoint]) -> list[TrackPoint]:
    """Translate *points* so their bounding-box center is ``(0, 0)``."""
    box = bounding_box(points)
    if box is None:
        return []
    min_x, min_y, max_x, max_y = box
    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2
    if cx == 0.0 and cy == 0.0:
        return list(points)
    return [dataclasses.replace(p, x=p.x - cx, y=p.y - cy) for p in points]


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------


class TrackPostProcessor:
    """Runs the full post-processing pipeline on a finished recording.

    Args:
        config: Supplies the minimum point count, closing gap and smoothing
            parameters.
    """

    def __init__(self, config: RecorderConfig | None = None) -> None:
        self._cfg = config or RecorderConfig()

    def process(self, points: list[TrackPoint]) -> tuple[TrackPoint, ...]:
        """Return the finished, immutable track for *points*.

        Captures of ``min_points_for_processing`` points or fewer are
        returned unchanged, in recording order.
        """
        cfg = self._cfg
        if len(points) <= cfg.min_points_for_processing:
            return tuple(points)

        ordered = reorder_by_lap_dist(points)
        closed = close_loop(ordered, cfg.close_gap)
        smoothed = smooth_outliers(
            closed,
            half_window=cfg.smoothing_half_window,
            threshold=cfg.outlier_distance,
            blend=cfg.outlier_blend,
        )
        return tuple(center_points(smoothed))
