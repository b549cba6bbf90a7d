"""Lap-completion detection for an in-progress recording.

Two independent paths can end a recording:

* **Crossing** — the previous point sat just before the start/finish line and
  the new sample sits just after it.
* **Proximity closing** — the car has been around the far side of the lap and
  is back near the lap fraction where recording began. The lap fraction alone
  is noisy near the line, so the candidate point is pulled toward the first
  recorded point and the lap is only closed once the local-frame distance
  corroborates it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from track_mapper.track.config import RecorderConfig
from track_mapper.track.geometry import distance, lap_dist_delta
from track_mapper.track.models import TrackPoint

_logger = logging.getLogger(__name__)


class LapDecision(str, Enum):
    CONTINUE = "continue"
    COMPLETE = "complete"


@dataclass(frozen=True)
class LapCheck:
    """Outcome of :meth:`LapCompletionDetector.check`.

    ``point`` is the candidate to append when recording continues; it may have
    been pulled toward the first recorded point by the closing correction.
    """

    decision: LapDecision
    point: TrackPoint
    reason: str = ""


class LapCompletionDetector:
    """Decides whether a candidate point completes the lap.

    Args:
        config: Point-count, lap-fraction and distance thresholds.
        min_progress: Minimum wraparound lap distance some recorded point must
            have from the start fraction before proximity closing is allowed.
    """

    def __init__(self, config: RecorderConfig | None = None, min_progress: float = 0.4) -> None:
        self._cfg = config or RecorderConfig()
        self.min_progress = min_progress

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(
        self,
        points: list[TrackPoint],
        candidate: TrackPoint,
        start_lap_dist_pct: float,
    ) -> LapCheck:
        """Evaluate *candidate* against the points recorded so far.

        Args:
            points: Points already recorded in this session (not modified).
            candidate: Freshly integrated point, not yet appended.
            start_lap_dist_pct: Lap fraction observed when recording began.
        """
        if not points:
            return LapCheck(LapDecision.CONTINUE, candidate)

        closing = self._check_proximity(points, candidate, start_lap_dist_pct)
        if closing.decision is LapDecision.COMPLETE:
            return closing

        if self.crossed_start_finish(points, closing.point):
            _logger.info("Lap completed: crossed start/finish line with %d points", len(points))
            return LapCheck(LapDecision.COMPLETE, closing.point, "crossing")

        return closing

    def crossed_start_finish(self, points: list[TrackPoint], candidate: TrackPoint) -> bool:
        """True when the step from the last point to *candidate* wraps the lap."""
        cfg = self._cfg
        if len(points) <= cfg.crossing_min_points:
            return False
        prev_pct = points[-1].lap_dist_pct
        return prev_pct > cfg.crossing_high and candidate.lap_dist_pct < cfg.crossing_low

    def made_progress(self, points: list[TrackPoint], start_lap_dist_pct: float) -> bool:
        """True once any recorded point lies on the far side of the lap."""
        return any(
            lap_dist_delta(start_lap_dist_pct, p.lap_dist_pct) >= self.min_progress
            for p in points
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_proximity(
        self,
        points: list[TrackPoint],
        candidate: TrackPoint,
        start_lap_dist_pct: float,
    ) -> LapCheck:
        cfg = self._cfg
        if len(points) <= cfg.closing_min_points:
            return LapCheck(LapDecision.CONTINUE, candidate)

        dist_from_start = lap_dist_delta(candidate.lap_dist_pct, start_lap_dist_pct)
        if dist_from_start >= cfg.closing_window:
            return LapCheck(LapDecision.CONTINUE, candidate)

        # a jump in lap fraction means a reset or tow, not a genuine approach
        step = lap_dist_delta(candidate.lap_dist_pct, points[-1].lap_dist_pct)
        if step >= cfg.closing_max_step:
            return LapCheck(LapDecision.CONTINUE, candidate)

        if not self.made_progress(points, start_lap_dist_pct):
            return LapCheck(LapDecision.CONTINUE, candidate)

        first = points[0]
        gap = distance(candidate, first)
        if gap >= cfg.closing_assist_distance:
            return LapCheck(LapDecision.CONTINUE, candidate)

        factor = max(0.0, min(1.0, 1.0 - dist_from_start / cfg.closing_window))
        corrected = TrackPoint(
            x=candidate.x * (1.0 - factor) + first.x * factor,
            y=candidate.y * (1.0 - factor) + first.y * factor,
            lap_dist_pct=candidate.lap_dist_pct,
            heading=candidate.heading,
            curvature=candidate.curvature,
            lon_accel=candidate.lon_accel,
        )

        if gap < cfg.closing_distance:
            _logger.info(
                "Lap completed: within %.1f of start point with %d points", gap, len(points)
            )
            return LapCheck(LapDecision.COMPLETE, corrected, "proximity")

        return LapCheck(LapDecision.CONTINUE, corrected)
