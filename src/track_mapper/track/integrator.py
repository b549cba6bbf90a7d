"""Dead-reckoning position integrator.

Reconstructs the car's path in a local 2D frame from body-frame velocity and
yaw rate alone. The first accepted sample defines the origin and heading 0.
"""

from __future__ import annotations

import math

from track_mapper.telemetry.models import TelemetrySample
from track_mapper.track.config import RecorderConfig
from track_mapper.track.models import TrackPoint


class DeadReckoningIntegrator:
    """Turns one accepted telemetry sample into the next :class:`TrackPoint`.

    The integrator only remembers the timestamp of the last accepted sample;
    the previous point is passed in by the owning session.

    Args:
        config: Thresholds (speed gate, time-delta clamp, curvature gate).
    """

    def __init__(self, config: RecorderConfig | None = None) -> None:
        self._cfg = config or RecorderConfig()
        self._last_timestamp: float | None = None

    def reset(self) -> None:
        self._last_timestamp = None

    def accepts(self, sample: TelemetrySample) -> bool:
        """Return True if *sample* is fast enough and on track to integrate."""
        return sample.on_track and sample.speed >= self._cfg.min_integration_speed

    def time_delta(self, timestamp: float) -> float:
        """Clamped gap since the last accepted sample; records *timestamp*.

        The first call after :meth:`reset` returns the configured default.
        """
        cfg = self._cfg
        if self._last_timestamp is None:
            dt = cfg.default_time_delta
        else:
            dt = min(cfg.max_time_delta, max(cfg.min_time_delta, timestamp - self._last_timestamp))
        self._last_timestamp = timestamp
        return dt

    def step(self, previous: TrackPoint | None, sample: TelemetrySample) -> TrackPoint:
        """Advance from *previous* using *sample* and return the new point.

        With no previous point the result is the origin with heading 0.
        """
        dt = self.time_delta(sample.timestamp)
        speed = sample.speed
        curvature = sample.lat_accel / (speed * speed) if speed > self._cfg.curvature_min_speed else 0.0

        if previous is None:
            return TrackPoint(
                x=0.0,
                y=0.0,
                lap_dist_pct=sample.lap_dist_pct,
                heading=0.0,
                curvature=curvature,
                lon_accel=sample.lon_accel,
            )

        heading = (previous.heading or 0.0) + sample.yaw_rate * dt
        cos_h = math.cos(heading)
        sin_h = math.sin(heading)
        vf = sample.forward_velocity
        vs = sample.lateral_velocity

        # rotate body-frame velocity into the world frame, then Euler-integrate
        world_dx = (vf * cos_h - vs * sin_h) * dt
        world_dy = (vf * sin_h + vs * cos_h) * dt

        return TrackPoint(
            x=previous.x + world_dx,
            y=previous.y + world_dy,
            lap_dist_pct=sample.lap_dist_pct,
            heading=heading,
            curvature=curvature,
            lon_accel=sample.lon_accel,
        )
