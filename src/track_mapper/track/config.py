"""Tunable thresholds for track recording and post-processing.

The defaults follow the conservative values that proved stable on real
iRacing feeds. Every field can be overridden through a
``TRACK_MAPPER_<FIELD>`` environment variable via :meth:`RecorderConfig.from_env`.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass

_ENV_PREFIX = "TRACK_MAPPER_"


@dataclass
class RecorderConfig:
    """All thresholds used by the recorder pipeline.

    Speeds are in m/s, distances in local-frame metres, lap distances as
    lap fractions and times in seconds.
    """

    # Recording entry
    start_speed: float = 10.0
    start_window: float = 0.05

    # Cancellation
    off_track_limit: int = 4
    invalidation_cooldown_s: float = 5.0

    # Integration
    min_integration_speed: float = 5.0
    min_time_delta: float = 0.01
    max_time_delta: float = 0.2
    default_time_delta: float = 0.05
    curvature_min_speed: float = 10.0

    # Lap completion: start/finish crossing
    crossing_min_points: int = 50
    crossing_high: float = 0.98
    crossing_low: float = 0.1

    # Lap completion: proximity closing
    closing_min_points: int = 300
    closing_window: float = 0.02
    closing_max_step: float = 0.05
    closing_assist_distance: float = 150.0
    closing_distance: float = 50.0

    # Post-processing
    min_points_for_processing: int = 10
    close_gap: float = 2.0
    smoothing_half_window: int = 2
    outlier_distance: float = 5.0
    outlier_blend: float = 0.3

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise :class:`ValueError` if any threshold is nonsensical."""
        if self.min_time_delta <= 0 or self.max_time_delta < self.min_time_delta:
            raise ValueError("time delta clamp must satisfy 0 < min <= max")
        if not 0.0 < self.start_window < 0.5:
            raise ValueError("start_window must be in (0, 0.5)")
        if not 0.0 < self.closing_window < 0.5:
            raise ValueError("closing_window must be in (0, 0.5)")
        if not 0.0 <= self.outlier_blend <= 1.0:
            raise ValueError("outlier_blend must be in [0, 1]")
        if self.off_track_limit < 1:
            raise ValueError("off_track_limit must be >= 1")
        if self.invalidation_cooldown_s < 0:
            raise ValueError("invalidation_cooldown_s must be >= 0")
        if self.closing_distance > self.closing_assist_distance:
            raise ValueError("closing_distance must not exceed closing_assist_distance")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RecorderConfig:
        """Build a config, overriding defaults from ``TRACK_MAPPER_*`` variables.

        Raises:
            ValueError: If a variable cannot be converted to the field's type.
        """
        env = os.environ if environ is None else environ
        overrides: dict = {}
        for f in dataclasses.fields(cls):
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            convert = int if f.type in (int, "int") else float
            try:
                overrides[f.name] = convert(raw)
            except ValueError as exc:
                raise ValueError(f"{_ENV_PREFIX}{f.name.upper()}={raw!r}: {exc}") from exc
        return cls(**overrides)
