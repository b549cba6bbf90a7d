"""SampleParser — converts raw iRacing SDK data to TelemetrySample."""

from __future__ import annotations

import math

from track_mapper.telemetry.models import TelemetrySample, TrackSurface

# iRacing SDK field name → (TelemetrySample field, clamp_min, clamp_max)
# clamp_min/max of None means no bound on that side.
_FIELD_MAP: tuple[tuple[str, str, float | None, float | None], ...] = (
    # raw_key        sample_field         min   max
    ("SessionTime",  "timestamp",         0.0,  None),
    ("VelocityX",    "forward_velocity",  None, None),
    ("VelocityY",    "lateral_velocity",  None, None),
    ("YawRate",      "yaw_rate",          None, None),
    ("LatAccel",     "lat_accel",         None, None),
    ("LongAccel",    "lon_accel",         None, None),
)


def _sanitize(value: float, lo: float | None, hi: float | None) -> float:
    """Return value clamped to [lo, hi], with NaN/Inf replaced by lo (or 0)."""
    if not math.isfinite(value):
        value = lo if lo is not None else 0.0
    if lo is not None and value < lo:
        value = lo
    if hi is not None and value > hi:
        value = hi
    return value


def _as_float(value: object) -> float:
    try:
        return float(value or 0.0)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


class SampleParser:
    """Parses a raw iRacing telemetry dict into a :class:`TelemetrySample`.

    The raw dict uses iRacing SDK field names (e.g. ``"VelocityX"``,
    ``"LapDistPct"``). Missing, malformed or non-finite values become 0;
    the lap distance is wrapped into ``[0, 1)``.
    """

    def parse(self, raw: dict) -> TelemetrySample:
        """Convert *raw* iRacing data snapshot to a :class:`TelemetrySample`."""
        kwargs: dict = {}

        for raw_key, sample_field, lo, hi in _FIELD_MAP:
            kwargs[sample_field] = _sanitize(_as_float(raw.get(raw_key)), lo, hi)

        lap_dist = _sanitize(_as_float(raw.get("LapDistPct")), None, None)
        kwargs["lap_dist_pct"] = lap_dist % 1.0
        kwargs["track_surface"] = TrackSurface.from_raw(raw.get("PlayerTrackSurface"))

        return TelemetrySample(**kwargs)
