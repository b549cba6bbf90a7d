"""TrackMapService — thread-safe wrapper around one TrackRecorder for the Web API."""

from __future__ import annotations

import threading

from track_mapper.telemetry.models import TelemetrySample
from track_mapper.track.config import RecorderConfig
from track_mapper.track.geometry import normalize_lap_dist
from track_mapper.track.models import InterpolatedPosition, RecorderStatus, TrackPoint
from track_mapper.track.recorder import TrackRecorder
from track_mapper.web.schemas import SampleRequest


class TrackMapService:
    """Serialises access to a :class:`TrackRecorder`.

    FastAPI runs sync endpoints in a worker thread pool, so every call takes
    the lock. Readers get immutable snapshots.

    Parameters
    ----------
    recorder:
        Recorder to wrap.  Defaults to one built from
        :meth:`RecorderConfig.from_env`.
    """

    def __init__(self, recorder: TrackRecorder | None = None) -> None:
        self._recorder = recorder or TrackRecorder(RecorderConfig.from_env())
        self._lock = threading.Lock()

    def feed(self, req: SampleRequest) -> tuple[RecorderStatus, int]:
        """Hand one sample to the recorder; return ``(status, point_count)``."""
        sample = TelemetrySample(
            timestamp=req.timestamp,
            forward_velocity=req.forward_velocity,
            lateral_velocity=req.lateral_velocity,
            yaw_rate=req.yaw_rate,
            lap_dist_pct=normalize_lap_dist(req.lap_dist_pct),
            track_surface=req.track_surface,
            lat_accel=req.lat_accel,
            lon_accel=req.lon_accel,
        )
        with self._lock:
            self._recorder.on_sample(sample)
            return self._recorder.status, len(self._recorder.points)

    def snapshot(self) -> tuple[RecorderStatus, tuple[TrackPoint, ...]]:
        with self._lock:
            return self._recorder.status, self._recorder.points

    def position(self, lap_dist_pct: float) -> InterpolatedPosition | None:
        with self._lock:
            return self._recorder.interpolate(lap_dist_pct)

    def finished_track(self) -> tuple[TrackPoint, ...] | None:
        """Return the published track, or None unless recording is complete."""
        with self._lock:
            if self._recorder.status is not RecorderStatus.COMPLETE:
                return None
            return self._recorder.points

    def stop(self) -> RecorderStatus:
        with self._lock:
            self._recorder.stop()
            return self._recorder.status

    def rearm(self) -> RecorderStatus:
        with self._lock:
            self._recorder.rearm()
            return self._recorder.status

    def reset(self) -> RecorderStatus:
        with self._lock:
            self._recorder.reset()
            return self._recorder.status
