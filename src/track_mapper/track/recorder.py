"""TrackRecorder — the track-map recording state machine.

Lifecycle::

    IDLE ──(fast, near start/finish, on track)──▶ RECORDING ──(lap done / stop())──▶ COMPLETE
      ▲                                              │                                 │
      └──────(off track for N samples, invalidated)──┘                                 │
                                                     ▲──────────────(rearm())──────────┘

A cancelled recording leaves the recorder IDLE with an *invalidated* flag
that clears on its own after a cooldown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from track_mapper.telemetry.models import TelemetrySample
from track_mapper.track.config import RecorderConfig
from track_mapper.track.integrator import DeadReckoningIntegrator
from track_mapper.track.interpolate import interpolate_position
from track_mapper.track.lap_detector import LapCompletionDetector, LapDecision
from track_mapper.track.models import (
    InterpolatedPosition,
    RecorderStatus,
    RecordingState,
    TrackPoint,
)
from track_mapper.track.postprocess import TrackPostProcessor

_logger = logging.getLogger(__name__)


@dataclass
class RecordingSession:
    """Mutable state of one recording attempt, owned by the recorder."""

    start_lap_dist_pct: float
    points: list[TrackPoint] = field(default_factory=list)
    off_track_count: int = 0


class TrackRecorder:
    """Builds a track map from a stream of :class:`TelemetrySample`.

    Feed samples with :meth:`on_sample`; read the outcome through
    :attr:`state`, :attr:`status`, :attr:`points` and :meth:`interpolate`.
    The recorder is single-threaded: callers sharing it between threads must
    serialise access.

    Parameters
    ----------
    config:
        Thresholds; defaults to :class:`RecorderConfig`.
    clock:
        Monotonic clock in seconds used for the invalidation cooldown.
    """

    def __init__(
        self,
        config: RecorderConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cfg = config or RecorderConfig()
        self._clock = clock
        self._integrator = DeadReckoningIntegrator(self._cfg)
        self._detector = LapCompletionDetector(self._cfg)
        self._post = TrackPostProcessor(self._cfg)

        self._state = RecordingState.IDLE
        self._session: RecordingSession | None = None
        self._track: tuple[TrackPoint, ...] = ()
        self._invalidated_until: float | None = None
        self._callbacks: list[Callable[[RecordingState], None]] = []

    # ------------------------------------------------------------------
    # Output contract
    # ------------------------------------------------------------------

    @property
    def config(self) -> RecorderConfig:
        return self._cfg

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def invalidated(self) -> bool:
        """True while the cooldown after a cancelled recording is running."""
        if self._invalidated_until is None:
            return False
        if self._clock() >= self._invalidated_until:
            self._invalidated_until = None
            return False
        return True

    @property
    def status(self) -> RecorderStatus:
        """Lifecycle state with the invalidation overlay applied."""
        if self._state is RecordingState.IDLE and self.invalidated:
            return RecorderStatus.INVALIDATED
        return RecorderStatus(self._state.value)

    @property
    def points(self) -> tuple[TrackPoint, ...]:
        """Snapshot of the in-progress points, or the finished track."""
        if self._session is not None:
            return tuple(self._session.points)
        return self._track

    @property
    def start_lap_dist_pct(self) -> float | None:
        return self._session.start_lap_dist_pct if self._session is not None else None

    def interpolate(self, lap_dist_pct: float) -> InterpolatedPosition | None:
        """Position on the current polyline for *lap_dist_pct* (None if empty)."""
        if self._session is not None:
            return interpolate_position(self._session.points, lap_dist_pct)
        return interpolate_position(self._track, lap_dist_pct)

    def register_callback(self, callback: Callable[[RecordingState], None]) -> None:
        """Register *callback(state)* to be called on every state transition."""
        self._callbacks.append(callback)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_sample(self, sample: TelemetrySample) -> RecordingState:
        """Process one sample and return the resulting state.

        NaN or infinite numeric fields are treated as zero.
        """
        sample = sample.sanitized()
        if self._state is RecordingState.IDLE:
            if self._should_start(sample):
                self._start(sample.lap_dist_pct)
            else:
                return self._state

        if self._state is RecordingState.RECORDING:
            self._record(sample)

        return self._state

    # ------------------------------------------------------------------
    # Control actions
    # ------------------------------------------------------------------

    def stop(self) -> tuple[TrackPoint, ...]:
        """Finish the current recording now and return the published track.

        Outside RECORDING this is a no-op returning the current track.
        """
        if self._state is RecordingState.RECORDING:
            self._complete("stopped")
        return self._track

    def rearm(self) -> None:
        """Discard any finished track and wait for the next entry condition."""
        self._session = None
        self._track = ()
        self._integrator.reset()
        if self._state is not RecordingState.IDLE:
            _logger.info("Recorder re-armed")
            self._transition(RecordingState.IDLE)

    def reset(self) -> None:
        """Like :meth:`rearm`, and also clear the invalidation flag."""
        self._invalidated_until = None
        self.rearm()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _should_start(self, sample: TelemetrySample) -> bool:
        cfg = self._cfg
        pct = sample.lap_dist_pct
        near_line = pct < cfg.start_window or pct > 1.0 - cfg.start_window
        return sample.on_track and near_line and sample.speed > cfg.start_speed

    def _start(self, lap_dist_pct: float) -> None:
        self._session = RecordingSession(start_lap_dist_pct=lap_dist_pct)
        self._track = ()
        self._integrator.reset()
        _logger.info("Recording started at lap distance %.3f", lap_dist_pct)
        self._transition(RecordingState.RECORDING)

    def _record(self, sample: TelemetrySample) -> None:
        session = self._session
        if session is None:
            return

        if sample.on_track:
            session.off_track_count = 0
        else:
            session.off_track_count += 1
            if session.off_track_count >= self._cfg.off_track_limit:
                self._cancel()
                return

        if not self._integrator.accepts(sample):
            return

        previous = session.points[-1] if session.points else None
        candidate = self._integrator.step(previous, sample)
        result = self._detector.check(session.points, candidate, session.start_lap_dist_pct)

        if result.decision is LapDecision.COMPLETE:
            self._complete(result.reason)
            return

        session.points.append(result.point)

    def _cancel(self) -> None:
        count = len(self._session.points) if self._session is not None else 0
        self._session = None
        self._integrator.reset()
        self._invalidated_until = self._clock() + self._cfg.invalidation_cooldown_s
        _logger.warning("Recording invalidated after leaving the track (%d points dropped)", count)
        self._transition(RecordingState.IDLE)

    def _complete(self, reason: str) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        self._track = self._post.process(session.points)
        _logger.info(
            "Track map complete (%s): %d raw points, %d published",
            reason or "unknown",
            len(session.points),
            len(self._track),
        )
        self._transition(RecordingState.COMPLETE)

    def _transition(self, state: RecordingState) -> None:
        self._state = state
        for cb in self._callbacks:
            cb(state)
