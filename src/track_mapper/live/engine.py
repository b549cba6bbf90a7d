"""LiveTrackEngine — feeds the newest telemetry sample to a TrackRecorder per tick."""

from __future__ import annotations

import dataclasses
import logging

from track_mapper.live.event_stream import SampleStream
from track_mapper.telemetry.models import TelemetrySample
from track_mapper.track.recorder import TrackRecorder

_logger = logging.getLogger(__name__)


class LiveTrackEngine:
    """Coalesces incoming samples and advances the recorder once per tick.

    Samples can be pushed with :meth:`submit` or pulled from a
    :class:`~track_mapper.live.event_stream.SampleStream`. Only the most
    recent pending sample is processed on each :meth:`tick`; older ones are
    dropped. A busy flag keeps at most one step in flight, so a tick
    requested while another is running (e.g. from a state callback) is a
    no-op and its sample waits for the next tick.

    Parameters
    ----------
    recorder:
        The :class:`TrackRecorder` to drive.
    stream:
        Optional :class:`SampleStream` to pull samples from on each tick.
    """

    def __init__(self, recorder: TrackRecorder, stream: SampleStream | None = None) -> None:
        self._recorder = recorder
        self._stream = stream
        self._pending: TelemetrySample | None = None
        self._busy = False
        self.coalesced = 0

    @property
    def recorder(self) -> TrackRecorder:
        return self._recorder

    @property
    def busy(self) -> bool:
        return self._busy

    def start(self) -> None:
        """Start the underlying sample stream, if any."""
        if self._stream is not None:
            self._stream.start()

    def stop(self) -> None:
        """Stop the underlying sample stream, if any."""
        if self._stream is not None:
            self._stream.stop()

    def submit(self, sample: TelemetrySample) -> None:
        """Queue *sample* for the next tick, replacing any pending sample."""
        if self._pending is not None:
            self.coalesced += 1
        self._pending = sample

    def tick(self) -> bool:
        """Process the newest pending sample.

        Returns True if a sample was handed to the recorder, False when
        nothing was pending or a step was already in flight.
        """
        if self._busy:
            return False

        self._pull_from_stream()
        sample = self._pending
        if sample is None:
            return False

        self._pending = None
        self._busy = True
        try:
            before = self._recorder.state
            after = self._recorder.on_sample(sample)
        finally:
            self._busy = False

        if after is not before:
            _logger.debug("Recorder state %s -> %s", before.value, after.value)
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _pull_from_stream(self) -> None:
        if self._stream is None:
            return
        event = self._stream.latest_event()
        if event is None:
            return
        sample = event.sample
        if sample.timestamp <= 0.0:
            # feed without its own clock: fall back to poll time
            sample = dataclasses.replace(sample, timestamp=event.timestamp)
        self.submit(sample)
