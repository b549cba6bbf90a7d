"""Tests for LiveTrackEngine — coalescing and the busy gate."""

from __future__ import annotations

from unittest.mock import MagicMock

from track_mapper.live.engine import LiveTrackEngine
from track_mapper.live.event_stream import SampleEvent
from track_mapper.telemetry.models import TelemetrySample, TrackSurface
from track_mapper.track.models import RecordingState
from track_mapper.track.recorder import TrackRecorder


def _make_sample(**kwargs) -> TelemetrySample:
    defaults = dict(
        timestamp=1.0,
        forward_velocity=15.0,
        lap_dist_pct=0.98,
        track_surface=TrackSurface.ON_TRACK,
    )
    defaults.update(kwargs)
    return TelemetrySample(**defaults)


def test_tick_without_sample_does_nothing():
    recorder = MagicMock()
    engine = LiveTrackEngine(recorder)
    assert engine.tick() is False
    recorder.on_sample.assert_not_called()


def test_burst_is_coalesced_to_latest_sample():
    recorder = MagicMock()
    recorder.on_sample.return_value = RecordingState.IDLE
    recorder.state = RecordingState.IDLE
    engine = LiveTrackEngine(recorder)

    samples = [_make_sample(timestamp=float(i)) for i in range(5)]
    for s in samples:
        engine.submit(s)

    assert engine.tick() is True
    recorder.on_sample.assert_called_once_with(samples[-1])
    assert engine.coalesced == 4
    assert engine.tick() is False


def test_reentrant_tick_is_gated():
    """A tick requested from inside a step is refused; its sample waits."""
    recorder = TrackRecorder()
    engine = LiveTrackEngine(recorder)
    nested: list[bool] = []

    def on_transition(state):
        engine.submit(_make_sample(timestamp=1.05, lap_dist_pct=0.985))
        nested.append(engine.tick())

    recorder.register_callback(on_transition)
    engine.submit(_make_sample())

    assert engine.tick() is True
    assert nested == [False]
    assert engine.busy is False
    assert len(recorder.points) == 1

    assert engine.tick() is True
    assert len(recorder.points) == 2


def test_pulls_latest_event_from_stream():
    stream = MagicMock()
    sample = _make_sample(timestamp=3.0)
    stream.latest_event.return_value = SampleEvent(sample=sample, timestamp=99.0)
    recorder = TrackRecorder()
    engine = LiveTrackEngine(recorder, stream)

    engine.start()
    assert engine.tick() is True
    engine.stop()

    stream.start.assert_called_once()
    stream.stop.assert_called_once()
    assert recorder.state is RecordingState.RECORDING


def test_stream_sample_without_clock_uses_poll_time():
    stream = MagicMock()
    stream.latest_event.return_value = SampleEvent(sample=_make_sample(timestamp=0.0), timestamp=42.0)
    recorder = MagicMock()
    recorder.state = RecordingState.IDLE
    recorder.on_sample.return_value = RecordingState.IDLE
    engine = LiveTrackEngine(recorder, stream)

    engine.tick()

    (passed,), _ = recorder.on_sample.call_args
    assert passed.timestamp == 42.0


def test_exception_in_step_releases_gate():
    recorder = MagicMock()
    recorder.state = RecordingState.IDLE
    recorder.on_sample.side_effect = RuntimeError("boom")
    engine = LiveTrackEngine(recorder)
    engine.submit(_make_sample())

    try:
        engine.tick()
    except RuntimeError:
        pass

    assert engine.busy is False
