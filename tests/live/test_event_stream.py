"""Tests for SampleStream."""

from __future__ import annotations

import time
from unittest.mock import MagicMock

from track_mapper.live.event_stream import SampleEvent, SampleStream
from track_mapper.telemetry.models import TelemetrySample, TrackSurface


def _make_sample(**kwargs) -> TelemetrySample:
    defaults = dict(forward_velocity=30.0, lap_dist_pct=0.1, track_surface=TrackSurface.ON_TRACK)
    defaults.update(kwargs)
    return TelemetrySample(**defaults)


def test_stream_delivers_event():
    """Samples produced by connection+parser reach get_event()."""
    sample = _make_sample()
    conn = MagicMock()
    conn.read_frame.return_value = {"VelocityX": 30.0}
    parser = MagicMock()
    parser.parse.return_value = sample

    stream = SampleStream(conn, parser, target_hz=200, queue_maxsize=10)
    stream.start()
    event = stream.get_event(timeout=1.0)
    stream.stop()

    assert isinstance(event, SampleEvent)
    assert event.sample is sample


def test_no_event_when_connection_returns_none():
    conn = MagicMock()
    conn.read_frame.return_value = None
    parser = MagicMock()

    stream = SampleStream(conn, parser, target_hz=10, queue_maxsize=10)
    stream.start()
    event = stream.get_event(timeout=0.2)
    stream.stop()

    assert event is None
    parser.parse.assert_not_called()


def test_unparseable_frames_are_dropped():
    conn = MagicMock()
    conn.read_frame.return_value = {"x": 1}
    parser = MagicMock()
    parser.parse.side_effect = ValueError("bad frame")

    stream = SampleStream(conn, parser, target_hz=200)
    stream.start()
    time.sleep(0.05)
    stream.stop()

    assert stream.queue_size() == 0


def test_drop_oldest_when_full():
    """Queue size never exceeds maxsize even under rapid production."""
    conn = MagicMock()
    conn.read_frame.return_value = {"x": 1}
    parser = MagicMock()
    parser.parse.return_value = _make_sample()

    stream = SampleStream(conn, parser, target_hz=1000, queue_maxsize=3)
    stream.start()
    time.sleep(0.05)
    stream.stop()

    assert stream.queue_size() <= 3


def test_latest_event_drains_queue():
    stream = SampleStream(MagicMock(), MagicMock(), queue_maxsize=5)
    for i in range(3):
        stream._enqueue(SampleEvent(sample=_make_sample(lap_dist_pct=i / 10), timestamp=float(i)))

    latest = stream.latest_event()

    assert latest.timestamp == 2.0
    assert stream.queue_size() == 0
    assert stream.latest_event() is None


def test_get_event_with_zero_timeout_does_not_block():
    stream = SampleStream(MagicMock(), MagicMock())
    t0 = time.monotonic()
    assert stream.get_event(timeout=0.0) is None
    assert time.monotonic() - t0 < 0.05


def test_parser_crash_does_not_stop_polling():
    """Any parser exception drops that frame; later frames still arrive."""
    sample = _make_sample()
    conn = MagicMock()
    conn.read_frame.return_value = {"x": 1}
    calls = {"n": 0}

    def parse(raw):
        calls["n"] += 1
        if calls["n"] == 1:
            raise AttributeError("not a frame")
        return sample

    parser = MagicMock()
    parser.parse.side_effect = parse

    stream = SampleStream(conn, parser, target_hz=200)
    stream.start()
    event = stream.get_event(timeout=1.0)
    stream.stop()

    assert event is not None
    assert event.sample is sample


def test_poll_once_returns_none_on_parser_error():
    conn = MagicMock()
    conn.read_frame.return_value = {"x": 1}
    parser = MagicMock()
    parser.parse.side_effect = RuntimeError("boom")

    stream = SampleStream(conn, parser)
    assert stream.poll_once(5.0) is None


def test_poll_once_stamps_event():
    conn = MagicMock()
    conn.read_frame.return_value = {"x": 1}
    parser = MagicMock()
    parser.parse.return_value = _make_sample()

    event = SampleStream(conn, parser).poll_once(5.0)
    assert event.timestamp == 5.0
