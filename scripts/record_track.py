"""Live track-map recorder.

Requires iRacing running on the same machine.  Drive across the start/finish
line above 36 km/h to start recording; the map is saved when the lap closes.
Press Ctrl+C to quit.

Usage:
    uv run python scripts/record_track.py
    uv run python scripts/record_track.py --db tracks.db --name monza
    uv run python scripts/record_track.py --hz 30 --keep-running
"""

from __future__ import annotations

import argparse
import logging
import os
import time

from dotenv import load_dotenv

load_dotenv()

from track_mapper.live.engine import LiveTrackEngine  # noqa: E402
from track_mapper.live.event_stream import SampleStream  # noqa: E402
from track_mapper.telemetry.connection import LiveTelemetryConnection  # noqa: E402
from track_mapper.telemetry.parser import SampleParser  # noqa: E402
from track_mapper.track.config import RecorderConfig  # noqa: E402
from track_mapper.track.models import RecordingState  # noqa: E402
from track_mapper.track.recorder import TrackRecorder  # noqa: E402
from track_mapper.track.storage import TrackStorage  # noqa: E402

_logger = logging.getLogger("record_track")


def main() -> None:
    ap = argparse.ArgumentParser(description="Record a track map from live iRacing telemetry")
    ap.add_argument("--db", default=os.environ.get("TRACK_MAPPER_DB", "tracks.db"),
                    help="SQLite database path")
    ap.add_argument("--name", default="", help="Name to save the track under")
    ap.add_argument("--hz", type=float, default=20.0, help="Engine tick rate in Hz")
    ap.add_argument("--keep-running", action="store_true",
                    help="Re-arm after each saved map instead of exiting")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    recorder = TrackRecorder(RecorderConfig.from_env())
    conn = LiveTelemetryConnection()
    conn.register_callback(
        lambda up: _logger.info("iRacing %s", "connected" if up else "disconnected")
    )
    if not conn.connect():
        _logger.info("iRacing not detected, waiting for connection...")

    stream = SampleStream(conn, SampleParser(), target_hz=60)
    engine = LiveTrackEngine(recorder, stream)
    storage = TrackStorage(args.db)
    name = args.name or time.strftime("track_%Y%m%d_%H%M%S")
    interval = 1.0 / args.hz

    engine.start()
    _logger.info("Track recorder running (db=%s). Press Ctrl+C to stop.", args.db)

    try:
        while True:
            if not conn.is_connected:
                conn.connect()

            engine.tick()

            if recorder.state is RecordingState.COMPLETE:
                points = recorder.points
                if points:
                    track_id = storage.save_track(name, points)
                    _logger.info("Saved %d points as %r (id=%d)", len(points), name, track_id)
                if not args.keep_running:
                    break
                recorder.rearm()

            time.sleep(interval)
    except KeyboardInterrupt:
        pass
    finally:
        engine.stop()
        storage.close()
        _logger.info("Track recorder stopped.")


if __name__ == "__main__":
    main()
