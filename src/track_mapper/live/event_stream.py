"""SampleStream — fixed-rate polling loop with drop-oldest overflow handling."""

from __future__ import annotations

import contextlib
import logging
import queue
import threading
import time
from dataclasses import dataclass

from track_mapper.telemetry.models import TelemetrySample

_logger = logging.getLogger(__name__)


@dataclass
class SampleEvent:
    """A parsed telemetry sample with the monotonic time it was polled."""

    sample: TelemetrySample
    timestamp: float  # time.monotonic() seconds


class SampleStream:
    """Polls a connection+parser pair at *target_hz* and enqueues :class:`SampleEvent`.

    When the internal queue is full the *oldest* event is discarded so that
    the consumer always sees the most recent telemetry.

    Parameters
    ----------
    connection:
        Object with ``read_frame() -> dict | None``.
    parser:
        Object with ``parse(raw: dict) -> TelemetrySample``.
    target_hz:
        Polling frequency in Hz.
    queue_maxsize:
        Maximum number of events buffered before drop-oldest kicks in.
    """

    def __init__(
        self,
        connection,
        parser,
        target_hz: float = 60.0,
        queue_maxsize: int = 120,
    ) -> None:
        self._conn = connection
        self._parser = parser
        self._interval = 1.0 / target_hz
        self._queue: queue.Queue[SampleEvent] = queue.Queue(maxsize=queue_maxsize)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background polling thread."""
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="SampleStream")
        self._thread.start()

    def stop(self) -> None:
        """Signal the polling thread to stop and join it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    def get_event(self, timeout: float = 0.1) -> SampleEvent | None:
        """Return the next queued event, or None if none arrives within *timeout* s."""
        try:
            if timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def latest_event(self) -> SampleEvent | None:
        """Drain the queue and return only the newest event (None if empty)."""
        latest = None
        while True:
            try:
                latest = self._queue.get_nowait()
            except queue.Empty:
                return latest

    def queue_size(self) -> int:
        """Return the current number of buffered events."""
        return self._queue.qsize()

    def poll_once(self, polled_at: float) -> SampleEvent | None:
        """Read and parse one frame without touching the queue.

        Returns None when no frame is available or the parser rejects it;
        a parser failure never escapes, so the polling thread keeps running.
        """
        raw = self._conn.read_frame()
        if not raw:
            return None
        try:
            sample = self._parser.parse(raw)
        except Exception:
            _logger.debug("Dropping unparseable frame", exc_info=True)
            return None
        return SampleEvent(sample=sample, timestamp=polled_at)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while not self._stop_event.is_set():
            polled_at = time.monotonic()
            event = self.poll_once(polled_at)
            if event is not None:
                self._enqueue(event)
            remaining = self._interval - (time.monotonic() - polled_at)
            if remaining > 0:
                self._stop_event.wait(remaining)

    def _enqueue(self, event: SampleEvent) -> None:
        """Put *event* in the queue; drop oldest if full."""
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with contextlib.suppress(queue.Empty):
                self._queue.get_nowait()
            with contextlib.suppress(queue.Full):
                self._queue.put_nowait(event)
