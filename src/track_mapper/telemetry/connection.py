"""LiveTelemetryConnection — connects to iRacing shared memory and tracks state."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

# SDK variables the track recorder consumes.
TRACK_FIELDS: tuple[str, ...] = (
    "SessionTime",
    "VelocityX",
    "VelocityY",
    "YawRate",
    "LapDistPct",
    "PlayerTrackSurface",
    "LatAccel",
    "LongAccel",
)


class LiveTelemetryConnection:
    """Manages the connection to the iRacing shared-memory SDK.

    Parameters
    ----------
    sdk:
        An iRacing SDK instance (``irsdk.IRSDK()``). Injected for testability;
        defaults to the real SDK when not provided.
    """

    def __init__(self, sdk: Any | None = None) -> None:
        if sdk is None:
            import irsdk  # lazy import: irsdk is only needed at runtime

            sdk = irsdk.IRSDK()
        self._sdk = sdk
        self._connected: bool = False
        self._callbacks: list[Callable[[bool], None]] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        """True when the SDK has successfully connected to iRacing."""
        return self._connected

    def connect(self) -> bool:
        """Attempt to connect to iRacing.

        Returns
        -------
        bool
            True if iRacing is running and the connection succeeded.
            False otherwise (never raises).
        """
        try:
            initialized = bool(self._sdk.startup())
        except Exception:
            initialized = False

        self._set_connected(initialized)
        return self._connected

    def disconnect(self) -> None:
        """Disconnect from iRacing and notify callbacks."""
        self._sdk.shutdown()
        self._set_connected(False)

    def register_callback(self, callback: Callable[[bool], None]) -> None:
        """Register *callback* to be called whenever connection state changes.

        The callback receives a single bool argument: True = connected,
        False = disconnected.
        """
        self._callbacks.append(callback)

    def read_frame(self) -> dict | None:
        """Return the latest values of :data:`TRACK_FIELDS`, or None.

        None is returned when not connected or when the sim has gone away
        since the last read; the latter also flips the connection state.
        """
        if not self._connected:
            return None
        try:
            if not self._sdk.is_connected:
                self._set_connected(False)
                return None
            self._sdk.freeze_var_buffer_latest()
            return {name: self._sdk[name] for name in TRACK_FIELDS}
        except Exception:
            return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_connected(self, state: bool) -> None:
        if state != self._connected:
            self._connected = state
            self._fire_callbacks(state)

    def _fire_callbacks(self, state: bool) -> None:
        for cb in self._callbacks:
            cb(state)
