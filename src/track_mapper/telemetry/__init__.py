"""Telemetry input for the track recorder.

Public API
----------
TelemetrySample         - single sample consumed by the recorder
TrackSurface            - surface the car is on
SampleParser            - raw iRacing dict → TelemetrySample
LiveTelemetryConnection - connects to iRacing shared memory
"""

from track_mapper.telemetry.connection import LiveTelemetryConnection
from track_mapper.telemetry.models import TelemetrySample, TrackSurface
from track_mapper.telemetry.parser import SampleParser

__all__ = [
    "LiveTelemetryConnection",
    "SampleParser",
    "TelemetrySample",
    "TrackSurface",
]
