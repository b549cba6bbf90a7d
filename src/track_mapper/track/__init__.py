"""Track-map reconstruction: recording, post-processing and interpolation."""

from track_mapper.track.config import RecorderConfig
from track_mapper.track.interpolate import interpolate_position, start_finish_marker
from track_mapper.track.models import (
    InterpolatedPosition,
    RecorderStatus,
    RecordingState,
    TrackPoint,
)
from track_mapper.track.postprocess import TrackPostProcessor
from track_mapper.track.recorder import TrackRecorder
from track_mapper.track.storage import TrackStorage

__all__ = [
    "InterpolatedPosition",
    "RecorderConfig",
    "RecorderStatus",
    "RecordingState",
    "TrackPoint",
    "TrackPostProcessor",
    "TrackRecorder",
    "TrackStorage",
    "interpolate_position",
    "start_finish_marker",
]
