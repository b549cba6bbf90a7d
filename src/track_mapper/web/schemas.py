"""Pydantic request/response schemas for the track-map Web API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from track_mapper.telemetry.models import TrackSurface


class HealthResponse(BaseModel):
    status: str
    version: str


class SampleRequest(BaseModel):
    timestamp: float = 0.0
    forward_velocity: float = 0.0
    lateral_velocity: float = 0.0
    yaw_rate: float = 0.0
    lap_dist_pct: float = Field(0.0, ge=0.0, le=1.0)
    track_surface: TrackSurface = TrackSurface.NOT_IN_WORLD
    lat_accel: float = 0.0
    lon_accel: float = 0.0


class PointRecord(BaseModel):
    x: float
    y: float
    lap_dist_pct: float
    heading: float | None = None


class StatusResponse(BaseModel):
    status: str
    point_count: int


class TrackResponse(BaseModel):
    status: str
    point_count: int
    points: list[PointRecord]


class PositionResponse(BaseModel):
    x: float
    y: float
    lap_dist_pct: float
    heading: float | None = None


class SaveTrackRequest(BaseModel):
    name: str = Field(..., min_length=1)


class SavedTrack(BaseModel):
    id: int
    name: str
    point_count: int
    created_at: str


class SavedTracksResponse(BaseModel):
    tracks: list[SavedTrack]


class SavedTrackResponse(BaseModel):
    id: int
    name: str
    points: list[PointRecord]
