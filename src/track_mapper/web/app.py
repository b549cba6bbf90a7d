"""FastAPI control surface for the live track map."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request

from track_mapper.track.models import TrackPoint
from track_mapper.track.storage import TrackStorage
from track_mapper.web.schemas import (
    HealthResponse,
    PointRecord,
    PositionResponse,
    SampleRequest,
    SavedTrack,
    SavedTrackResponse,
    SavedTracksResponse,
    SaveTrackRequest,
    StatusResponse,
    TrackResponse,
)
from track_mapper.web.service import TrackMapService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

_VERSION = "0.1.0"

app = FastAPI(title="Track Mapper", version=_VERSION)
app.state.service = TrackMapService()

_DEFAULT_DB = os.environ.get("TRACK_MAPPER_DB", "tracks.db")


def _storage(db_path: str | None = None) -> TrackStorage:
    return TrackStorage(db_path or _DEFAULT_DB)


def _service(request: Request) -> TrackMapService:
    return request.app.state.service


def _point_records(points: tuple[TrackPoint, ...] | list[TrackPoint]) -> list[PointRecord]:
    return [
        PointRecord(x=p.x, y=p.y, lap_dist_pct=p.lap_dist_pct, heading=p.heading)
        for p in points
    ]


# ---------------------------------------------------------------------------
# Endpoints: live recorder
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=_VERSION)


@app.get("/api/track", response_model=TrackResponse)
def get_track(request: Request) -> TrackResponse:
    """Return the recorder status and the current (or finished) polyline."""
    status, points = _service(request).snapshot()
    return TrackResponse(
        status=status.value,
        point_count=len(points),
        points=_point_records(points),
    )


@app.get("/api/track/position", response_model=PositionResponse)
def get_position(
    request: Request,
    lap_dist_pct: float = Query(..., ge=0.0, le=1.0),
) -> PositionResponse:
    """Interpolate the car position for *lap_dist_pct* on the current polyline."""
    pos = _service(request).position(lap_dist_pct)
    if pos is None:
        raise HTTPException(status_code=404, detail="No track data yet")
    return PositionResponse(x=pos.x, y=pos.y, lap_dist_pct=pos.lap_dist_pct, heading=pos.heading)


@app.post("/api/track/samples", response_model=StatusResponse)
def post_sample(request: Request, req: SampleRequest) -> StatusResponse:
    """Feed one telemetry sample to the recorder."""
    status, count = _service(request).feed(req)
    return StatusResponse(status=status.value, point_count=count)


@app.post("/api/track/stop", response_model=StatusResponse)
def stop_recording(request: Request) -> StatusResponse:
    """Finish the current recording immediately."""
    svc = _service(request)
    status = svc.stop()
    _, points = svc.snapshot()
    return StatusResponse(status=status.value, point_count=len(points))


@app.post("/api/track/rearm", response_model=StatusResponse)
def rearm_recording(request: Request) -> StatusResponse:
    """Discard the finished track and wait for the next start condition."""
    status = _service(request).rearm()
    return StatusResponse(status=status.value, point_count=0)


@app.post("/api/track/reset", response_model=StatusResponse)
def reset_recording(request: Request) -> StatusResponse:
    """Return to idle and clear the invalidation flag."""
    status = _service(request).reset()
    return StatusResponse(status=status.value, point_count=0)


# ---------------------------------------------------------------------------
# Endpoints: saved tracks
# ---------------------------------------------------------------------------


@app.post("/api/tracks", response_model=SavedTrack, status_code=201)
def save_track(request: Request, req: SaveTrackRequest, db: str | None = None) -> SavedTrack:
    """Persist the finished track under *name*."""
    points = _service(request).finished_track()
    if not points:
        raise HTTPException(status_code=409, detail="No finished track to save")

    storage = _storage(db)
    try:
        track_id = storage.save_track(req.name, points)
        info = storage.get_track_info(track_id)
    finally:
        storage.close()
    return SavedTrack(**info)


@app.get("/api/tracks", response_model=SavedTracksResponse)
def list_tracks(name: str = "", db: str | None = None) -> SavedTracksResponse:
    """Return saved tracks, optionally filtered by name."""
    storage = _storage(db)
    try:
        rows = storage.list_tracks(name)
    finally:
        storage.close()
    return SavedTracksResponse(tracks=[SavedTrack(**r) for r in rows])


@app.get("/api/tracks/{track_id}", response_model=SavedTrackResponse)
def get_saved_track(track_id: int, db: str | None = None) -> SavedTrackResponse:
    """Return one saved track's polyline."""
    storage = _storage(db)
    try:
        info = storage.get_track_info(track_id)
        if info is None:
            raise HTTPException(status_code=404, detail="Track not found")
        points = storage.get_track(track_id)
    finally:
        storage.close()
    return SavedTrackResponse(id=info["id"], name=info["name"], points=_point_records(points))


@app.delete("/api/tracks/{track_id}", status_code=204)
def delete_saved_track(track_id: int, db: str | None = None) -> None:
    """Delete one saved track."""
    storage = _storage(db)
    try:
        deleted = storage.delete_track(track_id)
    finally:
        storage.close()
    if not deleted:
        raise HTTPException(status_code=404, detail="Track not found")
