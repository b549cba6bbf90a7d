"""Shared fixtures for web tests."""

from __future__ import annotations

import math

import pytest
from fastapi.testclient import TestClient

from track_mapper.track.config import RecorderConfig
from track_mapper.track.recorder import TrackRecorder
from track_mapper.web.app import app
from track_mapper.web.service import TrackMapService


@pytest.fixture
def client():
    """FastAPI test client with a fresh recorder per test."""
    app.state.service = TrackMapService(TrackRecorder(RecorderConfig()))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "tracks.db")


def make_sample_payload(
    index: int,
    n_per_lap: int = 150,
    offset: int = 147,
    speed: float = 15.0,
    dt: float = 0.05,
    track_surface: int = 3,
) -> dict:
    """Build a POST /api/track/samples body for a car driving a circle.

    Sample *index* sits at lap fraction ``((index + offset) % n_per_lap) / n_per_lap``
    so the first sample lands just before the start/finish line.
    """
    return {
        "timestamp": 100.0 + index * dt,
        "forward_velocity": speed,
        "lateral_velocity": 0.0,
        "yaw_rate": 2.0 * math.pi / (n_per_lap * dt),
        "lap_dist_pct": ((index + offset) % n_per_lap) / n_per_lap,
        "track_surface": track_surface,
    }


def feed(client, count: int, start: int = 0) -> dict:
    """POST *count* consecutive circle samples and return the last response body."""
    data: dict = {}
    for i in range(start, start + count):
        resp = client.post("/api/track/samples", json=make_sample_payload(i))
        assert resp.status_code == 200
        data = resp.json()
    return data
