"""Live recorder endpoints: /api/track/*."""

from __future__ import annotations

import json

from tests.web.conftest import feed, make_sample_payload


def test_initial_track_is_idle_and_empty(client):
    resp = client.get("/api/track")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "idle"
    assert data["point_count"] == 0
    assert data["points"] == []


def test_slow_sample_does_not_start_recording(client):
    body = make_sample_payload(0, speed=5.0)
    resp = client.post("/api/track/samples", json=body)
    assert resp.json() == {"status": "idle", "point_count": 0}


def test_samples_start_and_grow_recording(client):
    data = feed(client, 10)
    assert data["status"] == "recording"
    assert data["point_count"] == 10

    track = client.get("/api/track").json()
    assert track["point_count"] == 10
    assert track["points"][0]["x"] == 0.0
    assert track["points"][0]["y"] == 0.0


def test_full_lap_completes(client):
    data = feed(client, 154)
    assert data["status"] == "complete"
    assert data["point_count"] > 100


def test_invalid_lap_dist_rejected(client):
    body = make_sample_payload(0)
    body["lap_dist_pct"] = 1.5
    resp = client.post("/api/track/samples", json=body)
    assert resp.status_code == 422


def test_unknown_surface_rejected(client):
    body = make_sample_payload(0)
    body["track_surface"] = 42
    resp = client.post("/api/track/samples", json=body)
    assert resp.status_code == 422


def test_position_404_without_points(client):
    resp = client.get("/api/track/position", params={"lap_dist_pct": 0.5})
    assert resp.status_code == 404


def test_position_on_recording(client):
    feed(client, 20)
    resp = client.get("/api/track/position", params={"lap_dist_pct": 0.05})
    assert resp.status_code == 200
    data = resp.json()
    assert data["lap_dist_pct"] == 0.05
    assert data["heading"] is not None


def test_position_query_validated(client):
    resp = client.get("/api/track/position", params={"lap_dist_pct": -0.1})
    assert resp.status_code == 422


def test_stop_completes_recording(client):
    feed(client, 30)
    resp = client.post("/api/track/stop")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "complete"
    assert data["point_count"] == 30


def test_stop_while_idle_is_noop(client):
    resp = client.post("/api/track/stop")
    assert resp.json() == {"status": "idle", "point_count": 0}


def test_rearm_discards_finished_track(client):
    feed(client, 30)
    client.post("/api/track/stop")

    resp = client.post("/api/track/rearm")
    assert resp.json() == {"status": "idle", "point_count": 0}
    assert client.get("/api/track").json()["point_count"] == 0


def test_off_track_invalidates_then_reset_clears(client):
    feed(client, 10)
    for i in range(10, 14):
        client.post("/api/track/samples", json=make_sample_payload(i, track_surface=0))

    assert client.get("/api/track").json()["status"] == "invalidated"

    resp = client.post("/api/track/reset")
    assert resp.json()["status"] == "idle"


def test_nan_sample_is_treated_as_zero(client):
    feed(client, 5)
    body = make_sample_payload(5)
    body["yaw_rate"] = float("nan")
    body["lat_accel"] = float("inf")
    # strict JSON has no NaN literal; json.dumps emits one anyway
    resp = client.post(
        "/api/track/samples",
        content=json.dumps(body),
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    feed(client, 3, start=6)

    data = client.get("/api/track").json()
    assert data["point_count"] == 9
    for p in data["points"]:
        assert p["x"] is not None
        assert p["y"] is not None
        assert p["heading"] is not None
