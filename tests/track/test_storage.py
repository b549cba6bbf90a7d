"""Tests for TrackStorage."""

from __future__ import annotations

import pytest

from track_mapper.track.models import TrackPoint
from track_mapper.track.storage import TrackStorage


def make_track(n: int = 12) -> list[TrackPoint]:
    pts = [
        TrackPoint(x=float(i), y=float(-i), lap_dist_pct=i / n, heading=i * 0.1, curvature=0.001 * i, lon_accel=-1.0)
        for i in range(n)
    ]
    # closing point shares position with the first and carries lap_dist_pct 1.0
    pts.append(TrackPoint(x=0.0, y=0.0, lap_dist_pct=1.0, heading=0.0))
    return pts


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "tracks.db")


@pytest.fixture
def storage(db_path):
    s = TrackStorage(db_path)
    yield s
    s.close()


def test_save_and_load_preserves_order_and_fields(storage):
    track = make_track()
    track_id = storage.save_track("monza", track)

    loaded = storage.get_track(track_id)

    assert loaded == track


def test_null_heading_round_trips(storage):
    track = [TrackPoint(x=1.0, y=2.0, lap_dist_pct=0.3, heading=None)]
    loaded = storage.get_track(storage.save_track("short", track))
    assert loaded[0].heading is None


def test_track_info(storage):
    track_id = storage.save_track("spa", make_track(20))
    info = storage.get_track_info(track_id)
    assert info["name"] == "spa"
    assert info["point_count"] == 21
    assert info["created_at"]


def test_list_tracks_filters_by_name(storage):
    storage.save_track("spa", make_track())
    storage.save_track("monza", make_track())
    storage.save_track("spa", make_track())

    assert [t["name"] for t in storage.list_tracks()] == ["spa", "monza", "spa"]
    assert len(storage.list_tracks("spa")) == 2
    assert storage.list_tracks("imola") == []


def test_unknown_track_raises_key_error(storage):
    with pytest.raises(KeyError):
        storage.get_track(42)
    assert storage.get_track_info(42) is None


def test_empty_track_rejected(storage):
    with pytest.raises(ValueError):
        storage.save_track("empty", [])


def test_delete_track(storage):
    track_id = storage.save_track("spa", make_track())
    assert storage.delete_track(track_id) is True
    assert storage.delete_track(track_id) is False
    assert storage.list_tracks() == []


def test_data_persists_across_connections(db_path):
    s1 = TrackStorage(db_path)
    track_id = s1.save_track("suzuka", make_track())
    s1.close()

    s2 = TrackStorage(db_path)
    try:
        assert len(s2.get_track(track_id)) == 13
    finally:
        s2.close()
