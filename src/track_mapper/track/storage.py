"""TrackStorage — persists finished track maps to SQLite.

Schema design notes:
  - ``tracks`` holds one row per saved map; ``track_points`` holds the
    polyline, keyed by ``(track_id, seq)`` so the published order survives
    the round trip (lap distance alone is not unique once a closing point
    has been appended).
  - ``heading`` is nullable: the very first point of a short, unprocessed
    capture may have none.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence

from track_mapper.track.models import TrackPoint

_DDL = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;

CREATE TABLE IF NOT EXISTS tracks (
    id          INTEGER PRIMARY KEY,
    name        TEXT    NOT NULL,
    point_count INTEGER NOT NULL,
    created_at  TEXT    NOT NULL
                DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);

CREATE TABLE IF NOT EXISTS track_points (
    track_id     INTEGER NOT NULL REFERENCES tracks (id) ON DELETE CASCADE,
    seq          INTEGER NOT NULL,
    x            REAL    NOT NULL,
    y            REAL    NOT NULL,
    lap_dist_pct REAL    NOT NULL,
    heading      REAL,
    curvature    REAL    NOT NULL DEFAULT 0.0,
    lon_accel    REAL    NOT NULL DEFAULT 0.0,
    PRIMARY KEY (track_id, seq)
);

CREATE INDEX IF NOT EXISTS idx_tracks_name
    ON tracks (name);
"""

_INSERT_TRACK = "INSERT INTO tracks (name, point_count) VALUES (?, ?)"

_INSERT_POINT = """
INSERT INTO track_points (
    track_id, seq, x, y, lap_dist_pct, heading, curvature, lon_accel
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""

_SELECT_POINTS = """
SELECT x, y, lap_dist_pct, heading, curvature, lon_accel
FROM   track_points
WHERE  track_id = ?
ORDER  BY seq
"""

_SELECT_TRACK = "SELECT id, name, point_count, created_at FROM tracks WHERE id = ?"

_LIST_TRACKS = """
SELECT id, name, point_count, created_at
FROM   tracks
WHERE  (? = '' OR name = ?)
ORDER  BY id
"""


class TrackStorage:
    """Stores and retrieves finished track maps from a SQLite database.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Pass ``":memory:"`` for in-process testing.
    """

    def __init__(self, db_path: str = "tracks.db") -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        for stmt in _DDL.strip().split(";"):
            stmt = stmt.strip()
            if stmt:
                self._conn.execute(stmt)
        self._conn.commit()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save_track(self, name: str, points: Sequence[TrackPoint]) -> int:
        """Persist *points* under *name* and return the new track id.

        Raises:
            ValueError: If *points* is empty.
        """
        if not points:
            raise ValueError("Cannot save an empty track")
        with self._conn:
            cur = self._conn.execute(_INSERT_TRACK, (name, len(points)))
            track_id = int(cur.lastrowid)
            self._conn.executemany(
                _INSERT_POINT,
                [
                    (track_id, seq, p.x, p.y, p.lap_dist_pct, p.heading, p.curvature, p.lon_accel)
                    for seq, p in enumerate(points)
                ],
            )
        return track_id

    def delete_track(self, track_id: int) -> bool:
        """Delete a saved track; returns False if it did not exist."""
        with self._conn:
            self._conn.execute("DELETE FROM track_points WHERE track_id = ?", (track_id,))
            cur = self._conn.execute("DELETE FROM tracks WHERE id = ?", (track_id,))
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_track(self, track_id: int) -> list[TrackPoint]:
        """Return the saved polyline in published order.

        Raises:
            KeyError: If no track with *track_id* exists.
        """
        if self.get_track_info(track_id) is None:
            raise KeyError(track_id)
        rows = self._conn.execute(_SELECT_POINTS, (track_id,)).fetchall()
        return [
            TrackPoint(
                x=r["x"],
                y=r["y"],
                lap_dist_pct=r["lap_dist_pct"],
                heading=r["heading"],
                curvature=r["curvature"],
                lon_accel=r["lon_accel"],
            )
            for r in rows
        ]

    def get_track_info(self, track_id: int) -> dict | None:
        """Return the ``tracks`` row for *track_id* as a dict, or None."""
        row = self._conn.execute(_SELECT_TRACK, (track_id,)).fetchone()
        return dict(row) if row is not None else None

    def list_tracks(self, name: str = "") -> list[dict]:
        """Return saved tracks (optionally filtered by *name*), oldest first."""
        rows = self._conn.execute(_LIST_TRACKS, (name, name)).fetchall()
        return [dict(r) for r in rows]

    def close(self) -> None:
        self._conn.close()
