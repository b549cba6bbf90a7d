"""Tests for RecorderConfig."""

from __future__ import annotations

import pytest

from track_mapper.track.config import RecorderConfig


def test_defaults_are_conservative_variant():
    cfg = RecorderConfig()
    assert cfg.closing_min_points == 300
    assert cfg.closing_distance == 50.0
    assert cfg.crossing_min_points == 50
    assert cfg.off_track_limit == 4
    assert cfg.invalidation_cooldown_s == 5.0


def test_from_env_overrides_fields():
    env = {
        "TRACK_MAPPER_CLOSING_MIN_POINTS": "120",
        "TRACK_MAPPER_CLOSING_DISTANCE": "10",
        "TRACK_MAPPER_START_SPEED": " ",
    }
    cfg = RecorderConfig.from_env(env)
    assert cfg.closing_min_points == 120
    assert isinstance(cfg.closing_min_points, int)
    assert cfg.closing_distance == pytest.approx(10.0)
    assert cfg.start_speed == pytest.approx(10.0)


def test_from_env_rejects_bad_value():
    with pytest.raises(ValueError, match="TRACK_MAPPER_OFF_TRACK_LIMIT"):
        RecorderConfig.from_env({"TRACK_MAPPER_OFF_TRACK_LIMIT": "four"})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_time_delta": 0.0},
        {"min_time_delta": 0.3, "max_time_delta": 0.2},
        {"start_window": 0.6},
        {"outlier_blend": 1.5},
        {"off_track_limit": 0},
        {"closing_distance": 200.0, "closing_assist_distance": 150.0},
    ],
)
def test_invalid_config_raises(kwargs):
    with pytest.raises(ValueError):
        RecorderConfig(**kwargs)
