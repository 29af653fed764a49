from __future__ import annotations

import math

import pytest

from sideline.football import derive_rates, passer_rating, safe_div


def test_passer_rating_reference_line():
    assert passer_rating(6, 10, 80, 1, 0) == pytest.approx(118.75)


def test_passer_rating_bounds():
    assert passer_rating(0, 0, 0, 0, 0) == 0.0
    assert passer_rating(10, 10, 400, 10, 0) == pytest.approx(158.3333, rel=1e-4)
    assert passer_rating(0, 10, 0, 0, 10) == 0.0


def test_safe_div_never_blows_up():
    assert safe_div(5, 0) == 0.0
    assert safe_div(9, 3) == 3.0


def test_derived_rates_from_totals():
    bucket = {
        "completions": 6,
        "passing_attempts": 10,
        "passing_yards": 80,
        "passing_touchdowns": 1,
        "rushing_attempts": 4,
        "rushing_yards": 22,
        "field_goals_made": 2,
        "field_goal_attempts": 3,
        "punts": 0,
        "punt_yards": 0,
    }
    rates = derive_rates(bucket, games_played=2)
    assert rates["completion_percentage"] == pytest.approx(60.0)
    assert rates["passer_rating"] == pytest.approx(118.75)
    assert rates["rushing_yards_per_attempt"] == pytest.approx(5.5)
    assert rates["field_goal_percentage"] == pytest.approx(200 / 3)
    assert rates["punt_average"] == 0.0
    assert rates["rushing_yards_per_game"] == pytest.approx(11.0)
    assert all(math.isfinite(v) for v in rates.values())


def test_rates_with_zero_games():
    rates = derive_rates({}, games_played=0)
    assert all(v == 0.0 for v in rates.values())
