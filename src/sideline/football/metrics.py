from __future__ import annotations

from typing import Mapping

PASSER_FACTOR_CAP = 2.375


def safe_div(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def _clamp(value: float, low: float = 0.0, high: float = PASSER_FACTOR_CAP) -> float:
    return max(low, min(high, value))


def passer_rating(completions: float, attempts: float, yards: float, touchdowns: float, interceptions: float) -> float:
    """Four-factor passer rating, each factor bounded to [0, 2.375]."""
    if attempts < 1:
        return 0.0
    a = _clamp((completions / attempts - 0.3) * 5)
    b = _clamp((yards / attempts - 3) * 0.25)
    c = _clamp((touchdowns / attempts) * 20)
    d = _clamp(PASSER_FACTOR_CAP - (interceptions / attempts) * 25)
    return (a + b + c + d) / 6 * 100


def percentage(made: float, attempts: float) -> float:
    return safe_div(made, attempts) * 100


def derive_rates(bucket: Mapping[str, float], games_played: int | None = None) -> dict[str, float]:
    """Rates recomputed from totals. Never stored independently of the totals they come from."""
    g = bucket.get
    rates = {
        "completion_percentage": percentage(g("completions", 0), g("passing_attempts", 0)),
        "passer_rating": passer_rating(
            g("completions", 0),
            g("passing_attempts", 0),
            g("passing_yards", 0),
            g("passing_touchdowns", 0),
            g("interceptions", 0),
        ),
        "passing_yards_per_attempt": safe_div(g("passing_yards", 0), g("passing_attempts", 0)),
        "rushing_yards_per_attempt": safe_div(g("rushing_yards", 0), g("rushing_attempts", 0)),
        "receiving_yards_per_catch": safe_div(g("receiving_yards", 0), g("receptions", 0)),
        "field_goal_percentage": percentage(g("field_goals_made", 0), g("field_goal_attempts", 0)),
        "extra_point_percentage": percentage(g("extra_points_made", 0), g("extra_point_attempts", 0)),
        "punt_average": safe_div(g("punt_yards", 0), g("punts", 0)),
        "kickoff_average": safe_div(g("kickoff_yards", 0), g("kickoffs", 0)),
        "kickoff_return_average": safe_div(g("kickoff_return_yards", 0), g("kickoff_returns", 0)),
        "punt_return_average": safe_div(g("punt_return_yards", 0), g("punt_returns", 0)),
    }
    if games_played is not None:
        rates["rushing_yards_per_game"] = safe_div(g("rushing_yards", 0), games_played)
        rates["passing_yards_per_game"] = safe_div(g("passing_yards", 0), games_played)
        rates["receiving_yards_per_game"] = safe_div(g("receiving_yards", 0), games_played)
    return rates


RATE_KEYS = frozenset(derive_rates({}, games_played=0))
