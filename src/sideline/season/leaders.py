from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from sideline.season.entities import PlayerSeasonStats, SeasonLeader

LEADER_GROUPS = ("offense", "defense", "special_teams", "scoring")


def format_integer(value: float) -> str:
    return str(int(round(value)))


def format_decimal(value: float) -> str:
    return f"{value:.1f}"


def format_percent(value: float) -> str:
    return f"{value:.0f}%"


@dataclass(slots=True, frozen=True)
class LeaderCategory:
    category: str
    display_label: str
    value: Callable[[PlayerSeasonStats], float]
    formatter: Callable[[float], str] = format_integer
    min_games: int = 0


def _stat(key: str) -> Callable[[PlayerSeasonStats], float]:
    return lambda totals: totals.value(key)


def _offensive_yards(totals: PlayerSeasonStats) -> float:
    return totals.value("rushing_yards") + totals.value("receiving_yards")


LEADER_CATEGORIES: dict[str, tuple[LeaderCategory, ...]] = {
    "offense": (
        LeaderCategory("total_points", "Total Points", _stat("total_points")),
        LeaderCategory("total_offensive_yards", "Total Offensive Yards", _offensive_yards),
        LeaderCategory("rushing_yards", "Yards Rushing", _stat("rushing_yards")),
        LeaderCategory("rushing_touchdowns", "TD Rushing", _stat("rushing_touchdowns")),
        LeaderCategory("rushing_long", "Longest Rush", _stat("rushing_long")),
        LeaderCategory("rushing_yards_per_attempt", "Avg Yards/Rush", _stat("rushing_yards_per_attempt"), format_decimal),
        LeaderCategory("passing_yards", "Passing Yards", _stat("passing_yards")),
        LeaderCategory("passing_touchdowns", "TD Passing", _stat("passing_touchdowns")),
        LeaderCategory("completion_percentage", "Completion%", _stat("completion_percentage"), format_percent),
        LeaderCategory("passer_rating", "QB Rating", _stat("passer_rating"), format_decimal),
        LeaderCategory("passing_long", "Longest Pass", _stat("passing_long")),
        LeaderCategory("receiving_yards", "Receiving Yards", _stat("receiving_yards")),
        LeaderCategory("receptions", "Receptions", _stat("receptions")),
        LeaderCategory("receiving_touchdowns", "TD Receiving", _stat("receiving_touchdowns")),
        LeaderCategory("receiving_long", "Longest Reception", _stat("receiving_long")),
        LeaderCategory("receiving_yards_per_catch", "Yards/Reception", _stat("receiving_yards_per_catch"), format_decimal),
    ),
    "defense": (
        LeaderCategory("tackles", "Tackles", _stat("tackles"), format_decimal),
        LeaderCategory("tackles_for_loss", "Tackles for Loss", _stat("tackles_for_loss"), format_decimal),
        LeaderCategory("sacks", "Sacks", _stat("sacks"), format_decimal),
        LeaderCategory("interceptions_def", "Interceptions", _stat("interceptions_def")),
        LeaderCategory("fumbles_recovered", "Fumbles Recovered", _stat("fumbles_recovered")),
        LeaderCategory("passes_defensed", "Passes Defensed", _stat("passes_defensed")),
        LeaderCategory("forced_fumbles", "Forced Fumbles", _stat("forced_fumbles")),
    ),
    "special_teams": (
        LeaderCategory("punt_return_yards", "Punt Return Yards", _stat("punt_return_yards")),
        LeaderCategory("punt_return_average", "Punt Return Avg", _stat("punt_return_average"), format_decimal),
        LeaderCategory("kickoff_return_yards", "Kickoff Return Yards", _stat("kickoff_return_yards")),
        LeaderCategory("kickoff_return_average", "Kickoff Return Avg", _stat("kickoff_return_average"), format_decimal),
        LeaderCategory("field_goals_made", "Field Goals Made", _stat("field_goals_made")),
        LeaderCategory("field_goal_long", "Longest Field Goal", _stat("field_goal_long")),
        LeaderCategory("extra_points_made", "Extra Points Made", _stat("extra_points_made")),
    ),
    "scoring": (
        LeaderCategory("total_points", "Total Points", _stat("total_points")),
        LeaderCategory("total_touchdowns", "Total Touchdowns", _stat("total_touchdowns")),
        LeaderCategory("rushing_touchdowns", "Rushing TDs", _stat("rushing_touchdowns")),
        LeaderCategory("receiving_touchdowns", "Receiving TDs", _stat("receiving_touchdowns")),
        LeaderCategory("two_point_conversions", "2-Point Conversions", _stat("two_point_conversions")),
    ),
}


def find_leader(entry: LeaderCategory, player_totals: Sequence[PlayerSeasonStats]) -> SeasonLeader | None:
    """Highest value among eligible players; the first in roster order wins a tie."""
    leader: PlayerSeasonStats | None = None
    best = 0.0
    for totals in player_totals:
        if totals.games_played < entry.min_games:
            continue
        value = entry.value(totals)
        if value > best:
            leader, best = totals, value
    if leader is None:
        return None
    return SeasonLeader(
        category=entry.category,
        display_label=entry.display_label,
        value=best,
        display_value=entry.formatter(best),
        player_id=leader.player_id,
        player_name=leader.name,
        jersey_number=leader.jersey_number,
    )


def season_leaders(player_totals: Sequence[PlayerSeasonStats]) -> dict[str, list[SeasonLeader]]:
    leaders: dict[str, list[SeasonLeader]] = {}
    for group in LEADER_GROUPS:
        found = (find_leader(entry, player_totals) for entry in LEADER_CATEGORIES[group])
        leaders[group] = [leader for leader in found if leader is not None]
    return leaders
