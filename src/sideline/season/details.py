from __future__ import annotations

from typing import Sequence

from sideline.contracts import Game, Player
from sideline.season.aggregator import season_roster
from sideline.season.entities import GameDetail
from sideline.season.schedule import game_result, recompute_games

# table name -> (primary sort key, output column -> stat key)
DETAIL_TABLES: dict[str, tuple[str, dict[str, str]]] = {
    "rushing": (
        "yards",
        {"attempts": "rushing_attempts", "yards": "rushing_yards", "touchdowns": "rushing_touchdowns", "long": "rushing_long"},
    ),
    "passing": (
        "yards",
        {
            "completions": "completions",
            "attempts": "passing_attempts",
            "yards": "passing_yards",
            "touchdowns": "passing_touchdowns",
            "interceptions": "interceptions",
            "long": "passing_long",
        },
    ),
    "receiving": (
        "yards",
        {"receptions": "receptions", "yards": "receiving_yards", "touchdowns": "receiving_touchdowns", "long": "receiving_long"},
    ),
    "defense": (
        "tackles",
        {
            "tackles": "tackles",
            "tackles_for_loss": "tackles_for_loss",
            "sacks": "sacks",
            "interceptions": "interceptions_def",
            "passes_defensed": "passes_defensed",
            "forced_fumbles": "forced_fumbles",
            "fumbles_recovered": "fumbles_recovered",
        },
    ),
    "kicking": (
        "fg_made",
        {
            "fg_made": "field_goals_made",
            "fg_attempts": "field_goal_attempts",
            "fg_long": "field_goal_long",
            "xp_made": "extra_points_made",
            "xp_attempts": "extra_point_attempts",
            "kickoffs": "kickoffs",
            "kickoff_yards": "kickoff_yards",
            "punts": "punts",
            "punt_yards": "punt_yards",
            "punt_long": "punt_long",
        },
    ),
    "scoring": (
        "total_points",
        {
            "touchdowns": "total_touchdowns",
            "two_point_conversions": "two_point_conversions",
            "field_goals": "field_goals_made",
            "extra_points": "extra_points_made",
            "total_points": "total_points",
        },
    ),
}

# a row shows up when any of these is non-zero
_PRESENCE: dict[str, tuple[str, ...]] = {
    "rushing": ("attempts",),
    "passing": ("attempts",),
    "receiving": ("receptions",),
    "defense": ("tackles", "tackles_for_loss", "sacks", "interceptions", "passes_defensed", "forced_fumbles", "fumbles_recovered"),
    "kicking": ("fg_attempts", "xp_attempts", "kickoffs", "punts"),
    "scoring": ("total_points",),
}

_TEAM_DETAIL_KEYS = {
    "total_offense_yards": "total_yards",
    "rushing_yards": "rushing_yards",
    "passing_yards": "passing_yards",
    "rushing_attempts": "rushing_attempts",
    "passing_attempts": "passing_attempts",
    "completions": "completions",
    "first_downs": "first_downs",
    "turnovers": "turnovers",
    "penalties": "penalties",
    "penalty_yards": "penalty_yards",
    "defense_yards_allowed": "yards_allowed",
    "defense_rushing_yards_allowed": "rushing_yards_allowed",
    "defense_passing_yards_allowed": "passing_yards_allowed",
    "sacks": "sacks",
    "tackles_for_loss": "tackles_for_loss",
    "interceptions": "interceptions",
    "fumbles_recovered": "fumbles_recovered",
}


def detail_table(
    table: str,
    roster: Sequence[Player],
    player_stats: dict[str, dict[str, float]],
) -> list[dict[str, object]]:
    primary, columns = DETAIL_TABLES[table]
    rows: list[dict[str, object]] = []
    for player in roster:
        bucket = player_stats.get(player.player_id)
        if not bucket:
            continue
        values = {column: bucket.get(key, 0) for column, key in columns.items()}
        if not any(values[column] for column in _PRESENCE[table]):
            continue
        rows.append(
            {"player_id": player.player_id, "name": player.display_name, "jersey_number": player.jersey_number, **values}
        )
    # stable sort keeps roster order among equal values
    rows.sort(key=lambda row: row[primary], reverse=True)
    return rows


def game_details(games: Sequence[Game], roster: Sequence[Player] = ()) -> list[GameDetail]:
    players = season_roster(games, roster)
    details: list[GameDetail] = []
    for game, result in recompute_games(games):
        entry = game_result(game, result)
        if not entry.played:
            continue
        home = result.team_stats["home"]
        details.append(
            GameDetail(
                game_id=game.game_id,
                opponent=game.opponent_name,
                date=game.date,
                site=game.site,
                home_score=result.home_score,
                opp_score=result.opp_score,
                result=entry.result,
                team_stats={name: home[key] for name, key in _TEAM_DETAIL_KEYS.items()},
                **{table: detail_table(table, players, result.player_stats) for table in DETAIL_TABLES},
            )
        )
    return details
