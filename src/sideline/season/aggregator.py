from __future__ import annotations

from typing import Sequence

from sideline.contracts import Game, Player
from sideline.football.metrics import derive_rates, safe_div
from sideline.football.stats import LONG_KEYS, PLAYER_STAT_KEYS, GameRecompute
from sideline.season.entities import PlayerGameLine, PlayerSeasonStats, TeamSeasonStats
from sideline.season.schedule import game_result, recompute_games, season_record


def season_roster(games: Sequence[Game], roster: Sequence[Player]) -> list[Player]:
    """The season roster, or the union of per-game home rosters when none was kept."""
    if roster:
        return list(roster)
    merged: dict[str, Player] = {}
    for game in games:
        for player in game.home_roster:
            merged.setdefault(player.player_id, player)
    return list(merged.values())


def participated(game: Game, player_id: str) -> bool:
    return any(play.references(player_id) for play in game.plays)


def _add_bucket(total: dict[str, float], bucket: dict[str, float]) -> None:
    for key in PLAYER_STAT_KEYS:
        value = bucket.get(key, 0)
        if key in LONG_KEYS:
            total[key] = max(total[key], value)
        else:
            total[key] += value


def _player_totals(
    recomputed: Sequence[tuple[Game, GameRecompute]],
    roster: Sequence[Player],
) -> list[PlayerSeasonStats]:
    totals: list[PlayerSeasonStats] = []
    for player in roster:
        bucket = {key: 0 for key in PLAYER_STAT_KEYS}
        games_played = 0
        for game, result in recomputed:
            if not participated(game, player.player_id):
                continue
            games_played += 1
            _add_bucket(bucket, result.player_stats.get(player.player_id, {}))
        totals.append(
            PlayerSeasonStats(
                player_id=player.player_id,
                name=player.display_name,
                jersey_number=player.jersey_number,
                position=player.position,
                games_played=games_played,
                stats={**bucket, **derive_rates(bucket, games_played=games_played)},
            )
        )
    return totals


def season_player_totals(games: Sequence[Game], roster: Sequence[Player] = ()) -> list[PlayerSeasonStats]:
    """Per-player season totals in roster order."""
    return _player_totals(recompute_games(games), season_roster(games, roster))


def season_team_totals(games: Sequence[Game]) -> TeamSeasonStats:
    totals = TeamSeasonStats()
    schedule = []
    for game, result in recompute_games(games):
        entry = game_result(game, result)
        if not entry.played:
            continue
        schedule.append(entry)
        totals.games_played += 1
        totals.points_for += result.home_score
        totals.points_against += result.opp_score
        home = result.team_stats["home"]
        away = result.team_stats["away"]
        totals.rushing_yards += home["rushing_yards"]
        totals.passing_yards += home["passing_yards"]
        totals.total_yards += home["total_yards"]
        totals.first_downs += home["first_downs"]
        totals.interceptions_thrown += home["interceptions_thrown"]
        totals.fumbles_lost += home["fumbles_lost"]
        totals.turnovers += home["turnovers"]
        totals.takeaways += away["turnovers"]

    record = season_record(schedule)
    totals.wins, totals.losses, totals.ties = record.wins, record.losses, record.ties
    totals.points_per_game = safe_div(totals.points_for, totals.games_played)
    totals.points_allowed_per_game = safe_div(totals.points_against, totals.games_played)
    totals.yards_per_game = safe_div(totals.total_yards, totals.games_played)
    return totals


def player_game_lines(games: Sequence[Game], roster: Sequence[Player] = ()) -> dict[str, list[PlayerGameLine]]:
    """Per-game lines for each player, schedule order, only games they took part in."""
    recomputed = recompute_games(games)
    lines: dict[str, list[PlayerGameLine]] = {}
    for player in season_roster(games, roster):
        player_lines: list[PlayerGameLine] = []
        for game, result in recomputed:
            if not participated(game, player.player_id):
                continue
            entry = game_result(game, result)
            player_lines.append(
                PlayerGameLine(
                    game_id=game.game_id,
                    opponent=game.opponent_name,
                    date=game.date,
                    result=entry.result,
                    stats=dict(result.player_stats.get(player.player_id, {})),
                )
            )
        lines[player.player_id] = player_lines
    return lines
