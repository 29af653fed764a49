from __future__ import annotations

from datetime import datetime, UTC
from typing import Sequence

from sideline.contracts import Game, GameStatus
from sideline.football.stats import GameRecompute, recompute_game
from sideline.season.entities import GameResult, SeasonRecord

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def is_played(game: Game) -> bool:
    return game.status == GameStatus.FINAL or bool(game.plays)


def result_code(home_score: int, opp_score: int) -> str:
    if home_score > opp_score:
        return "W"
    if home_score < opp_score:
        return "L"
    return "T"


def _sort_date(value: datetime | None) -> datetime:
    if value is None:
        return _EPOCH
    # naive dates are read as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def ordered_games(games: Sequence[Game]) -> list[Game]:
    """Games by date; undated games keep their input order at the end."""
    indexed = list(enumerate(games))
    indexed.sort(key=lambda pair: (pair[1].date is None, _sort_date(pair[1].date), pair[0]))
    return [game for _, game in indexed]


def recompute_games(games: Sequence[Game]) -> list[tuple[Game, GameRecompute]]:
    return [(game, recompute_game(game.plays, game.home_roster, game.away_roster)) for game in ordered_games(games)]


def game_result(game: Game, recomputed: GameRecompute) -> GameResult:
    played = is_played(game)
    return GameResult(
        game_id=game.game_id,
        opponent=game.opponent_name,
        date=game.date,
        site=game.site,
        home_score=recomputed.home_score,
        opp_score=recomputed.opp_score,
        result=result_code(recomputed.home_score, recomputed.opp_score) if played else "",
        is_playoff=game.is_playoff,
        played=played,
    )


def build_schedule(games: Sequence[Game]) -> list[GameResult]:
    return [game_result(game, recomputed) for game, recomputed in recompute_games(games)]


def season_record(schedule: Sequence[GameResult]) -> SeasonRecord:
    record = SeasonRecord()
    for entry in schedule:
        if entry.result == "W":
            record.wins += 1
        elif entry.result == "L":
            record.losses += 1
        elif entry.result == "T":
            record.ties += 1
    return record
