from __future__ import annotations

import logging
from dataclasses import replace

from sideline.contracts import DriveCheckpoint, Game, GameStatus, Play, ScoreDelta, TeamSide
from sideline.core.errors import DriveTransitionError
from sideline.football.drive import DriveCommand, Transition, opening_drive, transition
from sideline.football.scoring import score_timeline
from sideline.football.stats import attach_stats, recompute_game

logger = logging.getLogger(__name__)


def recompute(game: Game) -> Game:
    """Fresh snapshot whose scores, team buckets and player buckets come from the play log alone."""
    result = recompute_game(game.plays, game.home_roster, game.away_roster)
    return replace(
        game,
        plays=list(game.plays),
        home_roster=attach_stats(game.home_roster, result.player_stats),
        away_roster=attach_stats(game.away_roster, result.player_stats),
        home_score=result.home_score,
        opp_score=result.opp_score,
        team_stats=result.team_stats,
    )


def start_game(game: Game, kicking_side: TeamSide = TeamSide.AWAY, home_attacks_high: bool = True) -> Game:
    game.rules.validate()
    started = replace(
        game,
        status=GameStatus.IN_PROGRESS,
        drive=opening_drive(game.rules, kicking_side=kicking_side, home_attacks_high=home_attacks_high),
    )
    return recompute(started)


def append_play(game: Game, play: Play) -> Game:
    return recompute(replace(game, plays=[*game.plays, play]))


def edit_play(game: Game, updated: Play) -> Game:
    """Replace the play with the same id in place. Unknown ids leave the game unchanged."""
    for index, existing in enumerate(game.plays):
        if existing.play_id == updated.play_id:
            plays = list(game.plays)
            plays[index] = updated
            logger.info("game %s: edited play %s", game.game_id, updated.play_id)
            return recompute(replace(game, plays=plays))
    return game


def remove_play(game: Game, play_id: str) -> Game:
    """Drop one play. Removing the last play a drive command logged rolls the drive back like an undo."""
    index = next((i for i, p in enumerate(game.plays) if p.play_id == play_id), None)
    if index is None:
        return game
    if index == len(game.plays) - 1 and _tail_checkpoint(game) is not None:
        return undo_last_play(game)
    logger.info("game %s: removed play %s", game.game_id, play_id)
    plays = [p for i, p in enumerate(game.plays) if i != index]
    drive_log = [
        replace(cp, start=cp.start - (cp.start > index), end=cp.end - (cp.end > index)) for cp in game.drive_log
    ]
    return recompute(replace(game, plays=plays, drive_log=drive_log))


def _tail_checkpoint(game: Game) -> int | None:
    """Index in the drive log of the command that logged the final play, if one did."""
    last = len(game.plays)
    for i in range(len(game.drive_log) - 1, -1, -1):
        cp = game.drive_log[i]
        if cp.start < cp.end:
            return i if cp.end == last else None
        if cp.end != last:
            return None
    return None


def undo_last_play(game: Game) -> Game:
    """Drop the final play.

    When a drive command logged that play, every play of the command goes with it and the drive
    returns to the state it had before the command ran.
    """
    if not game.plays:
        return game
    tail = _tail_checkpoint(game)
    if tail is not None:
        checkpoint = game.drive_log[tail]
        return recompute(
            replace(
                game,
                plays=game.plays[: checkpoint.start],
                drive=checkpoint.before,
                drive_log=game.drive_log[:tail],
            )
        )
    last = len(game.plays) - 1
    return recompute(
        replace(game, plays=game.plays[:-1], drive_log=[cp for cp in game.drive_log if cp.end <= last])
    )


def apply_command(game: Game, command: DriveCommand) -> tuple[Game, Transition]:
    """Run a drive command and append whatever plays it confirms."""
    if game.drive is None:
        raise DriveTransitionError("GAME_NOT_STARTED", "none", "start the game before logging drive commands")
    step = transition(game.drive, command, game.rules)
    start = len(game.plays)
    checkpoint = DriveCheckpoint(start=start, end=start + len(step.plays), before=game.drive)
    updated = replace(
        game,
        plays=[*game.plays, *step.plays],
        drive=step.state,
        drive_log=[*game.drive_log, checkpoint],
    )
    return recompute(updated), step


def finalize_game(game: Game) -> Game:
    return recompute(replace(game, status=GameStatus.FINAL))


def game_timeline(game: Game) -> list[ScoreDelta]:
    return score_timeline(game.plays)
