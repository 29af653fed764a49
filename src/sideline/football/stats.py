from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

from sideline.contracts import UNATTRIBUTED_PLAYER_ID, ParticipantRole, Play, Player, PlayType, TeamSide
from sideline.football.metrics import derive_rates, safe_div
from sideline.football.scoring import (
    EXTRA_POINT_POINTS,
    FIELD_GOAL_POINTS,
    TOUCHDOWN_POINTS,
    TWO_POINT_POINTS,
    final_score,
    score_delta,
)
from sideline.football.taxonomy import TACKLE_ROLES

PLAYER_STAT_KEYS: tuple[str, ...] = (
    "rushing_attempts",
    "rushing_yards",
    "rushing_long",
    "rushing_touchdowns",
    "passing_attempts",
    "completions",
    "passing_yards",
    "passing_long",
    "passing_touchdowns",
    "interceptions",
    "sacks_taken",
    "sack_yards_lost",
    "receptions",
    "receiving_yards",
    "receiving_long",
    "receiving_touchdowns",
    "tackles",
    "tackles_for_loss",
    "sacks",
    "interceptions_def",
    "interception_yards",
    "fumbles_recovered",
    "passes_defensed",
    "forced_fumbles",
    "safeties",
    "field_goal_attempts",
    "field_goals_made",
    "field_goal_long",
    "extra_point_attempts",
    "extra_points_made",
    "kickoffs",
    "kickoff_yards",
    "punts",
    "punt_yards",
    "punt_long",
    "kickoff_returns",
    "kickoff_return_yards",
    "kickoff_return_long",
    "punt_returns",
    "punt_return_yards",
    "punt_return_long",
    "two_point_attempts",
    "two_point_conversions",
    "total_touchdowns",
    "total_points",
    "first_downs",
    "penalties",
    "penalty_yards",
)

LONG_KEYS = frozenset(k for k in PLAYER_STAT_KEYS if k.endswith("_long"))

TEAM_STAT_KEYS: tuple[str, ...] = (
    "plays",
    "points",
    "rushing_attempts",
    "rushing_yards",
    "passing_attempts",
    "completions",
    "passing_yards",
    "total_yards",
    "first_downs",
    "penalties",
    "penalty_yards",
    "interceptions_thrown",
    "fumbles_lost",
    "turnovers",
    "sacks",
    "tackles_for_loss",
    "interceptions",
    "fumbles_recovered",
    "passes_defensed",
    "rushing_yards_allowed",
    "passing_yards_allowed",
    "yards_allowed",
)

_RUSH_TYPES = (PlayType.RUSH, PlayType.RUSH_TD)
_PASS_TYPES = (PlayType.PASS_COMPLETE, PlayType.PASS_TD, PlayType.PASS_INCOMPLETE)


@dataclass(slots=True)
class GameRecompute:
    home_score: int
    opp_score: int
    player_stats: dict[str, dict[str, float]] = field(default_factory=dict)
    team_stats: dict[str, dict[str, float]] = field(default_factory=dict)


def empty_player_bucket() -> dict[str, float]:
    return {key: 0 for key in PLAYER_STAT_KEYS}


def zeroed_player_stats() -> dict[str, float]:
    bucket = empty_player_bucket()
    return {**bucket, **derive_rates(bucket)}


def empty_team_bucket() -> dict[str, float]:
    return {key: 0 for key in TEAM_STAT_KEYS}


def tackle_credits(play: Play) -> dict[str, float]:
    """Per-tackler credit for one play. Always sums to 1.0 when anyone is credited."""
    tacklers: dict[str, float | None] = {}
    for participant in play.participants:
        if participant.role not in TACKLE_ROLES or participant.player_id == UNATTRIBUTED_PLAYER_ID:
            continue
        tacklers.setdefault(participant.player_id, participant.credit)
    if not tacklers:
        return {}
    explicit = list(tacklers.values())
    if all(c is not None and c > 0 for c in explicit):
        total = sum(c for c in explicit if c is not None)
        return {pid: (credit or 0) / total for pid, credit in tacklers.items()}
    share = 1.0 / len(tacklers)
    return {pid: share for pid in tacklers}


class _Ledger:
    def __init__(self, roster_ids: Iterable[str]) -> None:
        self.buckets: dict[str, dict[str, float]] = {}
        for player_id in roster_ids:
            self.bucket(player_id)

    def bucket(self, player_id: str) -> dict[str, float]:
        if player_id not in self.buckets:
            self.buckets[player_id] = empty_player_bucket()
        return self.buckets[player_id]

    def add(self, player_ids: Iterable[str], key: str, amount: float = 1) -> None:
        for player_id in player_ids:
            if player_id == UNATTRIBUTED_PLAYER_ID:
                continue
            self.bucket(player_id)[key] += amount

    def longest(self, player_ids: Iterable[str], key: str, value: float) -> None:
        for player_id in player_ids:
            if player_id == UNATTRIBUTED_PLAYER_ID:
                continue
            bucket = self.bucket(player_id)
            bucket[key] = max(bucket[key], value)

    def credit(self, credits: dict[str, float], key: str) -> None:
        for player_id, amount in credits.items():
            self.bucket(player_id)[key] += amount


def _accumulate_player(ledger: _Ledger, play: Play) -> None:
    kind = play.play_type
    yards = play.yards
    role = ParticipantRole

    if kind in _RUSH_TYPES:
        rushers = play.player_ids(role.RUSHER)
        ledger.add(rushers, "rushing_attempts")
        ledger.add(rushers, "rushing_yards", yards)
        ledger.longest(rushers, "rushing_long", yards)
        if play.first_down:
            ledger.add(rushers, "first_downs")
        if kind == PlayType.RUSH_TD:
            ledger.add(rushers, "rushing_touchdowns")
            ledger.add(rushers, "total_touchdowns")
            ledger.add(rushers, "total_points", TOUCHDOWN_POINTS)

    elif kind in _PASS_TYPES:
        passers = play.player_ids(role.PASSER)
        receivers = play.player_ids(role.RECEIVER)
        ledger.add(passers, "passing_attempts")
        if kind != PlayType.PASS_INCOMPLETE:
            ledger.add(passers, "completions")
            ledger.add(passers, "passing_yards", yards)
            ledger.longest(passers, "passing_long", yards)
            ledger.add(receivers, "receptions")
            ledger.add(receivers, "receiving_yards", yards)
            ledger.longest(receivers, "receiving_long", yards)
            if play.first_down:
                ledger.add(receivers or passers, "first_downs")
        if kind == PlayType.PASS_TD:
            ledger.add(passers, "passing_touchdowns")
            ledger.add(receivers, "receiving_touchdowns")
            scorers = receivers or passers
            ledger.add(scorers, "total_touchdowns")
            ledger.add(scorers, "total_points", TOUCHDOWN_POINTS)

    elif kind == PlayType.RECEPTION:
        receivers = play.player_ids(role.RECEIVER)
        ledger.add(receivers, "receptions")
        ledger.add(receivers, "receiving_yards", yards)
        ledger.longest(receivers, "receiving_long", yards)
        if play.first_down:
            ledger.add(receivers, "first_downs")

    elif kind == PlayType.TACKLE_FOR_LOSS:
        credits = tackle_credits(play)
        ledger.credit(credits, "tackles_for_loss")

    elif kind == PlayType.SACK:
        passers = play.player_ids(role.PASSER)
        ledger.add(passers, "sacks_taken")
        ledger.add(passers, "sack_yards_lost", abs(yards))
        ledger.credit(tackle_credits(play), "sacks")

    elif kind == PlayType.INTERCEPTION:
        passers = play.player_ids(role.PASSER)
        interceptors = play.player_ids(role.INTERCEPTOR)
        ledger.add(passers, "passing_attempts")
        ledger.add(passers, "interceptions")
        ledger.add(interceptors, "interceptions_def")
        ledger.add(interceptors, "interception_yards", yards)

    elif kind == PlayType.FUMBLE_RECOVERY:
        ledger.add(play.player_ids(role.RECOVERER), "fumbles_recovered")

    elif kind == PlayType.PASS_DEFENSED:
        ledger.add(play.player_ids(role.DEFENDER), "passes_defensed")

    elif kind in (PlayType.FIELD_GOAL_MADE, PlayType.FIELD_GOAL_MISSED):
        kickers = play.player_ids(role.KICKER)
        ledger.add(kickers, "field_goal_attempts")
        if kind == PlayType.FIELD_GOAL_MADE:
            ledger.add(kickers, "field_goals_made")
            ledger.longest(kickers, "field_goal_long", yards)
            ledger.add(kickers, "total_points", FIELD_GOAL_POINTS)

    elif kind in (PlayType.EXTRA_POINT_MADE, PlayType.EXTRA_POINT_MISSED):
        kickers = play.player_ids(role.KICKER)
        ledger.add(kickers, "extra_point_attempts")
        if kind == PlayType.EXTRA_POINT_MADE:
            ledger.add(kickers, "extra_points_made")
            ledger.add(kickers, "total_points", EXTRA_POINT_POINTS)

    elif kind in (PlayType.TWO_POINT_MADE, PlayType.TWO_POINT_FAILED):
        scorers = play.player_ids(role.RUSHER, role.RECEIVER) or play.player_ids(role.PASSER, role.OTHER)
        ledger.add(scorers, "two_point_attempts")
        if kind == PlayType.TWO_POINT_MADE:
            ledger.add(scorers, "two_point_conversions")
            ledger.add(scorers, "total_points", TWO_POINT_POINTS)

    elif kind == PlayType.SAFETY:
        ledger.add(play.player_ids(*TACKLE_ROLES), "safeties")

    elif kind == PlayType.KICKOFF:
        kickers = play.player_ids(role.KICKER)
        ledger.add(kickers, "kickoffs")
        ledger.add(kickers, "kickoff_yards", yards)

    elif kind == PlayType.PUNT:
        kickers = play.player_ids(role.KICKER)
        ledger.add(kickers, "punts")
        ledger.add(kickers, "punt_yards", yards)
        ledger.longest(kickers, "punt_long", yards)

    elif kind == PlayType.KICKOFF_RETURN:
        returners = play.player_ids(role.RETURNER)
        ledger.add(returners, "kickoff_returns")
        ledger.add(returners, "kickoff_return_yards", yards)
        ledger.longest(returners, "kickoff_return_long", yards)

    elif kind == PlayType.PUNT_RETURN:
        returners = play.player_ids(role.RETURNER)
        ledger.add(returners, "punt_returns")
        ledger.add(returners, "punt_return_yards", yards)
        ledger.longest(returners, "punt_return_long", yards)

    elif kind == PlayType.PENALTY:
        penalized = play.player_ids(role.PENALIZED)
        ledger.add(penalized, "penalties")
        ledger.add(penalized, "penalty_yards", abs(yards))

    # forced fumbles can ride on any play
    ledger.add(play.player_ids(role.FORCER), "forced_fumbles")
    # every listed tackler on any play gets tackle credit
    ledger.credit(tackle_credits(play), "tackles")


def _accumulate_team(teams: dict[TeamSide, dict[str, float]], play: Play, sides: dict[str, TeamSide]) -> None:
    kind = play.play_type
    offense = teams[play.team_side]
    defense = teams[play.team_side.other]
    yards = play.yards

    delta = score_delta(play)
    teams[TeamSide.HOME]["points"] += delta.home
    teams[TeamSide.AWAY]["points"] += delta.opp

    if kind in _RUSH_TYPES or kind == PlayType.SACK:
        offense["plays"] += 1
        offense["rushing_attempts"] += 1
        offense["rushing_yards"] += yards
        offense["total_yards"] += yards
        defense["rushing_yards_allowed"] += yards
        defense["yards_allowed"] += yards
        if kind == PlayType.SACK:
            defense["sacks"] += 1
    elif kind in _PASS_TYPES:
        offense["plays"] += 1
        offense["passing_attempts"] += 1
        if kind != PlayType.PASS_INCOMPLETE:
            offense["completions"] += 1
            offense["passing_yards"] += yards
            offense["total_yards"] += yards
            defense["passing_yards_allowed"] += yards
            defense["yards_allowed"] += yards
    elif kind == PlayType.INTERCEPTION:
        offense["plays"] += 1
        offense["passing_attempts"] += 1
        offense["interceptions_thrown"] += 1
        offense["turnovers"] += 1
        defense["interceptions"] += 1
    elif kind == PlayType.FUMBLE_RECOVERY:
        recovered_by = {sides.get(pid) for pid in play.player_ids(ParticipantRole.RECOVERER)}
        if play.team_side not in recovered_by:
            offense["fumbles_lost"] += 1
            offense["turnovers"] += 1
            defense["fumbles_recovered"] += 1
    elif kind == PlayType.TACKLE_FOR_LOSS:
        defense["tackles_for_loss"] += 1
    elif kind == PlayType.PASS_DEFENSED:
        defense["passes_defensed"] += 1
    elif kind == PlayType.PENALTY:
        flagged = [sides[pid] for pid in play.player_ids(ParticipantRole.PENALIZED) if pid in sides]
        bucket = teams[flagged[0]] if flagged else offense
        bucket["penalties"] += 1
        bucket["penalty_yards"] += abs(yards)

    if play.first_down and kind != PlayType.RECEPTION:
        offense["first_downs"] += 1


def _team_rates(bucket: dict[str, float]) -> dict[str, float]:
    return {
        "yards_per_play": safe_div(bucket["total_yards"], bucket["plays"]),
        "rushing_yards_per_attempt": safe_div(bucket["rushing_yards"], bucket["rushing_attempts"]),
        "completion_percentage": safe_div(bucket["completions"], bucket["passing_attempts"]) * 100,
    }


def roster_sides(home_roster: Sequence[Player], away_roster: Sequence[Player]) -> dict[str, TeamSide]:
    sides: dict[str, TeamSide] = {}
    for player in away_roster:
        sides[player.player_id] = TeamSide.AWAY
    for player in home_roster:
        sides[player.player_id] = TeamSide.HOME
    return sides


def recompute_game(
    plays: Sequence[Play],
    home_roster: Sequence[Player] = (),
    away_roster: Sequence[Player] = (),
) -> GameRecompute:
    """Rebuild scores, player buckets and team buckets from the ordered play log alone."""
    ledger = _Ledger(p.player_id for p in [*home_roster, *away_roster])
    sides = roster_sides(home_roster, away_roster)
    teams = {TeamSide.HOME: empty_team_bucket(), TeamSide.AWAY: empty_team_bucket()}

    for play in plays:
        _accumulate_player(ledger, play)
        _accumulate_team(teams, play, sides)

    score = final_score(plays)
    player_stats = {pid: {**bucket, **derive_rates(bucket)} for pid, bucket in ledger.buckets.items()}
    team_stats = {side.value: {**bucket, **_team_rates(bucket)} for side, bucket in teams.items()}
    return GameRecompute(
        home_score=score.home,
        opp_score=score.opp,
        player_stats=player_stats,
        team_stats=team_stats,
    )


def attach_stats(roster: Sequence[Player], player_stats: dict[str, dict[str, float]]) -> list[Player]:
    """Return roster copies whose ``stats`` bucket is wholly replaced by the recomputed one."""
    return [replace(p, stats=dict(player_stats.get(p.player_id) or zeroed_player_stats())) for p in roster]
