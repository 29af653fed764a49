from __future__ import annotations

from typing import Iterable

from sideline.contracts import Play, PlayType, ScoreDelta, TeamSide

TOUCHDOWN_POINTS = 6
FIELD_GOAL_POINTS = 3
EXTRA_POINT_POINTS = 1
TWO_POINT_POINTS = 2
SAFETY_POINTS = 2

_POSSESSING_SIDE_POINTS: dict[PlayType, int] = {
    PlayType.RUSH_TD: TOUCHDOWN_POINTS,
    PlayType.PASS_TD: TOUCHDOWN_POINTS,
    PlayType.FIELD_GOAL_MADE: FIELD_GOAL_POINTS,
    PlayType.EXTRA_POINT_MADE: EXTRA_POINT_POINTS,
    PlayType.TWO_POINT_MADE: TWO_POINT_POINTS,
}


def _award(side: TeamSide, points: int) -> ScoreDelta:
    if side is TeamSide.HOME:
        return ScoreDelta(home=points, opp=0)
    return ScoreDelta(home=0, opp=points)


def score_delta(play: Play) -> ScoreDelta:
    if play.play_type in _POSSESSING_SIDE_POINTS:
        return _award(play.team_side, _POSSESSING_SIDE_POINTS[play.play_type])
    if play.play_type == PlayType.SAFETY:
        # scored against the team that snapped the ball
        return _award(play.team_side.other, SAFETY_POINTS)
    return ScoreDelta()


def score_timeline(plays: Iterable[Play]) -> list[ScoreDelta]:
    timeline: list[ScoreDelta] = []
    running = ScoreDelta()
    for play in plays:
        running = running + score_delta(play)
        timeline.append(running)
    return timeline


def final_score(plays: Iterable[Play]) -> ScoreDelta:
    total = ScoreDelta()
    for play in plays:
        total = total + score_delta(play)
    return total

