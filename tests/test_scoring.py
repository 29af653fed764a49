from __future__ import annotations

from sideline.contracts import PlayType, ScoreDelta
from sideline.football import final_score, score_delta, score_timeline
from tests.helpers import AWAY, HOME, make_play, sample_plays


def test_timeline_ends_at_sum_of_deltas():
    plays = sample_plays()
    timeline = score_timeline(plays)
    total = ScoreDelta()
    for p in plays:
        total = total + score_delta(p)

    assert len(timeline) == len(plays)
    assert timeline[-1] == total
    assert (total.home, total.opp) == (10, 6)
    assert final_score(plays) == total


def test_empty_log_scores_nothing():
    assert score_timeline([]) == []
    assert final_score([]) == ScoreDelta()


def test_field_goal_always_three_for_kicking_side():
    for side in (HOME, AWAY):
        delta = score_delta(make_play(PlayType.FIELD_GOAL_MADE, 45, side))
        assert delta.home + delta.opp == 3
        assert (delta.home if side is HOME else delta.opp) == 3


def test_safety_scores_for_the_defense():
    delta = score_delta(make_play("safety", 0, HOME, ("opp_lb", "tackler")))
    assert delta == ScoreDelta(home=0, opp=2)


def test_conversions_and_non_scoring_plays():
    assert score_delta(make_play("two_point_made", 0, AWAY)) == ScoreDelta(0, 2)
    assert score_delta(make_play("extra_point_missed", 0, HOME)) == ScoreDelta()
    assert score_delta(make_play("field_goal_missed", 40, HOME)) == ScoreDelta()
    assert score_delta(make_play("other", 99, HOME)) == ScoreDelta()
