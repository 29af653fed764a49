from __future__ import annotations

from dataclasses import replace

import pytest

from sideline.contracts import (
    DriveState,
    GameRules,
    NormalPlay,
    PendingExtraPoint,
    PendingInterceptionReturn,
    PendingKickoff,
    PendingKickoffReturn,
    PendingPossessionConfirm,
    PlayType,
)
from sideline.core import DriveTransitionError
from sideline.football import (
    AdvancePeriod,
    CallTimeout,
    CommitPlay,
    ConfirmPossession,
    ResolveExtraPoint,
    ResolveInterceptionReturn,
    ResolveKickoffReturn,
    apply_command,
    format_clock,
    opening_drive,
    transition,
)
from tests.helpers import AWAY, HOME, make_game, make_play

RULES = GameRules()


def _state(**overrides) -> DriveState:
    values = dict(
        possession=HOME,
        down=1,
        distance=10,
        field_position=35,
        quarter=1,
        clock_seconds=600,
        home_timeouts=3,
        away_timeouts=3,
        possession_clock_start=600,
    )
    values.update(overrides)
    return DriveState(**values)


def test_rush_touchdown_from_the_35_scores_six_and_waits_for_conversion():
    game = make_game(drive=_state(field_position=35))
    game, step = apply_command(game, CommitPlay(make_play("rush_td", 65, HOME, ("rb1", "rusher"))))

    assert isinstance(step.state.pending, PendingExtraPoint)
    assert step.state.pending.scoring_side is HOME
    assert game.home_score == 6
    rb = next(p for p in game.home_roster if p.player_id == "rb1")
    assert rb.stats["rushing_touchdowns"] == 1
    assert rb.stats["rushing_yards"] == 65


def test_conversion_then_kickoff_by_scoring_side():
    state = _state(pending=PendingExtraPoint(scoring_side=HOME), field_position=100)
    step = transition(state, ResolveExtraPoint(PlayType.EXTRA_POINT_MADE, "k1"), RULES)

    assert [p.play_type for p in step.plays] == [PlayType.EXTRA_POINT_MADE]
    assert step.plays[0].team_side is HOME
    assert isinstance(step.state.pending, PendingKickoff)
    assert step.state.pending.kicking_side is HOME
    assert step.state.pending.spot == RULES.kickoff_spot


def test_made_extra_point_requires_a_kicker():
    state = _state(pending=PendingExtraPoint(scoring_side=HOME))
    with pytest.raises(DriveTransitionError) as excinfo:
        transition(state, ResolveExtraPoint(PlayType.EXTRA_POINT_MADE, None), RULES)
    assert excinfo.value.code == "KICKER_REQUIRED"


def test_interception_returned_flips_possession_and_credits_defender():
    game = make_game(drive=_state(field_position=40))
    game, step = apply_command(game, CommitPlay(make_play("interception", 0, HOME, ("qb1", "passer"))))
    assert step.plays == []
    assert isinstance(step.state.pending, PendingInterceptionReturn)

    game, step = apply_command(game, ResolveInterceptionReturn("opp_lb", interception_spot=50, return_end_spot=10))
    drive = step.state
    assert drive.possession is AWAY
    assert (drive.down, drive.distance, drive.field_position) == (1, 10, 10)
    assert isinstance(drive.pending, NormalPlay)

    logged = step.plays[0]
    assert logged.play_type is PlayType.INTERCEPTION
    assert logged.air_yards == 10
    assert logged.yards == 40
    defender = next(p for p in game.away_roster if p.player_id == "opp_lb")
    passer = next(p for p in game.home_roster if p.player_id == "qb1")
    assert defender.stats["interceptions_def"] == 1
    assert defender.stats["interception_yards"] == 40
    assert passer.stats["interceptions"] == 1


def test_first_down_resets_the_chains():
    step = transition(_state(down=2, distance=8), CommitPlay(make_play("rush", 12, HOME, ("rb1", "rusher"))), RULES)
    assert (step.state.down, step.state.distance, step.state.field_position) == (1, 10, 47)
    assert step.plays[0].first_down is True
    assert step.plays[0].down == 2


def test_short_gain_advances_the_down():
    step = transition(_state(), CommitPlay(make_play("pass_complete", 4, HOME, ("qb1", "passer"))), RULES)
    assert (step.state.down, step.state.distance, step.state.field_position) == (2, 6, 39)


def test_fourth_down_failure_turns_the_ball_over():
    state = _state(down=4, distance=5, field_position=50)
    step = transition(state, CommitPlay(make_play("rush", 2, HOME, ("rb1", "rusher"))), RULES)

    assert [p.play_type for p in step.plays] == [PlayType.RUSH, PlayType.OTHER]
    assert "turnover_on_downs" in step.plays[1].tags
    assert "turnover_on_downs" in step.events
    assert step.state.possession is AWAY
    assert (step.state.down, step.state.distance, step.state.field_position) == (1, 10, 52)


def test_timeouts_floor_at_zero():
    step = transition(_state(home_timeouts=0), CallTimeout(HOME), RULES)
    assert step.state.home_timeouts == 0
    assert step.plays[0].play_type is PlayType.TIMEOUT
    assert step.plays[0].description == f"Timeout home at {format_clock(600)}"

    step = transition(_state(), CallTimeout(AWAY), RULES)
    assert step.state.away_timeouts == 2


def test_time_of_possession_folds_on_change():
    state = _state(clock_seconds=720, possession_clock_start=720)
    step = transition(state, CommitPlay(make_play("punt", 40, HOME, ("k1", "kicker")), clock_seconds=500), RULES)
    assert isinstance(step.state.pending, PendingPossessionConfirm)
    assert step.state.pending.spot == 75

    step = transition(step.state, ConfirmPossession(AWAY, 70, clock_seconds=480), RULES)
    assert step.state.possession is AWAY
    assert step.state.home_possession_seconds == 240
    assert step.state.possession_clock_start == 480


def test_punt_return_is_logged_when_a_returner_is_named():
    state = _state(field_position=30)
    step = transition(state, CommitPlay(make_play("punt", 40, HOME, ("k1", "kicker"))), RULES)
    step = transition(step.state, ConfirmPossession(AWAY, 60, player_id="opp_rb"), RULES)

    assert [p.play_type for p in step.plays] == [PlayType.PUNT_RETURN]
    assert step.plays[0].yards == 10
    assert step.state.field_position == 60


def test_offense_recovering_its_own_fumble_keeps_the_ball():
    state = _state(field_position=30)
    step = transition(state, CommitPlay(make_play("fumble_recovery", 0, HOME, ("rb1", "forcer"))), RULES)
    assert step.plays == []
    step = transition(step.state, ConfirmPossession(HOME, 33, player_id="wr1"), RULES)

    assert step.state.possession is HOME
    assert (step.state.down, step.state.distance, step.state.field_position) == (2, 7, 33)
    assert step.plays[0].play_type is PlayType.FUMBLE_RECOVERY
    assert "wr1" in step.plays[0].player_ids()


def test_opening_kickoff_touchback_and_halftime_kick_by_opening_receiver():
    state = opening_drive(RULES, kicking_side=AWAY)
    assert isinstance(state.pending, PendingKickoff)
    assert state.pending.spot == 60

    step = transition(state, CommitPlay(make_play("kickoff", 55, AWAY, ("opp_lb", "kicker"))), RULES)
    assert isinstance(step.state.pending, PendingKickoffReturn)
    assert step.state.opening_receiver is HOME

    step = transition(step.state, ResolveKickoffReturn(None), RULES)
    assert step.events == ["touchback", "possession_changed"]
    assert step.state.possession is HOME
    assert step.state.field_position == RULES.touchback_spot

    step = transition(step.state, AdvancePeriod(), RULES)
    assert step.state.quarter == 2
    step = transition(replace(step.state, home_timeouts=0), AdvancePeriod(), RULES)
    third = step.state
    assert third.quarter == 3
    assert third.home_attacks_high is False
    assert third.home_timeouts == RULES.timeouts_per_half
    assert isinstance(third.pending, PendingKickoff)
    assert third.pending.kicking_side is HOME
    assert third.pending.spot == 60
    assert third.clock_seconds == RULES.period_seconds(3)


def test_kickoff_return_with_returner_logs_return_yards():
    state = opening_drive(RULES, kicking_side=AWAY)
    step = transition(state, CommitPlay(make_play("kickoff", 50, AWAY)), RULES)
    assert step.state.pending.landing_spot == 10
    step = transition(step.state, ResolveKickoffReturn("rb1", return_end_spot=35), RULES)

    assert step.plays[0].play_type is PlayType.KICKOFF_RETURN
    assert step.plays[0].yards == 25
    assert step.state.field_position == 35


def test_illegal_commands_raise_with_pending_state_name():
    with pytest.raises(DriveTransitionError) as excinfo:
        transition(opening_drive(RULES), CommitPlay(make_play("rush", 3, HOME)), RULES)
    assert excinfo.value.code == "KICKOFF_REQUIRED"
    assert excinfo.value.pending == "PendingKickoff"

    with pytest.raises(DriveTransitionError):
        transition(_state(), ResolveExtraPoint(PlayType.EXTRA_POINT_MADE, "k1"), RULES)

    with pytest.raises(ValueError):
        transition(_state(pending=PendingExtraPoint(scoring_side=HOME)), AdvancePeriod(), RULES)


def test_no_overtime_when_rules_disable_it():
    rules = replace(RULES, overtime_enabled=False)
    with pytest.raises(DriveTransitionError) as excinfo:
        transition(_state(quarter=4), AdvancePeriod(), rules)
    assert excinfo.value.code == "GAME_OVER"


def test_commands_before_start_are_rejected():
    with pytest.raises(DriveTransitionError):
        apply_command(make_game(), AdvancePeriod())


def test_transition_leaves_the_prior_state_untouched():
    state = _state()
    transition(state, CommitPlay(make_play("rush", 5, HOME)), RULES)
    assert (state.down, state.distance, state.field_position) == (1, 10, 35)


def test_touchdown_yards_come_from_the_spot_not_the_entry():
    game = make_game(drive=_state(field_position=35))
    game, step = apply_command(game, CommitPlay(make_play("rush_td", 0, HOME, ("rb1", "rusher"))))

    assert step.plays[0].yards == 65
    assert step.state.field_position == 100
    rb = next(p for p in game.home_roster if p.player_id == "rb1")
    assert rb.stats["rushing_yards"] == 65

    step = transition(_state(field_position=80), CommitPlay(make_play("pass_td", 45, HOME, ("qb1", "passer"))), RULES)
    assert step.plays[0].yards == 20


def test_safety_gives_the_kick_to_the_team_scored_upon():
    game = make_game(drive=_state(field_position=3))
    game, step = apply_command(game, CommitPlay(make_play("safety", 0, HOME)))

    assert (game.home_score, game.opp_score) == (0, 2)
    assert step.events == ["safety"]
    assert isinstance(step.state.pending, PendingKickoff)
    assert step.state.pending.kicking_side is HOME
    assert step.state.pending.spot == RULES.safety_kick_spot


def test_missed_field_goal_hands_the_ball_over_at_the_spot():
    step = transition(_state(down=4, field_position=70), CommitPlay(make_play("field_goal_missed", 47, HOME, ("k1", "kicker"))), RULES)

    assert step.events == ["possession_changed"]
    assert step.state.possession is AWAY
    assert (step.state.down, step.state.distance, step.state.field_position) == (1, 10, 70)


def test_penalty_yardage_can_earn_a_first_down():
    step = transition(_state(down=2, distance=8), CommitPlay(make_play("penalty", 15, HOME)), RULES)
    assert step.plays[0].first_down is True
    assert (step.state.down, step.state.distance, step.state.field_position) == (1, 10, 50)

    step = transition(_state(), CommitPlay(make_play("penalty", -5, HOME)), RULES)
    assert step.plays[0].first_down is False
    assert (step.state.down, step.state.distance, step.state.field_position) == (1, 15, 30)


def test_halftime_credits_possession_through_the_end_of_the_half():
    state = _state(quarter=2, clock_seconds=300, possession_clock_start=600, home_possession_seconds=100)
    step = transition(state, AdvancePeriod(), RULES)

    assert step.state.quarter == 3
    assert step.state.home_possession_seconds == 700
    assert step.state.away_possession_seconds == 0
    assert step.state.possession_clock_start == RULES.period_seconds(3)


def test_period_cannot_end_while_a_fumble_recovery_is_unconfirmed():
    game = make_game(drive=_state(quarter=2, field_position=30))
    game, step = apply_command(game, CommitPlay(make_play("fumble_recovery", 0, HOME, ("rb1", "forcer"))))
    assert isinstance(step.state.pending, PendingPossessionConfirm)

    with pytest.raises(DriveTransitionError) as excinfo:
        apply_command(game, AdvancePeriod())
    assert excinfo.value.code == "RESOLUTION_PENDING"

    game, step = apply_command(game, ConfirmPossession(AWAY, 30, player_id="opp_lb"))
    game, step = apply_command(game, AdvancePeriod())
    assert step.state.quarter == 3
    assert [p.play_type for p in game.plays] == [PlayType.FUMBLE_RECOVERY]
