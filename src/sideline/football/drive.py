from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from sideline.contracts import (
    DriveState,
    GameRules,
    NormalPlay,
    ParticipantRole,
    PendingExtraPoint,
    PendingInterceptionReturn,
    PendingKickoff,
    PendingKickoffReturn,
    PendingPossessionConfirm,
    PendingState,
    Play,
    PlayParticipant,
    PlayType,
    TeamSide,
)
from sideline.core.errors import DriveTransitionError
from sideline.core.ids import make_id
from sideline.football.taxonomy import ANNOTATION_TYPES, CONVERSION_TYPES, ORDINARY_GAIN_TYPES, TOUCHDOWN_TYPES

logger = logging.getLogger(__name__)

FIRST_DOWN_DISTANCE = 10


@dataclass(slots=True)
class CommitPlay:
    play: Play
    clock_seconds: int | None = None


@dataclass(slots=True)
class ResolveExtraPoint:
    outcome: PlayType
    player_id: str | None = None
    clock_seconds: int | None = None


@dataclass(slots=True)
class ResolveKickoffReturn:
    returner_id: str | None
    return_end_spot: int | None = None
    clock_seconds: int | None = None


@dataclass(slots=True)
class ResolveInterceptionReturn:
    interceptor_id: str
    interception_spot: int
    return_end_spot: int
    clock_seconds: int | None = None


@dataclass(slots=True)
class ConfirmPossession:
    side: TeamSide
    spot: int
    player_id: str | None = None
    clock_seconds: int | None = None


@dataclass(slots=True)
class CallTimeout:
    side: TeamSide
    clock_seconds: int | None = None


@dataclass(slots=True)
class AdvancePeriod:
    pass


DriveCommand = (
    CommitPlay
    | ResolveExtraPoint
    | ResolveKickoffReturn
    | ResolveInterceptionReturn
    | ConfirmPossession
    | CallTimeout
    | AdvancePeriod
)


@dataclass(slots=True)
class Transition:
    state: DriveState
    plays: list[Play] = field(default_factory=list)
    events: list[str] = field(default_factory=list)


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def pending_name(pending: PendingState) -> str:
    return type(pending).__name__


def clamp_spot(spot: int) -> int:
    return max(0, min(100, int(spot)))


def attacks_high(state: DriveState, side: TeamSide) -> bool:
    return state.home_attacks_high if side is TeamSide.HOME else not state.home_attacks_high


def goal_line(state: DriveState, side: TeamSide) -> int:
    return 100 if attacks_high(state, side) else 0


def own_yard_line(state: DriveState, side: TeamSide, yards: int) -> int:
    """Absolute spot of ``side``'s own ``yards`` line."""
    return yards if attacks_high(state, side) else 100 - yards


def advance_spot(state: DriveState, side: TeamSide, spot: int, yards: int) -> int:
    return clamp_spot(spot + yards if attacks_high(state, side) else spot - yards)


def yards_gained(state: DriveState, side: TeamSide, start: int, end: int) -> int:
    return end - start if attacks_high(state, side) else start - end


def yards_to_goal(state: DriveState) -> int:
    return abs(goal_line(state, state.possession) - state.field_position)


def opening_drive(rules: GameRules, kicking_side: TeamSide = TeamSide.AWAY, home_attacks_high: bool = True) -> DriveState:
    clock = rules.period_seconds(1)
    state = DriveState(
        possession=kicking_side,
        down=1,
        distance=FIRST_DOWN_DISTANCE,
        field_position=0,
        quarter=1,
        clock_seconds=clock,
        home_timeouts=rules.timeouts_per_half,
        away_timeouts=rules.timeouts_per_half,
        possession_clock_start=clock,
        home_attacks_high=home_attacks_high,
    )
    spot = own_yard_line(state, kicking_side, rules.kickoff_spot)
    state.field_position = spot
    state.pending = PendingKickoff(kicking_side=kicking_side, spot=spot)
    return state


def transition(state: DriveState, command: DriveCommand, rules: GameRules) -> Transition:
    """Apply one command to a drive state and return the next state plus the plays to log."""
    nxt = replace(state)
    clock = getattr(command, "clock_seconds", None)
    if clock is not None:
        nxt.clock_seconds = max(0, int(clock))

    if isinstance(command, CallTimeout):
        result = _call_timeout(nxt, command)
    elif isinstance(command, AdvancePeriod):
        result = _advance_period(nxt, rules)
    elif isinstance(command, CommitPlay):
        result = _commit(nxt, command.play, rules)
    elif isinstance(command, ResolveExtraPoint):
        result = _resolve_extra_point(nxt, command, rules)
    elif isinstance(command, ResolveKickoffReturn):
        result = _resolve_kickoff_return(nxt, command, rules)
    elif isinstance(command, ResolveInterceptionReturn):
        result = _resolve_interception_return(nxt, command)
    elif isinstance(command, ConfirmPossession):
        result = _confirm_possession(nxt, command)
    else:
        raise DriveTransitionError("UNKNOWN_COMMAND", pending_name(state.pending), f"unsupported command {type(command).__name__}")

    logger.debug(
        "drive %s -> %s q%s %s&%s at %s events=%s",
        pending_name(state.pending),
        pending_name(result.state.pending),
        result.state.quarter,
        result.state.down,
        result.state.distance,
        result.state.field_position,
        result.events,
    )
    return result


def _require(state: DriveState, expected: type, command: str) -> None:
    if not isinstance(state.pending, expected):
        raise DriveTransitionError(
            "UNEXPECTED_RESOLUTION",
            pending_name(state.pending),
            f"{command} requires {expected.__name__}",
        )


def _stamp(play: Play, state: DriveState, side: TeamSide | None = None, scrimmage: bool = True) -> Play:
    return replace(
        play,
        quarter=state.quarter,
        team_side=side or state.possession,
        down=state.down if scrimmage else None,
        distance=state.distance if scrimmage else None,
        yard_line=state.field_position,
        clock_seconds=state.clock_seconds,
    )


def _credit_possession_time(state: DriveState, until: int) -> None:
    elapsed = max(0, state.possession_clock_start - until)
    if state.possession is TeamSide.HOME:
        state.home_possession_seconds += elapsed
    else:
        state.away_possession_seconds += elapsed


def _change_possession(state: DriveState, side: TeamSide, spot: int, events: list[str]) -> None:
    _credit_possession_time(state, state.clock_seconds)
    state.possession = side
    state.possession_clock_start = state.clock_seconds
    state.down = 1
    state.distance = FIRST_DOWN_DISTANCE
    state.field_position = clamp_spot(spot)
    state.pending = NormalPlay()
    events.append("possession_changed")


def _kickoff_pending(state: DriveState, kicking_side: TeamSide, yard_line: int) -> PendingKickoff:
    return PendingKickoff(kicking_side=kicking_side, spot=own_yard_line(state, kicking_side, yard_line))


def _advance_downs(state: DriveState, stamped: Play, gained: int, plays: list[Play], events: list[str]) -> None:
    if gained >= state.distance:
        stamped.first_down = True
        state.down = 1
        state.distance = FIRST_DOWN_DISTANCE
        return
    stamped.first_down = False
    if state.down >= 4:
        side = state.possession
        plays.append(
            Play(
                play_id=make_id("play"),
                play_type=PlayType.OTHER,
                quarter=state.quarter,
                team_side=side,
                down=4,
                distance=max(1, state.distance - gained),
                yard_line=state.field_position,
                clock_seconds=state.clock_seconds,
                description="Turnover on downs",
                tags=["turnover_on_downs"],
            )
        )
        events.append("turnover_on_downs")
        _change_possession(state, side.other, state.field_position, events)
        return
    state.down += 1
    state.distance -= gained


def _commit(state: DriveState, play: Play, rules: GameRules) -> Transition:
    pending = state.pending
    kind = play.play_type

    if kind == PlayType.TIMEOUT:
        return _call_timeout(state, CallTimeout(side=play.team_side))

    if isinstance(pending, PendingKickoff):
        if kind != PlayType.KICKOFF:
            raise DriveTransitionError("KICKOFF_REQUIRED", pending_name(pending), f"{kind.value} cannot precede the kickoff")
        return _kickoff(state, play, pending.kicking_side, pending.spot)

    if not isinstance(pending, NormalPlay):
        raise DriveTransitionError(
            "RESOLUTION_PENDING",
            pending_name(pending),
            f"{kind.value} cannot be committed until the pending action is resolved",
        )

    if kind in CONVERSION_TYPES:
        raise DriveTransitionError("NO_CONVERSION_PENDING", pending_name(pending), "conversions follow a touchdown")

    events: list[str] = []
    side = state.possession

    if kind in ANNOTATION_TYPES:
        annotated = replace(play, quarter=state.quarter, team_side=side, clock_seconds=state.clock_seconds)
        return Transition(state, [annotated], events)

    if kind in ORDINARY_GAIN_TYPES:
        stamped = _stamp(play, state)
        start = state.field_position
        state.field_position = advance_spot(state, side, start, play.yards)
        plays = [stamped]
        _advance_downs(state, stamped, yards_gained(state, side, start, state.field_position), plays, events)
        return Transition(state, plays, events)

    if kind == PlayType.PENALTY:
        stamped = _stamp(play, state)
        start = state.field_position
        state.field_position = advance_spot(state, side, start, play.yards)
        gained = yards_gained(state, side, start, state.field_position)
        if gained >= state.distance:
            stamped.first_down = True
            state.down = 1
            state.distance = FIRST_DOWN_DISTANCE
        else:
            state.distance -= gained
        return Transition(state, [stamped], events)

    if kind in TOUCHDOWN_TYPES:
        stamped = _stamp(play, state)
        stamped.yards = yards_to_goal(state)
        state.field_position = goal_line(state, side)
        state.pending = PendingExtraPoint(scoring_side=side)
        events.append("touchdown")
        return Transition(state, [stamped], events)

    if kind == PlayType.FIELD_GOAL_MADE:
        stamped = _stamp(play, state)
        state.pending = _kickoff_pending(state, side, rules.kickoff_spot)
        events.append("field_goal")
        return Transition(state, [stamped], events)

    if kind == PlayType.FIELD_GOAL_MISSED:
        stamped = _stamp(play, state)
        _change_possession(state, side.other, state.field_position, events)
        return Transition(state, [stamped], events)

    if kind == PlayType.SAFETY:
        stamped = _stamp(play, state)
        state.field_position = goal_line(state, side.other)
        state.pending = _kickoff_pending(state, side, rules.safety_kick_spot)
        events.append("safety")
        return Transition(state, [stamped], events)

    if kind == PlayType.KICKOFF:
        return _kickoff(state, play, side, own_yard_line(state, side, rules.kickoff_spot))

    if kind == PlayType.PUNT:
        stamped = _stamp(play, state)
        landing = advance_spot(state, side, state.field_position, play.yards)
        state.pending = PendingPossessionConfirm(receiving_side=side.other, spot=landing, reason="punt")
        return Transition(state, [stamped], events)

    if kind == PlayType.INTERCEPTION:
        draft = _stamp(play, state)
        state.pending = PendingInterceptionReturn(
            intercepting_side=side.other,
            line_of_scrimmage=state.field_position,
            draft=draft,
        )
        return Transition(state, [], events)

    if kind == PlayType.FUMBLE_RECOVERY:
        draft = _stamp(play, state)
        spot = advance_spot(state, side, state.field_position, play.yards)
        state.pending = PendingPossessionConfirm(receiving_side=side.other, spot=spot, reason="fumble", draft=draft)
        return Transition(state, [], events)

    # remaining play types attribute stats without moving the drive
    return Transition(state, [_stamp(play, state)], events)


def _kickoff(state: DriveState, play: Play, kicking_side: TeamSide, spot: int) -> Transition:
    state.field_position = spot
    stamped = _stamp(play, state, side=kicking_side, scrimmage=False)
    landing = advance_spot(state, kicking_side, spot, play.yards)
    state.field_position = landing
    state.pending = PendingKickoffReturn(kicking_side=kicking_side, receiving_side=kicking_side.other, landing_spot=landing)
    events = ["kickoff"]
    if state.opening_receiver is None:
        state.opening_receiver = kicking_side.other
    return Transition(state, [stamped], events)


def _resolve_extra_point(state: DriveState, command: ResolveExtraPoint, rules: GameRules) -> Transition:
    _require(state, PendingExtraPoint, "resolve_extra_point")
    pending = state.pending
    assert isinstance(pending, PendingExtraPoint)
    outcome = PlayType(command.outcome)
    if outcome not in CONVERSION_TYPES:
        raise DriveTransitionError("INVALID_OUTCOME", pending_name(pending), f"{outcome.value} is not a conversion outcome")
    if outcome == PlayType.EXTRA_POINT_MADE and not command.player_id:
        raise DriveTransitionError("KICKER_REQUIRED", pending_name(pending), "a made extra point requires a kicker")
    if outcome == PlayType.TWO_POINT_MADE and not command.player_id:
        raise DriveTransitionError("PLAYER_REQUIRED", pending_name(pending), "a two-point conversion requires a player")

    kicking = outcome in (PlayType.EXTRA_POINT_MADE, PlayType.EXTRA_POINT_MISSED)
    role = ParticipantRole.KICKER if kicking else ParticipantRole.RUSHER
    participants = [PlayParticipant(command.player_id, role)] if command.player_id else []
    play = Play(
        play_id=make_id("play"),
        play_type=outcome,
        quarter=state.quarter,
        team_side=pending.scoring_side,
        participants=participants,
        yard_line=state.field_position,
        clock_seconds=state.clock_seconds,
        description=outcome.value.replace("_", " "),
    )
    state.pending = _kickoff_pending(state, pending.scoring_side, rules.kickoff_spot)
    return Transition(state, [play], ["conversion"])


def _resolve_kickoff_return(state: DriveState, command: ResolveKickoffReturn, rules: GameRules) -> Transition:
    _require(state, PendingKickoffReturn, "resolve_kickoff_return")
    pending = state.pending
    assert isinstance(pending, PendingKickoffReturn)
    receiving = pending.receiving_side
    events: list[str] = []
    plays: list[Play] = []

    if command.returner_id is None:
        end = command.return_end_spot
        if end is None:
            end = own_yard_line(state, receiving, rules.touchback_spot)
        events.append("touchback")
    else:
        if command.return_end_spot is None:
            raise DriveTransitionError("RETURN_SPOT_REQUIRED", pending_name(pending), "a returned kickoff needs a return-end spot")
        end = clamp_spot(command.return_end_spot)
        yards = yards_gained(state, receiving, pending.landing_spot, end)
        plays.append(
            Play(
                play_id=make_id("play"),
                play_type=PlayType.KICKOFF_RETURN,
                yards=yards,
                quarter=state.quarter,
                team_side=receiving,
                participants=[PlayParticipant(command.returner_id, ParticipantRole.RETURNER)],
                yard_line=pending.landing_spot,
                clock_seconds=state.clock_seconds,
                description=f"Kickoff return for {yards} yards",
            )
        )
    _change_possession(state, receiving, end, events)
    return Transition(state, plays, events)


def _resolve_interception_return(state: DriveState, command: ResolveInterceptionReturn) -> Transition:
    _require(state, PendingInterceptionReturn, "resolve_interception_return")
    pending = state.pending
    assert isinstance(pending, PendingInterceptionReturn)
    caught_at = clamp_spot(command.interception_spot)
    end = clamp_spot(command.return_end_spot)
    participants = list(pending.draft.participants)
    if command.interceptor_id not in pending.draft.player_ids(ParticipantRole.INTERCEPTOR):
        participants.append(PlayParticipant(command.interceptor_id, ParticipantRole.INTERCEPTOR))
    play = replace(
        pending.draft,
        yards=yards_gained(state, pending.intercepting_side, caught_at, end),
        air_yards=abs(caught_at - pending.line_of_scrimmage),
        participants=participants,
        clock_seconds=state.clock_seconds,
    )
    events = ["interception"]
    _change_possession(state, pending.intercepting_side, end, events)
    return Transition(state, [play], events)


def _confirm_possession(state: DriveState, command: ConfirmPossession) -> Transition:
    _require(state, PendingPossessionConfirm, "confirm_possession")
    pending = state.pending
    assert isinstance(pending, PendingPossessionConfirm)
    side = TeamSide(command.side)
    spot = clamp_spot(command.spot)
    events: list[str] = []
    plays: list[Play] = []

    if pending.draft is not None:
        draft = replace(pending.draft)
        if command.player_id and command.player_id not in draft.player_ids(ParticipantRole.RECOVERER):
            draft = replace(
                draft,
                participants=[*draft.participants, PlayParticipant(command.player_id, ParticipantRole.RECOVERER)],
            )
        plays.append(draft)

    if pending.reason == "punt" and command.player_id and side == pending.receiving_side:
        yards = yards_gained(state, side, pending.spot, spot)
        plays.append(
            Play(
                play_id=make_id("play"),
                play_type=PlayType.PUNT_RETURN,
                yards=yards,
                quarter=state.quarter,
                team_side=side,
                participants=[PlayParticipant(command.player_id, ParticipantRole.RETURNER)],
                yard_line=pending.spot,
                clock_seconds=state.clock_seconds,
                description=f"Punt return for {yards} yards",
            )
        )

    if side != state.possession or pending.reason == "punt":
        _change_possession(state, side, spot, events)
        return Transition(state, plays, events)

    # offense kept its own fumble
    line_of_scrimmage = state.field_position
    state.field_position = spot
    state.pending = NormalPlay()
    anchor = plays[0] if plays else Play(play_id=make_id("play"), play_type=PlayType.OTHER)
    _advance_downs(state, anchor, yards_gained(state, side, line_of_scrimmage, spot), plays, events)
    return Transition(state, plays, events)


def _call_timeout(state: DriveState, command: CallTimeout) -> Transition:
    side = TeamSide(command.side)
    if side is TeamSide.HOME:
        state.home_timeouts = max(0, state.home_timeouts - 1)
    else:
        state.away_timeouts = max(0, state.away_timeouts - 1)
    play = Play(
        play_id=make_id("play"),
        play_type=PlayType.TIMEOUT,
        quarter=state.quarter,
        team_side=side,
        clock_seconds=state.clock_seconds,
        description=f"Timeout {side.value} at {format_clock(state.clock_seconds)}",
    )
    return Transition(state, [play], ["timeout"])


def _advance_period(state: DriveState, rules: GameRules) -> Transition:
    pending = state.pending
    if isinstance(
        pending, (PendingExtraPoint, PendingKickoffReturn, PendingInterceptionReturn, PendingPossessionConfirm)
    ):
        raise DriveTransitionError("RESOLUTION_PENDING", pending_name(pending), "resolve the pending action before ending the period")
    if state.quarter >= 4 and not rules.overtime_enabled:
        raise DriveTransitionError("GAME_OVER", pending_name(pending), "overtime is disabled for these rules")

    _credit_possession_time(state, 0)
    state.quarter += 1
    state.clock_seconds = rules.period_seconds(state.quarter)
    state.possession_clock_start = state.clock_seconds
    events = ["period_advanced"]

    if state.quarter == 3:
        state.home_attacks_high = not state.home_attacks_high
        state.home_timeouts = rules.timeouts_per_half
        state.away_timeouts = rules.timeouts_per_half
        kicking = state.opening_receiver or state.possession
        state.possession = kicking
        state.down = 1
        state.distance = FIRST_DOWN_DISTANCE
        state.pending = _kickoff_pending(state, kicking, rules.kickoff_spot)
        state.field_position = state.pending.spot
        events.append("halftime")
    return Transition(state, [], events)
