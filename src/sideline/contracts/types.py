from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, Protocol, Sequence

UNATTRIBUTED_PLAYER_ID = "unattributed"


class PlayType(str, Enum):
    RUSH = "rush"
    RUSH_TD = "rush_td"
    PASS_COMPLETE = "pass_complete"
    PASS_INCOMPLETE = "pass_incomplete"
    PASS_TD = "pass_td"
    RECEPTION = "reception"
    TACKLE = "tackle"
    TACKLE_FOR_LOSS = "tackle_for_loss"
    SACK = "sack"
    INTERCEPTION = "interception"
    FUMBLE_RECOVERY = "fumble_recovery"
    PASS_DEFENSED = "pass_defensed"
    FORCED_FUMBLE = "forced_fumble"
    FIELD_GOAL_MADE = "field_goal_made"
    FIELD_GOAL_MISSED = "field_goal_missed"
    EXTRA_POINT_MADE = "extra_point_made"
    EXTRA_POINT_MISSED = "extra_point_missed"
    TWO_POINT_MADE = "two_point_made"
    TWO_POINT_FAILED = "two_point_failed"
    SAFETY = "safety"
    KICKOFF = "kickoff"
    KICKOFF_RETURN = "kickoff_return"
    PUNT = "punt"
    PUNT_RETURN = "punt_return"
    PENALTY = "penalty"
    TIMEOUT = "timeout"
    OTHER = "other"


class ParticipantRole(str, Enum):
    RUSHER = "rusher"
    PASSER = "passer"
    RECEIVER = "receiver"
    TACKLER = "tackler"
    ASSIST = "assist"
    INTERCEPTOR = "interceptor"
    RECOVERER = "recoverer"
    DEFENDER = "defender"
    FORCER = "forcer"
    KICKER = "kicker"
    RETURNER = "returner"
    PENALIZED = "penalized"
    OTHER = "other"


class TeamSide(str, Enum):
    HOME = "home"
    AWAY = "away"

    @property
    def other(self) -> TeamSide:
        return TeamSide.AWAY if self is TeamSide.HOME else TeamSide.HOME


class GameSite(str, Enum):
    HOME = "home"
    AWAY = "away"
    NEUTRAL = "neutral"


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"


class ActionType(str, Enum):
    START_GAME = "start_game"
    COMMIT_PLAY = "commit_play"
    RESOLVE_EXTRA_POINT = "resolve_extra_point"
    RESOLVE_KICKOFF_RETURN = "resolve_kickoff_return"
    RESOLVE_INTERCEPTION_RETURN = "resolve_interception_return"
    CONFIRM_POSSESSION = "confirm_possession"
    CALL_TIMEOUT = "call_timeout"
    ADVANCE_PERIOD = "advance_period"
    APPEND_PLAY = "append_play"
    EDIT_PLAY = "edit_play"
    REMOVE_PLAY = "remove_play"
    UNDO_LAST_PLAY = "undo_last_play"
    GET_GAME_STATE = "get_game_state"
    GET_SEASON_REPORT = "get_season_report"
    EXPORT_SEASON = "export_season"


@dataclass(slots=True)
class PlayParticipant:
    player_id: str
    role: ParticipantRole
    credit: float | None = None


@dataclass(slots=True)
class Play:
    play_id: str
    play_type: PlayType
    yards: int = 0
    quarter: int = 1
    team_side: TeamSide = TeamSide.HOME
    participants: list[PlayParticipant] = field(default_factory=list)
    down: int | None = None
    distance: int | None = None
    yard_line: int | None = None
    timestamp: datetime | None = None
    clock_seconds: int | None = None
    description: str = ""
    air_yards: int | None = None
    penalty_type: str | None = None
    first_down: bool = False
    tags: list[str] = field(default_factory=list)
    raw_type: str | None = None

    def player_ids(self, *roles: ParticipantRole) -> list[str]:
        """Attributed player ids in listed order, sentinel excluded, optionally filtered by role."""
        seen: list[str] = []
        for participant in self.participants:
            if roles and participant.role not in roles:
                continue
            if participant.player_id == UNATTRIBUTED_PLAYER_ID or participant.player_id in seen:
                continue
            seen.append(participant.player_id)
        return seen

    def references(self, player_id: str) -> bool:
        return any(p.player_id == player_id for p in self.participants)


@dataclass(slots=True)
class Player:
    player_id: str
    name: str
    jersey_number: int | None = None
    position: str = ""
    preferred_name: str | None = None
    stats: dict[str, float] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.preferred_name or self.name


@dataclass(slots=True)
class GameRules:
    profile: str = "nfhs"
    quarter_length_minutes: int = 12
    overtime_enabled: bool = True
    overtime_length_minutes: int = 10
    timeouts_per_half: int = 3
    kickoff_spot: int = 40
    safety_kick_spot: int = 20
    touchback_spot: int = 20

    def period_seconds(self, quarter: int) -> int:
        if quarter > 4:
            return self.overtime_length_minutes * 60
        return self.quarter_length_minutes * 60

    def validate(self) -> None:
        if self.quarter_length_minutes <= 0 or self.overtime_length_minutes <= 0:
            raise ValueError("period lengths must be positive")
        if self.timeouts_per_half < 0:
            raise ValueError("timeouts_per_half cannot be negative")
        for spot in (self.kickoff_spot, self.safety_kick_spot, self.touchback_spot):
            if not 0 < spot < 100:
                raise ValueError(f"kick spot {spot} must be inside the field of play")


@dataclass(slots=True)
class NormalPlay:
    pass


@dataclass(slots=True)
class PendingExtraPoint:
    scoring_side: TeamSide


@dataclass(slots=True)
class PendingKickoff:
    kicking_side: TeamSide
    spot: int


@dataclass(slots=True)
class PendingKickoffReturn:
    kicking_side: TeamSide
    receiving_side: TeamSide
    landing_spot: int


@dataclass(slots=True)
class PendingInterceptionReturn:
    intercepting_side: TeamSide
    line_of_scrimmage: int
    draft: Play


@dataclass(slots=True)
class PendingPossessionConfirm:
    receiving_side: TeamSide
    spot: int
    reason: str
    draft: Play | None = None


PendingState = (
    NormalPlay
    | PendingExtraPoint
    | PendingKickoff
    | PendingKickoffReturn
    | PendingInterceptionReturn
    | PendingPossessionConfirm
)


@dataclass(slots=True)
class DriveState:
    possession: TeamSide
    down: int
    distance: int
    field_position: int
    quarter: int
    clock_seconds: int
    home_timeouts: int
    away_timeouts: int
    possession_clock_start: int
    home_attacks_high: bool = True
    home_possession_seconds: int = 0
    away_possession_seconds: int = 0
    opening_receiver: TeamSide | None = None
    pending: PendingState = field(default_factory=NormalPlay)

    def timeouts(self, side: TeamSide) -> int:
        return self.home_timeouts if side is TeamSide.HOME else self.away_timeouts

    def possession_seconds(self, side: TeamSide) -> int:
        return self.home_possession_seconds if side is TeamSide.HOME else self.away_possession_seconds


@dataclass(slots=True)
class DriveCheckpoint:
    """Drive state before one command, and the span of plays that command logged."""

    start: int
    end: int
    before: DriveState


@dataclass(slots=True)
class ScoreDelta:
    home: int = 0
    opp: int = 0

    def __add__(self, other: ScoreDelta) -> ScoreDelta:
        return ScoreDelta(self.home + other.home, self.opp + other.opp)


@dataclass(slots=True)
class Game:
    game_id: str
    season_id: str = ""
    date: datetime | None = None
    opponent_name: str = "TBD Opponent"
    site: GameSite = GameSite.HOME
    status: GameStatus = GameStatus.SCHEDULED
    is_playoff: bool = False
    rules: GameRules = field(default_factory=GameRules)
    plays: list[Play] = field(default_factory=list)
    home_roster: list[Player] = field(default_factory=list)
    away_roster: list[Player] = field(default_factory=list)
    home_score: int = 0
    opp_score: int = 0
    team_stats: dict[str, dict[str, float]] = field(default_factory=dict)
    drive: DriveState | None = None
    drive_log: list[DriveCheckpoint] = field(default_factory=list)


@dataclass(slots=True)
class Season:
    season_id: str
    year: int
    label: str = ""
    level: str = ""
    roster: list[Player] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)


@dataclass(slots=True)
class GameEvent:
    event_id: str
    time: datetime
    scope: str
    event_type: str
    game_id: str
    detail: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ActionRequest:
    request_id: str
    action_type: ActionType | str
    payload: dict[str, Any]
    game_id: str = ""


@dataclass(slots=True)
class ActionResult:
    request_id: str
    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ValidationIssue:
    code: str
    severity: str
    field_path: str
    entity_id: str
    message: str


class ValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        message = "; ".join(f"{i.code}:{i.entity_id}:{i.message}" for i in issues)
        super().__init__(message)
        self.issues = issues


@dataclass(slots=True)
class ForensicArtifact:
    artifact_id: str
    timestamp: datetime
    engine_scope: str
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
    identifiers: Mapping[str, str]
    causal_fragment: Sequence[str]


GameHandler = Callable[[Game], None]


class GameRepository(Protocol):
    def save(self, game: Game) -> None: ...

    def load(self, game_id: str) -> Game | None: ...

    def subscribe(self, handler: GameHandler) -> None: ...
