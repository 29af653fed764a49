from .types import (
    UNATTRIBUTED_PLAYER_ID,
    ActionRequest,
    ActionResult,
    ActionType,
    DriveCheckpoint,
    DriveState,
    ForensicArtifact,
    Game,
    GameEvent,
    GameHandler,
    GameRepository,
    GameRules,
    GameSite,
    GameStatus,
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
    Player,
    ScoreDelta,
    Season,
    TeamSide,
    ValidationError,
    ValidationIssue,
)

__all__ = [
    "UNATTRIBUTED_PLAYER_ID",
    "ActionRequest",
    "ActionResult",
    "ActionType",
    "DriveCheckpoint",
    "DriveState",
    "ForensicArtifact",
    "Game",
    "GameEvent",
    "GameHandler",
    "GameRepository",
    "GameRules",
    "GameSite",
    "GameStatus",
    "NormalPlay",
    "ParticipantRole",
    "PendingExtraPoint",
    "PendingInterceptionReturn",
    "PendingKickoff",
    "PendingKickoffReturn",
    "PendingPossessionConfirm",
    "PendingState",
    "Play",
    "PlayParticipant",
    "PlayType",
    "Player",
    "ScoreDelta",
    "Season",
    "TeamSide",
    "ValidationError",
    "ValidationIssue",
]
