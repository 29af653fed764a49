from .drive import (
    AdvancePeriod,
    CallTimeout,
    CommitPlay,
    ConfirmPossession,
    DriveCommand,
    ResolveExtraPoint,
    ResolveInterceptionReturn,
    ResolveKickoffReturn,
    Transition,
    format_clock,
    opening_drive,
    transition,
)
from .ingest import NormalizedGame, dedupe_plays, game_to_document, normalize_game_document, normalize_play
from .metrics import derive_rates, passer_rating, safe_div
from .playlog import (
    append_play,
    apply_command,
    edit_play,
    finalize_game,
    game_timeline,
    recompute,
    remove_play,
    start_game,
    undo_last_play,
)
from .scoring import final_score, score_delta, score_timeline
from .stats import GameRecompute, recompute_game, tackle_credits
from .taxonomy import classify_play_type

__all__ = [
    "AdvancePeriod",
    "CallTimeout",
    "CommitPlay",
    "ConfirmPossession",
    "DriveCommand",
    "GameRecompute",
    "NormalizedGame",
    "ResolveExtraPoint",
    "ResolveInterceptionReturn",
    "ResolveKickoffReturn",
    "Transition",
    "append_play",
    "apply_command",
    "classify_play_type",
    "dedupe_plays",
    "derive_rates",
    "edit_play",
    "final_score",
    "finalize_game",
    "format_clock",
    "game_timeline",
    "game_to_document",
    "normalize_game_document",
    "normalize_play",
    "opening_drive",
    "passer_rating",
    "recompute",
    "recompute_game",
    "remove_play",
    "safe_div",
    "score_delta",
    "score_timeline",
    "start_game",
    "tackle_credits",
    "transition",
    "undo_last_play",
]
