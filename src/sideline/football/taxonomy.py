from __future__ import annotations

import re

from sideline.contracts import ParticipantRole, PlayType

TOUCHDOWN_TYPES = frozenset({PlayType.RUSH_TD, PlayType.PASS_TD})

CONVERSION_TYPES = frozenset(
    {
        PlayType.EXTRA_POINT_MADE,
        PlayType.EXTRA_POINT_MISSED,
        PlayType.TWO_POINT_MADE,
        PlayType.TWO_POINT_FAILED,
    }
)

ORDINARY_GAIN_TYPES = frozenset(
    {PlayType.RUSH, PlayType.PASS_COMPLETE, PlayType.PASS_INCOMPLETE, PlayType.SACK}
)

ANNOTATION_TYPES = frozenset(
    {
        PlayType.RECEPTION,
        PlayType.TACKLE,
        PlayType.TACKLE_FOR_LOSS,
        PlayType.PASS_DEFENSED,
        PlayType.FORCED_FUMBLE,
        PlayType.OTHER,
    }
)

DEFENSIVE_TYPES = frozenset(
    {
        PlayType.TACKLE,
        PlayType.TACKLE_FOR_LOSS,
        PlayType.SACK,
        PlayType.INTERCEPTION,
        PlayType.FUMBLE_RECOVERY,
        PlayType.PASS_DEFENSED,
        PlayType.FORCED_FUMBLE,
        PlayType.SAFETY,
    }
)

KICKING_TYPES = frozenset(
    {
        PlayType.FIELD_GOAL_MADE,
        PlayType.FIELD_GOAL_MISSED,
        PlayType.EXTRA_POINT_MADE,
        PlayType.EXTRA_POINT_MISSED,
        PlayType.KICKOFF,
        PlayType.PUNT,
    }
)

RETURN_TYPES = frozenset({PlayType.KICKOFF_RETURN, PlayType.PUNT_RETURN})

TACKLE_ROLES = (ParticipantRole.TACKLER, ParticipantRole.ASSIST)

_ALIASES: dict[str, PlayType] = {
    "rush_touchdown": PlayType.RUSH_TD,
    "run": PlayType.RUSH,
    "run_td": PlayType.RUSH_TD,
    "pass_touchdown": PlayType.PASS_TD,
    "pass_completion": PlayType.PASS_COMPLETE,
    "tfl": PlayType.TACKLE_FOR_LOSS,
    "int": PlayType.INTERCEPTION,
    "fg_made": PlayType.FIELD_GOAL_MADE,
    "fg_missed": PlayType.FIELD_GOAL_MISSED,
    "extra_point_kick_made": PlayType.EXTRA_POINT_MADE,
    "extra_point_kick_missed": PlayType.EXTRA_POINT_MISSED,
    "pat_made": PlayType.EXTRA_POINT_MADE,
    "pat_missed": PlayType.EXTRA_POINT_MISSED,
    "two_point_conversion_made": PlayType.TWO_POINT_MADE,
    "two_point_conversion_failed": PlayType.TWO_POINT_FAILED,
    "2pt_made": PlayType.TWO_POINT_MADE,
    "2pt_failed": PlayType.TWO_POINT_FAILED,
    "kick_return": PlayType.KICKOFF_RETURN,
}

_MISS_WORDS = ("miss", "fail", "block", "no good")


def _canonical_key(raw: str) -> str:
    return re.sub(r"[\s\-]+", "_", raw.strip().lower())


def _has_word(text: str, *words: str) -> bool:
    return any(re.search(rf"\b{re.escape(w)}\b", text) for w in words)


def _keyword_match(text: str) -> PlayType | None:
    missed = any(w in text for w in _MISS_WORDS)
    if _has_word(text, "td", "touchdown"):
        if _has_word(text, "run", "rush", "rushing"):
            return PlayType.RUSH_TD
        if _has_word(text, "pass", "passing", "catch", "reception"):
            return PlayType.PASS_TD
    if "field goal" in text or _has_word(text, "fg"):
        return PlayType.FIELD_GOAL_MISSED if missed else PlayType.FIELD_GOAL_MADE
    if _has_word(text, "pat", "xp") or "extra point" in text:
        return PlayType.EXTRA_POINT_MISSED if missed else PlayType.EXTRA_POINT_MADE
    if "two point" in text or "2 point" in text or "2pt" in text:
        return PlayType.TWO_POINT_FAILED if missed else PlayType.TWO_POINT_MADE
    if "safety" in text:
        return PlayType.SAFETY
    if "intercept" in text or _has_word(text, "int"):
        return PlayType.INTERCEPTION
    if "sack" in text:
        return PlayType.SACK
    if "tackle for loss" in text or _has_word(text, "tfl"):
        return PlayType.TACKLE_FOR_LOSS
    if "tackle" in text:
        return PlayType.TACKLE
    if "forced fumble" in text:
        return PlayType.FORCED_FUMBLE
    if "fumble" in text:
        return PlayType.FUMBLE_RECOVERY
    if "kickoff return" in text or "kick return" in text:
        return PlayType.KICKOFF_RETURN
    if "kickoff" in text:
        return PlayType.KICKOFF
    if "punt return" in text:
        return PlayType.PUNT_RETURN
    if "punt" in text:
        return PlayType.PUNT
    if "penalty" in text or _has_word(text, "flag"):
        return PlayType.PENALTY
    if "timeout" in text:
        return PlayType.TIMEOUT
    if "incomplete" in text:
        return PlayType.PASS_INCOMPLETE
    if "reception" in text or _has_word(text, "catch"):
        return PlayType.RECEPTION
    if _has_word(text, "pass", "passing", "completion", "complete"):
        return PlayType.PASS_COMPLETE
    if _has_word(text, "run", "rush", "rushing", "carry"):
        return PlayType.RUSH
    return None


def classify_play_type(raw: PlayType | str | None) -> PlayType | None:
    """Map a canonical code, a known alias, or legacy free text onto a PlayType.

    Returns None when nothing matches; callers decide how to report that.
    """
    if raw is None:
        return None
    if isinstance(raw, PlayType):
        return raw
    key = _canonical_key(str(raw))
    if not key:
        return None
    try:
        return PlayType(key)
    except ValueError:
        pass
    if key in _ALIASES:
        return _ALIASES[key]
    return _keyword_match(str(raw).lower().replace("_", " ").replace("-", " "))


def default_role_for(play_type: PlayType, on_possessing_roster: bool | None = None) -> ParticipantRole:
    """Role for a legacy single-player attribution (``primaryPlayerId``)."""
    if play_type in (PlayType.RUSH, PlayType.RUSH_TD):
        return ParticipantRole.RUSHER
    if play_type in (PlayType.PASS_COMPLETE, PlayType.PASS_INCOMPLETE, PlayType.PASS_TD):
        return ParticipantRole.PASSER
    if play_type == PlayType.RECEPTION:
        return ParticipantRole.RECEIVER
    if play_type == PlayType.INTERCEPTION:
        if on_possessing_roster:
            return ParticipantRole.PASSER
        return ParticipantRole.INTERCEPTOR
    if play_type in (PlayType.TACKLE, PlayType.TACKLE_FOR_LOSS, PlayType.SACK, PlayType.SAFETY):
        return ParticipantRole.TACKLER
    if play_type == PlayType.FUMBLE_RECOVERY:
        return ParticipantRole.RECOVERER
    if play_type == PlayType.PASS_DEFENSED:
        return ParticipantRole.DEFENDER
    if play_type == PlayType.FORCED_FUMBLE:
        return ParticipantRole.FORCER
    if play_type in KICKING_TYPES:
        return ParticipantRole.KICKER
    if play_type in (PlayType.TWO_POINT_MADE, PlayType.TWO_POINT_FAILED):
        return ParticipantRole.RUSHER
    if play_type in RETURN_TYPES:
        return ParticipantRole.RETURNER
    if play_type == PlayType.PENALTY:
        return ParticipantRole.PENALIZED
    return ParticipantRole.OTHER
