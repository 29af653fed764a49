from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Mapping, Sequence

from sideline.contracts import (
    UNATTRIBUTED_PLAYER_ID,
    DriveCheckpoint,
    DriveState,
    Game,
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
    TeamSide,
    ValidationError,
    ValidationIssue,
)
from sideline.core.ids import coerce_datetime
from sideline.football.taxonomy import DEFENSIVE_TYPES, classify_play_type, default_role_for

logger = logging.getLogger(__name__)

DEFAULT_OPPONENT_NAME = "TBD Opponent"

# team-credited plays in older documents name this stand-in player
LEGACY_TEAM_PLAYER_ID = "team-placeholder-player"

_PENDING_TYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (
        NormalPlay,
        PendingExtraPoint,
        PendingKickoff,
        PendingKickoffReturn,
        PendingInterceptionReturn,
        PendingPossessionConfirm,
    )
}


@dataclass(slots=True)
class NormalizedGame:
    game: Game
    diagnostics: list[ValidationIssue] = field(default_factory=list)
    duplicate_play_ids: list[str] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.diagnostics if i.severity == "error"]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if re.fullmatch(r"-?\d+(\.\d+)?", text):
        return int(float(text))
    return None


def _as_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if re.fullmatch(r"-?\d+(\.\d+)?", text):
        return float(text)
    return None


def _player_ref(value: Any) -> str:
    player_id = str(value)
    return UNATTRIBUTED_PLAYER_ID if player_id == LEGACY_TEAM_PLAYER_ID else player_id


def normalize_player(doc: Mapping[str, Any]) -> Player:
    player_id = str(doc.get("id") or doc.get("playerId") or doc.get("player_id") or "")
    if not player_id:
        raise ValidationError(
            [ValidationIssue("MISSING_PLAYER_ID", "error", "roster", "", "roster entry has no id")]
        )
    return Player(
        player_id=player_id,
        name=str(doc.get("name") or doc.get("displayName") or player_id),
        jersey_number=_as_int(doc.get("jerseyNumber", doc.get("jersey_number"))),
        position=str(doc.get("position") or ""),
        preferred_name=doc.get("preferredName") or doc.get("preferred_name"),
    )


def normalize_roster(docs: Iterable[Mapping[str, Any]] | None) -> list[Player]:
    roster: list[Player] = []
    seen: set[str] = set()
    for doc in docs or []:
        player = normalize_player(doc)
        if player.player_id == LEGACY_TEAM_PLAYER_ID or player.player_id in seen:
            continue
        seen.add(player.player_id)
        roster.append(player)
    return roster


def _participants(doc: Mapping[str, Any], play_type: PlayType, team_side: TeamSide, sides: Mapping[str, TeamSide]) -> list[PlayParticipant]:
    participants: list[PlayParticipant] = []
    for raw in doc.get("participants") or []:
        player_id = _player_ref(raw.get("playerId") or raw.get("player_id") or UNATTRIBUTED_PLAYER_ID)
        try:
            role = ParticipantRole(str(raw.get("role") or "other").lower())
        except ValueError:
            role = ParticipantRole.OTHER
        credit = raw.get("credit")
        participants.append(PlayParticipant(player_id, role, _as_float(credit)))

    primary_raw = doc.get("primaryPlayerId") or doc.get("playerId")
    primary = _player_ref(primary_raw) if primary_raw else None
    listed = {p.player_id for p in participants}
    if primary and primary not in listed:
        on_possessing = sides.get(primary) == team_side if primary in sides else None
        participants.insert(0, PlayParticipant(primary, default_role_for(play_type, on_possessing)))
        listed.add(primary)

    assist_role = ParticipantRole.RECEIVER if play_type in (
        PlayType.PASS_COMPLETE,
        PlayType.PASS_TD,
        PlayType.PASS_INCOMPLETE,
    ) else ParticipantRole.ASSIST
    for assisting in doc.get("assistingPlayerIds") or []:
        player_id = _player_ref(assisting)
        if player_id in listed:
            continue
        listed.add(player_id)
        participants.append(PlayParticipant(player_id, assist_role))
    return participants


def normalize_play(
    doc: Mapping[str, Any],
    index: int = 0,
    sides: Mapping[str, TeamSide] | None = None,
) -> tuple[Play | None, list[ValidationIssue]]:
    """Single entry point that turns a stored play record of any vintage into a canonical Play."""
    issues: list[ValidationIssue] = []
    path = f"plays[{index}]"
    if not isinstance(doc, Mapping):
        issues.append(ValidationIssue("MALFORMED_PLAY", "error", path, "", "play record is not an object"))
        return None, issues

    play_id = str(doc.get("id") or doc.get("playId") or doc.get("play_id") or f"play_{index}")
    raw_type = doc.get("type", doc.get("play_type"))
    play_type = classify_play_type(raw_type)
    if play_type is None:
        issues.append(
            ValidationIssue(
                "UNRECOGNIZED_PLAY_TYPE",
                "warning",
                f"{path}.type",
                play_id,
                f"no play type matches '{raw_type}'; recorded as other with no score or stat effect",
            )
        )
        play_type = PlayType.OTHER

    yards_raw = doc.get("yards", 0)
    yards = _as_int(yards_raw)
    if yards is None and yards_raw not in (None, ""):
        issues.append(ValidationIssue("MALFORMED_PLAY", "error", f"{path}.yards", play_id, f"yards '{yards_raw}' is not numeric"))
        return None, issues

    for n, raw in enumerate(doc.get("participants") or []):
        field_path = f"{path}.participants[{n}]"
        if not isinstance(raw, Mapping):
            issues.append(ValidationIssue("MALFORMED_PLAY", "error", field_path, play_id, "participant is not an object"))
            return None, issues
        credit = raw.get("credit")
        if credit is not None and _as_float(credit) is None:
            issues.append(
                ValidationIssue("MALFORMED_PLAY", "error", f"{field_path}.credit", play_id, f"credit '{credit}' is not numeric")
            )
            return None, issues

    side_raw = doc.get("teamSide", doc.get("team_side"))
    if side_raw in ("home", "away"):
        team_side = TeamSide(side_raw)
    else:
        team_side = TeamSide.HOME
        issues.append(
            ValidationIssue("MISSING_TEAM_SIDE", "warning", f"{path}.teamSide", play_id, "team side missing; defaulted to home")
        )

    try:
        timestamp = coerce_datetime(doc.get("timestamp"))
    except ValueError:
        timestamp = None
        issues.append(ValidationIssue("BAD_TIMESTAMP", "warning", f"{path}.timestamp", play_id, "timestamp ignored"))

    legacy_text = doc.get("rawType")
    if legacy_text is None and raw_type is not None and not isinstance(raw_type, PlayType) and raw_type != play_type.value:
        legacy_text = str(raw_type)

    down = _as_int(doc.get("down"))
    distance = _as_int(doc.get("distance"))
    yard_line = _as_int(doc.get("yardLine", doc.get("yard_line")))
    play = Play(
        play_id=play_id,
        play_type=play_type,
        yards=yards or 0,
        quarter=_as_int(doc.get("quarter")) or 1,
        team_side=team_side,
        participants=_participants(doc, play_type, team_side, sides or {}),
        down=down if down is not None and 1 <= down <= 4 else None,
        distance=distance if distance is not None and distance >= 1 else None,
        yard_line=max(0, min(100, yard_line)) if yard_line is not None else None,
        timestamp=timestamp,
        clock_seconds=_as_int(doc.get("clockSeconds", doc.get("clock_seconds"))),
        description=str(doc.get("description") or ""),
        air_yards=_as_int(doc.get("airYards", doc.get("air_yards"))),
        penalty_type=doc.get("penaltyType") or doc.get("penalty_type"),
        first_down=bool(doc.get("resultedInFirstDown", doc.get("firstDown", False))),
        tags=[str(t) for t in doc.get("tags") or []],
        raw_type=legacy_text,
    )
    if play_type in DEFENSIVE_TYPES and not play.player_ids():
        issues.append(ValidationIssue("UNATTRIBUTED_PLAY", "info", path, play_id, f"{play_type.value} has no credited player"))
    return play, issues


def dedupe_plays(plays: Sequence[Play]) -> tuple[list[Play], list[str]]:
    """Keep the first occurrence of each play id, preserving log order."""
    kept: list[Play] = []
    dropped: list[str] = []
    seen: set[str] = set()
    for play in plays:
        if play.play_id in seen:
            dropped.append(play.play_id)
            continue
        seen.add(play.play_id)
        kept.append(play)
    return kept, dropped


def _home_roster_docs(doc: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    snapshot = doc.get("myTeamSnapshot") or {}
    if snapshot.get("roster"):
        return list(snapshot["roster"])
    return list(doc.get("homePlayers") or doc.get("homeRoster") or [])


def _away_roster_docs(doc: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    snapshot = doc.get("opponentSnapshot") or {}
    if snapshot.get("roster"):
        return list(snapshot["roster"])
    return list(doc.get("awayPlayers") or doc.get("awayRoster") or [])


def opponent_name(doc: Mapping[str, Any]) -> str:
    snapshot = doc.get("opponentSnapshot") or {}
    name = doc.get("opponentName") or doc.get("opponent") or snapshot.get("name")
    return str(name).strip() if name and str(name).strip() else DEFAULT_OPPONENT_NAME


def rules_from_document(doc: Mapping[str, Any] | None) -> GameRules:
    rules = GameRules()
    for key, value in (doc or {}).items():
        name = _snake(key)
        if hasattr(rules, name):
            setattr(rules, name, value)
    rules.validate()
    return rules


def rules_to_document(rules: GameRules) -> dict[str, Any]:
    return {_camel(f.name): getattr(rules, f.name) for f in fields(rules)}


def normalize_game_document(doc: Mapping[str, Any], strict: bool = False) -> NormalizedGame:
    """Normalize a stored or legacy game document into the canonical Game shape.

    With ``strict`` any error-severity diagnostic raises ValidationError instead of
    dropping the offending play.
    """
    game_id = str(doc.get("id") or doc.get("gameId") or doc.get("game_id") or "")
    diagnostics: list[ValidationIssue] = []
    if not game_id:
        diagnostics.append(ValidationIssue("MISSING_GAME_ID", "error", "id", "", "game document has no id"))

    if not (doc.get("myTeamSnapshot") or {}).get("roster") and doc.get("homePlayers"):
        diagnostics.append(
            ValidationIssue("LEGACY_ROSTER_SHAPE", "info", "homePlayers", game_id, "roster read from homePlayers")
        )
    home_roster = normalize_roster(_home_roster_docs(doc))
    away_roster = normalize_roster(_away_roster_docs(doc))
    sides = {p.player_id: TeamSide.AWAY for p in away_roster}
    sides.update({p.player_id: TeamSide.HOME for p in home_roster})

    plays: list[Play] = []
    for index, raw in enumerate(doc.get("plays") or []):
        play, issues = normalize_play(raw, index, sides)
        diagnostics.extend(issues)
        if play is not None:
            plays.append(play)
    plays, duplicates = dedupe_plays(plays)
    for play_id in duplicates:
        diagnostics.append(ValidationIssue("DUPLICATE_PLAY_ID", "warning", "plays", play_id, "duplicate play dropped"))

    try:
        site = GameSite(str(doc.get("site") or doc.get("location") or "home").lower())
    except ValueError:
        site = GameSite.HOME
    try:
        status = GameStatus(str(doc.get("status") or GameStatus.SCHEDULED.value).lower())
    except ValueError:
        status = GameStatus.FINAL if plays else GameStatus.SCHEDULED

    try:
        game_date = coerce_datetime(doc.get("date"))
    except ValueError:
        game_date = None
        diagnostics.append(ValidationIssue("BAD_DATE", "warning", "date", game_id, "game date ignored"))

    game = Game(
        game_id=game_id,
        season_id=str(doc.get("seasonId") or doc.get("season_id") or ""),
        date=game_date,
        opponent_name=opponent_name(doc),
        site=site,
        status=status,
        is_playoff=bool(doc.get("isPlayoff", False)),
        rules=rules_from_document(doc.get("rules")),
        plays=plays,
        home_roster=home_roster,
        away_roster=away_roster,
        drive=drive_from_document(doc.get("drive")),
        drive_log=drive_log_from_document(doc.get("driveLog")),
    )

    for issue in diagnostics:
        if issue.severity in ("warning", "error"):
            logger.warning("game %s: %s %s %s", game_id, issue.code, issue.field_path, issue.message)
    result = NormalizedGame(game=game, diagnostics=diagnostics, duplicate_play_ids=duplicates)
    if strict and result.errors:
        raise ValidationError(result.errors)
    return result


def participant_to_document(participant: PlayParticipant) -> dict[str, Any]:
    out: dict[str, Any] = {"playerId": participant.player_id, "role": participant.role.value}
    if participant.credit is not None:
        out["credit"] = participant.credit
    return out


def play_to_document(play: Play) -> dict[str, Any]:
    return {
        "id": play.play_id,
        "type": play.play_type.value,
        "yards": play.yards,
        "quarter": play.quarter,
        "teamSide": play.team_side.value,
        "participants": [participant_to_document(p) for p in play.participants],
        "down": play.down,
        "distance": play.distance,
        "yardLine": play.yard_line,
        "timestamp": play.timestamp.isoformat() if play.timestamp else None,
        "clockSeconds": play.clock_seconds,
        "description": play.description,
        "airYards": play.air_yards,
        "penaltyType": play.penalty_type,
        "resultedInFirstDown": play.first_down,
        "tags": list(play.tags),
        "rawType": play.raw_type,
    }


def player_to_document(player: Player, include_stats: bool = True) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": player.player_id,
        "name": player.name,
        "jerseyNumber": player.jersey_number,
        "position": player.position,
        "preferredName": player.preferred_name,
    }
    if include_stats:
        out["stats"] = dict(player.stats)
    return out


def drive_to_document(drive: DriveState | None) -> dict[str, Any] | None:
    if drive is None:
        return None
    out: dict[str, Any] = {}
    for f in fields(drive):
        value = getattr(drive, f.name)
        if f.name == "pending":
            continue
        out[_camel(f.name)] = value.value if isinstance(value, TeamSide) else value
    pending = drive.pending
    pending_doc: dict[str, Any] = {"kind": type(pending).__name__}
    for f in fields(pending):
        value = getattr(pending, f.name)
        if isinstance(value, Play):
            value = play_to_document(value)
        elif isinstance(value, TeamSide):
            value = value.value
        pending_doc[_camel(f.name)] = value
    out["pending"] = pending_doc
    return out


def _pending_from_document(doc: Mapping[str, Any] | None) -> PendingState:
    if not doc:
        return NormalPlay()
    cls = _PENDING_TYPES.get(str(doc.get("kind")))
    if cls is None:
        raise ValidationError(
            [ValidationIssue("UNKNOWN_PENDING_STATE", "error", "drive.pending", "", f"unknown pending kind {doc.get('kind')!r}")]
        )
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        value = doc.get(_camel(f.name))
        if f.name in ("scoring_side", "kicking_side", "receiving_side", "intercepting_side"):
            value = TeamSide(value)
        elif f.name == "draft" and value is not None:
            value, _ = normalize_play(value)
        kwargs[f.name] = value
    return cls(**kwargs)


def drive_from_document(doc: Mapping[str, Any] | None) -> DriveState | None:
    if not doc:
        return None
    kwargs: dict[str, Any] = {}
    for f in fields(DriveState):
        if f.name == "pending":
            continue
        key = _camel(f.name)
        if key not in doc:
            continue
        value = doc[key]
        if f.name in ("possession", "opening_receiver") and value is not None:
            value = TeamSide(value)
        kwargs[f.name] = value
    return DriveState(**kwargs, pending=_pending_from_document(doc.get("pending")))


def drive_log_from_document(docs: Iterable[Mapping[str, Any]] | None) -> list[DriveCheckpoint]:
    checkpoints: list[DriveCheckpoint] = []
    for doc in docs or []:
        before = drive_from_document(doc.get("before"))
        if before is None:
            continue
        checkpoints.append(DriveCheckpoint(start=int(doc.get("start", 0)), end=int(doc.get("end", 0)), before=before))
    return checkpoints


def game_to_document(game: Game) -> dict[str, Any]:
    return {
        "id": game.game_id,
        "seasonId": game.season_id,
        "date": game.date.isoformat() if game.date else None,
        "opponentName": game.opponent_name,
        "site": game.site.value,
        "status": game.status.value,
        "isPlayoff": game.is_playoff,
        "rules": rules_to_document(game.rules),
        "homeScore": game.home_score,
        "oppScore": game.opp_score,
        "myTeamSnapshot": {"roster": [player_to_document(p) for p in game.home_roster]},
        "opponentSnapshot": {"name": game.opponent_name, "roster": [player_to_document(p) for p in game.away_roster]},
        "plays": [play_to_document(p) for p in game.plays],
        "teamStats": {side: dict(bucket) for side, bucket in game.team_stats.items()},
        "drive": drive_to_document(game.drive),
        "driveLog": [
            {"start": cp.start, "end": cp.end, "before": drive_to_document(cp.before)} for cp in game.drive_log
        ],
    }

