from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Mapping

from sideline.contracts import (
    ActionRequest,
    ActionResult,
    ActionType,
    Game,
    GameRules,
    Play,
    Season,
    TeamSide,
    ValidationError,
    ValidationIssue,
)
from sideline.core import (
    DriveTransitionError,
    EngineIntegrityError,
    EventBus,
    build_forensic_artifact,
    make_id,
    persist_forensic_artifact,
    resolve_rules,
)
from sideline.export import ExportService
from sideline.football import (
    AdvancePeriod,
    CallTimeout,
    CommitPlay,
    ConfirmPossession,
    ResolveExtraPoint,
    ResolveInterceptionReturn,
    ResolveKickoffReturn,
    append_play,
    apply_command,
    classify_play_type,
    edit_play,
    finalize_game,
    format_clock,
    game_timeline,
    game_to_document,
    normalize_game_document,
    normalize_play,
    remove_play,
    start_game,
    undo_last_play,
)
from sideline.football.drive import DriveCommand, pending_name
from sideline.football.ingest import rules_to_document
from sideline.football.stats import roster_sides
from sideline.persistence import GameStore, SqliteGameRepository
from sideline.season import SeasonStatsExport, build_season_export

logger = logging.getLogger(__name__)

_DRIVE_ACTIONS = {
    ActionType.COMMIT_PLAY,
    ActionType.RESOLVE_EXTRA_POINT,
    ActionType.RESOLVE_KICKOFF_RETURN,
    ActionType.RESOLVE_INTERCEPTION_RETURN,
    ActionType.CONFIRM_POSSESSION,
    ActionType.CALL_TIMEOUT,
    ActionType.ADVANCE_PERIOD,
}


class RuntimePaths:
    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def sqlite_path(self) -> Path:
        return self.root / "data" / "scorebook.sqlite3"

    @property
    def export_dir(self) -> Path:
        return self.root / "exports"

    @property
    def forensic_dir(self) -> Path:
        return self.root / "forensics"


def _require(payload: Mapping[str, Any], *keys: str) -> None:
    missing = sorted(k for k in keys if payload.get(k) is None)
    if missing:
        raise ValueError(f"missing fields: {', '.join(missing)}")


def _side(value: Any) -> TeamSide:
    try:
        return TeamSide(str(value).lower())
    except ValueError:
        raise ValueError(f"invalid side '{value}'") from None


class ScorekeeperRuntime:
    def __init__(
        self,
        root: Path,
        rules_profile: str = "nfhs",
        rules_overrides: dict[str, Any] | None = None,
    ) -> None:
        self.paths = RuntimePaths(root)
        self.paths.sqlite_path.parent.mkdir(parents=True, exist_ok=True)

        self.rules: GameRules = resolve_rules(rules_profile, rules_overrides)
        self.event_bus = EventBus()
        self.store = GameStore(self.paths.sqlite_path)
        self.store.initialize_schema()
        self.repository = SqliteGameRepository(self.store, self.event_bus)
        self.export_service = ExportService()

        self.games: dict[str, Game] = {}
        self.halted = False
        self.last_forensic_path: str | None = None
        logger.info("runtime ready at %s with %s rules", root, self.rules.profile)

    def register_season(self, season: Season) -> None:
        self.store.save_season(season)
        for game in season.games:
            self.repository.save(game)
            self.games[game.game_id] = game

    def handle_action(self, request: ActionRequest) -> ActionResult:
        if self.halted:
            return ActionResult(
                request.request_id,
                False,
                f"runtime halted after integrity failure; forensic={self.last_forensic_path}",
                {"forensic_path": self.last_forensic_path},
            )

        try:
            return self._handle_action_core(request)
        except DriveTransitionError as exc:
            return ActionResult(
                request.request_id,
                False,
                str(exc),
                {"code": exc.code, "pending": exc.pending},
            )
        except ValidationError as exc:
            return ActionResult(
                request.request_id,
                False,
                "request rejected by validation",
                {"issues": [asdict(i) for i in exc.issues]},
            )
        except ValueError as exc:
            return ActionResult(request.request_id, False, str(exc))
        except EngineIntegrityError as exc:
            self.last_forensic_path = str(persist_forensic_artifact(exc.artifact, self.paths.forensic_dir))
            self.halted = True
            logger.error("integrity failure %s; forensic=%s", exc.artifact.error_code, self.last_forensic_path)
            return ActionResult(
                request.request_id,
                False,
                f"integrity failure: {exc.artifact.error_code}",
                {"forensic_path": self.last_forensic_path},
            )
        except Exception as exc:
            game_id = self._game_id(request)
            game = self.games.get(game_id)
            artifact = build_forensic_artifact(
                engine_scope="runtime",
                error_code="UNHANDLED_RUNTIME_EXCEPTION",
                message=str(exc),
                state_snapshot=self._snapshot(game),
                context={"action_type": str(request.action_type), "payload": request.payload},
                identifiers={"request_id": request.request_id, "game_id": game_id},
                causal_fragment=["runtime_dispatch", type(exc).__name__],
            )
            self.last_forensic_path = str(persist_forensic_artifact(artifact, self.paths.forensic_dir))
            self.halted = True
            logger.exception("runtime hard-stopped; forensic=%s", self.last_forensic_path)
            return ActionResult(
                request.request_id,
                False,
                f"runtime hard-stopped: {exc}",
                {"forensic_path": self.last_forensic_path},
            )

    def _handle_action_core(self, request: ActionRequest) -> ActionResult:
        action = self._normalize_action(request.action_type)
        payload = request.payload or {}

        if action == ActionType.START_GAME:
            game = self._start_game(request)
            return ActionResult(request.request_id, True, f"game {game.game_id} started", data=self._state_data(game))

        if action in _DRIVE_ACTIONS:
            game = self._game(request)
            command = self._drive_command(action, payload, game)
            updated, step = apply_command(game, command)
            self._commit(updated, "drive", action.value, events=step.events)
            return ActionResult(
                request.request_id,
                True,
                f"{action.value}: {len(step.plays)} play(s) logged",
                data={**self._state_data(updated), "events": list(step.events)},
            )

        if action == ActionType.APPEND_PLAY:
            game = self._game(request)
            updated = append_play(game, self._play(payload, game))
            self._commit(updated, "playlog", "play_appended")
            return ActionResult(request.request_id, True, "play appended", data=self._state_data(updated))

        if action == ActionType.EDIT_PLAY:
            game = self._game(request)
            play_doc = payload.get("play") or {}
            _require(play_doc, "id")
            updated = edit_play(game, self._play(payload, game))
            changed = updated is not game
            if changed:
                self._commit(updated, "playlog", "play_edited")
            return ActionResult(
                request.request_id,
                True,
                "play edited" if changed else "no play with that id",
                data=self._state_data(updated),
            )

        if action == ActionType.REMOVE_PLAY:
            game = self._game(request)
            _require(payload, "play_id")
            updated = remove_play(game, str(payload["play_id"]))
            changed = updated is not game
            if changed:
                self._commit(updated, "playlog", "play_removed")
            return ActionResult(
                request.request_id,
                True,
                "play removed" if changed else "no play with that id",
                data=self._state_data(updated),
            )

        if action == ActionType.UNDO_LAST_PLAY:
            game = self._game(request)
            updated = undo_last_play(game)
            if updated is not game:
                self._commit(updated, "playlog", "play_undone")
            return ActionResult(request.request_id, True, "last play undone", data=self._state_data(updated))

        if action == ActionType.GET_GAME_STATE:
            game = self._game(request)
            if payload.get("finalize"):
                game = finalize_game(game)
                self._commit(game, "playlog", "game_finalized")
            return ActionResult(request.request_id, True, "game state", data=self._state_data(game, full=True))

        if action == ActionType.GET_SEASON_REPORT:
            export = self._season_export(payload)
            return ActionResult(request.request_id, True, "season report", data=export.to_dict())

        if action == ActionType.EXPORT_SEASON:
            export = self._season_export(payload)
            season_id = str(payload["season_id"])
            outputs = self.export_service.export_season(export, self.paths.export_dir / season_id)
            return ActionResult(
                request.request_id,
                True,
                f"exported {len(outputs)} files",
                data={"paths": [str(p) for p in outputs]},
            )

        return ActionResult(request.request_id, False, f"unsupported action: {action}")

    def _normalize_action(self, action: ActionType | str) -> ActionType:
        if isinstance(action, ActionType):
            return action
        return ActionType(action)

    def _game_id(self, request: ActionRequest) -> str:
        return str(request.game_id or (request.payload or {}).get("game_id") or "")

    def _game(self, request: ActionRequest) -> Game:
        game_id = self._game_id(request)
        if not game_id:
            raise ValueError("game_id required")
        game = self.games.get(game_id)
        if game is None:
            game = self.repository.load(game_id)
            if game is None:
                raise ValueError(f"unknown game '{game_id}'")
            self.games[game_id] = game
        return game

    def _start_game(self, request: ActionRequest) -> Game:
        payload = request.payload or {}
        doc = dict(payload.get("game") or {})
        game_id = str(doc.get("id") or self._game_id(request) or make_id("game"))
        existing = self.games.get(game_id) or self.repository.load(game_id)
        if existing is not None and existing.drive is not None:
            raise ValueError(f"game '{game_id}' already started")
        if existing is not None and not doc:
            game = existing
        else:
            doc["id"] = game_id
            doc.setdefault("rules", rules_to_document(self.rules))
            game = normalize_game_document(doc, strict=True).game
        started = start_game(
            game,
            kicking_side=_side(payload.get("kicking_side", TeamSide.AWAY.value)),
            home_attacks_high=bool(payload.get("home_attacks_high", True)),
        )
        self._commit(started, "playlog", "game_started")
        return started

    def _play(self, payload: Mapping[str, Any], game: Game) -> Play:
        doc = dict(payload.get("play") or {})
        if not doc:
            raise ValueError("missing fields: play")
        doc.setdefault("id", make_id("play"))
        play, issues = normalize_play(doc, len(game.plays), roster_sides(game.home_roster, game.away_roster))
        errors = [i for i in issues if i.severity == "error"]
        if play is None or errors:
            raise ValidationError(errors or issues)
        for issue in issues:
            if issue.severity == "warning":
                logger.warning("game %s: %s %s", game.game_id, issue.code, issue.message)
        return play

    def _drive_command(self, action: ActionType, payload: Mapping[str, Any], game: Game) -> DriveCommand:
        clock = payload.get("clock_seconds")
        clock_seconds = int(clock) if clock is not None else None

        if action == ActionType.COMMIT_PLAY:
            return CommitPlay(self._play(payload, game), clock_seconds=clock_seconds)

        if action == ActionType.RESOLVE_EXTRA_POINT:
            _require(payload, "outcome")
            outcome = classify_play_type(payload["outcome"])
            if outcome is None:
                raise ValidationError(
                    [ValidationIssue("UNRECOGNIZED_PLAY_TYPE", "error", "outcome", game.game_id, f"unknown outcome '{payload['outcome']}'")]
                )
            return ResolveExtraPoint(outcome, payload.get("player_id"), clock_seconds=clock_seconds)

        if action == ActionType.RESOLVE_KICKOFF_RETURN:
            end = payload.get("return_end_spot")
            return ResolveKickoffReturn(
                payload.get("returner_id"),
                int(end) if end is not None else None,
                clock_seconds=clock_seconds,
            )

        if action == ActionType.RESOLVE_INTERCEPTION_RETURN:
            _require(payload, "interceptor_id", "interception_spot", "return_end_spot")
            return ResolveInterceptionReturn(
                str(payload["interceptor_id"]),
                int(payload["interception_spot"]),
                int(payload["return_end_spot"]),
                clock_seconds=clock_seconds,
            )

        if action == ActionType.CONFIRM_POSSESSION:
            _require(payload, "side", "spot")
            return ConfirmPossession(
                _side(payload["side"]),
                int(payload["spot"]),
                payload.get("player_id"),
                clock_seconds=clock_seconds,
            )

        if action == ActionType.CALL_TIMEOUT:
            _require(payload, "side")
            return CallTimeout(_side(payload["side"]), clock_seconds=clock_seconds)

        return AdvancePeriod()

    def _commit(self, game: Game, scope: str, event_type: str, events: list[str] | None = None) -> None:
        self._check_integrity(game)
        self.games[game.game_id] = game
        self.repository.save(game)
        self.event_bus.emit(scope, event_type, game.game_id, plays=len(game.plays))
        for name in events or []:
            logger.debug("game %s drive event %s", game.game_id, name)
            self.event_bus.emit("drive", name, game.game_id)

    def _check_integrity(self, game: Game) -> None:
        timeline = game_timeline(game)
        last = (timeline[-1].home, timeline[-1].opp) if timeline else (0, 0)
        if last != (game.home_score, game.opp_score):
            raise EngineIntegrityError(
                build_forensic_artifact(
                    engine_scope="playlog",
                    error_code="SCORE_TIMELINE_MISMATCH",
                    message=f"score {game.home_score}-{game.opp_score} disagrees with timeline {last[0]}-{last[1]}",
                    state_snapshot=self._snapshot(game),
                    context={"plays": len(game.plays)},
                    identifiers={"game_id": game.game_id},
                    causal_fragment=["recompute", "score_timeline"],
                )
            )

    def _season_export(self, payload: Mapping[str, Any]) -> SeasonStatsExport:
        _require(payload, "season_id")
        season = self.store.load_season(str(payload["season_id"]))
        if season is None:
            raise ValueError(f"unknown season '{payload['season_id']}'")
        return build_season_export(season, team_name=str(payload.get("team_name") or ""))

    def _snapshot(self, game: Game | None) -> dict[str, object]:
        if game is None:
            return {}
        drive = game.drive
        return {
            "game_id": game.game_id,
            "plays": len(game.plays),
            "home_score": game.home_score,
            "opp_score": game.opp_score,
            "pending": pending_name(drive.pending) if drive else None,
        }

    def _state_data(self, game: Game, full: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "game_id": game.game_id,
            "home_score": game.home_score,
            "opp_score": game.opp_score,
            "plays": len(game.plays),
            "status": game.status.value,
        }
        drive = game.drive
        if drive is not None:
            data["drive"] = {
                "possession": drive.possession.value,
                "down": drive.down,
                "distance": drive.distance,
                "field_position": drive.field_position,
                "quarter": drive.quarter,
                "clock": format_clock(drive.clock_seconds),
                "home_timeouts": drive.home_timeouts,
                "away_timeouts": drive.away_timeouts,
                "pending": pending_name(drive.pending),
            }
        if full:
            data["document"] = game_to_document(game)
            data["timeline"] = [[d.home, d.opp] for d in game_timeline(game)]
        return data
