from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from sideline.contracts import Game
from sideline.football.ingest import NormalizedGame, normalize_game_document
from sideline.football.playlog import recompute

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MigrationReport:
    total_games: int = 0
    legacy_games: int = 0
    migrated_games: int = 0
    failed_migrations: int = 0
    roster_migrations: int = 0
    opponent_name_fills: int = 0
    team_side_defaults: int = 0
    unrecognized_types: int = 0
    duplicate_plays: int = 0
    score_mismatches: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if not self.legacy_games:
            return 100.0
        return self.migrated_games / self.legacy_games * 100


def _game_id(doc: Mapping[str, Any]) -> str:
    return str(doc.get("id") or doc.get("gameId") or doc.get("game_id") or "?")


def _needs_roster_migration(doc: Mapping[str, Any]) -> bool:
    return bool(doc.get("homePlayers")) and not (doc.get("myTeamSnapshot") or {}).get("roster")


def _needs_opponent_name(doc: Mapping[str, Any]) -> bool:
    snapshot = doc.get("opponentSnapshot") or {}
    name = doc.get("opponentName") or doc.get("opponent") or snapshot.get("name")
    return not (name and str(name).strip())


def _score_mismatch(doc: Mapping[str, Any], game: Game) -> bool:
    stored = (doc.get("homeScore"), doc.get("oppScore", doc.get("awayScore")))
    if stored[0] is None or stored[1] is None:
        return False
    return (int(stored[0]), int(stored[1])) != (game.home_score, game.opp_score)


def _tally(report: MigrationReport, doc: Mapping[str, Any], normalized: NormalizedGame, game: Game) -> bool:
    """Fold one game into the report. Returns whether it needed migration."""
    codes = [issue.code for issue in normalized.diagnostics]
    roster = _needs_roster_migration(doc)
    opponent = _needs_opponent_name(doc)
    sides = codes.count("MISSING_TEAM_SIDE")
    unknown = codes.count("UNRECOGNIZED_PLAY_TYPE")
    duplicates = len(normalized.duplicate_play_ids)

    report.roster_migrations += int(roster)
    report.opponent_name_fills += int(opponent)
    report.team_side_defaults += sides
    report.unrecognized_types += unknown
    report.duplicate_plays += duplicates
    report.score_mismatches += int(_score_mismatch(doc, game))
    return roster or opponent or bool(sides or unknown or duplicates)


def migrate_games(documents: Iterable[Mapping[str, Any]]) -> tuple[list[Game], MigrationReport]:
    """Normalize every document, recompute it, and report what normalization changed."""
    report = MigrationReport()
    games: list[Game] = []
    for doc in documents:
        report.total_games += 1
        game_id = _game_id(doc)
        try:
            normalized = normalize_game_document(doc, strict=True)
        except ValueError as exc:
            report.legacy_games += 1
            report.failed_migrations += 1
            report.errors.append((game_id, str(exc)))
            logger.warning("game %s failed migration: %s", game_id, exc)
            continue
        game = recompute(normalized.game)
        if _tally(report, doc, normalized, game):
            report.legacy_games += 1
            report.migrated_games += 1
        games.append(game)
    return games, report


def analyze_legacy_games(documents: Iterable[Mapping[str, Any]]) -> MigrationReport:
    _, report = migrate_games(documents)
    return report


def format_migration_report(report: MigrationReport) -> str:
    lines = [
        "=== Game Data Migration Report ===",
        "",
        f"Total games analyzed: {report.total_games}",
        f"Games with legacy structure: {report.legacy_games}",
        f"Successfully migrated: {report.migrated_games}",
        f"Failed migrations: {report.failed_migrations}",
        "",
        f"Rosters moved from homePlayers: {report.roster_migrations}",
        f"Opponent names filled: {report.opponent_name_fills}",
        f"Plays defaulted to home side: {report.team_side_defaults}",
        f"Unrecognized play types: {report.unrecognized_types}",
        f"Duplicate plays dropped: {report.duplicate_plays}",
        f"Stored scores that disagree with the log: {report.score_mismatches}",
        "",
    ]
    if report.errors:
        lines.append("Errors:")
        lines.extend(f"  - Game {game_id}: {message}" for game_id, message in report.errors)
        lines.append("")
    lines.append(f"Migration success rate: {report.success_rate:.1f}%")
    return "\n".join(lines)
