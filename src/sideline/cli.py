from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from sideline.contracts import Season
from sideline.core import default_rules_profiles, make_id, resolve_rules
from sideline.export import ExportService
from sideline.football import normalize_game_document, recompute
from sideline.football.ingest import game_to_document, normalize_roster, rules_to_document
from sideline.season import build_season_export, format_migration_report, migrate_games


def _read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


def _game_documents(path: Path) -> list[dict]:
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("games", [data])
    return list(data)


def _recompute(args: argparse.Namespace) -> int:
    doc = _read_json(args.game)
    if isinstance(doc, dict) and not doc.get("rules"):
        doc["rules"] = rules_to_document(resolve_rules(args.rules_profile))
    normalized = normalize_game_document(doc, strict=args.strict)
    for issue in normalized.diagnostics:
        print(f"[{issue.severity}] {issue.code} {issue.field_path}: {issue.message}")
    game = recompute(normalized.game)
    print(f"{game.game_id}: home {game.home_score} - {game.opp_score} {game.opponent_name}")
    if args.output:
        args.output.write_text(json.dumps(game_to_document(game), indent=2), encoding="utf-8")
        print(f"wrote {args.output}")
    return 0


def _season_report(args: argparse.Namespace) -> int:
    data = _read_json(args.season)
    games = [normalize_game_document(doc).game for doc in data.get("games", [])]
    season = Season(
        season_id=str(data.get("id") or data.get("seasonId") or make_id("season")),
        year=int(data.get("year") or 0),
        label=str(data.get("label") or ""),
        level=str(data.get("level") or ""),
        roster=normalize_roster(data.get("roster")),
        games=games,
    )
    export = build_season_export(season, team_name=args.team_name or str(data.get("teamName") or ""))
    print(f"{export.team_name or season.season_id}: {export.record.display}")
    for group, leaders in export.leaders.items():
        for leader in leaders:
            print(f"  {group:<14} {leader.display_label:<24} {leader.player_name} {leader.display_value}")

    if args.output_dir:
        try:
            outputs = ExportService().export_season(export, args.output_dir)
        except RuntimeError as exc:
            print(f"Export unavailable: {exc}")
            return 1
        print("Exported datasets:")
        for p in outputs:
            print(f"- {p}")
    return 0


def _migrate_report(args: argparse.Namespace) -> int:
    _, report = migrate_games(_game_documents(args.games))
    print(format_migration_report(report))
    return 1 if report.failed_migrations else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sideline: football play log scorekeeping and season stats")
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recompute", help="normalize one game document and rebuild its score and stats")
    rec.add_argument("game", type=Path, help="game document JSON")
    rec.add_argument("--strict", action="store_true", help="fail on malformed plays instead of skipping them")
    rec.add_argument(
        "--rules-profile",
        default="nfhs",
        choices=sorted(default_rules_profiles()),
        help="rules applied when the document carries none",
    )
    rec.add_argument("--output", type=Path, default=None, help="write the recomputed canonical document here")
    rec.set_defaults(handler=_recompute)

    rep = sub.add_parser("season-report", help="build the season report from a season JSON file")
    rep.add_argument("season", type=Path, help="season JSON with roster and games")
    rep.add_argument("--team-name", default="", help="team name shown on the report")
    rep.add_argument("--output-dir", type=Path, default=None, help="write JSON, CSV and Parquet exports here")
    rep.set_defaults(handler=_season_report)

    mig = sub.add_parser("migrate-report", help="report what normalization changes in legacy game documents")
    mig.add_argument("games", type=Path, help="JSON list of game documents")
    mig.set_defaults(handler=_migrate_report)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
