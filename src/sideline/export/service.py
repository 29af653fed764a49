from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

from sideline.football.metrics import RATE_KEYS, derive_rates
from sideline.football.stats import PLAYER_STAT_KEYS
from sideline.season.export import SeasonStatsExport

try:
    import duckdb
except ModuleNotFoundError:  # pragma: no cover - exercised via runtime environments without duckdb
    duckdb = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

Column = tuple[str, str]

GAME_RATE_KEYS: tuple[str, ...] = tuple(sorted(derive_rates({})))
SEASON_RATE_KEYS: tuple[str, ...] = tuple(sorted(RATE_KEYS))

SCHEDULE_COLUMNS: list[Column] = [
    ("game_id", "VARCHAR"),
    ("opponent", "VARCHAR"),
    ("game_date", "VARCHAR"),
    ("site", "VARCHAR"),
    ("home_score", "INTEGER"),
    ("opp_score", "INTEGER"),
    ("result", "VARCHAR"),
    ("is_playoff", "BOOLEAN"),
]

LEADER_COLUMNS: list[Column] = [
    ("leader_group", "VARCHAR"),
    ("category", "VARCHAR"),
    ("display_label", "VARCHAR"),
    ("value", "DOUBLE"),
    ("display_value", "VARCHAR"),
    ("player_id", "VARCHAR"),
    ("player_name", "VARCHAR"),
    ("jersey_number", "INTEGER"),
]

PLAYER_SEASON_COLUMNS: list[Column] = [
    ("player_id", "VARCHAR"),
    ("name", "VARCHAR"),
    ("jersey_number", "INTEGER"),
    ("position", "VARCHAR"),
    ("games_played", "INTEGER"),
    *[(key, "DOUBLE") for key in (*PLAYER_STAT_KEYS, *SEASON_RATE_KEYS)],
]

PLAYER_GAME_COLUMNS: list[Column] = [
    ("player_id", "VARCHAR"),
    ("game_id", "VARCHAR"),
    ("opponent", "VARCHAR"),
    ("game_date", "VARCHAR"),
    ("result", "VARCHAR"),
    *[(key, "DOUBLE") for key in (*PLAYER_STAT_KEYS, *GAME_RATE_KEYS)],
]


def export_tables(export: SeasonStatsExport) -> dict[str, tuple[list[Column], list[tuple[Any, ...]]]]:
    """Flatten the season export into the row sets written as CSV and Parquet."""
    schedule = [
        (
            g.game_id,
            g.opponent,
            g.date.isoformat() if g.date else None,
            g.site.value,
            g.home_score,
            g.opp_score,
            g.result,
            g.is_playoff,
        )
        for g in export.schedule
    ]
    players = [
        (
            p.player_id,
            p.name,
            p.jersey_number,
            p.position,
            p.games_played,
            *[float(p.stats.get(key, 0)) for key in (*PLAYER_STAT_KEYS, *SEASON_RATE_KEYS)],
        )
        for p in export.player_stats
    ]
    leaders = [
        (
            group,
            leader.category,
            leader.display_label,
            float(leader.value),
            leader.display_value,
            leader.player_id,
            leader.player_name,
            leader.jersey_number,
        )
        for group, entries in export.leaders.items()
        for leader in entries
    ]
    game_lines = [
        (
            player_id,
            line.game_id,
            line.opponent,
            line.date.isoformat() if line.date else None,
            line.result,
            *[float(line.stats.get(key, 0)) for key in (*PLAYER_STAT_KEYS, *GAME_RATE_KEYS)],
        )
        for player_id, lines in export.player_game_stats.items()
        for line in lines
    ]
    return {
        "schedule": (SCHEDULE_COLUMNS, schedule),
        "player_season_stats": (PLAYER_SEASON_COLUMNS, players),
        "leaders": (LEADER_COLUMNS, leaders),
        "player_game_stats": (PLAYER_GAME_COLUMNS, game_lines),
    }


class ExportService:
    def __init__(self, analytics_db: Path | None = None) -> None:
        self.analytics_db = analytics_db

    def export_season(self, export: SeasonStatsExport, output_dir: Path) -> list[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        report_path = output_dir / "season_report.json"
        report_path.write_text(json.dumps(export.to_dict(), indent=2), encoding="utf-8")
        outputs = [report_path]
        outputs.extend(self.export_tables(export, output_dir))
        logger.info("exported season report for %s to %s", export.team_name or "team", output_dir)
        return outputs

    def export_tables(self, export: SeasonStatsExport, output_dir: Path) -> list[Path]:
        if duckdb is None:
            raise RuntimeError("duckdb is required for exports")
        output_dir.mkdir(parents=True, exist_ok=True)
        outputs: list[Path] = []
        database = str(self.analytics_db) if self.analytics_db is not None else ":memory:"
        with duckdb.connect(database) as conn:
            for table, (columns, rows) in export_tables(export).items():
                self._load_table(conn, table, columns, rows)
                outputs.extend(self._export_table(conn, table, output_dir / table))
        return outputs

    def _load_table(self, conn: Any, table: str, columns: Sequence[Column], rows: list[tuple[Any, ...]]) -> None:
        ddl = ", ".join(f"\"{name}\" {kind}" for name, kind in columns)
        conn.execute(f"CREATE OR REPLACE TABLE {table} ({ddl})")
        if rows:
            placeholders = ", ".join("?" for _ in columns)
            conn.executemany(f"INSERT INTO {table} VALUES ({placeholders})", rows)

    def _export_table(self, conn: Any, table: str, stem: Path) -> list[Path]:
        csv_path = stem.with_suffix(".csv")
        parquet_path = stem.with_suffix(".parquet")
        conn.execute(f"COPY (SELECT * FROM {table}) TO '{csv_path.as_posix()}' (HEADER, DELIMITER ',')")
        conn.execute(f"COPY (SELECT * FROM {table}) TO '{parquet_path.as_posix()}' (FORMAT PARQUET)")
        return [csv_path, parquet_path]
