from .aggregator import player_game_lines, season_player_totals, season_roster, season_team_totals
from .details import game_details
from .entities import (
    GameDetail,
    GameResult,
    PlayerGameLine,
    PlayerSeasonStats,
    SeasonLeader,
    SeasonRecord,
    TeamSeasonStats,
)
from .export import SeasonStatsExport, build_season_export
from .leaders import season_leaders
from .migration import MigrationReport, analyze_legacy_games, format_migration_report, migrate_games
from .schedule import build_schedule, season_record

__all__ = [
    "GameDetail",
    "GameResult",
    "MigrationReport",
    "PlayerGameLine",
    "PlayerSeasonStats",
    "SeasonLeader",
    "SeasonRecord",
    "SeasonStatsExport",
    "TeamSeasonStats",
    "analyze_legacy_games",
    "build_schedule",
    "build_season_export",
    "format_migration_report",
    "game_details",
    "migrate_games",
    "player_game_lines",
    "season_leaders",
    "season_player_totals",
    "season_record",
    "season_roster",
    "season_team_totals",
]
