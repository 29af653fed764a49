from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Sequence

from sideline.contracts import Game, Season
from sideline.core.ids import now_utc
from sideline.season.aggregator import player_game_lines, season_player_totals, season_roster, season_team_totals
from sideline.season.details import game_details
from sideline.season.entities import (
    GameDetail,
    GameResult,
    PlayerGameLine,
    PlayerSeasonStats,
    SeasonLeader,
    SeasonRecord,
    TeamSeasonStats,
)
from sideline.season.leaders import season_leaders
from sideline.season.schedule import build_schedule, season_record


def jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(slots=True)
class SeasonStatsExport:
    team_name: str
    season: dict[str, Any]
    record: SeasonRecord
    schedule: list[GameResult]
    team_stats: TeamSeasonStats
    player_stats: list[PlayerSeasonStats]
    leaders: dict[str, list[SeasonLeader]]
    roster: list[dict[str, Any]]
    player_game_stats: dict[str, list[PlayerGameLine]]
    game_details: list[GameDetail]
    generated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        record = jsonable(self.record)
        record["display"] = self.record.display
        team_stats = jsonable(self.team_stats)
        team_stats["point_differential"] = self.team_stats.point_differential
        return {
            "team_name": self.team_name,
            "season": jsonable(self.season),
            "record": record,
            "schedule": jsonable(self.schedule),
            "team_stats": team_stats,
            "player_stats": jsonable(self.player_stats),
            "leaders": jsonable(self.leaders),
            "roster": jsonable(self.roster),
            "player_game_stats": jsonable(self.player_game_stats),
            "game_details": jsonable(self.game_details),
            "generated_at": self.generated_at.isoformat(),
            "metadata": jsonable(self.metadata),
        }


def build_season_export(
    season: Season,
    games: Sequence[Game] | None = None,
    team_name: str = "",
    generated_at: datetime | None = None,
) -> SeasonStatsExport:
    games = list(season.games if games is None else games)
    roster = season_roster(games, season.roster)
    order = {player.player_id: index for index, player in enumerate(roster)}

    schedule = build_schedule(games)
    totals = season_player_totals(games, roster)
    active = [t for t in totals if t.games_played > 0]
    active.sort(key=lambda t: (-t.value("total_points"), order[t.player_id]))

    return SeasonStatsExport(
        team_name=team_name,
        season={"season_id": season.season_id, "year": season.year, "label": season.label, "level": season.level},
        record=season_record(schedule),
        schedule=schedule,
        team_stats=season_team_totals(games),
        player_stats=active,
        leaders=season_leaders(totals),
        roster=[
            {"id": p.player_id, "name": p.display_name, "jersey_number": p.jersey_number, "position": p.position}
            for p in roster
        ],
        player_game_stats=player_game_lines(games, roster),
        game_details=game_details(games, roster),
        generated_at=generated_at or now_utc(),
        metadata={"games": len(games), "played": sum(1 for g in schedule if g.played)},
    )
