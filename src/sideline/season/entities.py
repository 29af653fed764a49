from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sideline.contracts import GameSite


@dataclass(slots=True)
class GameResult:
    game_id: str
    opponent: str
    date: datetime | None
    site: GameSite
    home_score: int
    opp_score: int
    result: str
    is_playoff: bool = False
    played: bool = True


@dataclass(slots=True)
class SeasonRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0

    @property
    def display(self) -> str:
        if self.ties:
            return f"{self.wins}-{self.losses}-{self.ties}"
        return f"{self.wins}-{self.losses}"


@dataclass(slots=True)
class PlayerSeasonStats:
    player_id: str
    name: str
    jersey_number: int | None
    position: str
    games_played: int
    stats: dict[str, float] = field(default_factory=dict)

    def value(self, key: str) -> float:
        return self.stats.get(key, 0)


@dataclass(slots=True)
class TeamSeasonStats:
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: int = 0
    points_against: int = 0
    rushing_yards: float = 0
    passing_yards: float = 0
    total_yards: float = 0
    first_downs: float = 0
    interceptions_thrown: float = 0
    fumbles_lost: float = 0
    turnovers: float = 0
    takeaways: float = 0
    points_per_game: float = 0.0
    points_allowed_per_game: float = 0.0
    yards_per_game: float = 0.0

    @property
    def point_differential(self) -> int:
        return self.points_for - self.points_against


@dataclass(slots=True)
class PlayerGameLine:
    game_id: str
    opponent: str
    date: datetime | None
    result: str
    stats: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class SeasonLeader:
    category: str
    display_label: str
    value: float
    display_value: str
    player_id: str
    player_name: str
    jersey_number: int | None = None


@dataclass(slots=True)
class GameDetail:
    game_id: str
    opponent: str
    date: datetime | None
    site: GameSite
    home_score: int
    opp_score: int
    result: str
    team_stats: dict[str, float] = field(default_factory=dict)
    rushing: list[dict[str, object]] = field(default_factory=list)
    passing: list[dict[str, object]] = field(default_factory=list)
    receiving: list[dict[str, object]] = field(default_factory=list)
    defense: list[dict[str, object]] = field(default_factory=list)
    kicking: list[dict[str, object]] = field(default_factory=list)
    scoring: list[dict[str, object]] = field(default_factory=list)
