from __future__ import annotations

from datetime import datetime, UTC
from itertools import count

from sideline.contracts import Game, GameStatus, ParticipantRole, Play, PlayParticipant, Player, PlayType, Season, TeamSide

_ids = count(1)

HOME = TeamSide.HOME
AWAY = TeamSide.AWAY


def make_play(
    play_type: PlayType | str,
    yards: int = 0,
    side: TeamSide = HOME,
    *participants: tuple[str, ParticipantRole | str],
    play_id: str | None = None,
    **kwargs,
) -> Play:
    return Play(
        play_id=play_id or f"p{next(_ids)}",
        play_type=PlayType(play_type),
        yards=yards,
        team_side=side,
        participants=[PlayParticipant(pid, ParticipantRole(role)) for pid, role in participants],
        **kwargs,
    )


def home_roster() -> list[Player]:
    return [
        Player("qb1", "Quinn Banks", jersey_number=7, position="QB"),
        Player("rb1", "Rory Bell", jersey_number=22, position="RB"),
        Player("wr1", "Wes Reyes", jersey_number=11, position="WR"),
        Player("lb1", "Lee Burke", jersey_number=44, position="LB"),
        Player("lb2", "Lou Baxter", jersey_number=52, position="LB"),
        Player("db1", "Dane Booker", jersey_number=24, position="DB"),
        Player("k1", "Kit Ames", jersey_number=3, position="K"),
    ]


def away_roster() -> list[Player]:
    return [
        Player("opp_qb", "Opp Passer", jersey_number=12, position="QB"),
        Player("opp_rb", "Opp Runner", jersey_number=30, position="RB"),
        Player("opp_lb", "Opp Backer", jersey_number=55, position="LB"),
    ]


def make_game(game_id: str = "g1", plays: list[Play] | None = None, **kwargs) -> Game:
    kwargs.setdefault("home_roster", home_roster())
    kwargs.setdefault("away_roster", away_roster())
    kwargs.setdefault("status", GameStatus.FINAL if plays else GameStatus.SCHEDULED)
    return Game(game_id=game_id, plays=list(plays or []), **kwargs)


def sample_plays() -> list[Play]:
    """A short home win: rush TD + PAT, field goal, one opponent TD with a missed PAT."""
    return [
        make_play("rush", 12, HOME, ("rb1", "rusher"), ("opp_lb", "tackler")),
        make_play("pass_complete", 18, HOME, ("qb1", "passer"), ("wr1", "receiver"), first_down=True),
        make_play("rush_td", 35, HOME, ("rb1", "rusher")),
        make_play("extra_point_made", 0, HOME, ("k1", "kicker")),
        make_play("rush", 4, AWAY, ("opp_rb", "rusher"), ("lb1", "tackler"), ("lb2", "assist")),
        make_play("pass_td", 40, AWAY, ("opp_qb", "passer")),
        make_play("extra_point_missed", 0, AWAY),
        make_play("field_goal_made", 31, HOME, ("k1", "kicker")),
    ]


def game_document(game_id: str = "g1", **overrides) -> dict:
    doc = {
        "id": game_id,
        "seasonId": "s2025",
        "date": "2025-09-05T19:00:00+00:00",
        "opponentName": "Central",
        "site": "home",
        "status": "final",
        "myTeamSnapshot": {
            "roster": [{"id": p.player_id, "name": p.name, "jerseyNumber": p.jersey_number, "position": p.position} for p in home_roster()]
        },
        "opponentSnapshot": {
            "name": "Central",
            "roster": [{"id": p.player_id, "name": p.name, "jerseyNumber": p.jersey_number} for p in away_roster()],
        },
        "plays": [
            {"id": "a1", "type": "rush", "yards": 12, "teamSide": "home", "primaryPlayerId": "rb1"},
            {"id": "a2", "type": "rush_td", "yards": 8, "teamSide": "home", "primaryPlayerId": "rb1"},
            {"id": "a3", "type": "extra_point_made", "teamSide": "home", "primaryPlayerId": "k1"},
        ],
    }
    doc.update(overrides)
    return doc


def make_season(games: list[Game], roster: list[Player] | None = None) -> Season:
    return Season(
        season_id="s2025",
        year=2025,
        label="Varsity 2025",
        level="varsity",
        roster=home_roster() if roster is None else roster,
        games=games,
    )


def dated(day: int) -> datetime:
    return datetime(2025, 9, day, 19, 0, tzinfo=UTC)
