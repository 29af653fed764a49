from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from sideline.contracts import Game, GameHandler, Player, Season
from sideline.core.events import EventBus
from sideline.football.ingest import game_to_document, normalize_game_document
from sideline.football.playlog import recompute
from sideline.persistence.migrations import MigrationRunner

logger = logging.getLogger(__name__)


class GameStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize_schema(self) -> None:
        with self.connect() as conn:
            applied = MigrationRunner(conn).apply()
        if applied:
            logger.info("applied schema migrations %s to %s", applied, self.db_path)

    def save_season(self, season: Season) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO seasons(season_id, year, label, level)
                VALUES (?, ?, ?, ?)
                """,
                (season.season_id, season.year, season.label, season.level),
            )
        self.save_season_roster(season.season_id, season.roster)

    def load_season(self, season_id: str) -> Season | None:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT season_id, year, label, level FROM seasons WHERE season_id = ?",
                (season_id,),
            ).fetchone()
        if row is None:
            return None
        games = [g for g in (self.load_game(gid) for gid in self.list_games(season_id)) if g is not None]
        return Season(
            season_id=row[0],
            year=row[1],
            label=row[2],
            level=row[3],
            roster=self.load_season_roster(season_id),
            games=games,
        )

    def save_season_roster(self, season_id: str, roster: list[Player]) -> None:
        with self.connect() as conn:
            conn.execute("DELETE FROM season_roster WHERE season_id = ?", (season_id,))
            conn.executemany(
                """
                INSERT INTO season_roster(season_id, player_id, roster_order, name, jersey_number, position, preferred_name)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (season_id, p.player_id, index, p.name, p.jersey_number, p.position, p.preferred_name)
                    for index, p in enumerate(roster)
                ],
            )

    def load_season_roster(self, season_id: str) -> list[Player]:
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT player_id, name, jersey_number, position, preferred_name
                FROM season_roster WHERE season_id = ? ORDER BY roster_order
                """,
                (season_id,),
            ).fetchall()
        return [
            Player(player_id=r[0], name=r[1], jersey_number=r[2], position=r[3], preferred_name=r[4])
            for r in rows
        ]

    def save_game(self, game: Game) -> None:
        document = game_to_document(game)
        with self.connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO games(
                    game_id, season_id, game_date, opponent_name, site, status, home_score, opp_score, document_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    game.game_id,
                    game.season_id,
                    game.date.isoformat() if game.date else None,
                    game.opponent_name,
                    game.site.value,
                    game.status.value,
                    game.home_score,
                    game.opp_score,
                    json.dumps(document, sort_keys=True),
                ),
            )
            conn.execute("DELETE FROM plays WHERE game_id = ?", (game.game_id,))
            conn.executemany(
                """
                INSERT INTO plays(game_id, seq, play_id, play_type, team_side, quarter, yards, player_ids_json)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        game.game_id,
                        seq,
                        p.play_id,
                        p.play_type.value,
                        p.team_side.value,
                        p.quarter,
                        p.yards,
                        json.dumps(p.player_ids()),
                    )
                    for seq, p in enumerate(game.plays)
                ],
            )

    def load_game_document(self, game_id: str) -> dict[str, Any] | None:
        with self.connect() as conn:
            row = conn.execute("SELECT document_json FROM games WHERE game_id = ?", (game_id,)).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def load_game(self, game_id: str) -> Game | None:
        document = self.load_game_document(game_id)
        if document is None:
            return None
        return recompute(normalize_game_document(document).game)

    def list_games(self, season_id: str | None = None) -> list[str]:
        with self.connect() as conn:
            if season_id is None:
                rows = conn.execute("SELECT game_id FROM games ORDER BY game_date, game_id").fetchall()
            else:
                rows = conn.execute(
                    "SELECT game_id FROM games WHERE season_id = ? ORDER BY game_date, game_id",
                    (season_id,),
                ).fetchall()
        return [r[0] for r in rows]

    def delete_game(self, game_id: str) -> None:
        with self.connect() as conn:
            conn.execute("DELETE FROM games WHERE game_id = ?", (game_id,))

    def play_type_counts(self, game_id: str | None = None) -> dict[str, int]:
        query = "SELECT play_type, COUNT(*) FROM plays"
        params: tuple[Any, ...] = ()
        if game_id is not None:
            query += " WHERE game_id = ?"
            params = (game_id,)
        with self.connect() as conn:
            rows = conn.execute(query + " GROUP BY play_type ORDER BY play_type", params).fetchall()
        return {r[0]: r[1] for r in rows}


class SqliteGameRepository:
    """GameRepository over a GameStore. Handlers run after each committed save."""

    def __init__(self, store: GameStore, bus: EventBus | None = None) -> None:
        self.store = store
        self.bus = bus
        self._handlers: list[GameHandler] = []

    def save(self, game: Game) -> None:
        self.store.save_game(game)
        logger.info("saved game %s (%d plays)", game.game_id, len(game.plays))
        if self.bus is not None:
            self.bus.emit("persistence", "game_saved", game.game_id, plays=len(game.plays))
        for handler in list(self._handlers):
            handler(game)

    def load(self, game_id: str) -> Game | None:
        return self.store.load_game(game_id)

    def subscribe(self, handler: GameHandler) -> None:
        self._handlers.append(handler)
