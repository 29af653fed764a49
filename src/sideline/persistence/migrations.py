from __future__ import annotations

import sqlite3

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            applied_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS seasons (
            season_id TEXT PRIMARY KEY,
            year INTEGER NOT NULL,
            label TEXT NOT NULL,
            level TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS season_roster (
            season_id TEXT NOT NULL,
            player_id TEXT NOT NULL,
            roster_order INTEGER NOT NULL,
            name TEXT NOT NULL,
            jersey_number INTEGER,
            position TEXT NOT NULL,
            preferred_name TEXT,
            PRIMARY KEY (season_id, player_id),
            FOREIGN KEY (season_id) REFERENCES seasons(season_id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS games (
            game_id TEXT PRIMARY KEY,
            season_id TEXT NOT NULL,
            game_date TEXT,
            opponent_name TEXT NOT NULL,
            site TEXT NOT NULL,
            status TEXT NOT NULL,
            home_score INTEGER NOT NULL,
            opp_score INTEGER NOT NULL,
            document_json TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS plays (
            game_id TEXT NOT NULL,
            seq INTEGER NOT NULL,
            play_id TEXT NOT NULL,
            play_type TEXT NOT NULL,
            team_side TEXT NOT NULL,
            quarter INTEGER NOT NULL,
            yards INTEGER NOT NULL,
            player_ids_json TEXT NOT NULL,
            PRIMARY KEY (game_id, seq),
            FOREIGN KEY (game_id) REFERENCES games(game_id) ON DELETE CASCADE
        );
        """,
    ),
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_games_season ON games(season_id, game_date);
        CREATE INDEX IF NOT EXISTS idx_plays_type ON plays(play_type);
        """,
    ),
]


class MigrationRunner:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def apply(self) -> list[int]:
        self.conn.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT DEFAULT CURRENT_TIMESTAMP)")
        applied = {
            row[0]
            for row in self.conn.execute("SELECT version FROM schema_migrations").fetchall()
        }
        newly: list[int] = []
        for version, sql in MIGRATIONS:
            if version in applied:
                continue
            self.conn.executescript(sql)
            self.conn.execute("INSERT INTO schema_migrations(version) VALUES (?)", (version,))
            newly.append(version)
        self.conn.commit()
        return newly
