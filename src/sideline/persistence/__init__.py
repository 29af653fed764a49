from .migrations import MIGRATIONS, MigrationRunner
from .sqlite_store import GameStore, SqliteGameRepository

__all__ = [
    "GameStore",
    "MIGRATIONS",
    "MigrationRunner",
    "SqliteGameRepository",
]
