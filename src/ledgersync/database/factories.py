"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgersync.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "LEDGERSYNC_DB_PATH"
DEFAULT_DB_DIR = Path.home() / ".ledgersync"
DEFAULT_DB_NAME = "ledgersync.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the SQLite file: explicit path, then $LEDGERSYNC_DB_PATH, then the home default.

    The parent directory is created if missing.
    """
    chosen = database_path or os.environ.get(DB_PATH_ENV)
    path = Path(chosen).expanduser() if chosen else DEFAULT_DB_DIR / DEFAULT_DB_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed ledger store.

    Args:
        database_path: Path to SQLite database file; see resolve_database_path

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
