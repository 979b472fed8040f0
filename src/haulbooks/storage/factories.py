"""Cache store factory functions."""

from pathlib import Path
from typing import Optional

from haulbooks.config import get_settings
from haulbooks.storage.sqlalchemy_store import SQLAlchemyCacheStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyCacheStore:
    """Create a SQLite-backed cache store.

    Args:
        database_path: Path to SQLite database file. If None, checks HAULBOOKS_DB_PATH
            environment variable, then defaults to ~/.haulbooks/haulbooks.db

    Returns:
        SQLAlchemyCacheStore instance configured for SQLite
    """
    if database_path is None:
        database_path = get_settings().db_path

    if database_path is None:
        db_dir = Path.home() / ".haulbooks"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "haulbooks.db")

    return SQLAlchemyCacheStore(f"sqlite:///{database_path}")
