"""Store factory functions for creating store instances."""

import os
from pathlib import Path
from typing import Optional

from givingbook.database.sqlalchemy_db import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: Path to SQLite database file. If None, checks GIVINGBOOK_DB_PATH
            environment variable, then defaults to ~/.givingbook/givingbook.db

    Returns:
        SQLAlchemyStore instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("GIVINGBOOK_DB_PATH")

    if database_path is None:
        home = Path.home()
        db_dir = home / ".givingbook"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "givingbook.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyStore(database_url)
