"""Storage layer for givingbook application."""

from givingbook.database.base import Store
from givingbook.database.factories import create_sqlite_store

__all__ = ["Store", "create_sqlite_store"]
