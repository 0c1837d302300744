"""Generic SQLAlchemy store implementation."""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from givingbook.database.base import Store
from givingbook.database.models import Record, create_session_factory

logger = logging.getLogger(__name__)


class SQLAlchemyStore(Store):
    """SQLAlchemy-based implementation of the Store interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the store."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize store schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    def get(self, key: str) -> Optional[str]:
        """Get the value stored at key, or None if absent."""
        session = self._get_session()
        record = session.get(Record, key, populate_existing=True)
        if record is None:
            return None
        return record.value

    def set(self, key: str, value: str) -> None:
        """Store value at key, overwriting any previous value."""
        session = self._get_session()
        record = session.get(Record, key, populate_existing=True)
        if record is None:
            session.add(Record(key=key, value=value))
        else:
            record.value = value
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.debug("Stored %d characters at %s", len(value), key)

    def delete(self, key: str) -> bool:
        """Delete key. Returns True if it existed."""
        session = self._get_session()
        record = session.get(Record, key, populate_existing=True)
        if record is None:
            return False
        session.delete(record)
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
        return True

    def enumerate_keys(self, prefix: Optional[str] = None) -> list[str]:
        """List stored keys, optionally only those starting with prefix."""
        session = self._get_session()
        query = session.query(Record.key)
        keys = [row.key for row in query.order_by(Record.key).all()]
        if prefix is not None:
            # Filtered in Python: LIKE would treat "_" in the prefix as a wildcard
            keys = [key for key in keys if key.startswith(prefix)]
        return keys
