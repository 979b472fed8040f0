"""SQLAlchemy cache store implementation."""

import json
from typing import Any, Optional
from sqlalchemy.orm import Session

from haulbooks.storage.base import CacheStore
from haulbooks.storage.models import CacheEntry, create_session_factory


class SQLAlchemyCacheStore(CacheStore):
    """SQLAlchemy-based implementation of CacheStore interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy cache store.

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
        """Initialize storage schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    def read(self, collection: str) -> Optional[list[dict[str, Any]]]:
        """Read a collection. Returns None if the key was never written."""
        session = self._get_session()
        entry = session.get(CacheEntry, collection)
        if entry is None:
            return None
        records = json.loads(entry.payload)
        if not isinstance(records, list):
            raise ValueError(f"Cache entry '{collection}' is not a list")
        return records

    def write(self, collection: str, records: list[dict[str, Any]]) -> None:
        """Replace a collection with the given records."""
        session = self._get_session()
        payload = json.dumps(records)
        entry = session.get(CacheEntry, collection)
        if entry is None:
            session.add(CacheEntry(key=collection, payload=payload))
        else:
            entry.payload = payload
        session.commit()

    def clear(self, collection: str) -> None:
        """Remove a collection key entirely."""
        session = self._get_session()
        entry = session.get(CacheEntry, collection)
        if entry is not None:
            session.delete(entry)
            session.commit()

    def list_collections(self) -> list[str]:
        """List the collection keys currently stored."""
        session = self._get_session()
        return [key for (key,) in session.query(CacheEntry.key).order_by(CacheEntry.key)]
