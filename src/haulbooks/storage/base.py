"""Abstract local cache store interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheStore(ABC):
    """Per-collection persisted key/value store.

    Each collection is persisted as one serialized array of records.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables)."""
        pass

    @abstractmethod
    def read(self, collection: str) -> Optional[list[dict[str, Any]]]:
        """Read a collection. Returns None if the key was never written."""
        pass

    @abstractmethod
    def write(self, collection: str, records: list[dict[str, Any]]) -> None:
        """Replace a collection with the given records."""
        pass

    @abstractmethod
    def clear(self, collection: str) -> None:
        """Remove a collection key entirely."""
        pass

    @abstractmethod
    def list_collections(self) -> list[str]:
        """List the collection keys currently stored."""
        pass
