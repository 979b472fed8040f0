"""Abstract remote store interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class RemoteStoreError(Exception):
    """Remote read or write failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class RemoteStore(ABC):
    """Async table store the local cache is reconciled against."""

    @property
    @abstractmethod
    def has_session(self) -> bool:
        """Whether an authenticated remote session is active."""
        pass

    @abstractmethod
    async def select(self, table: str) -> list[dict[str, Any]]:
        """Return every row of a table."""
        pass

    @abstractmethod
    async def insert(self, table: str, row: dict[str, Any]) -> None:
        """Insert one row."""
        pass

    @abstractmethod
    async def update(self, table: str, row_id: str, row: dict[str, Any]) -> None:
        """Replace the row with the given id."""
        pass

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> None:
        """Delete the row with the given id."""
        pass

    @abstractmethod
    async def delete_many(self, table: str, ids: Sequence[str]) -> None:
        """Delete every listed row in a single request."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass
