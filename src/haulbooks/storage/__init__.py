"""Local cache store layer for haulbooks."""

from haulbooks.storage.base import CacheStore
from haulbooks.storage.factories import create_sqlite_store

__all__ = ["CacheStore", "create_sqlite_store"]
