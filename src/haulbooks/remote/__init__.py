"""Remote store layer for haulbooks."""

from haulbooks.remote.base import RemoteStore, RemoteStoreError
from haulbooks.remote.postgrest import PostgrestRemoteStore

__all__ = ["RemoteStore", "RemoteStoreError", "PostgrestRemoteStore"]
