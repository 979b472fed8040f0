"""Sync coordinator: local cache first, remote store best effort.

Every mutation is validated, applied to in-memory state and written to the
local cache before the first suspension point. Only then is the remote write
attempted. A failed remote write is reported through the returned
SyncResult and the entity's sync marker; local state is never rolled back.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence, Union

import structlog

from haulbooks.domain import entities as domain
from haulbooks.domain import seed
from haulbooks.domain.entities import Collection
from haulbooks.domain.errors import (
    NotFoundError,
    SyncError,
    ValidationError,
    entity_not_found,
    remote_read_failed,
    remote_write_failed,
)
from haulbooks.domain.extraction import normalize_candidates
from haulbooks.domain.validation import validate_entity, validate_identifier
from haulbooks.remote.base import RemoteStore, RemoteStoreError
from haulbooks.remote.resolver import REMOTE_TABLES, TO_ROW, resolve_remote_rows
from haulbooks.storage.base import CacheStore
from haulbooks.storage.mappers import FROM_RECORD, TO_RECORD

logger = structlog.get_logger(__name__)


class MutationOp(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    DELETE_MANY = "delete_many"


class ConnectionState(str, Enum):
    """Remote connectivity as last observed."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    OFFLINE = "offline"


class SyncState(str, Enum):
    """Per-entity remote sync marker."""

    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"
    LOCAL_ONLY = "local_only"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of the remote half of a mutation.

    ``ok`` is True when the remote write succeeded or none was needed.
    """

    ok: bool
    remote: bool = False
    error: Optional[SyncError] = None


SEEDS: dict[Collection, Callable[[], list[Any]]] = {
    Collection.ENTITIES: seed.default_entities,
    Collection.ACCOUNTS: seed.default_accounts,
    Collection.CATEGORIES: seed.default_categories,
    Collection.TRUCKS: seed.default_trucks,
    Collection.TRANSACTIONS: list,
    Collection.LOADS: list,
    Collection.FISCAL: list,
}


def _entity_id(entity: Any) -> str:
    return entity.id


class SyncCoordinator:
    """Owns canonical in-memory state and reconciles it with both stores."""

    def __init__(self, store: CacheStore, remote: Optional[RemoteStore] = None):
        """Initialize sync coordinator.

        Args:
            store: Local cache store
            remote: Remote store; None means no remote session
        """
        self.store = store
        self.remote = remote
        self.connection = ConnectionState.OFFLINE
        self.last_error: Optional[SyncError] = None
        self.loaded = False
        self._state: dict[Collection, list[Any]] = {c: [] for c in Collection}
        self._sync_states: dict[tuple[Collection, str], SyncState] = {}

    # Queries

    def items(self, collection: Union[Collection, str]) -> list[Any]:
        """Return a copy of a collection's current state."""
        return list(self._state[Collection(collection)])

    def get(self, collection: Union[Collection, str], entity_id: str) -> Optional[Any]:
        """Get an entity by id, or None."""
        for entity in self._state[Collection(collection)]:
            if _entity_id(entity) == entity_id:
                return entity
        return None

    @property
    def entities(self) -> list[domain.BusinessEntity]:
        return self.items(Collection.ENTITIES)

    @property
    def accounts(self) -> list[domain.BankAccount]:
        return self.items(Collection.ACCOUNTS)

    @property
    def categories(self) -> list[domain.Category]:
        return self.items(Collection.CATEGORIES)

    @property
    def trucks(self) -> list[domain.Truck]:
        return self.items(Collection.TRUCKS)

    @property
    def transactions(self) -> list[domain.Transaction]:
        return self.items(Collection.TRANSACTIONS)

    @property
    def loads(self) -> list[domain.LoadRecord]:
        return self.items(Collection.LOADS)

    @property
    def fiscal_records(self) -> list[domain.FiscalYearRecord]:
        return self.items(Collection.FISCAL)

    def sync_state(
        self, collection: Union[Collection, str], entity_id: str
    ) -> Optional[SyncState]:
        """Return the sync marker of an entity, or None if never mutated."""
        return self._sync_states.get((Collection(collection), entity_id))

    def failed_entities(self) -> list[tuple[Collection, str]]:
        """Return every (collection, id) whose last remote write failed."""
        return [key for key, state in self._sync_states.items() if state == SyncState.FAILED]

    def has_remote_session(self) -> bool:
        return self.remote is not None and self.remote.has_session

    # Loading

    def load_from_cache(self) -> None:
        """Load every collection from the cache, seeding empty ones."""
        for collection in Collection:
            records = self.store.read(collection.value)
            if records:
                decode = FROM_RECORD[collection]
                self._state[collection] = [decode(record) for record in records]
                continue

            seeded = SEEDS[collection]()
            self._state[collection] = seeded
            if seeded:
                self._write_cache(collection)
                logger.info("cache_seeded", collection=collection.value, count=len(seeded))
        self.loaded = True
        logger.debug(
            "cache_loaded",
            **{c.value: len(items) for c, items in self._state.items()},
        )

    async def load(self, initial: bool = True) -> ConnectionState:
        """Load state from the cache, then refresh from the remote store.

        Args:
            initial: Read the local cache first. A later refresh passes False
                to keep the in-memory state and only refresh from remote.

        Returns:
            Connection state after the attempt. A remote read failure keeps
            the cache-sourced state and reports DISCONNECTED.
        """
        if initial or not self.loaded:
            self.load_from_cache()

        if not self.has_remote_session():
            self.connection = ConnectionState.OFFLINE
            return self.connection

        collections = list(REMOTE_TABLES)
        results = await asyncio.gather(
            *(self.remote.select(REMOTE_TABLES[c]) for c in collections),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, RemoteStoreError):
                raise failure
        if failures:
            message = str(failures[0])
            self.connection = ConnectionState.DISCONNECTED
            self.last_error = SyncError(remote_read_failed(message), operation="load")
            logger.warning("remote_read_failed", error=message, failed_tables=len(failures))
            return self.connection

        resolved = resolve_remote_rows(dict(zip(collections, results)))
        for collection, entities in resolved.items():
            self._state[collection] = entities
            self._write_cache(collection)
            self._clear_sync_states(collection)

        self.connection = ConnectionState.CONNECTED
        self.last_error = None
        logger.info(
            "remote_refreshed",
            **{c.value: len(entities) for c, entities in resolved.items()},
        )
        return self.connection

    # Mutations

    async def mutate(
        self, collection: Union[Collection, str], op: Union[MutationOp, str], payload: Any
    ) -> SyncResult:
        """Apply a mutation locally, then persist it remotely if possible.

        Args:
            collection: Target collection
            op: ADD/UPDATE take an entity, DELETE an id, DELETE_MANY a list of ids
            payload: Entity, id or ids

        Returns:
            SyncResult describing the remote outcome

        Raises:
            ValidationError: If the payload is malformed (nothing is written)
            NotFoundError: If an updated or deleted entity does not exist
        """
        collection = Collection(collection)
        op = MutationOp(op)
        entity, ids = self.apply_local(collection, op, payload)
        return await self._persist_remote(collection, op, entity, ids)

    def apply_local(
        self, collection: Collection, op: MutationOp, payload: Any
    ) -> tuple[Optional[Any], list[str]]:
        """Apply a mutation to in-memory state and the cache synchronously.

        Returns:
            Tuple of (validated entity or None, affected ids)
        """
        items = self._state[collection]

        if op == MutationOp.ADD:
            entity = validate_entity(collection, payload)
            entity_id = _entity_id(entity)
            if any(_entity_id(item) == entity_id for item in items):
                raise ValidationError(f"{collection.value} entry '{entity_id}' already exists")
            self._state[collection] = items + [entity]
            ids = [entity_id]
        elif op == MutationOp.UPDATE:
            entity = validate_entity(collection, payload)
            entity_id = _entity_id(entity)
            if not any(_entity_id(item) == entity_id for item in items):
                raise NotFoundError(entity_not_found(collection.value, entity_id))
            self._state[collection] = [
                entity if _entity_id(item) == entity_id else item for item in items
            ]
            ids = [entity_id]
        elif op == MutationOp.DELETE:
            entity = None
            entity_id = str(payload)
            if not any(_entity_id(item) == entity_id for item in items):
                raise NotFoundError(entity_not_found(collection.value, entity_id))
            self._state[collection] = [item for item in items if _entity_id(item) != entity_id]
            ids = [entity_id]
        else:
            entity = None
            if isinstance(payload, str):
                raise ValidationError("delete_many expects a sequence of ids")
            ids = list(dict.fromkeys(str(i) for i in payload))
            if collection != Collection.FISCAL:
                for entity_id in ids:
                    validate_identifier(entity_id)
            wanted = set(ids)
            self._state[collection] = [item for item in items if _entity_id(item) not in wanted]

        self._write_cache(collection)
        marker = (
            SyncState.PENDING
            if self._syncs_remotely(collection)
            else SyncState.LOCAL_ONLY
        )
        for entity_id in ids:
            self._sync_states[(collection, entity_id)] = marker
        return entity, ids

    async def _persist_remote(
        self,
        collection: Collection,
        op: MutationOp,
        entity: Optional[Any],
        ids: list[str],
    ) -> SyncResult:
        if not self._syncs_remotely(collection) or not ids:
            return SyncResult(ok=True)

        table = REMOTE_TABLES[collection]
        try:
            if op == MutationOp.ADD:
                await self.remote.insert(table, TO_ROW[collection](entity))
            elif op == MutationOp.UPDATE:
                await self.remote.update(table, ids[0], TO_ROW[collection](entity))
            elif op == MutationOp.DELETE:
                await self.remote.delete(table, ids[0])
            else:
                await self.remote.delete_many(table, ids)
        except RemoteStoreError as e:
            error = SyncError(
                remote_write_failed(collection.value, op.value, str(e)),
                collection=collection.value,
                operation=op.value,
                ids=ids,
            )
            self.last_error = error
            self._mark(collection, ids, SyncState.FAILED)
            logger.warning(
                "remote_write_failed",
                collection=collection.value,
                operation=op.value,
                ids=ids,
                error=str(e),
            )
            return SyncResult(ok=False, remote=True, error=error)

        self._mark(collection, ids, SyncState.SYNCED)
        return SyncResult(ok=True, remote=True)

    async def add(self, collection: Union[Collection, str], entity: Any) -> SyncResult:
        return await self.mutate(collection, MutationOp.ADD, entity)

    async def update(self, collection: Union[Collection, str], entity: Any) -> SyncResult:
        return await self.mutate(collection, MutationOp.UPDATE, entity)

    async def delete(self, collection: Union[Collection, str], entity_id: str) -> SyncResult:
        return await self.mutate(collection, MutationOp.DELETE, entity_id)

    async def delete_many(
        self, collection: Union[Collection, str], ids: Iterable[str]
    ) -> SyncResult:
        return await self.mutate(collection, MutationOp.DELETE_MANY, list(ids))

    async def set_fiscal_year(self, record: domain.FiscalYearRecord) -> SyncResult:
        """Create or replace the manual override for a year."""
        op = MutationOp.UPDATE if self.get(Collection.FISCAL, record.id) else MutationOp.ADD
        return await self.mutate(Collection.FISCAL, op, record)

    async def import_candidates(
        self, records: Sequence[domain.CandidateRecord], account_id: str
    ) -> tuple[list[domain.Transaction], list[SyncResult]]:
        """Normalize extracted candidates and add them as transactions.

        Candidates that cannot be normalized are skipped and logged.
        """
        transactions, rejected = normalize_candidates(records, account_id, self.categories)
        for record, error in rejected:
            logger.info("candidate_rejected", description=record.description, error=str(error))

        results = []
        for txn in transactions:
            results.append(await self.add(Collection.TRANSACTIONS, txn))
        return transactions, results

    # Internals

    def _syncs_remotely(self, collection: Collection) -> bool:
        return collection in REMOTE_TABLES and self.has_remote_session()

    def _write_cache(self, collection: Collection) -> None:
        encode = TO_RECORD[collection]
        self.store.write(collection.value, [encode(item) for item in self._state[collection]])

    def _mark(self, collection: Collection, ids: Iterable[str], state: SyncState) -> None:
        for entity_id in ids:
            self._sync_states[(collection, entity_id)] = state

    def _clear_sync_states(self, collection: Collection) -> None:
        for key in [key for key in self._sync_states if key[0] == collection]:
            del self._sync_states[key]
