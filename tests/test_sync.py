"""Tests for the sync coordinator."""

from datetime import date
from decimal import Decimal

import httpx
import pytest

from haulbooks.domain.balance import current_balance
from haulbooks.domain.entities import (
    CandidateRecord,
    Category,
    Collection,
    FiscalYearRecord,
    FiscalYearStatus,
    TransactionType,
)
from haulbooks.domain.errors import NotFoundError, SyncError, ValidationError
from haulbooks.domain.sync import ConnectionState, SyncCoordinator, SyncState
from haulbooks.remote.base import RemoteStoreError
from haulbooks.remote.postgrest import PostgrestRemoteStore
from haulbooks.storage.mappers import transaction_to_record

from conftest import make_transaction


def _remote_tables(**tables):
    """Side effect for select() returning rows per table name."""

    async def select(table):
        return tables.get(table, [])

    return select


class TestLoadFromCache:
    """Tests for cache-first loading."""

    def test_empty_cache_is_seeded(self, temp_store):
        coordinator = SyncCoordinator(temp_store)
        coordinator.load_from_cache()

        assert [a.id for a in coordinator.accounts] == ["acc-1", "acc-2", "acc-3"]
        assert len(coordinator.categories) == 19
        assert len(coordinator.trucks) == 4
        assert coordinator.transactions == []
        assert temp_store.read("accounts") is not None
        assert temp_store.read("transactions") is None

    def test_cached_records_are_used(self, temp_store):
        txn = make_transaction("t1", "42.50")
        temp_store.write("transactions", [transaction_to_record(txn)])

        coordinator = SyncCoordinator(temp_store)
        coordinator.load_from_cache()

        assert coordinator.transactions == [txn]

    def test_empty_collection_is_reseeded(self, temp_store):
        temp_store.write("trucks", [])
        coordinator = SyncCoordinator(temp_store)
        coordinator.load_from_cache()
        assert len(coordinator.trucks) == 4

    @pytest.mark.asyncio
    async def test_load_without_remote_is_offline(self, temp_store):
        coordinator = SyncCoordinator(temp_store)
        assert await coordinator.load() == ConnectionState.OFFLINE
        assert coordinator.loaded is True


class TestRemoteRefresh:
    """Tests for refreshing state from the remote store."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_state_and_cache(self, temp_store, mock_remote):
        mock_remote.select.side_effect = _remote_tables(
            bank_accounts=[
                {"id": "acc-r", "name": "Remote Checking", "type": "Checking", "initial_balance": 10}
            ],
            categories=[{"id": "cat-r", "name": "Fuel", "type": "Expense"}],
            trucks=[{"id": "truck-r", "unit_number": "R-1"}],
            transactions=[
                {
                    "id": "txn-r",
                    "date": "2024-04-01",
                    "description": "Diesel",
                    "amount": "120.50",
                    "type": "Expense",
                    "account_id": "acc-r",
                    "category_id": "cat-r",
                    "truck_id": "truck-missing",
                }
            ],
        )
        coordinator = SyncCoordinator(temp_store, mock_remote)

        state = await coordinator.load()

        assert state == ConnectionState.CONNECTED
        assert mock_remote.select.await_count == 6
        (txn,) = coordinator.transactions
        assert txn.category.name == "Fuel"
        assert txn.truck is None
        assert txn.truck_label == "Unknown"
        assert txn.amount == Decimal("120.50")
        assert [a.id for a in coordinator.accounts] == ["acc-r"]
        assert temp_store.read("transactions")[0]["id"] == "txn-r"

    @pytest.mark.asyncio
    async def test_non_positive_remote_amounts_are_dropped(self, temp_store, mock_remote):
        mock_remote.select.side_effect = _remote_tables(
            bank_accounts=[
                {"id": "acc-r", "name": "Checking", "type": "Checking", "initial_balance": "1000"}
            ],
            transactions=[
                {"id": "t1", "date": "2024-04-01", "amount": "200", "type": "Expense",
                 "account_id": "acc-r"},
                {"id": "t2", "date": "2024-04-02", "amount": "-200", "type": "Expense",
                 "account_id": "acc-r"},
                {"id": "t3", "date": "2024-04-03", "amount": "0", "type": "Income",
                 "account_id": "acc-r"},
            ],
        )
        coordinator = SyncCoordinator(temp_store, mock_remote)

        assert await coordinator.load() == ConnectionState.CONNECTED

        (account,) = coordinator.accounts
        assert current_balance(account, coordinator.transactions) == Decimal("800")
        assert [Decimal(r["amount"]) for r in temp_store.read("transactions")] == [Decimal("200")]

    @pytest.mark.asyncio
    async def test_partial_read_failure_keeps_cache(self, temp_store, mock_remote):
        temp_store.write("transactions", [transaction_to_record(make_transaction("t1", "10"))])
        tables = _remote_tables(trucks=[{"id": "truck-r", "unit_number": "R-1"}])

        async def select(table):
            if table == "loads":
                raise RemoteStoreError("loads timed out")
            return await tables(table)

        mock_remote.select.side_effect = select
        coordinator = SyncCoordinator(temp_store, mock_remote)

        state = await coordinator.load()

        assert state == ConnectionState.DISCONNECTED
        assert mock_remote.select.await_count == 6
        assert [t.id for t in coordinator.transactions] == ["t1"]
        assert len(coordinator.trucks) == 4
        assert "loads timed out" in str(coordinator.last_error)

    @pytest.mark.asyncio
    async def test_unexpected_read_error_propagates(self, temp_store, mock_remote):
        mock_remote.select.side_effect = RuntimeError("bug")
        coordinator = SyncCoordinator(temp_store, mock_remote)

        with pytest.raises(RuntimeError):
            await coordinator.load()

    @pytest.mark.asyncio
    async def test_non_json_response_is_disconnected(self, temp_store):
        temp_store.write("transactions", [transaction_to_record(make_transaction("t1", "10"))])
        remote = PostgrestRemoteStore(
            base_url="https://example.supabase.co/",
            api_key="anon-key-0123456789abcdef",
            access_token="session-token",
            timeout=5,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, text="<html>portal</html>")
            ),
        )
        coordinator = SyncCoordinator(temp_store, remote)

        async with remote:
            state = await coordinator.load()

        assert state == ConnectionState.DISCONNECTED
        assert [t.id for t in coordinator.transactions] == ["t1"]

    @pytest.mark.asyncio
    async def test_read_failure_keeps_cache(self, temp_store, mock_remote):
        temp_store.write("transactions", [transaction_to_record(make_transaction("t1", "10"))])
        mock_remote.select.side_effect = RemoteStoreError("boom", status_code=503)
        coordinator = SyncCoordinator(temp_store, mock_remote)

        state = await coordinator.load()

        assert state == ConnectionState.DISCONNECTED
        assert [t.id for t in coordinator.transactions] == ["t1"]
        assert isinstance(coordinator.last_error, SyncError)

    @pytest.mark.asyncio
    async def test_remote_without_session_is_not_queried(self, temp_store, mock_remote):
        mock_remote.has_session = False
        coordinator = SyncCoordinator(temp_store, mock_remote)

        assert await coordinator.load() == ConnectionState.OFFLINE
        mock_remote.select.assert_not_awaited()


class TestMutations:
    """Tests for optimistic local-first mutations."""

    @pytest.mark.asyncio
    async def test_add_without_remote_is_local_only(self, coordinator):
        result = await coordinator.add(Collection.TRANSACTIONS, make_transaction("t1", "10"))

        assert result.ok is True
        assert result.remote is False
        assert coordinator.sync_state(Collection.TRANSACTIONS, "t1") == SyncState.LOCAL_ONLY
        assert coordinator.store.read("transactions")[0]["id"] == "t1"

    @pytest.mark.asyncio
    async def test_add_persists_remote_row(self, online_coordinator, mock_remote, fuel_category):
        txn = make_transaction("t1", "88.10", category=fuel_category)
        result = await online_coordinator.add(Collection.TRANSACTIONS, txn)

        assert result.ok is True
        assert result.remote is True
        table, row = mock_remote.insert.await_args.args
        assert table == "transactions"
        assert row["category_id"] == "cat-fuel"
        assert row["amount"] == "88.10"
        assert "category" not in row
        assert online_coordinator.sync_state(Collection.TRANSACTIONS, "t1") == SyncState.SYNCED

    @pytest.mark.asyncio
    async def test_cache_written_before_remote_call(self, online_coordinator, mock_remote):
        seen = []

        async def insert(table, row):
            seen.append([r["id"] for r in online_coordinator.store.read("transactions")])

        mock_remote.insert.side_effect = insert
        await online_coordinator.add(Collection.TRANSACTIONS, make_transaction("t1", "5"))

        assert seen == [["t1"]]

    @pytest.mark.asyncio
    async def test_remote_write_failure_keeps_local_change(self, online_coordinator, mock_remote):
        mock_remote.insert.side_effect = RemoteStoreError("HTTP 500", status_code=500)

        result = await online_coordinator.add(
            Collection.TRANSACTIONS, make_transaction("t1", "5")
        )

        assert result.ok is False
        assert isinstance(result.error, SyncError)
        assert result.error.ids == ("t1",)
        assert [t.id for t in online_coordinator.transactions] == ["t1"]
        assert online_coordinator.store.read("transactions")[0]["id"] == "t1"
        assert online_coordinator.failed_entities() == [(Collection.TRANSACTIONS, "t1")]

    @pytest.mark.asyncio
    async def test_invalid_payload_leaves_cache_untouched(self, coordinator):
        with pytest.raises(ValidationError):
            await coordinator.add(Collection.TRANSACTIONS, make_transaction("t1", "0"))
        with pytest.raises(ValidationError):
            await coordinator.add(Collection.TRANSACTIONS, make_transaction("bad id!", "5"))
        with pytest.raises(ValidationError):
            await coordinator.add(
                Collection.TRANSACTIONS, make_transaction("t2", "5", TransactionType.TRANSFER)
            )

        assert coordinator.transactions == []
        assert coordinator.store.read("transactions") is None

    @pytest.mark.asyncio
    async def test_wrong_entity_type_rejected(self, coordinator, fuel_category):
        with pytest.raises(ValidationError):
            await coordinator.add(Collection.TRANSACTIONS, fuel_category)

    @pytest.mark.asyncio
    async def test_duplicate_add_rejected(self, coordinator):
        await coordinator.add(Collection.TRANSACTIONS, make_transaction("t1", "5"))
        with pytest.raises(ValidationError):
            await coordinator.add(Collection.TRANSACTIONS, make_transaction("t1", "7"))

    @pytest.mark.asyncio
    async def test_update_and_delete(self, online_coordinator, mock_remote):
        await online_coordinator.add(Collection.TRANSACTIONS, make_transaction("t1", "5"))
        await online_coordinator.update(Collection.TRANSACTIONS, make_transaction("t1", "9"))

        assert online_coordinator.get(Collection.TRANSACTIONS, "t1").amount == Decimal("9")
        assert mock_remote.update.await_args.args[:2] == ("transactions", "t1")

        await online_coordinator.delete(Collection.TRANSACTIONS, "t1")
        assert online_coordinator.transactions == []
        mock_remote.delete.assert_awaited_once_with("transactions", "t1")

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, coordinator):
        with pytest.raises(NotFoundError):
            await coordinator.update(Collection.TRANSACTIONS, make_transaction("nope", "5"))
        with pytest.raises(NotFoundError):
            await coordinator.delete(Collection.TRANSACTIONS, "nope")

    @pytest.mark.asyncio
    async def test_transfer_is_normalized(self, coordinator, fuel_category):
        txn = make_transaction(
            "t1", "5", TransactionType.TRANSFER, to_account_id="acc-3", category=fuel_category
        )
        await coordinator.add(Collection.TRANSACTIONS, txn)
        assert coordinator.get(Collection.TRANSACTIONS, "t1").category is None

    @pytest.mark.asyncio
    async def test_category_names_required(self, coordinator):
        blank = Category(id="cat-x", name="  ", type=TransactionType.EXPENSE)
        with pytest.raises(ValidationError):
            await coordinator.add(Collection.CATEGORIES, blank)


class TestBatchDelete:
    """Tests for deleting many entities at once."""

    @pytest.mark.asyncio
    async def test_single_remote_call(self, online_coordinator, mock_remote):
        ids = [f"t{i}" for i in range(5)]
        for txn_id in ids + ["keep"]:
            await online_coordinator.add(Collection.TRANSACTIONS, make_transaction(txn_id, "1"))

        result = await online_coordinator.delete_many(Collection.TRANSACTIONS, ids + ["t0"])

        assert result.ok is True
        mock_remote.delete_many.assert_awaited_once_with("transactions", ids)
        mock_remote.delete.assert_not_awaited()
        assert [t.id for t in online_coordinator.transactions] == ["keep"]
        assert [r["id"] for r in online_coordinator.store.read("transactions")] == ["keep"]

    @pytest.mark.asyncio
    async def test_failure_marks_every_id(self, online_coordinator, mock_remote):
        for txn_id in ("a1", "a2"):
            await online_coordinator.add(Collection.TRANSACTIONS, make_transaction(txn_id, "1"))
        mock_remote.delete_many.side_effect = RemoteStoreError("timeout")

        result = await online_coordinator.delete_many(Collection.TRANSACTIONS, ["a1", "a2"])

        assert result.ok is False
        assert online_coordinator.transactions == []
        assert sorted(online_coordinator.failed_entities()) == [
            (Collection.TRANSACTIONS, "a1"),
            (Collection.TRANSACTIONS, "a2"),
        ]

    @pytest.mark.asyncio
    async def test_bare_string_rejected(self, coordinator):
        with pytest.raises(ValidationError):
            await coordinator.mutate(Collection.TRANSACTIONS, "delete_many", "t1")


class TestFiscalYears:
    """Tests for fiscal-year overrides, which never leave the device."""

    @pytest.mark.asyncio
    async def test_set_fiscal_year_upserts_locally(self, online_coordinator, mock_remote):
        record = FiscalYearRecord(year=2023, status=FiscalYearStatus.CLOSED)
        result = await online_coordinator.set_fiscal_year(record)
        assert result.ok is True
        assert result.remote is False

        await online_coordinator.set_fiscal_year(
            FiscalYearRecord(year=2023, manual_balance=Decimal("100"))
        )

        (stored,) = online_coordinator.fiscal_records
        assert stored.manual_balance == Decimal("100")
        assert online_coordinator.sync_state(Collection.FISCAL, "2023") == SyncState.LOCAL_ONLY
        mock_remote.insert.assert_not_awaited()
        mock_remote.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_out_of_range_year(self, coordinator):
        with pytest.raises(ValidationError):
            await coordinator.set_fiscal_year(FiscalYearRecord(year=12))


class TestImportCandidates:
    """Tests for importing extracted candidates."""

    @pytest.mark.asyncio
    async def test_import(self, coordinator):
        records = [
            CandidateRecord(date=date(2024, 1, 2), description="Pilot", amount=Decimal("-80"),
                            category_name="fuel"),
            CandidateRecord(date=date(2024, 1, 3), description="Broker", amount=Decimal("900"),
                            type_hint="income", category_name="Freight Revenue"),
            CandidateRecord(date=date(2024, 1, 4), description="Void", amount=Decimal("0")),
        ]

        transactions, results = await coordinator.import_candidates(records, "acc-1")

        assert len(transactions) == 2
        assert all(r.ok for r in results)
        fuel, freight = coordinator.transactions
        assert fuel.type == TransactionType.EXPENSE
        assert fuel.amount == Decimal("80")
        assert fuel.category.id == "cat-exp-1"
        assert freight.type == TransactionType.INCOME
        assert freight.category.id == "cat-inc-1"
