"""Shared pytest fixtures for haulbooks tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from haulbooks.config import get_settings
from haulbooks.domain.entities import Category, Transaction, TransactionType
from haulbooks.domain.sync import SyncCoordinator
from haulbooks.remote.base import RemoteStore
from haulbooks.storage.factories import create_sqlite_store


@pytest.fixture(autouse=True)
def reset_settings():
    """Re-read settings from the environment in every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def temp_store():
    """Create a temporary SQLite cache store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def mock_remote():
    """Remote store double with an active session and empty tables."""
    remote = MagicMock(spec=RemoteStore)
    remote.has_session = True
    remote.select = AsyncMock(return_value=[])
    remote.insert = AsyncMock(return_value=None)
    remote.update = AsyncMock(return_value=None)
    remote.delete = AsyncMock(return_value=None)
    remote.delete_many = AsyncMock(return_value=None)
    remote.close = AsyncMock(return_value=None)
    return remote


@pytest.fixture
def coordinator(temp_store):
    """Offline coordinator loaded from a freshly seeded cache."""
    coord = SyncCoordinator(temp_store)
    coord.load_from_cache()
    return coord


@pytest.fixture
def online_coordinator(temp_store, mock_remote):
    """Coordinator with a remote session, loaded from the cache only."""
    coord = SyncCoordinator(temp_store, mock_remote)
    coord.load_from_cache()
    return coord


@pytest.fixture
def cli_runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def fuel_category():
    return Category(id="cat-fuel", name="Fuel", type=TransactionType.EXPENSE, is_tax_deductible=True)


@pytest.fixture
def owner_draw_category():
    return Category(id="cat-draw", name="Owner Draw", type=TransactionType.EXPENSE)


@pytest.fixture
def freight_category():
    return Category(
        id="cat-freight", name="Freight Revenue", type=TransactionType.INCOME, is_tax_deductible=False
    )


def make_transaction(
    txn_id: str,
    amount: str,
    txn_type: TransactionType = TransactionType.EXPENSE,
    on: date = date(2024, 3, 15),
    account_id: str = "acc-1",
    to_account_id: str | None = None,
    category: Category | None = None,
) -> Transaction:
    """Build a transaction with sensible defaults."""
    return Transaction(
        id=txn_id,
        date=on,
        description=f"Transaction {txn_id}",
        amount=Decimal(amount),
        type=txn_type,
        account_id=account_id,
        to_account_id=to_account_id,
        category=category,
    )
