"""Relationship resolver between remote rows and domain entities.

Foreign keys on remote rows (category, truck, account) are joined against
in-memory indexes. A reference to a missing entity is a normal state: the
field is left empty and callers render "Uncategorized"/"Unknown".
"""

from typing import Any, Callable, Mapping, Optional

import structlog

from haulbooks.domain import entities as domain
from haulbooks.domain.entities import Collection
from haulbooks.domain.validation import normalize_transaction
from haulbooks.remote.rows import (
    BankAccountRow,
    BusinessEntityRow,
    CategoryRow,
    LoadRow,
    RemoteRow,
    TransactionRow,
    TruckRow,
    parse_rows,
)
from haulbooks.utils.date_parser import parse_iso_date

logger = structlog.get_logger(__name__)

REMOTE_TABLES: dict[Collection, str] = {
    Collection.ENTITIES: "business_entities",
    Collection.ACCOUNTS: "bank_accounts",
    Collection.CATEGORIES: "categories",
    Collection.TRUCKS: "trucks",
    Collection.LOADS: "loads",
    Collection.TRANSACTIONS: "transactions",
}

ROW_MODELS: dict[Collection, type[RemoteRow]] = {
    Collection.ENTITIES: BusinessEntityRow,
    Collection.ACCOUNTS: BankAccountRow,
    Collection.CATEGORIES: CategoryRow,
    Collection.TRUCKS: TruckRow,
    Collection.LOADS: LoadRow,
    Collection.TRANSACTIONS: TransactionRow,
}


def row_to_entity(row: BusinessEntityRow) -> domain.BusinessEntity:
    """Convert a business_entities row to BusinessEntity."""
    return domain.BusinessEntity(
        id=row.id,
        name=row.name,
        structure=row.structure,
        tax_form=row.tax_form or "",
        ein=row.ein,
        email=row.email,
        phone=row.phone,
        website=row.website,
        address=row.address,
        city=row.city,
        state=row.state,
        zip=row.zip,
        logo_url=row.logo_url,
    )


def row_to_account(row: BankAccountRow) -> domain.BankAccount:
    """Convert a bank_accounts row to BankAccount."""
    return domain.BankAccount(
        id=row.id,
        name=row.name,
        kind=row.type,
        initial_balance=row.initial_balance,
        business_entity_id=row.business_entity_id,
    )


def row_to_category(row: CategoryRow) -> domain.Category:
    """Convert a categories row to Category."""
    return domain.Category(
        id=row.id,
        name=row.name,
        type=row.type,
        is_tax_deductible=row.is_tax_deductible,
    )


def row_to_truck(row: TruckRow) -> domain.Truck:
    """Convert a trucks row to Truck."""
    return domain.Truck(
        id=row.id,
        unit_number=row.unit_number,
        make=row.make,
        model=row.model,
        year=row.year,
    )


def row_to_load(row: LoadRow) -> domain.LoadRecord:
    """Convert a loads row to LoadRecord; totals are re-derived."""
    return domain.LoadRecord(
        id=row.id,
        current_location=row.current_location,
        pickup_location=row.pickup_location,
        delivery_location=row.delivery_location,
        miles_to_pickup=row.miles_to_pickup,
        miles_to_delivery=row.miles_to_delivery,
        payment_type=row.payment_type,
        rate=row.rate,
        status=row.status,
        pickup_date=parse_iso_date(row.pickup_date) if row.pickup_date else None,
        delivery_date=parse_iso_date(row.delivery_date) if row.delivery_date else None,
        truck_id=row.truck_id,
    )


def _lookup(index: Mapping[str, Any], key: Optional[str], kind: str, row_id: str) -> Any:
    if key is None:
        return None
    found = index.get(key)
    if found is None:
        logger.debug("reference_gap", kind=kind, key=key, transaction_id=row_id)
    return found


def resolve(
    row: TransactionRow,
    category_index: Mapping[str, domain.Category],
    account_index: Mapping[str, domain.BankAccount],
    truck_index: Mapping[str, domain.Truck],
) -> domain.Transaction:
    """Resolve a transactions row into a fully populated Transaction.

    Never raises for a missing foreign key.
    """
    _lookup(account_index, row.account_id, "account", row.id)
    _lookup(account_index, row.to_account_id, "account", row.id)
    txn = domain.Transaction(
        id=row.id,
        date=parse_iso_date(row.date),
        description=row.description or "",
        amount=row.amount,
        type=row.type,
        account_id=row.account_id,
        to_account_id=row.to_account_id,
        category=_lookup(category_index, row.category_id, "category", row.id),
        to_category=_lookup(category_index, row.to_category_id, "category", row.id),
        truck=_lookup(truck_index, row.truck_id, "truck", row.id),
        receipts=tuple(row.receipts or ()),
    )
    return normalize_transaction(txn)


def resolve_transaction_rows(
    rows: list[TransactionRow],
    categories: list[domain.Category],
    accounts: list[domain.BankAccount],
    trucks: list[domain.Truck],
) -> list[domain.Transaction]:
    """Resolve every transactions row against the given entities."""
    category_index = {c.id: c for c in categories}
    account_index = {a.id: a for a in accounts}
    truck_index = {t.id: t for t in trucks}
    transactions = []
    for row in rows:
        try:
            transactions.append(resolve(row, category_index, account_index, truck_index))
        except ValueError as e:
            # Unparseable date; the row cannot be placed in the ledger
            logger.warning("remote_row_rejected", table="transactions", row_id=row.id, error=str(e))
    return transactions


ROW_CONVERTERS: dict[Collection, Callable[[Any], Any]] = {
    Collection.ENTITIES: row_to_entity,
    Collection.ACCOUNTS: row_to_account,
    Collection.CATEGORIES: row_to_category,
    Collection.TRUCKS: row_to_truck,
    Collection.LOADS: row_to_load,
}


def resolve_remote_rows(raw: Mapping[Collection, list[Any]]) -> dict[Collection, list[Any]]:
    """Turn raw rows of every remote table into domain entities.

    Referenced collections are resolved first so transactions can be joined
    against them.
    """
    resolved: dict[Collection, list[Any]] = {}
    for collection, convert in ROW_CONVERTERS.items():
        table = REMOTE_TABLES[collection]
        rows = parse_rows(ROW_MODELS[collection], table, raw.get(collection, []))
        entities = []
        for row in rows:
            try:
                entities.append(convert(row))
            except ValueError as e:
                logger.warning("remote_row_rejected", table=table, row_id=row.id, error=str(e))
        resolved[collection] = entities

    transaction_rows = parse_rows(
        TransactionRow, "transactions", raw.get(Collection.TRANSACTIONS, [])
    )
    resolved[Collection.TRANSACTIONS] = resolve_transaction_rows(
        transaction_rows,
        resolved[Collection.CATEGORIES],
        resolved[Collection.ACCOUNTS],
        resolved[Collection.TRUCKS],
    )
    return resolved


def entity_to_row(entity: domain.BusinessEntity) -> dict[str, Any]:
    """Convert BusinessEntity to a business_entities row."""
    return BusinessEntityRow(
        id=entity.id,
        name=entity.name,
        structure=entity.structure,
        tax_form=entity.tax_form,
        ein=entity.ein,
        email=entity.email,
        phone=entity.phone,
        website=entity.website,
        address=entity.address,
        city=entity.city,
        state=entity.state,
        zip=entity.zip,
        logo_url=entity.logo_url,
    ).model_dump(mode="json")


def account_to_row(account: domain.BankAccount) -> dict[str, Any]:
    """Convert BankAccount to a bank_accounts row."""
    return BankAccountRow(
        id=account.id,
        name=account.name,
        type=account.kind,
        initial_balance=account.initial_balance,
        business_entity_id=account.business_entity_id,
    ).model_dump(mode="json")


def category_to_row(category: domain.Category) -> dict[str, Any]:
    """Convert Category to a categories row."""
    return CategoryRow(
        id=category.id,
        name=category.name,
        type=category.type,
        is_tax_deductible=category.is_tax_deductible,
    ).model_dump(mode="json")


def truck_to_row(truck: domain.Truck) -> dict[str, Any]:
    """Convert Truck to a trucks row."""
    return TruckRow(
        id=truck.id,
        unit_number=truck.unit_number,
        make=truck.make,
        model=truck.model,
        year=truck.year,
    ).model_dump(mode="json")


def load_to_row(load: domain.LoadRecord) -> dict[str, Any]:
    """Convert LoadRecord to a loads row including the derived totals."""
    return LoadRow(
        id=load.id,
        current_location=load.current_location,
        pickup_location=load.pickup_location,
        delivery_location=load.delivery_location,
        miles_to_pickup=load.miles_to_pickup,
        miles_to_delivery=load.miles_to_delivery,
        total_miles=load.total_miles,
        payment_type=load.payment_type,
        rate=load.rate,
        total_revenue=load.total_revenue,
        status=load.status,
        pickup_date=load.pickup_date.isoformat() if load.pickup_date else None,
        delivery_date=load.delivery_date.isoformat() if load.delivery_date else None,
        truck_id=load.truck_id,
    ).model_dump(mode="json")


def transaction_to_row(txn: domain.Transaction) -> dict[str, Any]:
    """Convert Transaction to a transactions row with foreign keys."""
    return TransactionRow(
        id=txn.id,
        date=txn.date.isoformat(),
        description=txn.description,
        amount=txn.amount,
        type=txn.type,
        account_id=txn.account_id,
        to_account_id=txn.to_account_id,
        category_id=txn.category.id if txn.category else None,
        to_category_id=txn.to_category.id if txn.to_category else None,
        truck_id=txn.truck.id if txn.truck else None,
        receipts=list(txn.receipts),
    ).model_dump(mode="json")


TO_ROW: dict[Collection, Callable[[Any], dict[str, Any]]] = {
    Collection.ENTITIES: entity_to_row,
    Collection.ACCOUNTS: account_to_row,
    Collection.CATEGORIES: category_to_row,
    Collection.TRUCKS: truck_to_row,
    Collection.LOADS: load_to_row,
    Collection.TRANSACTIONS: transaction_to_row,
}
