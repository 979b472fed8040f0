"""Mapper functions between domain entities and cached JSON records.

Records are JSON-safe dicts: decimals are stored as strings and dates as
ISO strings. Transactions embed their category and truck so the cache alone
is enough to render the ledger.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from haulbooks.domain import entities as domain
from haulbooks.domain.entities import Collection


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else _decimal(value)


def _optional_date(value: Optional[str]) -> Optional[date]:
    return None if not value else date.fromisoformat(value)


def _optional_iso(value: Optional[date]) -> Optional[str]:
    return None if value is None else value.isoformat()


def entity_to_record(entity: domain.BusinessEntity) -> dict[str, Any]:
    """Convert BusinessEntity to a cache record."""
    return {
        "id": entity.id,
        "name": entity.name,
        "structure": entity.structure.value,
        "tax_form": entity.tax_form,
        "ein": entity.ein,
        "email": entity.email,
        "phone": entity.phone,
        "website": entity.website,
        "address": entity.address,
        "city": entity.city,
        "state": entity.state,
        "zip": entity.zip,
        "logo_url": entity.logo_url,
    }


def record_to_entity(record: dict[str, Any]) -> domain.BusinessEntity:
    """Convert a cache record to BusinessEntity."""
    return domain.BusinessEntity(
        id=record["id"],
        name=record["name"],
        structure=domain.LegalStructure(record["structure"]),
        tax_form=record.get("tax_form") or "",
        ein=record.get("ein"),
        email=record.get("email"),
        phone=record.get("phone"),
        website=record.get("website"),
        address=record.get("address"),
        city=record.get("city"),
        state=record.get("state"),
        zip=record.get("zip"),
        logo_url=record.get("logo_url"),
    )


def account_to_record(account: domain.BankAccount) -> dict[str, Any]:
    """Convert BankAccount to a cache record."""
    return {
        "id": account.id,
        "name": account.name,
        "kind": account.kind.value,
        "initial_balance": str(account.initial_balance),
        "business_entity_id": account.business_entity_id,
    }


def record_to_account(record: dict[str, Any]) -> domain.BankAccount:
    """Convert a cache record to BankAccount."""
    return domain.BankAccount(
        id=record["id"],
        name=record["name"],
        kind=domain.AccountKind(record["kind"]),
        initial_balance=_decimal(record["initial_balance"]),
        business_entity_id=record.get("business_entity_id"),
    )


def category_to_record(category: domain.Category) -> dict[str, Any]:
    """Convert Category to a cache record."""
    return {
        "id": category.id,
        "name": category.name,
        "type": category.type.value,
        "is_tax_deductible": category.is_tax_deductible,
    }


def record_to_category(record: dict[str, Any]) -> domain.Category:
    """Convert a cache record to Category."""
    return domain.Category(
        id=record["id"],
        name=record["name"],
        type=domain.TransactionType(record["type"]),
        is_tax_deductible=record.get("is_tax_deductible"),
    )


def truck_to_record(truck: domain.Truck) -> dict[str, Any]:
    """Convert Truck to a cache record."""
    return {
        "id": truck.id,
        "unit_number": truck.unit_number,
        "make": truck.make,
        "model": truck.model,
        "year": truck.year,
    }


def record_to_truck(record: dict[str, Any]) -> domain.Truck:
    """Convert a cache record to Truck."""
    return domain.Truck(
        id=record["id"],
        unit_number=record["unit_number"],
        make=record["make"],
        model=record["model"],
        year=int(record["year"]),
    )


def transaction_to_record(txn: domain.Transaction) -> dict[str, Any]:
    """Convert Transaction to a cache record with embedded relations."""
    return {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "amount": str(txn.amount),
        "type": txn.type.value,
        "account_id": txn.account_id,
        "to_account_id": txn.to_account_id,
        "category": category_to_record(txn.category) if txn.category else None,
        "to_category": category_to_record(txn.to_category) if txn.to_category else None,
        "truck": truck_to_record(txn.truck) if txn.truck else None,
        "receipts": list(txn.receipts),
    }


def record_to_transaction(record: dict[str, Any]) -> domain.Transaction:
    """Convert a cache record to Transaction."""
    category = record.get("category")
    to_category = record.get("to_category")
    truck = record.get("truck")
    return domain.Transaction(
        id=record["id"],
        date=date.fromisoformat(record["date"]),
        description=record.get("description") or "",
        amount=_decimal(record["amount"]),
        type=domain.TransactionType(record["type"]),
        account_id=record["account_id"],
        to_account_id=record.get("to_account_id"),
        category=record_to_category(category) if category else None,
        to_category=record_to_category(to_category) if to_category else None,
        truck=record_to_truck(truck) if truck else None,
        receipts=tuple(record.get("receipts") or ()),
    )


def load_to_record(load: domain.LoadRecord) -> dict[str, Any]:
    """Convert LoadRecord to a cache record."""
    return {
        "id": load.id,
        "current_location": load.current_location,
        "pickup_location": load.pickup_location,
        "delivery_location": load.delivery_location,
        "miles_to_pickup": str(load.miles_to_pickup),
        "miles_to_delivery": str(load.miles_to_delivery),
        "payment_type": load.payment_type.value,
        "rate": str(load.rate),
        "status": load.status.value,
        "pickup_date": _optional_iso(load.pickup_date),
        "delivery_date": _optional_iso(load.delivery_date),
        "truck_id": load.truck_id,
    }


def record_to_load(record: dict[str, Any]) -> domain.LoadRecord:
    """Convert a cache record to LoadRecord."""
    return domain.LoadRecord(
        id=record["id"],
        current_location=record.get("current_location") or "",
        pickup_location=record["pickup_location"],
        delivery_location=record["delivery_location"],
        miles_to_pickup=_decimal(record["miles_to_pickup"]),
        miles_to_delivery=_decimal(record["miles_to_delivery"]),
        payment_type=domain.PaymentType(record["payment_type"]),
        rate=_decimal(record["rate"]),
        status=domain.LoadStatus(record.get("status") or domain.LoadStatus.PLANNED.value),
        pickup_date=_optional_date(record.get("pickup_date")),
        delivery_date=_optional_date(record.get("delivery_date")),
        truck_id=record.get("truck_id"),
    )


def fiscal_to_record(record: domain.FiscalYearRecord) -> dict[str, Any]:
    """Convert FiscalYearRecord to a cache record."""
    return {
        "year": record.year,
        "status": record.status.value if record.status else None,
        "manual_balance": None if record.manual_balance is None else str(record.manual_balance),
        "notes": record.notes,
    }


def record_to_fiscal(record: dict[str, Any]) -> domain.FiscalYearRecord:
    """Convert a cache record to FiscalYearRecord."""
    status = record.get("status")
    return domain.FiscalYearRecord(
        year=int(record["year"]),
        status=domain.FiscalYearStatus(status) if status else None,
        manual_balance=_optional_decimal(record.get("manual_balance")),
        notes=record.get("notes"),
    )


TO_RECORD: dict[Collection, Callable[[Any], dict[str, Any]]] = {
    Collection.ENTITIES: entity_to_record,
    Collection.ACCOUNTS: account_to_record,
    Collection.CATEGORIES: category_to_record,
    Collection.TRUCKS: truck_to_record,
    Collection.TRANSACTIONS: transaction_to_record,
    Collection.LOADS: load_to_record,
    Collection.FISCAL: fiscal_to_record,
}

FROM_RECORD: dict[Collection, Callable[[dict[str, Any]], Any]] = {
    Collection.ENTITIES: record_to_entity,
    Collection.ACCOUNTS: record_to_account,
    Collection.CATEGORIES: record_to_category,
    Collection.TRUCKS: record_to_truck,
    Collection.TRANSACTIONS: record_to_transaction,
    Collection.LOADS: record_to_load,
    Collection.FISCAL: record_to_fiscal,
}
