"""Validation and normalization applied before any cache write."""

import re
from dataclasses import replace
from decimal import Decimal
from typing import Any

from haulbooks.domain import entities as domain
from haulbooks.domain.entities import Collection, TransactionType
from haulbooks.domain.errors import (
    ValidationError,
    invalid_identifier,
    non_positive_amount,
    transfer_missing_destination,
)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}$")

ENTITY_TYPES: dict[Collection, type] = {
    Collection.ENTITIES: domain.BusinessEntity,
    Collection.ACCOUNTS: domain.BankAccount,
    Collection.CATEGORIES: domain.Category,
    Collection.TRUCKS: domain.Truck,
    Collection.TRANSACTIONS: domain.Transaction,
    Collection.LOADS: domain.LoadRecord,
    Collection.FISCAL: domain.FiscalYearRecord,
}


def validate_identifier(value: Any) -> str:
    """Return the identifier if well formed, else raise ValidationError."""
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
        raise ValidationError(invalid_identifier(value))
    return value


def normalize_transaction(txn: domain.Transaction) -> domain.Transaction:
    """Drop fields that do not apply to the transaction type.

    Transfers carry no category or truck; income and expense carry no
    destination account.
    """
    if txn.type == TransactionType.TRANSFER:
        if txn.category is not None or txn.to_category is not None or txn.truck is not None:
            return replace(txn, category=None, to_category=None, truck=None)
        return txn
    if txn.to_account_id is not None:
        return replace(txn, to_account_id=None)
    return txn


def validate_transaction(txn: domain.Transaction) -> domain.Transaction:
    """Validate a transaction and return its normalized form."""
    validate_identifier(txn.id)
    validate_identifier(txn.account_id)
    amount = txn.amount
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount <= 0:
        raise ValidationError(non_positive_amount(amount))
    if txn.type == TransactionType.TRANSFER:
        if not txn.to_account_id:
            raise ValidationError(transfer_missing_destination(txn.id))
        validate_identifier(txn.to_account_id)
    return normalize_transaction(txn)


def validate_category(category: domain.Category) -> domain.Category:
    validate_identifier(category.id)
    if not category.name.strip():
        raise ValidationError("Category name must not be empty")
    if category.type == TransactionType.TRANSFER:
        raise ValidationError("Categories must be Income or Expense, not Transfer")
    return category


def validate_load(load: domain.LoadRecord) -> domain.LoadRecord:
    validate_identifier(load.id)
    for label, value in (
        ("miles to pickup", load.miles_to_pickup),
        ("miles to delivery", load.miles_to_delivery),
        ("rate", load.rate),
    ):
        if value < 0:
            raise ValidationError(f"Load {label} must not be negative, got {value}")
    return load


def validate_truck(truck: domain.Truck) -> domain.Truck:
    validate_identifier(truck.id)
    if not truck.unit_number.strip():
        raise ValidationError("Truck unit number must not be empty")
    return truck


def validate_fiscal(record: domain.FiscalYearRecord) -> domain.FiscalYearRecord:
    if not 1900 <= record.year <= 9999:
        raise ValidationError(f"Fiscal year out of range: {record.year}")
    return record


def validate_entity(collection: Collection, entity: Any) -> Any:
    """Validate an entity for a collection and return its normalized form.

    Raises:
        ValidationError: If the entity is malformed or of the wrong type
    """
    expected = ENTITY_TYPES[collection]
    if not isinstance(entity, expected):
        raise ValidationError(
            f"Expected {expected.__name__} for {collection.value}, got {type(entity).__name__}"
        )

    if collection == Collection.TRANSACTIONS:
        return validate_transaction(entity)
    if collection == Collection.CATEGORIES:
        return validate_category(entity)
    if collection == Collection.LOADS:
        return validate_load(entity)
    if collection == Collection.TRUCKS:
        return validate_truck(entity)
    if collection == Collection.FISCAL:
        return validate_fiscal(entity)

    validate_identifier(entity.id)
    name = getattr(entity, "name", None)
    if name is not None and not name.strip():
        raise ValidationError(f"{collection.value} name must not be empty")
    return entity
