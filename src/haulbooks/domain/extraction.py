"""Normalization of transaction candidates from the text extraction service."""

import uuid
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Sequence

from haulbooks.domain.entities import (
    CandidateRecord,
    Category,
    Transaction,
    TransactionType,
)
from haulbooks.domain.errors import ValidationError, non_positive_amount


class TransactionExtractor(ABC):
    """External service turning raw text into candidate transactions."""

    @abstractmethod
    async def extract(self, text: str) -> list[CandidateRecord]:
        """Extract candidate records from unstructured text."""
        pass


def resolve_type(record: CandidateRecord) -> TransactionType:
    """Determine the transaction type of a candidate.

    A negative amount is always an expense. Otherwise the type hint decides,
    defaulting to expense when the hint is missing or not income.
    """
    if record.amount < 0:
        return TransactionType.EXPENSE
    hint = (record.type_hint or "").strip().lower()
    if hint == TransactionType.INCOME.value.lower():
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def match_category(
    name: Optional[str], txn_type: TransactionType, categories: Sequence[Category]
) -> Optional[Category]:
    """Find a category of the given type by case-insensitive name."""
    if not name:
        return None
    wanted = name.strip().lower()
    for category in categories:
        if category.type == txn_type and category.name.lower() == wanted:
            return category
    return None


def normalize_candidate(
    record: CandidateRecord, account_id: str, categories: Sequence[Category]
) -> Transaction:
    """Convert one candidate into a transaction with a positive amount.

    Raises:
        ValidationError: If the amount is zero
    """
    amount = Decimal(record.amount)
    if amount == 0:
        raise ValidationError(non_positive_amount(amount))

    txn_type = resolve_type(record)
    return Transaction(
        id=str(uuid.uuid4()),
        date=record.date,
        description=record.description,
        amount=abs(amount),
        type=txn_type,
        account_id=account_id,
        category=match_category(record.category_name, txn_type, categories),
    )


def normalize_candidates(
    records: Sequence[CandidateRecord], account_id: str, categories: Sequence[Category]
) -> tuple[list[Transaction], list[tuple[CandidateRecord, ValidationError]]]:
    """Normalize candidates, collecting the ones that cannot be used.

    Returns:
        Tuple of (transactions, rejected candidates with their errors)
    """
    transactions = []
    rejected = []
    for record in records:
        try:
            transactions.append(normalize_candidate(record, account_id, categories))
        except ValidationError as e:
            rejected.append((record, e))
    return transactions, rejected
