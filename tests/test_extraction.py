"""Tests for normalizing extracted transaction candidates."""

from datetime import date
from decimal import Decimal

import pytest

from haulbooks.domain.entities import CandidateRecord, TransactionType
from haulbooks.domain.errors import ValidationError
from haulbooks.domain.extraction import (
    TransactionExtractor,
    match_category,
    normalize_candidate,
    normalize_candidates,
    resolve_type,
)
from haulbooks.domain.seed import default_categories


def _candidate(amount, type_hint=None, category_name=None):
    return CandidateRecord(
        date=date(2024, 6, 1),
        description="Statement line",
        amount=Decimal(amount),
        type_hint=type_hint,
        category_name=category_name,
    )


class TestResolveType:
    def test_negative_is_expense_regardless_of_hint(self):
        assert resolve_type(_candidate("-10", type_hint="income")) == TransactionType.EXPENSE

    def test_income_hint(self):
        assert resolve_type(_candidate("10", type_hint="Income")) == TransactionType.INCOME

    def test_default_is_expense(self):
        assert resolve_type(_candidate("10")) == TransactionType.EXPENSE
        assert resolve_type(_candidate("10", type_hint="refund")) == TransactionType.EXPENSE


class TestNormalize:
    def test_negative_becomes_positive_expense(self):
        txn = normalize_candidate(_candidate("-45.10", category_name="TIRES"), "acc-1",
                                  default_categories())
        assert txn.amount == Decimal("45.10")
        assert txn.type == TransactionType.EXPENSE
        assert txn.category.name == "Tires"
        assert txn.account_id == "acc-1"

    def test_category_must_match_type(self):
        categories = default_categories()
        assert match_category("Fuel", TransactionType.INCOME, categories) is None
        assert match_category("fuel surcharge", TransactionType.INCOME, categories).id == "cat-inc-4"

    def test_unknown_category_is_uncategorized(self):
        txn = normalize_candidate(_candidate("5", category_name="Snacks"), "acc-1", [])
        assert txn.category is None

    def test_zero_rejected(self):
        with pytest.raises(ValidationError):
            normalize_candidate(_candidate("0"), "acc-1", [])

    def test_fresh_ids(self):
        transactions, rejected = normalize_candidates(
            [_candidate("1"), _candidate("2"), _candidate("0")], "acc-1", []
        )
        assert len({t.id for t in transactions}) == 2
        assert len(rejected) == 1
        assert rejected[0][0].amount == Decimal("0")


class TestExtractorInterface:
    @pytest.mark.asyncio
    async def test_subclass(self):
        class StaticExtractor(TransactionExtractor):
            async def extract(self, text):
                return [_candidate("-3")]

        records = await StaticExtractor().extract("ignored")
        assert records[0].amount == Decimal("-3")

    def test_abstract(self):
        with pytest.raises(TypeError):
            TransactionExtractor()
