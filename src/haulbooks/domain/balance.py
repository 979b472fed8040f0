"""Account and fiscal-year balance calculations."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from haulbooks.domain.entities import (
    BankAccount,
    FiscalYearBalance,
    FiscalYearRecord,
    FiscalYearStatus,
    FiscalYearSummary,
    Transaction,
    TransactionType,
)

ZERO = Decimal("0")


def signed_amount(txn: Transaction, account_id: str) -> Decimal:
    """Return the effect of a transaction on one account's balance.

    A transfer whose source and destination are the same account nets to zero.
    """
    if txn.type == TransactionType.TRANSFER:
        delta = ZERO
        if txn.account_id == account_id:
            delta -= txn.amount
        if txn.to_account_id == account_id:
            delta += txn.amount
        return delta

    if txn.account_id != account_id:
        return ZERO
    if txn.type == TransactionType.INCOME:
        return txn.amount
    return -txn.amount


def current_balance(account: BankAccount, transactions: Iterable[Transaction]) -> Decimal:
    """Derive an account's current balance from its initial balance and the ledger."""
    balance = Decimal(account.initial_balance)
    for txn in transactions:
        balance += signed_amount(txn, account.id)
    return balance


def net_income(transactions: Iterable[Transaction]) -> Decimal:
    """Income minus expense; transfers are ignored."""
    total = ZERO
    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            total += txn.amount
        elif txn.type == TransactionType.EXPENSE:
            total -= txn.amount
    return total


def default_status(year: int, today: Optional[date] = None) -> FiscalYearStatus:
    """The current calendar year is open, every other year closed."""
    today = today or date.today()
    return FiscalYearStatus.OPEN if year == today.year else FiscalYearStatus.CLOSED


class BalanceService:
    """Service deriving balances from the transaction ledger."""

    def __init__(self, fiscal_records: Sequence[FiscalYearRecord] = ()):
        """Initialize balance service.

        Args:
            fiscal_records: Manual fiscal-year overrides
        """
        self.fiscal_records = {record.year: record for record in fiscal_records}

    def current_balance(
        self, account: BankAccount, transactions: Iterable[Transaction]
    ) -> Decimal:
        """Return the current balance of an account."""
        return current_balance(account, transactions)

    def account_balances(
        self, accounts: Sequence[BankAccount], transactions: Sequence[Transaction]
    ) -> dict[str, Decimal]:
        """Return current balances keyed by account ID."""
        balances = {acc.id: Decimal(acc.initial_balance) for acc in accounts}
        for txn in transactions:
            for account_id in {txn.account_id, txn.to_account_id}:
                if account_id in balances:
                    balances[account_id] += signed_amount(txn, account_id)
        return balances

    def system_calculated_balance(
        self, year: int, transactions: Iterable[Transaction]
    ) -> Decimal:
        """Cumulative net income of every transaction dated on or before Dec 31 of year."""
        cutoff = date(year, 12, 31)
        return net_income(txn for txn in transactions if txn.date <= cutoff)

    def fiscal_year_balance(
        self, year: int, transactions: Iterable[Transaction]
    ) -> FiscalYearBalance:
        """Return the system-calculated, manual and effective balance for a year."""
        system_calculated = self.system_calculated_balance(year, transactions)
        record = self.fiscal_records.get(year)
        manual = record.manual_balance if record is not None else None
        return FiscalYearBalance(
            year=year,
            system_calculated=system_calculated,
            manual_override=manual,
            effective=manual if manual is not None else system_calculated,
        )

    def fiscal_year_status(self, year: int, today: Optional[date] = None) -> FiscalYearStatus:
        """Return the stored status for a year, else the derived default."""
        record = self.fiscal_records.get(year)
        if record is not None and record.status is not None:
            return record.status
        return default_status(year, today)

    def fiscal_year_summaries(
        self, transactions: Sequence[Transaction], today: Optional[date] = None
    ) -> list[FiscalYearSummary]:
        """Build per-year statistics for every year present in the ledger, newest first."""
        by_year: dict[int, list[Transaction]] = defaultdict(list)
        for txn in transactions:
            by_year[txn.date.year].append(txn)

        # Running total in ascending order gives every year's cumulative balance.
        summaries = []
        cumulative = ZERO
        for year in sorted(by_year):
            year_txns = by_year[year]
            income = sum(
                (t.amount for t in year_txns if t.type == TransactionType.INCOME), ZERO
            )
            expense = sum(
                (t.amount for t in year_txns if t.type == TransactionType.EXPENSE), ZERO
            )
            cumulative += income - expense

            record = self.fiscal_records.get(year)
            manual = record.manual_balance if record is not None else None
            summaries.append(
                FiscalYearSummary(
                    year=year,
                    income=income,
                    expense=expense,
                    net=income - expense,
                    count=len(year_txns),
                    status=self.fiscal_year_status(year, today),
                    system_calculated_balance=cumulative,
                    effective_balance=manual if manual is not None else cumulative,
                    is_manual=manual is not None,
                    notes=record.notes if record is not None else None,
                )
            )

        return list(reversed(summaries))
