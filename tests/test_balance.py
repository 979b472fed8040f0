"""Tests for balance calculation."""

from datetime import date
from decimal import Decimal

from haulbooks.domain.balance import BalanceService, default_status, signed_amount
from haulbooks.domain.entities import (
    AccountKind,
    BankAccount,
    FiscalYearRecord,
    FiscalYearStatus,
    TransactionType,
)

from conftest import make_transaction


def _account(account_id="acc-1", initial="1000"):
    return BankAccount(
        id=account_id, name=account_id, kind=AccountKind.CHECKING, initial_balance=Decimal(initial)
    )


class TestCurrentBalance:
    """Tests for account balances."""

    def test_income_and_expense(self):
        account = _account()
        txns = [
            make_transaction("t1", "500", TransactionType.INCOME),
            make_transaction("t2", "200", TransactionType.EXPENSE),
        ]
        assert BalanceService().current_balance(account, txns) == Decimal("1300")

    def test_transfer_moves_money_between_accounts(self):
        a = _account("acc-a", "1000")
        b = _account("acc-b", "0")
        txns = [
            make_transaction(
                "t1", "250", TransactionType.TRANSFER, account_id="acc-a", to_account_id="acc-b"
            )
        ]
        balances = BalanceService().account_balances([a, b], txns)
        assert balances == {"acc-a": Decimal("750"), "acc-b": Decimal("250")}

    def test_transfer_to_same_account_nets_to_zero(self):
        account = _account()
        txn = make_transaction(
            "t1", "300", TransactionType.TRANSFER, account_id="acc-1", to_account_id="acc-1"
        )
        assert signed_amount(txn, "acc-1") == Decimal("0")
        assert BalanceService().current_balance(account, [txn]) == Decimal("1000")

    def test_other_accounts_ignored(self):
        account = _account()
        txns = [make_transaction("t1", "99", TransactionType.EXPENSE, account_id="acc-2")]
        assert BalanceService().current_balance(account, txns) == Decimal("1000")

    def test_independent_of_order(self):
        account = _account()
        txns = [
            make_transaction("t1", "75", TransactionType.INCOME),
            make_transaction("t2", "20", TransactionType.EXPENSE),
            make_transaction(
                "t3", "40", TransactionType.TRANSFER, account_id="acc-9", to_account_id="acc-1"
            ),
        ]
        service = BalanceService()
        assert service.current_balance(account, txns) == service.current_balance(
            account, list(reversed(txns))
        ) == Decimal("1095")

    def test_account_balances_match_current_balance(self):
        accounts = [_account("acc-1", "100"), _account("acc-2", "50")]
        txns = [
            make_transaction("t1", "40", TransactionType.INCOME, account_id="acc-2"),
            make_transaction(
                "t2", "30", TransactionType.TRANSFER, account_id="acc-1", to_account_id="acc-2"
            ),
            make_transaction("t3", "10", TransactionType.EXPENSE, account_id="acc-1"),
        ]
        service = BalanceService()
        balances = service.account_balances(accounts, txns)
        for acc in accounts:
            assert balances[acc.id] == service.current_balance(acc, txns)
        assert balances == {"acc-1": Decimal("60"), "acc-2": Decimal("120")}


class TestFiscalYears:
    """Tests for cumulative fiscal-year balances and status."""

    def _ledger(self):
        return [
            make_transaction("t1", "1000", TransactionType.INCOME, on=date(2022, 6, 1)),
            make_transaction("t2", "400", TransactionType.EXPENSE, on=date(2022, 12, 31)),
            make_transaction("t3", "2000", TransactionType.INCOME, on=date(2023, 1, 1)),
            make_transaction(
                "t4", "5000", TransactionType.TRANSFER, on=date(2023, 2, 1), to_account_id="acc-3"
            ),
            make_transaction("t5", "500", TransactionType.EXPENSE, on=date(2024, 3, 1)),
        ]

    def test_system_balance_is_cumulative(self):
        service = BalanceService()
        ledger = self._ledger()
        assert service.system_calculated_balance(2022, ledger) == Decimal("600")
        assert service.system_calculated_balance(2023, ledger) == Decimal("2600")
        assert service.system_calculated_balance(2024, ledger) == Decimal("2100")

    def test_year_before_ledger_is_zero(self):
        assert BalanceService().system_calculated_balance(2020, self._ledger()) == Decimal("0")

    def test_manual_override_wins(self):
        service = BalanceService([FiscalYearRecord(year=2023, manual_balance=Decimal("3000"))])
        balance = service.fiscal_year_balance(2023, self._ledger())
        assert balance.system_calculated == Decimal("2600")
        assert balance.manual_override == Decimal("3000")
        assert balance.effective == Decimal("3000")

    def test_without_override_effective_is_calculated(self):
        balance = BalanceService().fiscal_year_balance(2022, self._ledger())
        assert balance.manual_override is None
        assert balance.effective == Decimal("600")

    def test_default_status(self):
        today = date(2024, 7, 4)
        assert default_status(2024, today) == FiscalYearStatus.OPEN
        assert default_status(2023, today) == FiscalYearStatus.CLOSED
        assert default_status(2025, today) == FiscalYearStatus.CLOSED

    def test_stored_status_wins(self):
        service = BalanceService([FiscalYearRecord(year=2023, status=FiscalYearStatus.OPEN)])
        assert service.fiscal_year_status(2023, date(2024, 1, 1)) == FiscalYearStatus.OPEN
        assert service.fiscal_year_status(2022, date(2024, 1, 1)) == FiscalYearStatus.CLOSED

    def test_summaries_newest_first(self):
        service = BalanceService(
            [FiscalYearRecord(year=2022, manual_balance=Decimal("650"), notes="Per CPA")]
        )
        summaries = service.fiscal_year_summaries(self._ledger(), today=date(2024, 5, 1))

        assert [s.year for s in summaries] == [2024, 2023, 2022]
        latest, middle, oldest = summaries
        assert latest.status == FiscalYearStatus.OPEN
        assert latest.system_calculated_balance == Decimal("2100")
        assert middle.income == Decimal("2000")
        assert middle.expense == Decimal("0")
        assert middle.count == 2
        assert oldest.net == Decimal("600")
        assert oldest.is_manual is True
        assert oldest.effective_balance == Decimal("650")
        assert oldest.notes == "Per CPA"
