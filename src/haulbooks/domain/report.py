"""Report aggregation domain service."""

from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence, Iterable

from haulbooks.domain.entities import (
    ReportBucket,
    ReportGroupBy,
    ScheduleCSummary,
    Transaction,
    TransactionType,
)
from haulbooks.domain.tax import is_deductible, schedule_c_line_order, schedule_line

ZERO = Decimal("0")


def quarter_of(month: int) -> int:
    """Return the calendar quarter (1-4) of a month."""
    return (month - 1) // 3 + 1


def period_key(txn: Transaction, group_by: ReportGroupBy) -> str:
    """Return the bucket key of a transaction for a grouping."""
    if group_by == ReportGroupBy.MONTH:
        return txn.date.strftime("%Y-%m")
    if group_by == ReportGroupBy.QUARTER:
        return f"{txn.date.year}-Q{quarter_of(txn.date.month)}"
    return str(txn.date.year)


def period_keys_for_year(year: int, group_by: ReportGroupBy) -> list[str]:
    """Return every bucket key of a year, in order."""
    if group_by == ReportGroupBy.MONTH:
        return [f"{year}-{month:02d}" for month in range(1, 13)]
    if group_by == ReportGroupBy.QUARTER:
        return [f"{year}-Q{quarter}" for quarter in range(1, 5)]
    return [str(year)]


class ReportService:
    """Service for building grouped ledger reports."""

    def filter_transactions(
        self,
        transactions: Iterable[Transaction],
        year: Optional[int] = None,
        account_ids: Optional[Iterable[str]] = None,
    ) -> list[Transaction]:
        """Filter transactions by year and source account."""
        allowed = set(account_ids) if account_ids is not None else None
        result = []
        for txn in transactions:
            if year is not None and txn.date.year != year:
                continue
            if allowed is not None and txn.account_id not in allowed:
                continue
            result.append(txn)
        return result

    def add_to_bucket(self, bucket: ReportBucket, txn: Transaction) -> ReportBucket:
        """Return bucket with one transaction folded in.

        Transfers move money between accounts and contribute to no total.
        """
        if txn.type == TransactionType.INCOME:
            return replace(bucket, income=bucket.income + txn.amount, count=bucket.count + 1)
        if txn.type == TransactionType.EXPENSE:
            if is_deductible(txn.category):
                return replace(
                    bucket,
                    expense=bucket.expense + txn.amount,
                    deductions=bucket.deductions + txn.amount,
                    count=bucket.count + 1,
                )
            return replace(
                bucket,
                expense=bucket.expense + txn.amount,
                distributions=bucket.distributions + txn.amount,
                count=bucket.count + 1,
            )
        return bucket

    def aggregate(
        self,
        transactions: Sequence[Transaction],
        group_by: ReportGroupBy = ReportGroupBy.MONTH,
        filter_year: Optional[int] = None,
    ) -> list[ReportBucket]:
        """Group ledger totals by month, quarter or year.

        Args:
            transactions: Ledger transactions
            group_by: Period grouping
            filter_year: If set, only that year is reported and every period
                of it is emitted even when empty

        Returns:
            Buckets in ascending period order
        """
        buckets: dict[str, ReportBucket] = {}
        if filter_year is not None:
            for key in period_keys_for_year(filter_year, group_by):
                buckets[key] = ReportBucket(key=key)

        for txn in self.filter_transactions(transactions, year=filter_year):
            key = period_key(txn, group_by)
            bucket = buckets.get(key) or ReportBucket(key=key)
            buckets[key] = self.add_to_bucket(bucket, txn)

        return [buckets[key] for key in sorted(buckets)]

    def totals(self, buckets: Iterable[ReportBucket], key: str = "total") -> ReportBucket:
        """Sum a sequence of buckets into one."""
        total = ReportBucket(key=key)
        for bucket in buckets:
            total = replace(
                total,
                income=total.income + bucket.income,
                expense=total.expense + bucket.expense,
                deductions=total.deductions + bucket.deductions,
                distributions=total.distributions + bucket.distributions,
                count=total.count + bucket.count,
            )
        return total

    def schedule_c_summary(
        self,
        transactions: Sequence[Transaction],
        year: int,
        account_ids: Optional[Iterable[str]] = None,
    ) -> ScheduleCSummary:
        """Build Schedule C figures for a year.

        Non-deductible expenses are reported as distributions and never reach
        a Schedule C line.
        """
        filtered = self.filter_transactions(transactions, year=year, account_ids=account_ids)

        gross = ZERO
        distributions = ZERO
        line_totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in filtered:
            if txn.type == TransactionType.INCOME:
                gross += txn.amount
            elif txn.type == TransactionType.EXPENSE:
                if is_deductible(txn.category):
                    line = schedule_line(txn.category.name if txn.category else None)
                    line_totals[line] += txn.amount
                else:
                    distributions += txn.amount

        lines = {
            line: line_totals[line]
            for line in schedule_c_line_order()
            if line in line_totals
        }
        return ScheduleCSummary(
            year=year,
            gross_receipts=gross,
            lines=lines,
            total_deductions=sum(lines.values(), ZERO),
            distributions=distributions,
        )
