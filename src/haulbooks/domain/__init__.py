"""Domain layer for haulbooks application."""

from haulbooks.domain.balance import BalanceService
from haulbooks.domain.report import ReportService
from haulbooks.domain.sync import SyncCoordinator
from haulbooks.domain.tax import is_deductible, schedule_line

__all__ = [
    "BalanceService",
    "ReportService",
    "SyncCoordinator",
    "is_deductible",
    "schedule_line",
]
