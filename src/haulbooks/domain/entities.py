"""Domain model entities for haulbooks.

These are pure data classes representing business concepts, independent of
both the local cache layout and the remote table schema. Updates replace an
entity by id, so every entity is immutable.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Kind of ledger transaction."""

    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"


class LegalStructure(str, Enum):
    """Legal structure of a business entity."""

    SOLE_PROPRIETORSHIP = "Sole Proprietorship"
    LLC_SINGLE_MEMBER = "LLC (Single Member)"
    LLC_MULTI_MEMBER = "LLC (Multi-Member)"
    S_CORP = "S-Corp"
    C_CORP = "C-Corp"
    PARTNERSHIP = "Partnership"


class AccountKind(str, Enum):
    """Bank account kind."""

    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT_CARD = "Credit Card"


class PaymentType(str, Enum):
    """How a load is paid."""

    PER_MILE = "Per Mile"
    FLAT_LOAD = "Flat Load"


class LoadStatus(str, Enum):
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    DELIVERED = "Delivered"
    PAID = "Paid"


class FiscalYearStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"


class Collection(str, Enum):
    """Logical collection names, also used as local cache keys."""

    ENTITIES = "entities"
    ACCOUNTS = "accounts"
    CATEGORIES = "categories"
    TRUCKS = "trucks"
    TRANSACTIONS = "transactions"
    LOADS = "loads"
    FISCAL = "fiscal"


class ReportGroupBy(str, Enum):
    """Period grouping for report buckets."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class BusinessEntity:
    """Business entity owning zero or more bank accounts.

    ``tax_form`` is derived from ``structure`` when left empty.
    """

    id: str
    name: str
    structure: LegalStructure
    tax_form: str = ""
    ein: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    logo_url: Optional[str] = None

    def __post_init__(self):
        if not self.tax_form:
            from haulbooks.domain.tax import tax_form_for_structure

            object.__setattr__(self, "tax_form", tax_form_for_structure(self.structure))


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: str
    name: str
    kind: AccountKind
    initial_balance: Decimal
    business_entity_id: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """Income or expense category.

    ``is_tax_deductible`` is None when no explicit flag was stored.
    """

    id: str
    name: str
    type: TransactionType
    is_tax_deductible: Optional[bool] = None


@dataclass(frozen=True)
class Truck:
    """Truck used for cost-center attribution."""

    id: str
    unit_number: str
    make: str
    model: str
    year: int


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction.

    ``amount`` is always positive; direction follows from ``type`` and from
    which of ``account_id``/``to_account_id`` matches the account in question.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    type: TransactionType
    account_id: str
    to_account_id: Optional[str] = None
    category: Optional[Category] = None
    to_category: Optional[Category] = None
    truck: Optional[Truck] = None
    receipts: tuple[str, ...] = ()

    @property
    def category_name(self) -> str:
        return self.category.name if self.category is not None else "Uncategorized"

    @property
    def truck_label(self) -> str:
        return self.truck.unit_number if self.truck is not None else "Unknown"


@dataclass(frozen=True)
class LoadRecord:
    """Freight leg with derived mileage and revenue."""

    id: str
    current_location: str
    pickup_location: str
    delivery_location: str
    miles_to_pickup: Decimal
    miles_to_delivery: Decimal
    payment_type: PaymentType
    rate: Decimal
    status: LoadStatus = LoadStatus.PLANNED
    pickup_date: Optional[date] = None
    delivery_date: Optional[date] = None
    truck_id: Optional[str] = None

    @property
    def total_miles(self) -> Decimal:
        return self.miles_to_pickup + self.miles_to_delivery

    @property
    def total_revenue(self) -> Decimal:
        if self.payment_type == PaymentType.PER_MILE:
            return self.total_miles * self.rate
        return self.rate

    @property
    def rate_per_mile(self) -> Decimal:
        miles = self.total_miles
        if miles <= 0:
            return Decimal("0")
        return self.total_revenue / miles


@dataclass(frozen=True)
class FiscalYearRecord:
    """Manual override for one fiscal year.

    Missing fields fall back to derived values (see BalanceService).
    """

    year: int
    status: Optional[FiscalYearStatus] = None
    manual_balance: Optional[Decimal] = None
    notes: Optional[str] = None

    @property
    def id(self) -> str:
        return str(self.year)


@dataclass(frozen=True)
class FiscalYearBalance:
    """Balance for a fiscal year as of December 31."""

    year: int
    system_calculated: Decimal
    manual_override: Optional[Decimal]
    effective: Decimal


@dataclass(frozen=True)
class FiscalYearSummary:
    """Per-year ledger statistics for the fiscal-year overview."""

    year: int
    income: Decimal
    expense: Decimal
    net: Decimal
    count: int
    status: FiscalYearStatus
    system_calculated_balance: Decimal
    effective_balance: Decimal
    is_manual: bool
    notes: Optional[str] = None


@dataclass(frozen=True)
class ReportBucket:
    """Grouped sums for one reporting period.

    ``expense`` holds every expense; ``deductions`` and ``distributions``
    split it by deductibility.
    """

    key: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    distributions: Decimal = Decimal("0")
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class ScheduleCSummary:
    """Schedule C figures for one tax year."""

    year: int
    gross_receipts: Decimal
    lines: dict[str, Decimal] = field(default_factory=dict)
    total_deductions: Decimal = Decimal("0")
    distributions: Decimal = Decimal("0")

    @property
    def net_profit(self) -> Decimal:
        return self.gross_receipts - self.total_deductions


@dataclass(frozen=True)
class CandidateRecord:
    """Transaction candidate produced by the text extraction service."""

    date: date
    description: str
    amount: Decimal
    type_hint: Optional[str] = None
    category_name: Optional[str] = None
