"""Typed row schemas for the remote tables.

Remote rows are validated into these models at the boundary; loosely typed
dicts never travel further than the resolver.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from haulbooks.domain.entities import (
    AccountKind,
    LegalStructure,
    LoadStatus,
    PaymentType,
    TransactionType,
)

logger = structlog.get_logger(__name__)


class RemoteRow(BaseModel):
    """Base row: unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: str


class BusinessEntityRow(RemoteRow):
    name: str
    structure: LegalStructure
    tax_form: Optional[str] = None
    ein: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    logo_url: Optional[str] = None


class BankAccountRow(RemoteRow):
    name: str
    type: AccountKind
    initial_balance: Decimal = Decimal("0")
    business_entity_id: Optional[str] = None


class CategoryRow(RemoteRow):
    name: str
    type: TransactionType
    is_tax_deductible: Optional[bool] = None

    @field_validator("type")
    @classmethod
    def not_transfer(cls, v: TransactionType) -> TransactionType:
        if v == TransactionType.TRANSFER:
            raise ValueError("category type must be Income or Expense")
        return v


class TruckRow(RemoteRow):
    unit_number: str
    make: str = ""
    model: str = ""
    year: int = 0


class LoadRow(RemoteRow):
    current_location: str = ""
    pickup_location: str
    delivery_location: str
    miles_to_pickup: Decimal = Decimal("0")
    miles_to_delivery: Decimal = Decimal("0")
    total_miles: Optional[Decimal] = None
    payment_type: PaymentType = PaymentType.PER_MILE
    rate: Decimal = Decimal("0")
    total_revenue: Optional[Decimal] = None
    status: LoadStatus = LoadStatus.PLANNED
    pickup_date: Optional[str] = None
    delivery_date: Optional[str] = None
    truck_id: Optional[str] = None


class TransactionRow(RemoteRow):
    date: str
    description: Optional[str] = ""
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    type: TransactionType
    account_id: str
    to_account_id: Optional[str] = None
    category_id: Optional[str] = None
    to_category_id: Optional[str] = None
    truck_id: Optional[str] = None
    receipts: Optional[list[str]] = Field(default_factory=list)


RowT = TypeVar("RowT", bound=RemoteRow)


def parse_rows(model: type[RowT], table: str, rows: Sequence[Any]) -> list[RowT]:
    """Validate raw rows, dropping the ones that do not fit the schema."""
    parsed = []
    for raw in rows:
        try:
            parsed.append(model.model_validate(raw))
        except ValidationError as e:
            row_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning(
                "remote_row_rejected",
                table=table,
                row_id=row_id,
                errors=e.error_count(),
            )
    return parsed
