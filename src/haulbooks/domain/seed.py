"""Built-in defaults used when a cache collection is absent or empty."""

from decimal import Decimal

from haulbooks.domain.entities import (
    AccountKind,
    BankAccount,
    BusinessEntity,
    Category,
    LegalStructure,
    Truck,
    TransactionType,
)

DEFAULT_ENTITY_ID = "entity-1"

INCOME_CATEGORIES = [
    ("cat-inc-1", "Freight Revenue"),
    ("cat-inc-2", "Detention Pay"),
    ("cat-inc-3", "Layover Pay"),
    ("cat-inc-4", "Fuel Surcharge"),
]

EXPENSE_CATEGORIES = [
    ("cat-exp-1", "Fuel"),
    ("cat-exp-2", "Repairs & Maintenance"),
    ("cat-exp-3", "Tires"),
    ("cat-exp-4", "Insurance Premiums"),
    ("cat-exp-5", "Licenses, Permits & Fees"),
    ("cat-exp-6", "Loan Interest / Lease Payments"),
    ("cat-exp-7", "Driver Wages & Salaries"),
    ("cat-exp-8", "Dispatch & Factoring Fees"),
    ("cat-exp-9", "Tolls & Parking"),
    ("cat-exp-10", "Office & Communication Expenses"),
    ("cat-exp-11", "Professional Services (Legal, Accounting)"),
    ("cat-exp-12", "Supplies (Logbooks, tools, etc.)"),
    ("cat-exp-13", "Travel & Per Diem"),
    ("cat-exp-14", "Depreciation"),
    ("cat-exp-15", "Taxes (HVUT, IFTA)"),
]


def default_entities() -> list[BusinessEntity]:
    return [
        BusinessEntity(
            id=DEFAULT_ENTITY_ID,
            name="My Trucking LLC",
            structure=LegalStructure.LLC_SINGLE_MEMBER,
        )
    ]


def default_accounts() -> list[BankAccount]:
    return [
        BankAccount(
            id="acc-1",
            name="Chase Business Checking",
            kind=AccountKind.CHECKING,
            initial_balance=Decimal("25000"),
            business_entity_id=DEFAULT_ENTITY_ID,
        ),
        BankAccount(
            id="acc-2",
            name="Amex Business Gold",
            kind=AccountKind.CREDIT_CARD,
            initial_balance=Decimal("0"),
            business_entity_id=DEFAULT_ENTITY_ID,
        ),
        BankAccount(
            id="acc-3",
            name="Business Savings",
            kind=AccountKind.SAVINGS,
            initial_balance=Decimal("50000"),
            business_entity_id=DEFAULT_ENTITY_ID,
        ),
    ]


def default_categories() -> list[Category]:
    categories = [
        Category(id=cat_id, name=name, type=TransactionType.INCOME, is_tax_deductible=False)
        for cat_id, name in INCOME_CATEGORIES
    ]
    categories.extend(
        Category(id=cat_id, name=name, type=TransactionType.EXPENSE, is_tax_deductible=True)
        for cat_id, name in EXPENSE_CATEGORIES
    )
    return categories


def default_trucks() -> list[Truck]:
    return [
        Truck(id="truck-1", unit_number="T-101", make="Freightliner", model="Cascadia", year=2022),
        Truck(id="truck-2", unit_number="T-102", make="Kenworth", model="T680", year=2021),
        Truck(id="truck-3", unit_number="T-103", make="Peterbilt", model="579", year=2023),
        Truck(id="truck-4", unit_number="T-104", make="Volvo", model="VNL 860", year=2022),
    ]
