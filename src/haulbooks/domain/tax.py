"""Tax classification of categories onto Schedule C lines.

Both the Schedule C mapping and the deductibility policy are driven by
ordered keyword tables. Matching is a case-insensitive substring test and
the first matching rule wins, so table order is significant.
"""

from dataclasses import dataclass
from typing import Optional

from haulbooks.domain.entities import Category, LegalStructure


def _contains_any(name: str, keywords: tuple[str, ...]) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in keywords)


@dataclass(frozen=True)
class TaxRule:
    """Keyword set routed to one Schedule C line."""

    keywords: tuple[str, ...]
    line: str

    def matches(self, name: str) -> bool:
        return _contains_any(name, self.keywords)


OTHER_EXPENSES_LINE = "Other expenses (Line 27a)"

# Operational categories precede generic ones: vehicle costs must be claimed
# before the rent/lease rule sees them.
SCHEDULE_C_RULES: tuple[TaxRule, ...] = (
    TaxRule(("fuel", "diesel", "gas"), "Car and truck expenses (Line 9)"),
    TaxRule(("repair", "maint", "tire", "oil"), "Repairs and maintenance (Line 21)"),
    TaxRule(("toll", "park", "scale", "weigh"), "Car and truck expenses (Line 9)"),
    TaxRule(("lease", "rent"), "Rent or lease (Vehicles) (Line 20a)"),
    TaxRule(("insurance", "occupational"), "Insurance (other than health) (Line 15)"),
    TaxRule(("tax", "license", "permit", "ifta", "hvut"), "Taxes and licenses (Line 23)"),
    TaxRule(
        ("phone", "cell", "internet", "software", "subscription"),
        "Office expense (Line 18)",
    ),
    TaxRule(("office", "supplies", "postage", "shipping"), "Office expense (Line 18)"),
    TaxRule(
        ("legal", "account", "professional", "attorney", "cpa"),
        "Legal and professional services (Line 17)",
    ),
    TaxRule(
        ("commission", "dispatch", "factoring", "merchant", "bank fee"),
        "Commissions and fees (Line 10)",
    ),
    TaxRule(("wage", "salary", "payroll"), "Wages (less employment credits) (Line 26)"),
    TaxRule(("contract", "labor"), "Contract labor (Line 11)"),
    TaxRule(("travel", "meal", "hotel", "lodging", "per diem"), "Travel, meals (Line 24)"),
    TaxRule(("interest",), "Mortgage/Other Interest (Line 16)"),
    TaxRule(("depreciation",), "Depreciation (Line 13)"),
)

FORCED_DEDUCTIBLE_KEYWORDS: tuple[str, ...] = (
    "fuel",
    "repair",
    "maint",
    "tire",
    "oil",
    "insurance",
    "phone",
    "cell",
    "internet",
    "lease",
    "rent",
    "tax",
    "license",
    "permit",
    "toll",
    "scale",
    "wage",
    "salary",
    "dispatch",
    "factoring",
)

OWNER_DRAW_KEYWORDS: tuple[str, ...] = (
    "owner draw",
    "owner's draw",
    "owner withdrawal",
    "distribution",
    "personal",
    "equity",
    "credit card payment",
    "credit-card payment",
    "loan principal",
    "transfer",
    "atm withdrawal",
    "cash withdrawal",
)

TAX_FORMS: dict[LegalStructure, str] = {
    LegalStructure.SOLE_PROPRIETORSHIP: "Schedule C (Form 1040)",
    LegalStructure.LLC_SINGLE_MEMBER: "Schedule C (Form 1040)",
    LegalStructure.LLC_MULTI_MEMBER: "Form 1065",
    LegalStructure.PARTNERSHIP: "Form 1065",
    LegalStructure.S_CORP: "Form 1120-S",
    LegalStructure.C_CORP: "Form 1120",
}


def schedule_line(
    category_name: Optional[str], rules: tuple[TaxRule, ...] = SCHEDULE_C_RULES
) -> str:
    """Map a category name to its Schedule C line label.

    Args:
        category_name: Category name (None for uncategorized)
        rules: Ordered rule table, first match wins

    Returns:
        Line label, or the catch-all "Other expenses" line when nothing matches
    """
    if not category_name:
        return OTHER_EXPENSES_LINE
    for rule in rules:
        if rule.matches(category_name):
            return rule.line
    return OTHER_EXPENSES_LINE


def is_deductible(category: Optional[Category]) -> bool:
    """Resolve whether expenses in a category are tax deductible.

    Resolution order, first applicable wins:
        1. forced-deductible keyword in the name, overriding any stored flag
        2. explicit ``is_tax_deductible`` flag
        3. owner-draw keyword in the name means not deductible
        4. deductible

    Uncategorized expenses fall through to the default.
    """
    if category is None:
        return True
    if _contains_any(category.name, FORCED_DEDUCTIBLE_KEYWORDS):
        return True
    if category.is_tax_deductible is not None:
        return category.is_tax_deductible
    if _contains_any(category.name, OWNER_DRAW_KEYWORDS):
        return False
    return True


def tax_form_for_structure(structure: LegalStructure) -> str:
    """Return the federal return a legal structure files."""
    return TAX_FORMS[LegalStructure(structure)]


def schedule_c_line_order(rules: tuple[TaxRule, ...] = SCHEDULE_C_RULES) -> list[str]:
    """Return distinct line labels in rule-table order, catch-all last."""
    ordered: list[str] = []
    for rule in rules:
        if rule.line not in ordered:
            ordered.append(rule.line)
    ordered.append(OTHER_EXPENSES_LINE)
    return ordered
