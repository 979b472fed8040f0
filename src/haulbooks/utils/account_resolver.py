"""Utility for resolving account references to accounts."""

from typing import Sequence

from haulbooks.domain.entities import BankAccount
from haulbooks.domain.errors import NotFoundError, entity_not_found


def resolve_account(accounts: Sequence[BankAccount], account: str) -> BankAccount:
    """Resolve an account ID or name to an account.

    IDs match exactly; names match case-insensitively.

    Raises:
        NotFoundError: If no account matches
    """
    for acc in accounts:
        if acc.id == account:
            return acc

    wanted = account.strip().lower()
    for acc in accounts:
        if acc.name.lower() == wanted:
            return acc

    raise NotFoundError(entity_not_found("accounts", account))
