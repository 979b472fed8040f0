"""Shared domain error messages and error types."""

from typing import Optional, Sequence


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input rejected before any cache write."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class SyncError(DomainError):
    """Remote read or write failed after the local cache was committed.

    Local state is never rolled back; this only reports the failure.
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        operation: Optional[str] = None,
        ids: Sequence[str] = (),
    ):
        super().__init__(message)
        self.collection = collection
        self.operation = operation
        self.ids = tuple(ids)


def entity_not_found(collection: str, entity_id: str) -> str:
    """Return message for missing entity."""
    return f"{collection} entry '{entity_id}' not found"


def invalid_identifier(entity_id: object) -> str:
    """Return message for malformed identifier."""
    return f"Invalid identifier: {entity_id!r}"


def non_positive_amount(amount: object) -> str:
    """Return message for zero or negative amount."""
    return f"Amount must be greater than zero, got {amount}"


def transfer_missing_destination(transaction_id: str) -> str:
    """Return message for transfer without destination account."""
    return f"Transfer {transaction_id} has no destination account"


def remote_write_failed(collection: str, operation: str, reason: str) -> str:
    """Return message for failed remote persist."""
    return f"Saved locally, but syncing {collection} ({operation}) failed: {reason}"


def remote_read_failed(reason: str) -> str:
    """Return message for failed remote refresh."""
    return f"Could not refresh from remote store, working from local cache: {reason}"
