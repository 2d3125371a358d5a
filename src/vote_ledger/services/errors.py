"""Exceptions raised by the vote ledger services."""

from __future__ import annotations


class VoteLedgerError(RuntimeError):
    """Base exception for ledger failures."""


class NotFoundError(VoteLedgerError):
    """Raised when a referenced voter or post does not exist.

    This is a client-input error and is never retried.
    """

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"No such {entity}: {identifier}")


class LedgerUnavailableError(VoteLedgerError):
    """Base class for retryable failures surfaced to the caller."""


class StorageUnavailableError(LedgerUnavailableError):
    """Raised when the database cannot be reached or the statement fails."""


class VoteConflictError(LedgerUnavailableError):
    """Raised when concurrent writers keep colliding past the retry budget."""


class VoteTimeoutError(LedgerUnavailableError):
    """Raised when the caller's deadline expires before the vote is applied."""
