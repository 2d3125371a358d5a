# src/vote_ledger/services/__init__.py
"""Business logic services for the vote ledger."""

from .errors import (
    LedgerUnavailableError,
    NotFoundError,
    StorageUnavailableError,
    VoteConflictError,
    VoteLedgerError,
    VoteTimeoutError,
)
from .ledger import VoteLedger, VoteOutcome, VoteRecord, VoteResult
from .tally import Tally, TallyReader

__all__ = [
    "VoteLedger",
    "VoteOutcome",
    "VoteRecord",
    "VoteResult",
    "Tally",
    "TallyReader",
    "VoteLedgerError",
    "NotFoundError",
    "LedgerUnavailableError",
    "StorageUnavailableError",
    "VoteConflictError",
    "VoteTimeoutError",
]
