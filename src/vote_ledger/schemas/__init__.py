# src/vote_ledger/schemas/__init__.py
"""Pydantic schemas for the vote ledger API."""

from .vote import MyVoteOut, TallyOut, VoteOut, VoteRequest, VoteResponse

__all__ = [
    "MyVoteOut",
    "TallyOut",
    "VoteOut",
    "VoteRequest",
    "VoteResponse",
]
