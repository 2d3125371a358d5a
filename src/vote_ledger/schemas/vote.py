# src/vote_ledger/schemas/vote.py
"""Vote-related Pydantic schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from vote_ledger.services.ledger import VoteOutcome


class VoteRequest(BaseModel):
    """Schema for casting, changing or retracting a vote."""

    voter_id: int
    post_id: int
    upvote: bool = Field(False, description="Request an upvote")
    downvote: bool = Field(False, description="Request a downvote")


class VoteOut(BaseModel):
    """A stored vote."""

    model_config = ConfigDict(from_attributes=True)

    voter_id: int
    post_id: int
    upvote: bool
    direction: Literal[-1, 1]


class VoteResponse(BaseModel):
    """Transition applied by a vote request."""

    outcome: VoteOutcome
    vote: VoteOut | None = None


class MyVoteOut(BaseModel):
    """A voter's current direction on a post; 0 when no vote is held."""

    direction: Literal[-1, 0, 1]


class TallyOut(BaseModel):
    """Vote counts for a post."""

    model_config = ConfigDict(from_attributes=True)

    post_id: int
    upvotes: int = Field(..., ge=0)
    downvotes: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    score: int
