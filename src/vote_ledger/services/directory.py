"""Existence lookups for the entities a vote refers to."""
from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from vote_ledger.models import Post, User

__all__ = [
    "VoterDirectory",
    "PostDirectory",
    "SqlVoterDirectory",
    "SqlPostDirectory",
]


class VoterDirectory(Protocol):
    """Resolves whether a voter identifier refers to a real account."""

    def exists(self, db: Session, voter_id: int) -> bool:
        ...


class PostDirectory(Protocol):
    """Resolves whether a post identifier refers to a votable post."""

    def exists(self, db: Session, post_id: int) -> bool:
        ...


class SqlVoterDirectory:
    """Voter lookup backed by the ``user_account`` table."""

    def exists(self, db: Session, voter_id: int) -> bool:
        return db.execute(select(User.id).where(User.id == voter_id)).first() is not None


class SqlPostDirectory:
    """Post lookup backed by the ``post`` table."""

    def exists(self, db: Session, post_id: int) -> bool:
        return db.execute(select(Post.id).where(Post.id == post_id)).first() is not None
