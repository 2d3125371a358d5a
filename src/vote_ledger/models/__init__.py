# src/vote_ledger/models/__init__.py
"""SQLAlchemy models for the vote ledger."""

from .post import Post
from .user import User
from .vote import PostVote

__all__ = [
    "Post",
    "User",
    "PostVote",
]
