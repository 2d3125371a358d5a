# src/vote_ledger/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .votes import router as votes_router

__all__ = [
    "votes_router",
]
