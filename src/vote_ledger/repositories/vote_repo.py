"""Data access helpers for working with post votes."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from vote_ledger.models.vote import PostVote

__all__ = ["VoteRepository"]


class VoteRepository:
    """Thin wrapper around database access for vote rows."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, voter_id: int, post_id: int) -> PostVote | None:
        """Return the vote keyed by ``(voter_id, post_id)`` if one exists."""
        return self.session.get(PostVote, (voter_id, post_id))

    def insert(self, voter_id: int, post_id: int, upvote: bool) -> PostVote:
        """Insert a new vote row and flush so key collisions surface immediately."""
        vote = PostVote(voter_id=voter_id, post_id=post_id, upvote=upvote)
        self.session.add(vote)
        self.session.flush()
        return vote

    def update_direction(self, voter_id: int, post_id: int, upvote: bool) -> int:
        """Set the stored direction by key and return the number of rows matched."""
        result = self.session.execute(
            update(PostVote)
            .where(PostVote.voter_id == voter_id, PostVote.post_id == post_id)
            .values(upvote=upvote)
        )
        return result.rowcount or 0

    def delete(self, voter_id: int, post_id: int) -> int:
        """Delete the vote for a pair and return the number of rows removed."""
        result = self.session.execute(
            delete(PostVote).where(
                PostVote.voter_id == voter_id,
                PostVote.post_id == post_id,
            )
        )
        return result.rowcount or 0

    def list_filtered(
        self,
        *,
        voter_id: int | None = None,
        post_id: int | None = None,
    ) -> list[PostVote]:
        """Return votes matching the optional voter and post filters."""
        stmt = select(PostVote)
        if voter_id is not None:
            stmt = stmt.where(PostVote.voter_id == voter_id)
        if post_id is not None:
            stmt = stmt.where(PostVote.post_id == post_id)
        stmt = stmt.order_by(PostVote.post_id, PostVote.voter_id)
        return list(self.session.execute(stmt).scalars())

    def count_by_direction(self, post_ids: Iterable[int]) -> dict[int, dict[bool, int]]:
        """Count votes per post and direction in a single aggregate query."""
        ids = list(post_ids)
        counts: dict[int, dict[bool, int]] = {post_id: {} for post_id in ids}
        if not ids:
            return counts
        rows = self.session.execute(
            select(PostVote.post_id, PostVote.upvote, func.count())
            .where(PostVote.post_id.in_(ids))
            .group_by(PostVote.post_id, PostVote.upvote)
        )
        for post_id, upvote, total in rows:
            counts[post_id][bool(upvote)] = int(total)
        return counts
