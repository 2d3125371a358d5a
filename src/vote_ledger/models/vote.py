# src/vote_ledger/models/vote.py
"""Models capturing voting interactions on posts."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from vote_ledger.db.session import Base


class PostVote(Base):
    """Settled vote of one user on one post.

    A row exists only while the voter holds an up or down opinion; retracting
    the vote deletes the row rather than storing a neutral value.
    """

    __tablename__ = "post_vote"
    __table_args__ = (
        Index("ix_post_vote_post_id", "post_id"),
    )

    # Composite primary key prevents duplicate votes from the same user.
    voter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # True = upvote, False = downvote.
    upvote: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __repr__(self) -> str:
        return f"<PostVote(voter_id={self.voter_id}, post_id={self.post_id}, upvote={self.upvote})>"
