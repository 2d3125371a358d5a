"""create vote ledger tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create voters, posts and the per-pair vote table."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["user_account.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "post_vote",
        sa.Column("voter_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("upvote", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["voter_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("voter_id", "post_id"),
    )
    op.create_index("ix_post_vote_post_id", "post_vote", ["post_id"])


def downgrade() -> None:
    """Drop the vote ledger tables."""
    op.drop_index("ix_post_vote_post_id", table_name="post_vote")
    op.drop_table("post_vote")
    op.drop_table("post")
    op.drop_table("user_account")
