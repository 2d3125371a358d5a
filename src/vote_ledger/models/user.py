"""SQLAlchemy model for voting principals."""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from vote_ledger.db.session import Base


class User(Base):
    """Registered account able to cast votes.

    Identity and session handling live outside the ledger; this table only
    backs voter existence checks and the cascade on account removal.
    """

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
