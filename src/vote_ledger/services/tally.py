"""Read-side vote counting."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from vote_ledger.db.session import SessionLocal
from vote_ledger.repositories.vote_repo import VoteRepository
from vote_ledger.services.ledger import SessionFactory, read_session

__all__ = ["Tally", "TallyReader", "get_tally_reader"]


@dataclass(frozen=True)
class Tally:
    """Upvote and downvote counts for one post."""

    post_id: int
    upvotes: int = 0
    downvotes: int = 0

    @property
    def total(self) -> int:
        """Number of voters currently holding an opinion on the post."""
        return self.upvotes + self.downvotes

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    def as_tuple(self) -> tuple[int, int]:
        return self.upvotes, self.downvotes


class TallyReader:
    """Reduces the committed votes of a post to an (upvotes, downvotes) pair.

    Reads take no locks; each tally is a single aggregate statement and so
    reflects the last committed state of the ledger. Posts without votes,
    including unknown posts, tally to zero.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def tally(self, post_id: int) -> Tally:
        """Return the tally for a single post."""
        return self.tally_many([post_id])[post_id]

    def tally_many(self, post_ids: Iterable[int]) -> dict[int, Tally]:
        """Return tallies keyed by post id for every requested post."""
        ids = list(dict.fromkeys(post_ids))
        with read_session(self._session_factory) as db:
            counts = VoteRepository(db).count_by_direction(ids)
        return {
            post_id: Tally(
                post_id=post_id,
                upvotes=counts[post_id].get(True, 0),
                downvotes=counts[post_id].get(False, 0),
            )
            for post_id in ids
        }


def get_tally_reader() -> TallyReader:
    """Return a tally reader bound to the application session factory."""
    return TallyReader(SessionLocal)
