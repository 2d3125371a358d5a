"""Authoritative store of who voted which way on which post.

The ledger keeps at most one row per ``(voter_id, post_id)`` pair. Every call
to :meth:`VoteLedger.vote` takes two independent flags and, together with the
currently stored row, derives one of four transitions:

=========  ========  =====================  ===========
existing   neutral   action                 outcome
=========  ========  =====================  ===========
yes        yes       delete row             ``REMOVED``
yes        no        set ``upvote``         ``UPDATED``
no         no        insert row             ``CREATED``
no         yes       nothing                ``NOOP``
=========  ========  =====================  ===========

A request is neutral when both flags agree. Neutral requests never leave a row
behind, so abstention is always represented by the absence of a row.

The read-decide-write sequence runs under a per-pair lock, and the composite
primary key on ``post_vote`` backs it up across processes: a unique-key
collision, or an update that finds the row already gone, rolls the attempt back
and the whole sequence is retried.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from vote_ledger.core.settings import settings
from vote_ledger.db.session import SessionLocal
from vote_ledger.models.vote import PostVote
from vote_ledger.repositories.vote_repo import VoteRepository
from vote_ledger.services.directory import (
    PostDirectory,
    SqlPostDirectory,
    SqlVoterDirectory,
    VoterDirectory,
)
from vote_ledger.services.errors import (
    NotFoundError,
    StorageUnavailableError,
    VoteConflictError,
    VoteTimeoutError,
)
from vote_ledger.services.locks import KeyedLock

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]

__all__ = [
    "VoteLedger",
    "VoteOutcome",
    "VoteRecord",
    "VoteResult",
    "decide_transition",
    "get_vote_ledger",
    "read_session",
]


class VoteOutcome(str, Enum):
    """Transition applied by a single vote request."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"
    NOOP = "noop"


@dataclass(frozen=True)
class VoteRecord:
    """Detached snapshot of a stored vote."""

    voter_id: int
    post_id: int
    upvote: bool

    @property
    def direction(self) -> int:
        """Return 1 for an upvote and -1 for a downvote."""
        return 1 if self.upvote else -1

    @classmethod
    def from_model(cls, vote: PostVote) -> VoteRecord:
        return cls(voter_id=vote.voter_id, post_id=vote.post_id, upvote=bool(vote.upvote))


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a vote request and the row as stored afterwards."""

    outcome: VoteOutcome
    vote: VoteRecord | None = None


def decide_transition(existing: bool, wants_upvote: bool, wants_downvote: bool) -> VoteOutcome:
    """Return the transition for the given stored state and request flags."""
    neutral = bool(wants_upvote) == bool(wants_downvote)
    if existing:
        return VoteOutcome.REMOVED if neutral else VoteOutcome.UPDATED
    return VoteOutcome.NOOP if neutral else VoteOutcome.CREATED


@contextmanager
def read_session(session_factory: SessionFactory) -> Iterator[Session]:
    """Open a short-lived session for reads, translating driver failures."""
    db = session_factory()
    try:
        yield db
    except DBAPIError as exc:
        logger.error("Vote storage read failed: %s", exc, exc_info=True)
        raise StorageUnavailableError("Vote storage is unavailable") from exc
    finally:
        db.close()


# Shared by every ledger in the process so same-pair calls serialize.
_PAIR_LOCKS = KeyedLock()


class VoteLedger:
    """Applies vote transitions and answers per-voter lookups."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        voters: VoterDirectory | None = None,
        posts: PostDirectory | None = None,
        locks: KeyedLock | None = None,
        max_retries: int | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._voters = voters or SqlVoterDirectory()
        self._posts = posts or SqlPostDirectory()
        self._locks = locks if locks is not None else _PAIR_LOCKS
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.vote_max_retries
        )
        self.lock_timeout = (
            lock_timeout if lock_timeout is not None else settings.vote_lock_timeout_seconds
        )

    def vote(
        self,
        voter_id: int,
        post_id: int,
        wants_upvote: bool = False,
        wants_downvote: bool = False,
        *,
        timeout: float | None = None,
    ) -> VoteResult:
        """Record a voter's opinion on a post.

        Args:
            voter_id: Identifier of the voting user.
            post_id: Identifier of the post being voted on.
            wants_upvote: Whether the request asks for an upvote.
            wants_downvote: Whether the request asks for a downvote.
            timeout: Seconds the whole call may take; defaults to the configured
                lock timeout.

        Returns:
            The applied transition and the stored vote afterwards.

        Raises:
            NotFoundError: If the voter or the post does not exist.
            VoteTimeoutError: If the deadline passes before the write.
            VoteConflictError: If concurrent writers keep colliding.
            StorageUnavailableError: If the database cannot be reached.
        """
        budget = self.lock_timeout if timeout is None else timeout
        deadline = time.monotonic() + budget
        key = (voter_id, post_id)

        if not self._locks.acquire(key, timeout=budget):
            logger.warning(
                "Timed out waiting for vote lock (voter=%s post=%s)", voter_id, post_id
            )
            raise VoteTimeoutError(
                f"Timed out waiting to vote on post {post_id} as voter {voter_id}"
            )
        try:
            return self._apply_with_retry(
                voter_id, post_id, wants_upvote, wants_downvote, deadline
            )
        finally:
            self._locks.release(key)

    def retract(self, voter_id: int, post_id: int, *, timeout: float | None = None) -> VoteResult:
        """Remove a voter's vote on a post, if any."""
        return self.vote(voter_id, post_id, False, False, timeout=timeout)

    def find(self, voter_id: int, post_id: int) -> VoteRecord | None:
        """Return the voter's current vote on a post, or None."""
        with read_session(self._session_factory) as db:
            vote = VoteRepository(db).get(voter_id, post_id)
            return VoteRecord.from_model(vote) if vote is not None else None

    def list_votes(
        self,
        *,
        voter_id: int | None = None,
        post_id: int | None = None,
    ) -> list[VoteRecord]:
        """Return stored votes filtered by voter and/or post."""
        with read_session(self._session_factory) as db:
            rows = VoteRepository(db).list_filtered(voter_id=voter_id, post_id=post_id)
            return [VoteRecord.from_model(row) for row in rows]

    def _apply_with_retry(
        self,
        voter_id: int,
        post_id: int,
        wants_upvote: bool,
        wants_downvote: bool,
        deadline: float,
    ) -> VoteResult:
        last_error: IntegrityError | StaleDataError | None = None
        for attempt in range(1, self.max_retries + 1):
            self._check_deadline(deadline, voter_id, post_id)
            db = self._session_factory()
            try:
                result = self._apply(
                    db, voter_id, post_id, wants_upvote, wants_downvote, deadline
                )
                db.commit()
            except (IntegrityError, StaleDataError) as exc:
                db.rollback()
                last_error = exc
                logger.warning(
                    "Vote conflict (voter=%s post=%s attempt %d/%d): %s",
                    voter_id,
                    post_id,
                    attempt,
                    self.max_retries,
                    getattr(exc, "orig", exc),
                )
                continue
            except DBAPIError as exc:
                db.rollback()
                logger.error(
                    "Vote storage failure (voter=%s post=%s): %s",
                    voter_id,
                    post_id,
                    exc,
                    exc_info=True,
                )
                raise StorageUnavailableError("Vote storage is unavailable") from exc
            finally:
                db.close()

            logger.debug(
                "Vote %s (voter=%s post=%s up=%s down=%s)",
                result.outcome.value,
                voter_id,
                post_id,
                wants_upvote,
                wants_downvote,
            )
            return result

        raise VoteConflictError(
            f"Vote on post {post_id} by voter {voter_id} kept conflicting "
            f"after {self.max_retries} attempts"
        ) from last_error

    def _apply(
        self,
        db: Session,
        voter_id: int,
        post_id: int,
        wants_upvote: bool,
        wants_downvote: bool,
        deadline: float,
    ) -> VoteResult:
        if not self._voters.exists(db, voter_id):
            raise NotFoundError("voter", voter_id)
        if not self._posts.exists(db, post_id):
            raise NotFoundError("post", post_id)

        repo = VoteRepository(db)
        existing = repo.get(voter_id, post_id)
        outcome = decide_transition(existing is not None, wants_upvote, wants_downvote)
        self._check_deadline(deadline, voter_id, post_id)

        if outcome is VoteOutcome.CREATED:
            vote = repo.insert(voter_id, post_id, bool(wants_upvote))
            return VoteResult(outcome, VoteRecord.from_model(vote))
        if outcome is VoteOutcome.UPDATED:
            # Zero matched rows means another writer removed the vote after the read.
            if repo.update_direction(voter_id, post_id, bool(wants_upvote)) == 0:
                raise StaleDataError(
                    f"Vote by voter {voter_id} on post {post_id} vanished before update"
                )
            return VoteResult(
                outcome,
                VoteRecord(voter_id=voter_id, post_id=post_id, upvote=bool(wants_upvote)),
            )
        if outcome is VoteOutcome.REMOVED:
            repo.delete(voter_id, post_id)
        return VoteResult(outcome)

    @staticmethod
    def _check_deadline(deadline: float, voter_id: int, post_id: int) -> None:
        if time.monotonic() > deadline:
            raise VoteTimeoutError(
                f"Deadline exceeded while voting on post {post_id} as voter {voter_id}"
            )


def get_vote_ledger() -> VoteLedger:
    """Return a vote ledger bound to the application session factory."""
    return VoteLedger(SessionLocal)
