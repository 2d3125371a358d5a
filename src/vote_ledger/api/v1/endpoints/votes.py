# src/vote_ledger/api/v1/endpoints/votes.py
"""Vote-related endpoints for the vote ledger API."""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from vote_ledger.schemas.vote import MyVoteOut, TallyOut, VoteOut, VoteRequest, VoteResponse
from vote_ledger.services.errors import LedgerUnavailableError, NotFoundError
from vote_ledger.services.ledger import VoteLedger, VoteResult, get_vote_ledger
from vote_ledger.services.tally import TallyReader, get_tally_reader

router = APIRouter(prefix="/votes", tags=["votes"])


def get_vote_ledger_dep() -> VoteLedger:
    """Return the shared vote ledger."""
    return get_vote_ledger()


def get_tally_reader_dep() -> TallyReader:
    """Return the shared tally reader."""
    return get_tally_reader()


LedgerDep = Annotated[VoteLedger, Depends(get_vote_ledger_dep)]
TallyDep = Annotated[TallyReader, Depends(get_tally_reader_dep)]


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, NotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{exc.entity.capitalize()} not found",
        ) from exc
    if isinstance(exc, LedgerUnavailableError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Vote storage is temporarily unavailable",
        ) from exc
    raise exc


def _to_response(result: VoteResult) -> VoteResponse:
    vote = VoteOut.model_validate(result.vote) if result.vote is not None else None
    return VoteResponse(outcome=result.outcome, vote=vote)


@router.post("/", response_model=VoteResponse)
def cast_vote(vote_data: VoteRequest, ledger: LedgerDep) -> VoteResponse:
    """Cast, change or retract a vote depending on the requested flags."""
    try:
        result = ledger.vote(
            vote_data.voter_id,
            vote_data.post_id,
            vote_data.upvote,
            vote_data.downvote,
        )
    except (NotFoundError, LedgerUnavailableError) as exc:
        _raise_http(exc)
    return _to_response(result)


@router.get("/", response_model=list[VoteOut])
def list_votes(
    ledger: LedgerDep,
    voter_id: int | None = None,
    post_id: int | None = None,
) -> list[VoteOut]:
    """List stored votes, optionally filtered by voter and/or post."""
    try:
        votes = ledger.list_votes(voter_id=voter_id, post_id=post_id)
    except LedgerUnavailableError as exc:
        _raise_http(exc)
    return [VoteOut.model_validate(vote) for vote in votes]


@router.get("/{post_id}/tally", response_model=TallyOut)
def get_tally(post_id: int, reader: TallyDep) -> TallyOut:
    """Return upvote and downvote counts for a post."""
    try:
        tally = reader.tally(post_id)
    except LedgerUnavailableError as exc:
        _raise_http(exc)
    return TallyOut.model_validate(tally)


@router.get("/{post_id}/voters/{voter_id}", response_model=MyVoteOut)
def get_voter_vote(post_id: int, voter_id: int, ledger: LedgerDep) -> MyVoteOut:
    """Get a voter's current vote on a specific post."""
    try:
        vote = ledger.find(voter_id, post_id)
    except LedgerUnavailableError as exc:
        _raise_http(exc)

    if vote is None:
        return MyVoteOut(direction=0)

    return MyVoteOut(direction=vote.direction)


@router.delete("/{post_id}/voters/{voter_id}", response_model=VoteResponse)
def retract_vote(post_id: int, voter_id: int, ledger: LedgerDep) -> VoteResponse:
    """Retract a voter's vote on a post."""
    try:
        result = ledger.retract(voter_id, post_id)
    except (NotFoundError, LedgerUnavailableError) as exc:
        _raise_http(exc)
    return _to_response(result)
