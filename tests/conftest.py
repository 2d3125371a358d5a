# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

from vote_ledger.api.v1.endpoints import votes as votes_endpoints
from vote_ledger.db.session import Base
from vote_ledger.main import app as fastapi_app
from vote_ledger.models import Post, User
from vote_ledger.services.ledger import VoteLedger
from vote_ledger.services.locks import KeyedLock
from vote_ledger.services.tally import TallyReader

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)


def _clear_tables(engine: Engine) -> None:
    with engine.begin() as cleanup_conn:
        for table in reversed(Base.metadata.sorted_tables):
            cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        _clear_tables(engine)


@pytest.fixture()
def file_session_factory(tmp_path: Path) -> Iterator[sessionmaker[Session]]:
    """Session factory over an on-disk database for multi-threaded tests."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'votes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    finally:
        engine.dispose()


@pytest.fixture()
def pair_locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture()
def ledger(session_factory: sessionmaker[Session], pair_locks: KeyedLock) -> VoteLedger:
    return VoteLedger(session_factory, locks=pair_locks, lock_timeout=2.0)


@pytest.fixture()
def tally_reader(session_factory: sessionmaker[Session]) -> TallyReader:
    return TallyReader(session_factory)


def _voter_factory(factory: sessionmaker[Session]) -> Callable[[], int]:
    def make_voter() -> int:
        with factory() as db:
            user = User(username=f"voter-{next(_USERNAME_COUNTER)}")
            db.add(user)
            db.commit()
            return user.id

    return make_voter


def _post_factory(factory: sessionmaker[Session]) -> Callable[..., int]:
    def make_post(author_id: int | None = None, body: str = "Test post content") -> int:
        with factory() as db:
            post = Post(author_id=author_id, body=body)
            db.add(post)
            db.commit()
            return post.id

    return make_post


@pytest.fixture()
def make_voter(session_factory: sessionmaker[Session]) -> Callable[[], int]:
    """Return a factory persisting a new voter and returning its id."""
    return _voter_factory(session_factory)


@pytest.fixture()
def make_post(session_factory: sessionmaker[Session]) -> Callable[..., int]:
    """Return a factory persisting a new post and returning its id."""
    return _post_factory(session_factory)


@pytest.fixture()
def voter(make_voter: Callable[[], int]) -> int:
    return make_voter()


@pytest.fixture()
def other_voter(make_voter: Callable[[], int]) -> int:
    return make_voter()


@pytest.fixture()
def post(make_post: Callable[..., int], voter: int) -> int:
    return make_post(author_id=voter)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(
    app: FastAPI,
    ledger: VoteLedger,
    tally_reader: TallyReader,
) -> Iterator[TestClient]:
    app.dependency_overrides[votes_endpoints.get_vote_ledger_dep] = lambda: ledger
    app.dependency_overrides[votes_endpoints.get_tally_reader_dep] = lambda: tally_reader
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(votes_endpoints.get_vote_ledger_dep, None)
        app.dependency_overrides.pop(votes_endpoints.get_tally_reader_dep, None)
