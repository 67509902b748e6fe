"""
ROLEGATE Test Configuration
===========================

Pytest fixtures and configuration for ROLEGATE tests.
"""

from datetime import datetime, timezone
from typing import Generator, List

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from rolegate.core.vote import VoteResult
from rolegate.db.repository import SqlAlchemyRoleRepository
from rolegate.db.session import create_db_engine, create_session_factory, init_db
from rolegate.voters.base import Voter

FIXED_NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with the schema created."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """Database session for a test."""
    session_factory = create_session_factory(engine)
    with session_factory() as session:
        yield session


@pytest.fixture
def repository(session) -> SqlAlchemyRoleRepository:
    """Role repository on the test session."""
    return SqlAlchemyRoleRepository(session)


@pytest.fixture
def clock():
    """Clock returning a fixed instant."""
    return lambda: FIXED_NOW


class StubVoter(Voter):
    """Voter returning a fixed vote and recording its calls."""

    def __init__(self, result: VoteResult, name: str = None):
        self.result = result
        self.name = name
        self.calls: List[tuple] = []

    @property
    def identity(self) -> str:
        return self.name or super().identity

    def vote(self, user_id, permission, subject=None) -> VoteResult:
        self.calls.append((user_id, permission, subject))
        return self.result


class ExplodingVoter(Voter):
    """Voter that must never be consulted."""

    def vote(self, user_id, permission, subject=None) -> VoteResult:
        raise AssertionError("voter should not have been called")


@pytest.fixture
def allow_voter() -> StubVoter:
    return StubVoter(VoteResult.allow("stub allow"), "AllowStub")


@pytest.fixture
def deny_voter() -> StubVoter:
    return StubVoter(VoteResult.deny("stub deny"), "DenyStub")


@pytest.fixture
def abstain_voter() -> StubVoter:
    return StubVoter(VoteResult.abstain("stub abstain"), "AbstainStub")


@pytest.fixture
def exploding_voter() -> ExplodingVoter:
    return ExplodingVoter()


@pytest.fixture
def make_voter():
    """Factory for stub voters: make_voter(VoteResult.allow("x"), "Name")."""
    return StubVoter
