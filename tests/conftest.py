"""
Shared pytest fixtures.

Engine tests need nothing but the make_player factory. Repository,
service and job tests use db_session: one in-memory SQLite database for
the whole run, with every test wrapped in a transaction that is rolled
back afterwards.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from ladder.db.models import Base
from ladder.engine.snapshots import PlayerSnapshot


@pytest.fixture(scope="session")
def test_engine():
    """In-memory SQLite shared by every connection of the test run."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture(scope="session")
def tables(test_engine):
    Base.metadata.create_all(test_engine)
    yield
    Base.metadata.drop_all(test_engine)


@pytest.fixture
def db_session(test_engine, tables):
    """
    Session bound to an outer transaction.

    Services only flush, so nothing a test writes outlives the rollback.
    """
    with test_engine.connect() as connection:
        outer = connection.begin()
        session = Session(bind=connection)
        try:
            yield session
        finally:
            session.close()
            outer.rollback()


@pytest.fixture
def make_player():
    """
    Factory for player snapshots.

    Usage:
        alice = make_player(1, 1200)
        bob = make_player(2, 1300, matches_played=4)
    """
    def _make(player_id, rating=1500, **kwargs):
        kwargs.setdefault("name", f"player{player_id}")
        return PlayerSnapshot(id=player_id, rating=rating, **kwargs)

    return _make
