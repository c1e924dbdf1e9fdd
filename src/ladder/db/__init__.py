"""
Database module for Ladder.

Provides SQLAlchemy ORM models, session management, and common queries.

Usage:
    from ladder.db import get_session, LadderRepository

    with get_session() as session:
        repo = LadderRepository(session)
        standings = repo.players_in_division(3, order_by_rating=True)
"""

from ladder.db.models import (
    Base,
    Division,
    League,
    Match,
    Player,
)
from ladder.db.repository import LadderRepository
from ladder.db.session import SessionLocal, get_engine, get_session

__all__ = [
    # Base
    "Base",
    # Models
    "League",
    "Division",
    "Player",
    "Match",
    # Queries
    "LadderRepository",
    # Session
    "get_session",
    "get_engine",
    "SessionLocal",
]
