"""
SQLAlchemy ORM models for Ladder.

The store owns every entity. The engine only ever sees the frozen
snapshots produced by each model's to_snapshot().

Tables:
- leagues: Named groupings of divisions and players
- divisions: Ranked tiers inside a league (rank 1 = top, contiguous 1..N)
- players: Registered players with their current rating
- matches: Recorded match results with ratings before and after
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ladder.engine.constants import DEFAULT_RATING
from ladder.engine.snapshots import DivisionSnapshot, MatchRecord, PlayerSnapshot


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# League Models
# =============================================================================

class League(Base):
    """A league: pure grouping of ranked divisions and their players."""
    __tablename__ = "leagues"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    divisions: Mapped[list["Division"]] = relationship(
        back_populates="league", order_by="Division.rank"
    )

    def __repr__(self) -> str:
        return f"<League(id={self.id}, name='{self.name}')>"


class Division(Base):
    """
    A ranked tier inside a league.

    Ranks are contiguous 1..N within a league. New divisions are appended
    at the bottom; removing one re-packs the rest (see LeagueService).
    """
    __tablename__ = "divisions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    league_id: Mapped[Optional[int]] = mapped_column(ForeignKey("leagues.id"), nullable=True)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    league: Mapped[Optional["League"]] = relationship(back_populates="divisions")

    __table_args__ = (
        Index("idx_divisions_league_rank", "league_id", "rank"),
        CheckConstraint("rank >= 1", name="ck_division_rank_positive"),
    )

    def to_snapshot(self) -> DivisionSnapshot:
        return DivisionSnapshot(id=self.id, league_id=self.league_id, rank=self.rank, name=self.name)

    def __repr__(self) -> str:
        return f"<Division(id={self.id}, league_id={self.league_id}, rank={self.rank})>"


# =============================================================================
# Player Models
# =============================================================================

class Player(Base):
    """
    Registered ladder player.

    signed_in gates matchmaking eligibility: only signed-in players of a
    division are paired. last_active_date drives weekly decay.
    """
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_RATING)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Placement (both nullable: unassigned players)
    division_id: Mapped[Optional[int]] = mapped_column(ForeignKey("divisions.id"), nullable=True)
    league_id: Mapped[Optional[int]] = mapped_column(ForeignKey("leagues.id"), nullable=True)

    signed_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_players_division_signed_in", "division_id", "signed_in"),
        Index("idx_players_league", "league_id"),
        CheckConstraint("rating >= 0", name="ck_player_rating_non_negative"),
    )

    def to_snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            id=self.id,
            rating=self.rating,
            matches_played=self.matches_played,
            last_active_date=self.last_active_date,
            division_id=self.division_id,
            league_id=self.league_id,
            signed_in=self.signed_in,
            name=self.name,
        )

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name='{self.name}', rating={self.rating})>"


# =============================================================================
# Match Models
# =============================================================================

class Match(Base):
    """
    A recorded match result.

    Created once per match and immutable afterwards. The id is the
    creation order used for recent-form calculations; match_datetime is
    informational only.
    """
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True)

    player1_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    player2_id: Mapped[int] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), nullable=False)

    player1_score: Mapped[int] = mapped_column(Integer, nullable=False)
    player2_score: Mapped[int] = mapped_column(Integer, nullable=False)

    # Ratings captured before either player was updated
    player1_rating_at_match_time: Mapped[int] = mapped_column(Integer, nullable=False)
    player2_rating_at_match_time: Mapped[int] = mapped_column(Integer, nullable=False)

    player1_rating_after_match: Mapped[int] = mapped_column(Integer, nullable=False)
    player2_rating_after_match: Mapped[int] = mapped_column(Integer, nullable=False)

    winner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    loser_id: Mapped[int] = mapped_column(Integer, nullable=False)

    match_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_matches_player1", "player1_id"),
        Index("idx_matches_player2", "player2_id"),
        Index("idx_matches_winner", "winner_id"),
        CheckConstraint("player1_id <> player2_id", name="ck_match_distinct_players"),
        CheckConstraint("winner_id <> loser_id", name="ck_match_distinct_result"),
    )

    def to_record(self) -> MatchRecord:
        return MatchRecord(
            id=self.id,
            player1_id=self.player1_id,
            player2_id=self.player2_id,
            player1_score=self.player1_score,
            player2_score=self.player2_score,
            winner_id=self.winner_id,
            loser_id=self.loser_id,
            match_datetime=self.match_datetime,
        )

    def __repr__(self) -> str:
        return (
            f"<Match(id={self.id}, {self.player1_id} vs {self.player2_id}, "
            f"score={self.player1_score}-{self.player2_score})>"
        )
