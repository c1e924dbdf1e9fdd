"""
Value snapshots exchanged between the store and the engine.

The engine never touches storage. Callers load players, divisions and
match history, hand the engine frozen snapshots, and persist whatever the
engine hands back (RatingChange, DivisionReassignment, MatchOutcome).

Match history is accessed through the MatchHistory protocol so the engine
works the same against the database repository and an in-memory list.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence


@dataclass(frozen=True)
class PlayerSnapshot:
    """A player's rating-relevant state at one point in time."""

    id: int
    rating: int
    matches_played: int = 0
    last_active_date: Optional[date] = None
    division_id: Optional[int] = None
    league_id: Optional[int] = None
    signed_in: bool = False
    name: str = ""

    def __repr__(self) -> str:
        return f"<PlayerSnapshot(id={self.id}, rating={self.rating})>"


@dataclass(frozen=True)
class DivisionSnapshot:
    id: int
    league_id: Optional[int]
    rank: int
    name: str = ""


@dataclass(frozen=True)
class MatchRecord:
    """
    A recorded match as seen by the engine.

    `id` doubles as creation order: a higher id was recorded later,
    whatever `match_datetime` says.
    """

    id: int
    player1_id: int
    player2_id: int
    player1_score: int
    player2_score: int
    winner_id: Optional[int]
    loser_id: Optional[int]
    match_datetime: Optional[datetime] = None

    def involves(self, player_id: int) -> bool:
        return player_id in (self.player1_id, self.player2_id)


@dataclass(frozen=True)
class Pairing:
    """Two players paired for a single round. Not persisted."""

    player1_id: int
    player2_id: int

    def __contains__(self, player_id: int) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def as_tuple(self) -> tuple[int, int]:
        return self.player1_id, self.player2_id


@dataclass(frozen=True)
class RatingChange:
    """Result of a batch rating transform for one player."""

    player_id: int
    rating_before: int
    rating_after: int

    @property
    def delta(self) -> int:
        return self.rating_after - self.rating_before


@dataclass(frozen=True)
class DivisionReassignment:
    """A player moving between divisions (promotion, demotion or placement)."""

    player_id: int
    from_division_id: Optional[int]
    to_division_id: int
    reason: str  # 'promotion', 'demotion', 'placement'


class MatchHistory(Protocol):
    """Read-only access to recorded matches needed by the engine."""

    def head_to_head_count(self, player_a_id: int, player_b_id: int) -> int:
        """Number of recorded matches between the two players, either seat order."""
        ...

    def recent_matches(self, player_id: int, limit: int) -> Sequence[MatchRecord]:
        """The `limit` most recently created matches involving the player, newest first."""
        ...


class InMemoryMatchHistory:
    """MatchHistory over a plain list of MatchRecord objects."""

    def __init__(self, matches: Iterable[MatchRecord] = ()):
        self._matches: list[MatchRecord] = list(matches)

    def add(self, match: MatchRecord) -> None:
        self._matches.append(match)

    def head_to_head_count(self, player_a_id: int, player_b_id: int) -> int:
        wanted = {player_a_id, player_b_id}
        return sum(
            1 for m in self._matches
            if {m.player1_id, m.player2_id} == wanted
        )

    def recent_matches(self, player_id: int, limit: int) -> list[MatchRecord]:
        involved = [m for m in self._matches if m.involves(player_id)]
        # Stable sort: equal ids keep insertion order, newest inserted first
        involved.reverse()
        involved.sort(key=lambda m: m.id, reverse=True)
        return involved[:limit]

    def __len__(self) -> int:
        return len(self._matches)
