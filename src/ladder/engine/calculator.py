"""
Rating engine for ladder matches.

Implements the standard ELO formula with integer ratings:
  Expected score: E_A = 1 / (1 + 10^((R_B - R_A) / 400))
  New rating: R'_A = trunc(R_A + K * (S_A - E_A)), floored at 0

Where:
  R_A, R_B = Ratings of players A and B before the match
  S_A = 1 for a win, 0 for a loss, 0.5 for equal scores
  K = How much ratings change per match (volatility factor)

It also provides the two derived rankings used by the matchmaker:
  performance = points_per_win * wins in the last N created matches
  weighted    = 0.6 * rating + 0.2 * matches_played + 0.2 * performance
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ladder.engine.constants import (
    DEFAULT_RATING,
    K_FACTOR,
    PERFORMANCE_DEFAULTS,
    RATING_SPREAD,
    WEIGHTED_SCORE_WEIGHTS,
)
from ladder.engine.errors import PlayerNotFound
from ladder.engine.snapshots import MatchHistory, PlayerSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcome:
    """
    Result of rating a single match.

    Both new ratings are computed from the ratings before the match, so
    the outcome can be persisted as one unit.
    """
    player1_id: int
    player2_id: int
    player1_score: int
    player2_score: int

    # Ratings before the match
    player1_before: int
    player2_before: int

    # Ratings after the match
    player1_after: int
    player2_after: int

    # Expected scores (before the match)
    expected1: float
    expected2: float

    # Constant used
    k_factor: int

    @property
    def player1_change(self) -> int:
        return self.player1_after - self.player1_before

    @property
    def player2_change(self) -> int:
        return self.player2_after - self.player2_before

    @property
    def is_draw(self) -> bool:
        return self.player1_score == self.player2_score

    @property
    def winner_id(self) -> Optional[int]:
        """Higher score wins, even by a single point. None for equal scores."""
        if self.player1_score > self.player2_score:
            return self.player1_id
        if self.player2_score > self.player1_score:
            return self.player2_id
        return None

    @property
    def loser_id(self) -> Optional[int]:
        winner = self.winner_id
        if winner is None:
            return None
        return self.player2_id if winner == self.player1_id else self.player1_id

    @property
    def was_upset(self) -> bool:
        """Whether the lower-rated player won."""
        if self.winner_id == self.player1_id:
            return self.player1_before < self.player2_before
        if self.winner_id == self.player2_id:
            return self.player2_before < self.player1_before
        return False

    def __repr__(self) -> str:
        return (
            f"<MatchOutcome(p{self.player1_id}: {self.player1_before} -> {self.player1_after}, "
            f"p{self.player2_id}: {self.player2_before} -> {self.player2_after}, "
            f"winner={self.winner_id})>"
        )


def actual_score(player_score: int, opponent_score: int) -> float:
    """1 for a strictly higher score, 0 for strictly lower, 0.5 when equal."""
    if player_score > opponent_score:
        return 1.0
    if player_score < opponent_score:
        return 0.0
    return 0.5


class RatingEngine:
    """
    Ladder rating calculator.

    Usage:
        engine = RatingEngine()               # K=32
        engine = RatingEngine.from_settings(settings)

        outcome = engine.apply_match_result(alice, bob, 10, 5)
        print(outcome.player1_after, outcome.player2_after)

        prob = engine.compute_expected_score(1000, 1200)   # ~0.2403
    """

    def __init__(
        self,
        k_factor: Optional[int] = None,
        spread: Optional[int] = None,
        default_rating: Optional[int] = None,
        performance_window: Optional[int] = None,
        points_per_win: Optional[int] = None,
        weights: Optional[dict] = None,
    ):
        self.k_factor = k_factor if k_factor is not None else K_FACTOR
        self.spread = spread if spread is not None else RATING_SPREAD
        self.default_rating = default_rating if default_rating is not None else DEFAULT_RATING
        self.performance_window = (
            performance_window if performance_window is not None
            else PERFORMANCE_DEFAULTS["window"]
        )
        self.points_per_win = (
            points_per_win if points_per_win is not None
            else PERFORMANCE_DEFAULTS["points_per_win"]
        )
        self.weights = {**WEIGHTED_SCORE_WEIGHTS, **(weights or {})}

    @classmethod
    def from_settings(cls, settings) -> "RatingEngine":
        return cls(
            k_factor=settings.k_factor,
            spread=settings.rating_spread,
            default_rating=settings.default_rating,
            performance_window=settings.performance_window,
            points_per_win=settings.performance_points_per_win,
            weights={
                "rating": settings.weight_rating,
                "matches_played": settings.weight_matches_played,
                "performance": settings.weight_performance,
            },
        )

    def compute_expected_score(self, rating: float, opponent_rating: float) -> float:
        """
        Probability-like expected score for a player against an opponent.

        Symmetric: compute_expected_score(a, b) + compute_expected_score(b, a) == 1.

        Example:
            engine.compute_expected_score(1000, 1200)  # ~0.2403
        """
        exponent = (opponent_rating - rating) / self.spread
        try:
            return 1.0 / (1.0 + math.pow(10.0, exponent))
        except OverflowError:
            # 10^x overflows only for huge positive gaps: the player is hopeless
            return 0.0

    def new_rating(self, rating: int, opponent_rating: int, player_score: int, opponent_score: int) -> int:
        """
        Rating after one match, truncated toward zero and floored at 0.

        Example:
            engine.new_rating(1000, 1200, 10, 5)  # 1024
        """
        expected = self.compute_expected_score(rating, opponent_rating)
        score = actual_score(player_score, opponent_score)
        updated = int(rating + self.k_factor * (score - expected))
        return max(updated, 0)

    def apply_match_result(
        self,
        player1: Optional[PlayerSnapshot],
        player2: Optional[PlayerSnapshot],
        score1: int,
        score2: int,
    ) -> MatchOutcome:
        """
        Rate a match between two players.

        Both players' ratings are captured before either is updated, so the
        outcome does not depend on which player is evaluated first.

        Args:
            player1: First player's snapshot (None if unresolved)
            player2: Second player's snapshot (None if unresolved)
            score1: First player's match score
            score2: Second player's match score

        Returns:
            MatchOutcome with ratings before and after for both players

        Raises:
            PlayerNotFound: If either player is None
            ValueError: If both snapshots are the same player
        """
        if player1 is None:
            raise PlayerNotFound(None)
        if player2 is None:
            raise PlayerNotFound(None)
        if player1.id == player2.id:
            raise ValueError(f"A player cannot play against themselves (id={player1.id})")

        before1 = player1.rating
        before2 = player2.rating

        after1 = self.new_rating(before1, before2, score1, score2)
        after2 = self.new_rating(before2, before1, score2, score1)

        outcome = MatchOutcome(
            player1_id=player1.id,
            player2_id=player2.id,
            player1_score=score1,
            player2_score=score2,
            player1_before=before1,
            player2_before=before2,
            player1_after=after1,
            player2_after=after2,
            expected1=self.compute_expected_score(before1, before2),
            expected2=self.compute_expected_score(before2, before1),
            k_factor=self.k_factor,
        )
        logger.debug("Rated match: %r", outcome)
        return outcome

    def performance_score(self, player_id: int, history: MatchHistory) -> int:
        """
        Recent form: points_per_win for each win among the player's most
        recently created matches (all of them if fewer than the window).
        """
        recent = history.recent_matches(player_id, self.performance_window)
        wins = sum(1 for m in recent if m.winner_id == player_id)
        return self.points_per_win * wins

    def weighted_score(self, player: PlayerSnapshot, history: MatchHistory) -> float:
        """Blend of rating, experience and recent form used to rank players for pairing."""
        performance = self.performance_score(player.id, history)
        score = (
            self.weights["rating"] * player.rating
            + self.weights["matches_played"] * player.matches_played
            + self.weights["performance"] * performance
        )
        logger.debug("Weighted score for player %s: %.2f", player.id, score)
        return score
