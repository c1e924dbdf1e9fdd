"""
Match service: record results and query match history.

Recording a match is a single unit of work:
1. Resolve and row-lock both players (fail fast if either is missing)
2. Rate the match from both players' current ratings
3. Store the match with ratings before/after and the derived winner/loser
4. Write back both ratings, bump matches_played, mark both active

Nothing is committed here; the caller's session commits or rolls back
the whole thing (see ladder.db.get_session).

Usage:
    with get_session() as session:
        match = MatchService(session).record_match(1, 2, 10, 5)
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ladder.config import settings
from ladder.db.models import Match
from ladder.db.repository import LadderRepository
from ladder.engine.calculator import MatchOutcome, RatingEngine
from ladder.engine.errors import InvalidMatchResult, PlayerNotFound

logger = logging.getLogger(__name__)


class MatchService:
    """Records matches and answers history questions."""

    def __init__(self, session: Session, engine: Optional[RatingEngine] = None):
        self.session = session
        self.repo = LadderRepository(session)
        self.engine = engine or RatingEngine.from_settings(settings)

    def record_match(
        self,
        player1_id: int,
        player2_id: int,
        score1: int,
        score2: int,
        match_datetime: Optional[datetime] = None,
    ) -> Match:
        """
        Record a finished match and update both players' ratings.

        Raises:
            InvalidMatchResult: Same player twice, or equal scores (no draws)
            PlayerNotFound: If either player does not exist
        """
        if player1_id == player2_id:
            raise InvalidMatchResult(f"Player {player1_id} cannot play against themselves")
        # actual_score() rates a draw at 0.5, but a Match row needs a distinct
        # winner and loser, so equal scores stop here rather than half-recording.
        if score1 == score2:
            raise InvalidMatchResult(
                f"Draws cannot be recorded ({score1}-{score2}); the higher score must win"
            )

        players = self.repo.lock_players([player1_id, player2_id])
        player1 = players.get(player1_id)
        player2 = players.get(player2_id)
        if player1 is None:
            raise PlayerNotFound(player1_id)
        if player2 is None:
            raise PlayerNotFound(player2_id)

        outcome: MatchOutcome = self.engine.apply_match_result(
            player1.to_snapshot(), player2.to_snapshot(), score1, score2
        )

        played_at = match_datetime or datetime.utcnow()
        match = Match(
            player1_id=player1_id,
            player2_id=player2_id,
            player1_score=score1,
            player2_score=score2,
            player1_rating_at_match_time=outcome.player1_before,
            player2_rating_at_match_time=outcome.player2_before,
            player1_rating_after_match=outcome.player1_after,
            player2_rating_after_match=outcome.player2_after,
            winner_id=outcome.winner_id,
            loser_id=outcome.loser_id,
            match_datetime=played_at,
        )
        self.session.add(match)

        for player, new_rating in ((player1, outcome.player1_after), (player2, outcome.player2_after)):
            logger.debug(
                "Updating rating for player %s: current=%s, new=%s",
                player.id, player.rating, new_rating,
            )
            player.rating = new_rating
            player.matches_played += 1
            player.last_active_date = played_at.date()

        self.session.flush()
        logger.info(
            "Recorded match %s: player %s %s -> %s, player %s %s -> %s",
            match.id,
            player1_id, outcome.player1_before, outcome.player1_after,
            player2_id, outcome.player2_before, outcome.player2_after,
        )
        return match

    def get(self, match_id: int) -> Match:
        return self.repo.require_match(match_id)

    def list_matches(self) -> list[Match]:
        return self.repo.all_matches()

    def delete(self, match_id: int) -> bool:
        """
        Delete a match record. Returns False if no such match exists.

        Ratings already applied are not rolled back.
        """
        match = self.repo.get_match(match_id)
        if match is None:
            return False
        self.session.delete(match)
        self.session.flush()
        logger.info("Deleted match %s", match_id)
        return True

    def matches_for_player(self, player_id: int) -> list[Match]:
        """A player's matches in the order they were played."""
        self.repo.require_player(player_id)
        return self.repo.matches_for_player(player_id)

    def head_to_head_count(self, player1_id: int, player2_id: int) -> int:
        return self.repo.head_to_head_count(player1_id, player2_id)

    def recent_performance(self, player_id: int) -> int:
        """Performance score from the player's most recently recorded matches."""
        self.repo.require_player(player_id)
        return self.engine.performance_score(player_id, self.repo)
