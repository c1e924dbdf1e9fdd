"""
Player service: registration, sign-in state, activity and standings.

Signing in is what makes a player eligible for matchmaking in their
division; it also counts as activity for the weekly decay.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ladder.config import settings
from ladder.db.models import Player
from ladder.db.repository import LadderRepository
from ladder.engine.errors import PlayerNotFound

logger = logging.getLogger(__name__)


class PlayerService:
    """
    Player lifecycle operations.

    Usage:
        service = PlayerService(session)
        player = service.register("alice")
        service.sign_in(player.id)
    """

    def __init__(self, session: Session):
        self.session = session
        self.repo = LadderRepository(session)

    def register(
        self,
        name: str,
        rating: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Player:
        """Create a new player at the default rating (or the one given)."""
        if rating is not None and rating < 0:
            raise ValueError(f"rating must be non-negative, got {rating}")
        player = Player(
            name=name,
            rating=rating if rating is not None else settings.default_rating,
            matches_played=0,
            last_active_date=today or date.today(),
            signed_in=False,
        )
        self.session.add(player)
        self.session.flush()
        logger.info("Registered player %s (%s) at rating %s", player.id, name, player.rating)
        return player

    def get(self, player_id: int) -> Player:
        return self.repo.require_player(player_id)

    def get_id_by_name(self, name: str) -> int:
        player = self.repo.get_player_by_name(name)
        if player is None:
            raise PlayerNotFound(None)
        return player.id

    def list_players(self) -> list[Player]:
        return self.repo.all_players()

    def update(
        self,
        player_id: int,
        name: Optional[str] = None,
        rating: Optional[int] = None,
        signed_in: Optional[bool] = None,
    ) -> Player:
        """Update editable player fields; None leaves a field unchanged."""
        player = self.repo.require_player(player_id)
        if name is not None:
            player.name = name
        if rating is not None:
            if rating < 0:
                raise ValueError(f"rating must be non-negative, got {rating}")
            player.rating = rating
        if signed_in is not None:
            player.signed_in = signed_in
        self.session.flush()
        logger.info("Updated player %s: %r", player_id, player)
        return player

    def delete(self, player_id: int) -> bool:
        """Remove a player. Returns False if no such player exists."""
        player = self.repo.get_player(player_id)
        if player is None:
            return False
        self.session.delete(player)
        self.session.flush()
        logger.info("Deleted player %s", player_id)
        return True

    def sign_in(self, player_id: int, today: Optional[date] = None) -> Player:
        player = self.repo.require_player(player_id)
        player.signed_in = True
        player.last_active_date = today or date.today()
        self.session.flush()
        logger.info("Signed in player %s", player_id)
        return player

    def sign_out(self, player_id: int) -> Player:
        player = self.repo.require_player(player_id)
        player.signed_in = False
        self.session.flush()
        logger.info("Signed out player %s", player_id)
        return player

    def touch_activity(self, player_id: int, today: Optional[date] = None) -> Player:
        """Mark the player active today (resets the decay clock)."""
        player = self.repo.require_player(player_id)
        player.last_active_date = today or date.today()
        self.session.flush()
        logger.debug("Updated activity date for player %s: %s", player_id, player.last_active_date)
        return player

    def signed_in_players(self, division_id: Optional[int] = None) -> list[Player]:
        return self.repo.signed_in_players(division_id)

    def division_standings(self, division_id: int) -> list[Player]:
        """Players of a division, highest rating first."""
        self.repo.require_division(division_id)
        return self.repo.players_in_division(division_id, order_by_rating=True)

    def record(self, player_id: int) -> tuple[int, int]:
        """(wins, losses) for a player."""
        self.repo.require_player(player_id)
        return self.repo.count_wins(player_id), self.repo.count_losses(player_id)
