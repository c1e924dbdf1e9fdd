"""Pair the signed-in players of a division for one round."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ladder.config import settings
from ladder.db.repository import LadderRepository
from ladder.engine.matchmaker import Matchmaker, PairingStrategy
from ladder.engine.snapshots import Pairing

logger = logging.getLogger(__name__)


class MatchmakingService:
    """
    Loads a division's pool and history and hands them to the Matchmaker.

    Pairings are returned to the caller, not stored; match rows are only
    created once results come in (MatchService.record_match).
    """

    def __init__(self, session: Session, matchmaker: Optional[Matchmaker] = None):
        self.session = session
        self.repo = LadderRepository(session)
        self.matchmaker = matchmaker or Matchmaker.from_settings(settings)

    def pair_division(
        self,
        division_id: int,
        strategy: PairingStrategy | str | None = None,
    ) -> list[Pairing]:
        """
        Pair the division's signed-in players.

        Raises:
            DivisionNotFound: If the division does not exist
            NotEnoughPlayers: If fewer than two players are signed in
        """
        self.repo.require_division(division_id)
        strategy = PairingStrategy(strategy or settings.default_pairing_strategy)
        pool = [p.to_snapshot() for p in self.repo.signed_in_players(division_id)]
        logger.info(
            "Matchmaking division %s: %d signed in, strategy=%s",
            division_id, len(pool), strategy.value,
        )
        return self.matchmaker.pair_players(pool, strategy, self.repo, division_id=division_id)
