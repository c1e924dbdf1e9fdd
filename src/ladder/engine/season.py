"""
End-of-season promotion, demotion and rating regression.

For a league whose divisions are ranked 1..N (1 = top):

1. Walk the divisions in rank order.
2. Sort each division's players by rating, highest first.
3. Cohort size n = player_count // 10 (divisions under 10 players move nobody).
4. Unless it is the top division, the best n move up one division.
5. Unless it is the bottom division, the worst n move down one division.
6. Every player in the league is then regressed halfway toward 1500.

Cohorts come from the snapshot handed in, read once per division, so a
player demoted into a division is never promoted straight back out in the
same run. Because 2n <= player_count, a middle-division player moves in at
most one direction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ladder.engine.constants import DEFAULT_RATING, PROMOTION_DIVISOR
from ladder.engine.decay import apply_regression
from ladder.engine.divisions import order_by_rank
from ladder.engine.errors import InvalidDivisionConfiguration
from ladder.engine.snapshots import (
    DivisionReassignment,
    DivisionSnapshot,
    PlayerSnapshot,
    RatingChange,
)

logger = logging.getLogger(__name__)


@dataclass
class SeasonTransition:
    """Everything a season-end run wants written back to the store."""

    league_id: int
    reassignments: list[DivisionReassignment] = field(default_factory=list)
    rating_changes: list[RatingChange] = field(default_factory=list)

    @property
    def promotions(self) -> list[DivisionReassignment]:
        return [r for r in self.reassignments if r.reason == "promotion"]

    @property
    def demotions(self) -> list[DivisionReassignment]:
        return [r for r in self.reassignments if r.reason == "demotion"]

    def new_division_of(self, player_id: int) -> Optional[int]:
        for reassignment in self.reassignments:
            if reassignment.player_id == player_id:
                return reassignment.to_division_id
        return None

    def summary(self) -> str:
        return (
            f"league={self.league_id} promoted={len(self.promotions)} "
            f"demoted={len(self.demotions)} regressed={len(self.rating_changes)}"
        )


class SeasonProcessor:
    """
    Computes the season-end transition for one league.

    Usage:
        processor = SeasonProcessor()
        transition = processor.process_season_end(league_id, divisions, players_by_division)
        for move in transition.reassignments:
            store.move(move.player_id, move.to_division_id)
        for change in transition.rating_changes:
            store.set_rating(change.player_id, change.rating_after)
    """

    def __init__(self, promotion_divisor: Optional[int] = None, default_rating: Optional[int] = None):
        self.promotion_divisor = promotion_divisor if promotion_divisor is not None else PROMOTION_DIVISOR
        self.default_rating = default_rating if default_rating is not None else DEFAULT_RATING

    @classmethod
    def from_settings(cls, settings) -> "SeasonProcessor":
        return cls(
            promotion_divisor=settings.promotion_divisor,
            default_rating=settings.default_rating,
        )

    def cohort_size(self, player_count: int) -> int:
        return player_count // self.promotion_divisor

    def process_season_end(
        self,
        league_id: int,
        divisions: Sequence[DivisionSnapshot],
        players_by_division: Mapping[int, Sequence[PlayerSnapshot]],
        league_players: Optional[Sequence[PlayerSnapshot]] = None,
    ) -> SeasonTransition:
        """
        Compute promotions, demotions and the regression for a league.

        Args:
            league_id: League being processed
            divisions: The league's divisions (any order; sorted by rank here)
            players_by_division: Pre-transition players of each division, by division id
            league_players: Everyone to regress. Defaults to all players in
                            players_by_division.

        Returns:
            SeasonTransition with reassignments and rating changes

        Raises:
            InvalidDivisionConfiguration: If the league has no divisions or a
                                          division belongs to another league
        """
        if not divisions:
            raise InvalidDivisionConfiguration(
                f"Cannot process season end: league {league_id} has no divisions"
            )
        for division in divisions:
            if division.league_id is not None and division.league_id != league_id:
                raise InvalidDivisionConfiguration(
                    f"Division {division.id} belongs to league {division.league_id}, not {league_id}"
                )

        ordered = order_by_rank(divisions)
        transition = SeasonTransition(league_id=league_id)
        logger.info("[START] End of season processing for league %s", league_id)

        for i, division in enumerate(ordered):
            players = sorted(
                players_by_division.get(division.id, ()),
                key=lambda p: (-p.rating, p.id),
            )
            n = self.cohort_size(len(players))
            if n == 0:
                continue

            if i > 0:
                higher = ordered[i - 1]
                promoted = players[:n]
                transition.reassignments.extend(
                    DivisionReassignment(p.id, division.id, higher.id, "promotion") for p in promoted
                )
                logger.info(
                    "Promoted players from division %s to division %s: %s",
                    division.id, higher.id, [p.id for p in promoted],
                )

            if i < len(ordered) - 1:
                lower = ordered[i + 1]
                demoted = players[len(players) - n:]
                transition.reassignments.extend(
                    DivisionReassignment(p.id, division.id, lower.id, "demotion") for p in demoted
                )
                logger.info(
                    "Demoted players from division %s to division %s: %s",
                    division.id, lower.id, [p.id for p in demoted],
                )

        if league_players is None:
            seen: dict[int, PlayerSnapshot] = {}
            for division in ordered:
                for player in players_by_division.get(division.id, ()):
                    seen.setdefault(player.id, player)
            league_players = list(seen.values())

        transition.rating_changes = apply_regression(league_players, self.default_rating)
        logger.info("[END] End of season processing: %s", transition.summary())
        return transition
