"""
Player pairing for a single round.

Three interchangeable strategies work over the same pool (the signed-in
players of one division):

1. NEAREST_RATING: walk the pool from the lowest rating up and pair each
   player with whichever rating neighbour has the smaller
   (rating gap)^2 + rematch penalty.
2. WEIGHTED_ADJACENT: sort by weighted score, highest first, and pair
   neighbours 1-2, 3-4, ...
3. OPTIMAL_GREEDY (default): sort by weighted score, lowest first; each
   unpaired player takes the remaining player with the smallest
   |weighted gap| + rematch penalty.

OPTIMAL_GREEDY is greedy in its outer order, not a minimum-weight perfect
matching. Its output for a given pool is part of the contract, so it must
not be swapped for an assignment solver.

Every strategy breaks sort ties by player id, so the output does not depend
on the order the pool was loaded in. Odd pools leave one player unpaired.
"""

from __future__ import annotations

import bisect
import logging
from enum import Enum
from typing import Optional, Sequence

from ladder.engine.calculator import RatingEngine
from ladder.engine.constants import REMATCH_PENALTY
from ladder.engine.errors import NotEnoughPlayers
from ladder.engine.snapshots import InMemoryMatchHistory, MatchHistory, Pairing, PlayerSnapshot

logger = logging.getLogger(__name__)


class PairingStrategy(str, Enum):
    NEAREST_RATING = "nearest_rating"
    WEIGHTED_ADJACENT = "weighted_adjacent"
    OPTIMAL_GREEDY = "optimal_greedy"


DEFAULT_STRATEGY = PairingStrategy.OPTIMAL_GREEDY


class Matchmaker:
    """
    Produces disjoint pairs from a pool of eligible players.

    Usage:
        matchmaker = Matchmaker()
        pairs = matchmaker.pair_players(pool, PairingStrategy.NEAREST_RATING, history)
        for pair in pairs:
            print(pair.player1_id, "vs", pair.player2_id)
    """

    def __init__(self, engine: Optional[RatingEngine] = None, rematch_penalty: Optional[float] = None):
        self.engine = engine or RatingEngine()
        self.rematch_penalty = rematch_penalty if rematch_penalty is not None else REMATCH_PENALTY

    @classmethod
    def from_settings(cls, settings) -> "Matchmaker":
        return cls(
            engine=RatingEngine.from_settings(settings),
            rematch_penalty=settings.rematch_penalty,
        )

    def pair_players(
        self,
        pool: Sequence[PlayerSnapshot],
        strategy: PairingStrategy | str = DEFAULT_STRATEGY,
        history: Optional[MatchHistory] = None,
        division_id: Optional[int] = None,
    ) -> list[Pairing]:
        """
        Pair the pool using the named strategy.

        Args:
            pool: Eligible players (normally the signed-in players of a division)
            strategy: Which pairing strategy to use
            history: Match history for rematch penalties and recent form
            division_id: Only used for error reporting and logging

        Returns:
            Disjoint pairs. An odd pool leaves exactly one player out.

        Raises:
            NotEnoughPlayers: If the pool has fewer than two players
            ValueError: If the strategy is unknown or a player appears twice
        """
        strategy = PairingStrategy(strategy)
        if len(pool) < 2:
            raise NotEnoughPlayers(len(pool), division_id)

        ids = [p.id for p in pool]
        if len(set(ids)) != len(ids):
            raise ValueError("Player pool contains duplicate player ids")

        if history is None:
            history = InMemoryMatchHistory()

        if strategy is PairingStrategy.NEAREST_RATING:
            pairs = self._pair_nearest_rating(pool, history)
        elif strategy is PairingStrategy.WEIGHTED_ADJACENT:
            pairs = self._pair_weighted_adjacent(pool, history)
        else:
            pairs = self._pair_optimal_greedy(pool, history)

        paired = {pid for pair in pairs for pid in pair.as_tuple()}
        unpaired = [pid for pid in ids if pid not in paired]
        logger.info(
            "Paired %d players into %d pairs (strategy=%s, division=%s, unpaired=%s)",
            len(pool), len(pairs), strategy.value, division_id, unpaired,
        )
        return pairs

    def compatibility_penalty(self, player_a_id: int, player_b_id: int, history: MatchHistory) -> float:
        """Penalty for pairing two players who have met before."""
        return history.head_to_head_count(player_a_id, player_b_id) * self.rematch_penalty

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _pair_nearest_rating(self, pool: Sequence[PlayerSnapshot], history: MatchHistory) -> list[Pairing]:
        by_id = {p.id: p for p in pool}
        # Sorted (rating, id) keys give predecessor/successor lookup by bisection
        keys = sorted((p.rating, p.id) for p in pool)
        pairs: list[Pairing] = []

        while len(keys) > 1:
            key = keys.pop(0)
            player = by_id[key[1]]

            index = bisect.bisect_left(keys, key)
            lower_index = index - 1 if index > 0 else None
            higher_index = index if index < len(keys) else None

            chosen = self._nearest_neighbour(player, keys, lower_index, higher_index, by_id, history)
            if chosen is None:
                break
            partner_key = keys.pop(chosen)
            pairs.append(Pairing(player.id, partner_key[1]))
            logger.debug("Matched players (nearest rating): %s vs %s", player.id, partner_key[1])

        return pairs

    def _nearest_neighbour(
        self,
        player: PlayerSnapshot,
        keys: list[tuple[int, int]],
        lower_index: Optional[int],
        higher_index: Optional[int],
        by_id: dict[int, PlayerSnapshot],
        history: MatchHistory,
    ) -> Optional[int]:
        if lower_index is None and higher_index is None:
            return None
        if lower_index is None:
            return higher_index
        if higher_index is None:
            return lower_index

        lower = by_id[keys[lower_index][1]]
        higher = by_id[keys[higher_index][1]]
        lower_diff = (player.rating - lower.rating) ** 2 + self.compatibility_penalty(player.id, lower.id, history)
        higher_diff = (player.rating - higher.rating) ** 2 + self.compatibility_penalty(player.id, higher.id, history)

        # Exact ties go to the higher neighbour
        return lower_index if lower_diff < higher_diff else higher_index

    def _pair_weighted_adjacent(self, pool: Sequence[PlayerSnapshot], history: MatchHistory) -> list[Pairing]:
        scores = {p.id: self.engine.weighted_score(p, history) for p in pool}
        ordered = sorted(pool, key=lambda p: (-scores[p.id], p.id))

        pairs = [
            Pairing(ordered[i].id, ordered[i + 1].id)
            for i in range(0, len(ordered) - 1, 2)
        ]
        for pair in pairs:
            logger.debug("Matched players (weighted): %s vs %s", pair.player1_id, pair.player2_id)
        return pairs

    def _pair_optimal_greedy(self, pool: Sequence[PlayerSnapshot], history: MatchHistory) -> list[Pairing]:
        scores = {p.id: self.engine.weighted_score(p, history) for p in pool}
        ordered = sorted(pool, key=lambda p: (scores[p.id], p.id))
        used = [False] * len(ordered)
        pairs: list[Pairing] = []

        for i, player in enumerate(ordered):
            if used[i]:
                continue

            best_index = -1
            best_difference = float("inf")
            for j in range(i + 1, len(ordered)):
                if used[j]:
                    continue
                candidate = ordered[j]
                difference = abs(scores[player.id] - scores[candidate.id])
                difference += self.compatibility_penalty(player.id, candidate.id, history)
                if difference < best_difference:
                    best_difference = difference
                    best_index = j

            if best_index != -1:
                used[i] = used[best_index] = True
                pairs.append(Pairing(player.id, ordered[best_index].id))
                logger.debug(
                    "Optimally matched players: %s vs %s (cost=%.2f)",
                    player.id, ordered[best_index].id, best_difference,
                )

        return pairs
