"""
Division rank bookkeeping and initial player placement.

Division ranks within a league are always the contiguous run 1..N
(1 = top tier). Adding a division appends it at N+1; removing one
re-packs the remaining ranks in their existing order.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from ladder.engine.errors import InvalidDivisionConfiguration
from ladder.engine.snapshots import DivisionReassignment, DivisionSnapshot, PlayerSnapshot

logger = logging.getLogger(__name__)


def order_by_rank(divisions: Iterable[DivisionSnapshot]) -> list[DivisionSnapshot]:
    """Divisions sorted top tier first (ties on rank fall back to id)."""
    return sorted(divisions, key=lambda d: (d.rank, d.id))


def next_rank(divisions: Iterable[DivisionSnapshot]) -> int:
    """Rank for a division appended to the bottom of a league."""
    return max((d.rank for d in divisions), default=0) + 1


def repack_ranks(divisions: Iterable[DivisionSnapshot]) -> list[DivisionSnapshot]:
    """
    Renumber divisions 1..N keeping their relative order.

    Returns every division with its (possibly unchanged) new rank.

    Example:
        ranks [1, 3, 4] -> [1, 2, 3]
    """
    return [
        replace(division, rank=position)
        for position, division in enumerate(order_by_rank(divisions), start=1)
    ]


def distribute_players(
    players: Sequence[PlayerSnapshot],
    divisions: Sequence[DivisionSnapshot],
) -> list[DivisionReassignment]:
    """
    Place a league's players into its divisions by rating.

    Players are sorted by rating (highest first) and handed out in equal
    blocks of len(players) // len(divisions), top division first. Players
    left over after the blocks go to the bottom division.

    Raises:
        InvalidDivisionConfiguration: If there are no divisions
    """
    if not divisions:
        raise InvalidDivisionConfiguration("Cannot distribute players: league has no divisions")

    ordered_divisions = order_by_rank(divisions)
    ordered_players = sorted(players, key=lambda p: (-p.rating, p.id))
    block_size = len(ordered_players) // len(ordered_divisions)

    placements: list[DivisionReassignment] = []
    index = 0
    for division in ordered_divisions:
        for _ in range(block_size):
            player = ordered_players[index]
            placements.append(
                DivisionReassignment(player.id, player.division_id, division.id, "placement")
            )
            index += 1

    bottom = ordered_divisions[-1]
    for player in ordered_players[index:]:
        placements.append(DivisionReassignment(player.id, player.division_id, bottom.id, "placement"))

    logger.debug(
        "Distributed %d players over %d divisions (block size %d)",
        len(ordered_players), len(ordered_divisions), block_size,
    )
    return placements
