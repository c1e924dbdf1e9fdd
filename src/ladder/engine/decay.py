"""
Batch rating transforms: inactivity decay, soft reset and hard reset.

These run over an explicit snapshot of players and return the rating
changes for the caller to persist. They keep no state between calls.

Decay:
    new_rating = trunc(rating * factor)   if today - last_active_date > inactive_days

    Applied once per elapsed period (weekly). Calling it twice in the same
    week decays twice; preventing that is the scheduler's job.

Soft reset (regression):
    new_rating = (rating + DEFAULT_RATING) // 2

    Pulls everyone halfway back to the baseline at season end without
    erasing standing entirely.

Hard reset:
    new_rating = DEFAULT_RATING
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from ladder.engine.constants import DECAY_DEFAULTS, DEFAULT_RATING
from ladder.engine.snapshots import PlayerSnapshot, RatingChange

logger = logging.getLogger(__name__)


def decay_rating(
    current_rating: int,
    days_inactive: int | None,
    inactive_days: int | None = None,
    factor: float | None = None,
) -> int:
    """
    Apply inactivity decay to a single rating.

    Args:
        current_rating: Player's current rating
        days_inactive: Days since the player was last active (None = unknown)
        inactive_days: Idle days allowed before decay. Default from DECAY_DEFAULTS.
        factor: Multiplier applied when decaying. Default from DECAY_DEFAULTS.

    Returns:
        Decayed rating (unchanged if within the grace period or unknown)

    Examples:
        decay_rating(1500, 3)    # -> 1500
        decay_rating(1500, 8)    # -> 1485
    """
    if inactive_days is None:
        inactive_days = DECAY_DEFAULTS["inactive_days"]
    if factor is None:
        factor = DECAY_DEFAULTS["factor"]

    if days_inactive is None or days_inactive <= inactive_days:
        return current_rating

    return int(current_rating * factor)


def regress_rating(current_rating: int, target_rating: int | None = None) -> int:
    """Move a rating halfway toward the baseline (integer division)."""
    if target_rating is None:
        target_rating = DEFAULT_RATING
    return (current_rating + target_rating) // 2


def apply_decay(
    players: Iterable[PlayerSnapshot],
    today: date,
    inactive_days: int | None = None,
    factor: float | None = None,
) -> list[RatingChange]:
    """
    Decay every player idle for longer than the grace period.

    Only players whose rating actually changes are returned. Players with
    no recorded activity date are skipped.
    """
    changes: list[RatingChange] = []
    for player in players:
        if player.last_active_date is None:
            continue
        days = (today - player.last_active_date).days
        new_rating = decay_rating(player.rating, days, inactive_days, factor)
        if new_rating != player.rating:
            changes.append(RatingChange(player.id, player.rating, new_rating))

    logger.debug("Decay as of %s affects %d players", today, len(changes))
    return changes


def apply_regression(
    players: Iterable[PlayerSnapshot],
    target_rating: int | None = None,
) -> list[RatingChange]:
    """Soft reset: one RatingChange per player, including unchanged ones."""
    return [
        RatingChange(p.id, p.rating, regress_rating(p.rating, target_rating))
        for p in players
    ]


def apply_hard_reset(
    players: Iterable[PlayerSnapshot],
    target_rating: int | None = None,
) -> list[RatingChange]:
    """Reset every player to the baseline rating."""
    if target_rating is None:
        target_rating = DEFAULT_RATING
    return [RatingChange(p.id, p.rating, target_rating) for p in players]
