"""
Matchmaking and rating engine.

Pure computation over player, division and match snapshots:
- ELO-style rating updates with a configurable K factor
- Recent-form performance and weighted ranking scores
- Three pairing strategies (nearest rating, weighted adjacent, optimal greedy)
- Season-end promotion/demotion with rating regression
- Weekly inactivity decay, soft reset and hard reset
"""

from ladder.engine.calculator import MatchOutcome, RatingEngine, actual_score
from ladder.engine.constants import DEFAULT_RATING, K_FACTOR
from ladder.engine.decay import (
    apply_decay,
    apply_hard_reset,
    apply_regression,
    decay_rating,
    regress_rating,
)
from ladder.engine.divisions import distribute_players, next_rank, repack_ranks
from ladder.engine.errors import (
    DivisionNotFound,
    InvalidDivisionConfiguration,
    InvalidLeagueMembership,
    InvalidMatchResult,
    LadderError,
    LeagueNotFound,
    MatchNotFound,
    NotEnoughPlayers,
    PlayerNotFound,
)
from ladder.engine.matchmaker import DEFAULT_STRATEGY, Matchmaker, PairingStrategy
from ladder.engine.season import SeasonProcessor, SeasonTransition
from ladder.engine.snapshots import (
    DivisionReassignment,
    DivisionSnapshot,
    InMemoryMatchHistory,
    MatchHistory,
    MatchRecord,
    Pairing,
    PlayerSnapshot,
    RatingChange,
)

__all__ = [
    # Rating
    "RatingEngine",
    "MatchOutcome",
    "actual_score",
    "DEFAULT_RATING",
    "K_FACTOR",
    # Batch transforms
    "apply_decay",
    "apply_regression",
    "apply_hard_reset",
    "decay_rating",
    "regress_rating",
    # Divisions
    "distribute_players",
    "next_rank",
    "repack_ranks",
    # Matchmaking
    "Matchmaker",
    "PairingStrategy",
    "DEFAULT_STRATEGY",
    # Seasons
    "SeasonProcessor",
    "SeasonTransition",
    # Snapshots
    "PlayerSnapshot",
    "DivisionSnapshot",
    "MatchRecord",
    "MatchHistory",
    "InMemoryMatchHistory",
    "Pairing",
    "RatingChange",
    "DivisionReassignment",
    # Errors
    "LadderError",
    "NotEnoughPlayers",
    "PlayerNotFound",
    "DivisionNotFound",
    "LeagueNotFound",
    "MatchNotFound",
    "InvalidDivisionConfiguration",
    "InvalidMatchResult",
    "InvalidLeagueMembership",
]
