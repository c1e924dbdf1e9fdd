"""
Service layer: store lookups + engine calls + write-back.

Each service wraps one SQLAlchemy session and only flushes; committing is
left to the caller so every operation is atomic.
"""

from ladder.services.leagues import LeagueService
from ladder.services.matches import MatchService
from ladder.services.matchmaking import MatchmakingService
from ladder.services.players import PlayerService

__all__ = [
    "LeagueService",
    "MatchService",
    "MatchmakingService",
    "PlayerService",
]
