"""Exception types raised by the ladder engine and service layer."""

from __future__ import annotations


class LadderError(Exception):
    """Base class for all ladder errors."""


class NotEnoughPlayers(LadderError):
    """Pairing was requested on a pool with fewer than two players."""

    def __init__(self, pool_size: int, division_id: int | None = None):
        self.pool_size = pool_size
        self.division_id = division_id
        where = f" in division {division_id}" if division_id is not None else ""
        super().__init__(
            f"Not enough players signed in for matchmaking{where}: "
            f"need at least 2, got {pool_size}"
        )


class PlayerNotFound(LadderError):
    """A player identity could not be resolved."""

    def __init__(self, player_id: int | None):
        self.player_id = player_id
        super().__init__(f"Player not found with id: {player_id}")


class DivisionNotFound(LadderError):
    def __init__(self, division_id: int):
        self.division_id = division_id
        super().__init__(f"Division not found with id: {division_id}")


class LeagueNotFound(LadderError):
    def __init__(self, league_id: int):
        self.league_id = league_id
        super().__init__(f"League not found with id: {league_id}")


class MatchNotFound(LadderError):
    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match not found with id: {match_id}")


class InvalidDivisionConfiguration(LadderError):
    """A league's divisions cannot support the requested operation."""


class InvalidMatchResult(LadderError):
    """A match result cannot be recorded (self-match or a draw)."""


class InvalidLeagueMembership(LadderError):
    """A player is not a member of the league the operation targets."""
