"""
League service: leagues, their ranked divisions, membership and seasons.

Division ranks stay contiguous 1..N per league: adding a division appends
it at the bottom, removing one re-packs the rest. End of season runs the
SeasonProcessor over a snapshot of the league and writes the resulting
moves and regressed ratings back in one flush.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ladder.config import settings
from ladder.db.models import Division, League, Player
from ladder.db.repository import LadderRepository
from ladder.engine.divisions import distribute_players, next_rank, repack_ranks
from ladder.engine.errors import InvalidDivisionConfiguration, InvalidLeagueMembership
from ladder.engine.season import SeasonProcessor, SeasonTransition
from ladder.engine.snapshots import DivisionReassignment

logger = logging.getLogger(__name__)


class LeagueService:
    """
    League and division management.

    Usage:
        service = LeagueService(session)
        league = service.create_league("Spring ladder")
        top = service.add_division(league.id, "Gold")
        service.distribute_players(league.id)
        transition = service.end_season(league.id)
    """

    def __init__(self, session: Session, processor: Optional[SeasonProcessor] = None):
        self.session = session
        self.repo = LadderRepository(session)
        self.processor = processor or SeasonProcessor.from_settings(settings)

    # ------------------------------------------------------------------
    # Leagues
    # ------------------------------------------------------------------

    def create_league(self, name: str) -> League:
        league = League(name=name)
        self.session.add(league)
        self.session.flush()
        logger.info("Created new league: %r", league)
        return league

    def get(self, league_id: int) -> League:
        return self.repo.require_league(league_id)

    def list_leagues(self) -> list[League]:
        return self.repo.all_leagues()

    def delete_league(self, league_id: int) -> None:
        """Delete a league, its divisions, and unassign its players."""
        league = self.repo.require_league(league_id)
        for player in self.repo.players_in_league(league_id):
            player.league_id = None
            player.division_id = None
        for division in self.repo.divisions_in_league(league_id):
            self._unassign_division_players(division.id)
            self.session.delete(division)
        self.session.delete(league)
        self.session.flush()
        logger.info("Deleted league with id %s", league_id)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_player(self, league_id: int, player_id: int) -> Player:
        self.repo.require_league(league_id)
        player = self.repo.require_player(player_id)
        if player.league_id != league_id:
            # A division belongs to exactly one league
            player.division_id = None
        player.league_id = league_id
        self.session.flush()
        logger.info("Added player %s to league %s", player_id, league_id)
        return player

    def remove_player(self, league_id: int, player_id: int) -> Player:
        player = self.repo.require_player(player_id)
        if player.league_id != league_id:
            raise InvalidLeagueMembership(
                f"Player {player_id} is not in league {league_id}"
            )
        player.league_id = None
        player.division_id = None
        self.session.flush()
        logger.info("Removed player %s from league %s", player_id, league_id)
        return player

    def players(self, league_id: int) -> list[Player]:
        self.repo.require_league(league_id)
        return self.repo.players_in_league(league_id)

    # ------------------------------------------------------------------
    # Divisions
    # ------------------------------------------------------------------

    def divisions(self, league_id: int) -> list[Division]:
        """A league's divisions, top tier first."""
        self.repo.require_league(league_id)
        return self.repo.divisions_in_league(league_id)

    def add_division(self, league_id: int, name: str = "") -> Division:
        """Append a new division below the league's current bottom tier."""
        self.repo.require_league(league_id)
        existing = [d.to_snapshot() for d in self.repo.divisions_in_league(league_id)]
        division = Division(name=name, league_id=league_id, rank=next_rank(existing))
        self.session.add(division)
        self.session.flush()
        logger.info("Added division %r to league %s", division, league_id)
        return division

    def remove_division(self, league_id: int, division_id: int) -> list[Division]:
        """
        Delete a division and re-pack the remaining ranks to 1..N-1.

        Players of the removed division stay in the league but become
        unassigned.

        Returns:
            The league's remaining divisions, top tier first
        """
        division = self.repo.require_division(division_id)
        if division.league_id != league_id:
            raise InvalidDivisionConfiguration(
                f"Division {division_id} is not in league {league_id}"
            )

        self._unassign_division_players(division_id)
        self.session.delete(division)
        self.session.flush()

        remaining = self.repo.divisions_in_league(league_id)
        by_id = {d.id: d for d in remaining}
        for packed in repack_ranks(d.to_snapshot() for d in remaining):
            by_id[packed.id].rank = packed.rank
        self.session.flush()

        logger.info(
            "Removed division %s from league %s; ranks re-packed to %s",
            division_id, league_id, [d.rank for d in remaining],
        )
        return self.repo.divisions_in_league(league_id)

    def distribute_players(self, league_id: int) -> list[DivisionReassignment]:
        """
        Place every league player into a division by rating.

        Raises:
            InvalidDivisionConfiguration: If the league has no divisions
        """
        self.repo.require_league(league_id)
        divisions = self.repo.divisions_in_league(league_id)
        if not divisions:
            logger.warning("No divisions found in league %s", league_id)
        players = self.repo.players_in_league(league_id)

        logger.info("[START] Player distribution in divisions for league %s", league_id)
        placements = distribute_players(
            [p.to_snapshot() for p in players],
            [d.to_snapshot() for d in divisions],
        )
        self._apply_reassignments(placements, {p.id: p for p in players})
        self.session.flush()
        logger.info("[END] Player distribution in divisions for league %s", league_id)
        return placements

    # ------------------------------------------------------------------
    # Seasons
    # ------------------------------------------------------------------

    def end_season(self, league_id: int) -> SeasonTransition:
        """
        Promote, demote and regress a league at the end of a season.

        The whole league is read once, the transition is computed from that
        snapshot, and then every move and rating is written back.

        Raises:
            InvalidDivisionConfiguration: If the league has no divisions
                                          (nothing is written)
        """
        self.repo.require_league(league_id)
        divisions = self.repo.divisions_in_league(league_id)
        league_players = self.repo.players_in_league(league_id)

        players_by_division = {
            d.id: [p.to_snapshot() for p in self.repo.players_in_division(d.id)]
            for d in divisions
        }
        players_by_id = {p.id: p for p in league_players}
        for snapshots in players_by_division.values():
            for snapshot in snapshots:
                if snapshot.id not in players_by_id:
                    players_by_id[snapshot.id] = self.repo.require_player(snapshot.id)

        transition = self.processor.process_season_end(
            league_id,
            [d.to_snapshot() for d in divisions],
            players_by_division,
            league_players=[p.to_snapshot() for p in league_players],
        )

        self._apply_reassignments(transition.reassignments, players_by_id)
        for change in transition.rating_changes:
            players_by_id[change.player_id].rating = change.rating_after
        self.session.flush()

        logger.info("Completed end of season processing: %s", transition.summary())
        return transition

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_reassignments(
        self,
        reassignments: list[DivisionReassignment],
        players_by_id: dict[int, Player],
    ) -> None:
        for move in reassignments:
            players_by_id[move.player_id].division_id = move.to_division_id

    def _unassign_division_players(self, division_id: int) -> None:
        for player in self.repo.players_in_division(division_id):
            player.division_id = None
