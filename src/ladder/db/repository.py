"""
Keyed lookups and filtered queries over the ladder store.

LadderRepository is the only place that queries the database. It also
implements the engine's MatchHistory protocol, so it can be handed
straight to the matchmaker for rematch penalties and recent form.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from ladder.db.models import Division, League, Match, Player
from ladder.engine.errors import DivisionNotFound, LeagueNotFound, MatchNotFound, PlayerNotFound
from ladder.engine.snapshots import MatchRecord


class LadderRepository:
    """Query helpers bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Keyed lookups
    # ------------------------------------------------------------------

    def get_player(self, player_id: int) -> Optional[Player]:
        return self.session.get(Player, player_id)

    def require_player(self, player_id: int) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise PlayerNotFound(player_id)
        return player

    def get_player_by_name(self, name: str) -> Optional[Player]:
        return self.session.query(Player).filter(Player.name == name).first()

    def get_division(self, division_id: int) -> Optional[Division]:
        return self.session.get(Division, division_id)

    def require_division(self, division_id: int) -> Division:
        division = self.get_division(division_id)
        if division is None:
            raise DivisionNotFound(division_id)
        return division

    def get_league(self, league_id: int) -> Optional[League]:
        return self.session.get(League, league_id)

    def require_league(self, league_id: int) -> League:
        league = self.get_league(league_id)
        if league is None:
            raise LeagueNotFound(league_id)
        return league

    def get_match(self, match_id: int) -> Optional[Match]:
        return self.session.get(Match, match_id)

    def require_match(self, match_id: int) -> Match:
        match = self.get_match(match_id)
        if match is None:
            raise MatchNotFound(match_id)
        return match

    def lock_players(self, player_ids: Iterable[int]) -> dict[int, Player]:
        """
        Load players with a row lock (SELECT ... FOR UPDATE where supported).

        Ids are locked in sorted order so two concurrent updates touching
        the same pair cannot deadlock.
        """
        ids = sorted(set(player_ids))
        players = (
            self.session.query(Player)
            .filter(Player.id.in_(ids))
            .order_by(Player.id)
            .with_for_update()
            .all()
        )
        return {p.id: p for p in players}

    # ------------------------------------------------------------------
    # Filtered queries
    # ------------------------------------------------------------------

    def all_players(self) -> list[Player]:
        return self.session.query(Player).order_by(Player.id).all()

    def all_leagues(self) -> list[League]:
        return self.session.query(League).order_by(League.id).all()

    def all_matches(self) -> list[Match]:
        return self.session.query(Match).order_by(Match.id).all()

    def signed_in_players(self, division_id: Optional[int] = None) -> list[Player]:
        query = self.session.query(Player).filter(Player.signed_in.is_(True))
        if division_id is not None:
            query = query.filter(Player.division_id == division_id)
        return query.order_by(Player.id).all()

    def players_in_division(self, division_id: int, order_by_rating: bool = False) -> list[Player]:
        query = self.session.query(Player).filter(Player.division_id == division_id)
        if order_by_rating:
            query = query.order_by(Player.rating.desc(), Player.id)
        else:
            query = query.order_by(Player.id)
        return query.all()

    def players_in_league(self, league_id: int) -> list[Player]:
        return (
            self.session.query(Player)
            .filter(Player.league_id == league_id)
            .order_by(Player.id)
            .all()
        )

    def divisions_in_league(self, league_id: int) -> list[Division]:
        """Divisions of a league, top tier first."""
        return (
            self.session.query(Division)
            .filter(Division.league_id == league_id)
            .order_by(Division.rank, Division.id)
            .all()
        )

    def matches_for_player(self, player_id: int) -> list[Match]:
        """All matches involving the player, oldest first by match time."""
        return (
            self.session.query(Match)
            .filter(or_(Match.player1_id == player_id, Match.player2_id == player_id))
            .order_by(Match.match_datetime, Match.id)
            .all()
        )

    def count_wins(self, player_id: int) -> int:
        return self.session.query(func.count(Match.id)).filter(Match.winner_id == player_id).scalar() or 0

    def count_losses(self, player_id: int) -> int:
        return self.session.query(func.count(Match.id)).filter(Match.loser_id == player_id).scalar() or 0

    # ------------------------------------------------------------------
    # MatchHistory protocol
    # ------------------------------------------------------------------

    def head_to_head_count(self, player_a_id: int, player_b_id: int) -> int:
        """Matches between the two players, in either seat order."""
        return (
            self.session.query(func.count(Match.id))
            .filter(
                or_(
                    and_(Match.player1_id == player_a_id, Match.player2_id == player_b_id),
                    and_(Match.player1_id == player_b_id, Match.player2_id == player_a_id),
                )
            )
            .scalar()
        ) or 0

    def recent_matches(self, player_id: int, limit: int) -> list[MatchRecord]:
        """The most recently created matches involving the player, newest first."""
        matches = (
            self.session.query(Match)
            .filter(or_(Match.player1_id == player_id, Match.player2_id == player_id))
            .order_by(Match.id.desc())
            .limit(limit)
            .all()
        )
        return [m.to_record() for m in matches]
