"""Unit tests for the matchmaker's pairing strategies."""

import random

import pytest

from ladder.engine.calculator import RatingEngine
from ladder.engine.errors import NotEnoughPlayers
from ladder.engine.matchmaker import Matchmaker, PairingStrategy
from ladder.engine.snapshots import InMemoryMatchHistory, MatchRecord

ALL_STRATEGIES = list(PairingStrategy)


def _met(match_id, p1, p2):
    """A finished match between two players, player 1 winning."""
    return MatchRecord(
        id=match_id,
        player1_id=p1,
        player2_id=p2,
        player1_score=10,
        player2_score=5,
        winner_id=p1,
        loser_id=p2,
    )


def _ids(pairs):
    return [pair.as_tuple() for pair in pairs]


@pytest.fixture
def matchmaker():
    return Matchmaker()


@pytest.fixture
def ladder_pool(make_player):
    """12 players rated 1000..1220 in steps of 20, ids 1..12."""
    return [make_player(i + 1, 1000 + 20 * i) for i in range(12)]


class TestPoolValidation:

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_empty_and_single_player_pools_raise(self, matchmaker, make_player, strategy):
        with pytest.raises(NotEnoughPlayers):
            matchmaker.pair_players([], strategy)
        with pytest.raises(NotEnoughPlayers) as exc_info:
            matchmaker.pair_players([make_player(1)], strategy, division_id=4)
        assert exc_info.value.division_id == 4

    def test_duplicate_ids_raise(self, matchmaker, make_player):
        with pytest.raises(ValueError):
            matchmaker.pair_players([make_player(1), make_player(1, 1400)])

    def test_unknown_strategy_raises(self, matchmaker, make_player):
        with pytest.raises(ValueError):
            matchmaker.pair_players([make_player(1), make_player(2)], "round_robin")

    def test_strategy_by_name(self, matchmaker, make_player):
        pairs = matchmaker.pair_players([make_player(1), make_player(2)], "nearest_rating")
        assert _ids(pairs) == [(1, 2)]


class TestPairingInvariants:
    """Properties every strategy must hold."""

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_no_player_paired_twice(self, matchmaker, make_player, strategy):
        rng = random.Random(7)
        pool = [make_player(i, rng.randint(800, 2200), matches_played=rng.randint(0, 40)) for i in range(1, 22)]
        history = InMemoryMatchHistory(
            _met(n, rng.randint(1, 21), rng.randint(22, 30)) for n in range(1, 30)
        )

        pairs = matchmaker.pair_players(pool, strategy, history)

        paired = [pid for pair in pairs for pid in pair.as_tuple()]
        assert len(paired) == len(set(paired))
        assert len(pairs) == 10  # 21 players: one left out

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_pool_order_does_not_change_pairs(self, matchmaker, ladder_pool, strategy):
        """Same pool and history in any order give identical pairs."""
        history = InMemoryMatchHistory([_met(1, 3, 4), _met(2, 5, 6), _met(3, 4, 3)])
        shuffled = list(ladder_pool)
        random.Random(42).shuffle(shuffled)

        assert _ids(matchmaker.pair_players(ladder_pool, strategy, history)) == _ids(
            matchmaker.pair_players(shuffled, strategy, history)
        )

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_odd_pool_leaves_one_unpaired(self, matchmaker, ladder_pool, strategy):
        pairs = matchmaker.pair_players(ladder_pool[:5], strategy)
        assert len(pairs) == 2


class TestNearestRating:

    def test_consecutive_ratings_pair_consecutively(self, matchmaker, ladder_pool):
        """Evenly spaced ratings with no history pair neighbours from the bottom up."""
        pairs = matchmaker.pair_players(ladder_pool, PairingStrategy.NEAREST_RATING)

        assert _ids(pairs) == [(1, 2), (3, 4), (5, 6), (7, 8), (9, 10), (11, 12)]

    def test_odd_pool_leaves_highest_rated_out(self, matchmaker, ladder_pool):
        pairs = matchmaker.pair_players(ladder_pool[:5], PairingStrategy.NEAREST_RATING)
        assert _ids(pairs) == [(1, 2), (3, 4)]

    def test_equal_ratings_pair_by_id(self, matchmaker, make_player):
        pool = [make_player(pid, 1500) for pid in (3, 1, 4, 2)]

        pairs = matchmaker.pair_players(pool, PairingStrategy.NEAREST_RATING)

        assert _ids(pairs) == [(1, 2), (3, 4)]

    def test_pairs_across_gaps(self, matchmaker, make_player):
        pool = [make_player(1, 900), make_player(2, 2000), make_player(3, 1300), make_player(4, 1310)]

        pairs = matchmaker.pair_players(pool, PairingStrategy.NEAREST_RATING)

        assert _ids(pairs) == [(1, 3), (4, 2)]


class TestNearestNeighbourChoice:
    """
    pair_players always takes the lowest remaining key, so it never has a
    predecessor to weigh. These call the neighbour comparison directly.
    """

    @pytest.fixture
    def neighbours(self, make_player):
        player = make_player(2, 1500)
        lower = make_player(1, 1480)
        higher = make_player(3, 1520)
        keys = [(lower.rating, lower.id), (higher.rating, higher.id)]
        by_id = {p.id: p for p in (player, lower, higher)}
        return player, keys, by_id

    def test_equal_cost_goes_to_successor(self, matchmaker, neighbours):
        player, keys, by_id = neighbours

        chosen = matchmaker._nearest_neighbour(player, keys, 0, 1, by_id, InMemoryMatchHistory())

        assert chosen == 1

    def test_strictly_cheaper_predecessor_wins(self, matchmaker, neighbours):
        """A previous meeting with the successor adds the rematch penalty to its side."""
        player, keys, by_id = neighbours
        history = InMemoryMatchHistory([_met(1, 2, 3)])

        chosen = matchmaker._nearest_neighbour(player, keys, 0, 1, by_id, history)

        assert chosen == 0

    def test_penalised_predecessor_loses(self, matchmaker, neighbours):
        player, keys, by_id = neighbours
        history = InMemoryMatchHistory([_met(1, 1, 2)])

        assert matchmaker._nearest_neighbour(player, keys, 0, 1, by_id, history) == 1

    def test_single_or_no_neighbour(self, matchmaker, neighbours):
        player, keys, by_id = neighbours
        history = InMemoryMatchHistory()

        assert matchmaker._nearest_neighbour(player, keys, None, 1, by_id, history) == 1
        assert matchmaker._nearest_neighbour(player, keys, 0, None, by_id, history) == 0
        assert matchmaker._nearest_neighbour(player, keys, None, None, by_id, history) is None


class TestWeightedAdjacent:

    def test_highest_weighted_pairs_first(self, matchmaker, make_player):
        pool = [make_player(1, 1000), make_player(2, 1300), make_player(3, 1100), make_player(4, 1200)]

        pairs = matchmaker.pair_players(pool, PairingStrategy.WEIGHTED_ADJACENT)

        assert _ids(pairs) == [(2, 4), (3, 1)]

    def test_matches_played_and_form_count(self, matchmaker, make_player):
        """Experience and recent wins can lift a player past a higher rating."""
        pool = [
            make_player(1, 1500),
            make_player(2, 1490, matches_played=100),  # 894 + 20 = 914 > 900
            make_player(3, 1400),
            make_player(4, 1380),
        ]
        # Player 4 won five straight: 0.2 * 125 = 25 on top of 828
        history = InMemoryMatchHistory(_met(n, 4, 9) for n in range(1, 6))

        pairs = matchmaker.pair_players(pool, PairingStrategy.WEIGHTED_ADJACENT, history)

        assert _ids(pairs) == [(2, 1), (4, 3)]

    def test_odd_pool_leaves_lowest_out(self, matchmaker, ladder_pool):
        pairs = matchmaker.pair_players(ladder_pool[:3], PairingStrategy.WEIGHTED_ADJACENT)
        assert _ids(pairs) == [(3, 2)]


class TestOptimalGreedy:

    def test_default_strategy(self, matchmaker, ladder_pool):
        default = matchmaker.pair_players(ladder_pool)
        explicit = matchmaker.pair_players(ladder_pool, PairingStrategy.OPTIMAL_GREEDY)
        assert _ids(default) == _ids(explicit)

    def test_lowest_weighted_picks_closest(self, matchmaker, make_player):
        pool = [make_player(1, 1000), make_player(2, 1010), make_player(3, 1020), make_player(4, 1500)]

        pairs = matchmaker.pair_players(pool, PairingStrategy.OPTIMAL_GREEDY)

        assert _ids(pairs) == [(1, 2), (3, 4)]

    def test_rematch_penalty_avoids_previous_opponent(self, matchmaker, make_player):
        """
        Player 1 already beat player 2, so the 200 point penalty pushes
        player 1 to the next closest opponent.
        """
        pool = [make_player(1, 1000), make_player(2, 1010), make_player(3, 1020), make_player(4, 1500)]
        history = InMemoryMatchHistory([_met(1, 1, 2)])

        pairs = matchmaker.pair_players(pool, PairingStrategy.OPTIMAL_GREEDY, history)

        assert _ids(pairs) == [(1, 3), (2, 4)]

    def test_ties_take_first_candidate(self, matchmaker, make_player):
        pool = [make_player(pid, 1500) for pid in (4, 2, 3, 1)]

        pairs = matchmaker.pair_players(pool, PairingStrategy.OPTIMAL_GREEDY)

        assert _ids(pairs) == [(1, 2), (3, 4)]

    def test_greedy_is_not_globally_optimal(self, make_player):
        """
        The lowest player grabs the cheapest partner without looking ahead.

        Scores 1000..1003 with 1-2 and 2-4 rematches: greedy pays 2 + 202,
        while (1, 4) and (2, 3) would only cost 3 + 1.
        """
        engine = RatingEngine(weights={"rating": 1.0, "matches_played": 0.0, "performance": 0.0})
        matchmaker = Matchmaker(engine=engine)
        pool = [make_player(pid, 999 + pid) for pid in (1, 2, 3, 4)]
        history = InMemoryMatchHistory([_met(1, 1, 2), _met(2, 2, 4)])

        pairs = matchmaker.pair_players(pool, PairingStrategy.OPTIMAL_GREEDY, history)

        assert _ids(pairs) == [(1, 3), (2, 4)]


class TestCompatibilityPenalty:

    def test_counts_both_seat_orders(self, matchmaker):
        history = InMemoryMatchHistory([_met(1, 1, 2), _met(2, 2, 1), _met(3, 1, 3)])

        assert matchmaker.compatibility_penalty(1, 2, history) == 400
        assert matchmaker.compatibility_penalty(2, 1, history) == 400
        assert matchmaker.compatibility_penalty(2, 3, history) == 0

    def test_custom_penalty(self):
        matchmaker = Matchmaker(rematch_penalty=50)
        history = InMemoryMatchHistory([_met(1, 1, 2)])
        assert matchmaker.compatibility_penalty(1, 2, history) == 50
