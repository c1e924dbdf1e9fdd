"""Unit tests for division rank bookkeeping and player placement."""

import pytest

from ladder.engine.divisions import distribute_players, next_rank, order_by_rank, repack_ranks
from ladder.engine.errors import InvalidDivisionConfiguration
from ladder.engine.snapshots import DivisionSnapshot


def _division(division_id, rank):
    return DivisionSnapshot(id=division_id, league_id=1, rank=rank)


class TestRanks:

    def test_next_rank_appends_at_bottom(self):
        assert next_rank([]) == 1
        assert next_rank([_division(1, 1), _division(2, 2)]) == 3

    def test_repack_closes_gaps(self):
        """Removing rank 2 of [1, 2, 3, 4] leaves [1, 3, 4] -> [1, 2, 3]."""
        packed = repack_ranks([_division(4, 4), _division(1, 1), _division(3, 3)])

        assert [(d.id, d.rank) for d in packed] == [(1, 1), (3, 2), (4, 3)]

    def test_repack_keeps_contiguous_ranks(self):
        packed = repack_ranks([_division(1, 1), _division(2, 2)])
        assert [d.rank for d in packed] == [1, 2]

    def test_repack_does_not_mutate_input(self):
        original = _division(7, 5)
        repack_ranks([original])
        assert original.rank == 5

    def test_order_by_rank_ties_fall_back_to_id(self):
        ordered = order_by_rank([_division(3, 1), _division(2, 2), _division(1, 1)])
        assert [d.id for d in ordered] == [1, 3, 2]


class TestDistributePlayers:

    def test_top_division_gets_highest_ratings(self, make_player):
        divisions = [_division(30, 3), _division(10, 1), _division(20, 2)]
        players = [make_player(i, 1000 + 100 * i) for i in range(1, 7)]

        placements = {p.player_id: p.to_division_id for p in distribute_players(players, divisions)}

        assert placements == {6: 10, 5: 10, 4: 20, 3: 20, 2: 30, 1: 30}

    def test_remainder_goes_to_bottom_division(self, make_player):
        divisions = [_division(10, 1), _division(20, 2), _division(30, 3)]
        players = [make_player(i, 2000 - i) for i in range(1, 8)]

        placements = distribute_players(players, divisions)

        by_division = {}
        for p in placements:
            by_division.setdefault(p.to_division_id, []).append(p.player_id)
        assert by_division == {10: [1, 2], 20: [3, 4], 30: [5, 6, 7]}
        assert all(p.reason == "placement" for p in placements)

    def test_fewer_players_than_divisions(self, make_player):
        """Block size 0: everyone lands in the bottom division."""
        divisions = [_division(10, 1), _division(20, 2), _division(30, 3)]
        placements = distribute_players([make_player(1), make_player(2)], divisions)

        assert {p.to_division_id for p in placements} == {30}

    def test_records_previous_division(self, make_player):
        placements = distribute_players([make_player(1, division_id=99)], [_division(10, 1)])
        assert placements[0].from_division_id == 99

    def test_no_divisions_raises(self, make_player):
        with pytest.raises(InvalidDivisionConfiguration):
            distribute_players([make_player(1)], [])
