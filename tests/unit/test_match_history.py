"""Unit tests for the in-memory match history used by the engine."""

from ladder.engine.snapshots import InMemoryMatchHistory, MatchRecord, Pairing


def _record(match_id, p1, p2):
    return MatchRecord(
        id=match_id,
        player1_id=p1,
        player2_id=p2,
        player1_score=3,
        player2_score=1,
        winner_id=p1,
        loser_id=p2,
    )


def test_head_to_head_counts_either_seat_order():
    history = InMemoryMatchHistory([_record(1, 1, 2), _record(2, 2, 1), _record(3, 1, 3)])

    assert history.head_to_head_count(1, 2) == 2
    assert history.head_to_head_count(2, 1) == 2
    assert history.head_to_head_count(2, 3) == 0


def test_recent_matches_newest_created_first():
    """Creation order is the id, regardless of insertion order."""
    history = InMemoryMatchHistory([_record(5, 1, 2), _record(2, 1, 3), _record(9, 4, 1), _record(7, 2, 3)])

    recent = history.recent_matches(1, 2)

    assert [m.id for m in recent] == [9, 5]


def test_recent_matches_limit_larger_than_history():
    history = InMemoryMatchHistory()
    history.add(_record(1, 1, 2))

    assert [m.id for m in history.recent_matches(1, 5)] == [1]
    assert history.recent_matches(3, 5) == []
    assert len(history) == 1


def test_pairing_membership():
    pair = Pairing(4, 9)

    assert 4 in pair
    assert 9 in pair
    assert 5 not in pair
    assert pair.as_tuple() == (4, 9)
