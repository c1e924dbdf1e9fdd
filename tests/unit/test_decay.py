"""
Unit tests for inactivity decay, soft reset and hard reset.
"""

from datetime import date, timedelta

import pytest

from ladder.engine.decay import (
    apply_decay,
    apply_hard_reset,
    apply_regression,
    decay_rating,
    regress_rating,
)

TODAY = date(2026, 3, 8)


class TestDecayRating:

    def test_within_grace_period(self):
        assert decay_rating(1500, 0) == 1500
        assert decay_rating(1500, 7) == 1500

    def test_decays_after_a_week(self):
        assert decay_rating(1500, 8) == 1485

    def test_decay_truncates(self):
        # 1001 * 0.99 = 990.99
        assert decay_rating(1001, 30) == 990

    def test_unknown_activity_does_not_decay(self):
        assert decay_rating(1500, None) == 1500

    def test_custom_parameters(self):
        assert decay_rating(2000, 3, inactive_days=2, factor=0.5) == 1000

    def test_long_inactivity_decays_once_per_call(self):
        """Decay is applied per run, not per elapsed week."""
        assert decay_rating(1500, 365) == 1485


class TestApplyDecay:

    def test_only_inactive_players_change(self, make_player):
        players = [
            make_player(1, 1500, last_active_date=TODAY - timedelta(days=8)),
            make_player(2, 1500, last_active_date=TODAY - timedelta(days=7)),
            make_player(3, 1500, last_active_date=TODAY),
            make_player(4, 1500, last_active_date=None),
        ]

        changes = apply_decay(players, TODAY)

        assert [(c.player_id, c.rating_before, c.rating_after) for c in changes] == [(1, 1500, 1485)]

    def test_zero_rating_is_not_reported(self, make_player):
        players = [make_player(1, 0, last_active_date=TODAY - timedelta(days=30))]
        assert apply_decay(players, TODAY) == []

    def test_running_twice_decays_twice(self, make_player):
        player = make_player(1, 1500, last_active_date=TODAY - timedelta(days=10))

        first = apply_decay([player], TODAY)[0].rating_after
        second = apply_decay([make_player(1, first, last_active_date=player.last_active_date)], TODAY)

        assert first == 1485
        assert second[0].rating_after == 1470


class TestResets:

    @pytest.mark.parametrize(
        "rating,expected",
        [(1700, 1600), (1300, 1400), (1500, 1500), (1501, 1500), (0, 750)],
    )
    def test_regress_rating(self, rating, expected):
        assert regress_rating(rating) == expected

    def test_apply_regression_reports_every_player(self, make_player):
        changes = apply_regression([make_player(1, 1500), make_player(2, 1900)])

        assert [(c.player_id, c.rating_after, c.delta) for c in changes] == [(1, 1500, 0), (2, 1700, -200)]

    def test_hard_reset(self, make_player):
        changes = apply_hard_reset([make_player(1, 2100), make_player(2, 0)])
        assert [c.rating_after for c in changes] == [1500, 1500]

    def test_custom_target(self, make_player):
        assert apply_hard_reset([make_player(1, 2100)], 1200)[0].rating_after == 1200
        assert apply_regression([make_player(1, 2000)], 1000)[0].rating_after == 1500
