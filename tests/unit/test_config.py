"""Unit tests for settings validation and engine construction from settings."""

import pytest
from pydantic import ValidationError

from ladder.config import Settings
from ladder.engine.calculator import RatingEngine
from ladder.engine.matchmaker import Matchmaker
from ladder.engine.season import SeasonProcessor


@pytest.fixture
def clean_env(monkeypatch):
    """Keep developer environment variables out of the defaults."""
    for name in ("K_FACTOR", "DEFAULT_RATING", "LOG_LEVEL", "DEFAULT_PAIRING_STRATEGY", "DECAY_FACTOR"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(clean_env):
    settings = Settings(_env_file=None)

    assert settings.k_factor == 32
    assert settings.default_rating == 1500
    assert settings.decay_inactive_days == 7
    assert settings.decay_factor == 0.99
    assert settings.rematch_penalty == 200
    assert settings.default_pairing_strategy == "optimal_greedy"
    assert settings.log_level == "INFO"


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("K_FACTOR", "16")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.k_factor == 16
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"k_factor": 0},
        {"promotion_divisor": -1},
        {"decay_factor": 0.0},
        {"decay_factor": 1.5},
        {"log_level": "LOUD"},
        {"default_pairing_strategy": "round_robin"},
    ],
)
def test_invalid_values_rejected(clean_env, overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_pairing_strategy_normalised(clean_env):
    assert Settings(_env_file=None, default_pairing_strategy="NEAREST_RATING").default_pairing_strategy == "nearest_rating"


def test_engine_components_from_settings(clean_env):
    settings = Settings(
        _env_file=None,
        k_factor=24,
        rematch_penalty=50,
        promotion_divisor=5,
        default_rating=1200,
        weight_rating=1.0,
        weight_matches_played=0.0,
        weight_performance=0.0,
    )

    engine = RatingEngine.from_settings(settings)
    matchmaker = Matchmaker.from_settings(settings)
    processor = SeasonProcessor.from_settings(settings)

    assert engine.k_factor == 24
    assert engine.weights == {"rating": 1.0, "matches_played": 0.0, "performance": 0.0}
    assert matchmaker.rematch_penalty == 50
    assert matchmaker.engine.k_factor == 24
    assert processor.cohort_size(20) == 4
    assert processor.default_rating == 1200
