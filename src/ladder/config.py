"""
Configuration management for Ladder.

Uses Pydantic Settings to load configuration from environment variables
with sensible defaults for development. The database URL and any tuning
of the rating engine should be set via environment variables or a .env
file.

Usage:
    from ladder.config import settings
    print(settings.k_factor)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PAIRING_STRATEGIES = {"nearest_rating", "weighted_adjacent", "optimal_greedy"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via a .env file
    in the project root directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ==========================================================================
    # Database Configuration
    # ==========================================================================

    database_url: str = Field(
        default="sqlite:///ladder.db",
        description="SQLAlchemy URL for the player/division/league/match store",
    )

    # Pool settings (ignored for SQLite)
    db_pool_size: int = Field(
        default=5,
        description="Number of connections to keep in the pool",
    )
    db_max_overflow: int = Field(
        default=10,
        description="Max additional connections beyond pool_size",
    )

    # ==========================================================================
    # Rating Configuration
    # ==========================================================================

    k_factor: int = Field(
        default=32,
        description="Maximum rating change per match",
    )
    default_rating: int = Field(
        default=1500,
        description="Starting rating for new players and target of regression",
    )
    rating_spread: int = Field(
        default=400,
        description="Rating gap scale in the expected score formula",
    )

    # Weekly decay (see engine/decay.py)
    decay_inactive_days: int = Field(
        default=7,
        description="Players idle longer than this many days decay",
    )
    decay_factor: float = Field(
        default=0.99,
        description="Multiplier applied to an inactive player's rating",
    )

    # ==========================================================================
    # Matchmaking Configuration
    # ==========================================================================

    performance_window: int = Field(
        default=5,
        description="Number of most recent matches counted for recent form",
    )
    performance_points_per_win: int = Field(
        default=25,
        description="Performance points per win inside the window",
    )
    rematch_penalty: float = Field(
        default=200.0,
        description="Pairing penalty per previous meeting between two players",
    )
    weight_rating: float = Field(default=0.6, description="Weighted score: rating weight")
    weight_matches_played: float = Field(default=0.2, description="Weighted score: experience weight")
    weight_performance: float = Field(default=0.2, description="Weighted score: recent form weight")
    default_pairing_strategy: str = Field(
        default="optimal_greedy",
        description="Strategy used when a caller does not name one",
    )

    # ==========================================================================
    # Season Configuration
    # ==========================================================================

    promotion_divisor: int = Field(
        default=10,
        description="Promotion/demotion cohort is player_count // promotion_divisor",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("k_factor", "rating_spread", "performance_window", "promotion_divisor")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("decay_factor")
    @classmethod
    def validate_decay_factor(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("decay_factor must be in (0, 1]")
        return v

    @field_validator("default_pairing_strategy")
    @classmethod
    def validate_pairing_strategy(cls, v: str) -> str:
        lower_v = v.lower()
        if lower_v not in PAIRING_STRATEGIES:
            raise ValueError(f"default_pairing_strategy must be one of {PAIRING_STRATEGIES}")
        return lower_v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once,
    which is important because loading from .env can be slow.
    """
    return Settings()


# Convenience alias for importing
settings = get_settings()
