"""
Rating and matchmaking constants.

These are the defaults used when an engine component is built without
explicit parameters. Production deployments override them through
environment variables (see ladder.config), most commonly the K factor.

K factor: Controls rating volatility (how much ratings change per match)
  - Higher K = bigger rating swings
  - Lower K = more stable ratings

Spread: How a rating difference translates to win probability.
  With a spread of 400, a 400-point gap means the favourite is expected
  to score ~0.91.
"""

# Default starting rating for new players, and the target of regression
DEFAULT_RATING = 1500

# Rating volatility per match
K_FACTOR = 32

# Rating difference scale used in the expected score formula
RATING_SPREAD = 400

# Inactivity decay
# inactive_days: a player must be idle strictly longer than this to decay
# factor: multiplier applied to the rating, truncated toward zero
DECAY_DEFAULTS = {
    "inactive_days": 7,
    "factor": 0.99,
}

# Recent form used by the weighted score
# window: how many of the most recently created matches count
# points_per_win: performance points awarded per win in the window
PERFORMANCE_DEFAULTS = {
    "window": 5,
    "points_per_win": 25,
}

# Blend of long-run skill, experience and recent form used to rank players
# for the weighted pairing strategies
WEIGHTED_SCORE_WEIGHTS = {
    "rating": 0.6,
    "matches_played": 0.2,
    "performance": 0.2,
}

# Penalty per previous meeting between two players.
# Large enough that a single rematch outweighs a modest rating gap.
REMATCH_PENALTY = 200

# Promotion/demotion cohort is player_count // PROMOTION_DIVISOR (10%)
PROMOTION_DIVISOR = 10
