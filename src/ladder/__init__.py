"""
Ladder - competitive ladder matchmaking and rating

Players carry a skill rating, are grouped into ranked divisions within
leagues, are paired for matches, and are promoted or demoted at season
boundaries.

Main components:
- engine: rating formula, pairing strategies, season transitions (pure)
- db: SQLAlchemy models, sessions and repository queries
- services: player, match, league and matchmaking operations
- tasks: scheduled maintenance jobs (decay, soft reset, hard reset)
"""

__version__ = "1.0.0"
