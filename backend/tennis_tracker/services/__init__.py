"""Internal application services."""

from .validation import ValidationError, validate_set_scores
from .matches import (
    ReferentialError,
    create_match,
    get_match,
    get_matches_for_user,
    list_matches,
    update_match,
)
from .rankings import leaderboard, update_rating
from .stats import (
    compute_user_stats,
    current_streak,
    frequent_opponents,
    longest_win_streak,
    set_win_rate,
    win_rate,
)

__all__ = [
    "validate_set_scores",
    "ValidationError",
    "ReferentialError",
    "create_match",
    "get_match",
    "get_matches_for_user",
    "list_matches",
    "update_match",
    "leaderboard",
    "update_rating",
    "compute_user_stats",
    "current_streak",
    "frequent_opponents",
    "longest_win_streak",
    "set_win_rate",
    "win_rate",
]
