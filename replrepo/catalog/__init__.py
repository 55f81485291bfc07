"""
Catalog module.

Searches and filters the template catalog and formats ratings.
"""

from replrepo.catalog.filters import (
    ALL_TYPES,
    search_projects,
    filter_by_type,
    apply_filters,
    star_breakdown,
)

from replrepo.catalog.leaderboard import (
    LEADERBOARD,
    LeaderboardEntry,
    get_leaderboard,
)

__all__ = [
    # Filters
    "ALL_TYPES",
    "search_projects",
    "filter_by_type",
    "apply_filters",
    "star_breakdown",
    # Leaderboard
    "LEADERBOARD",
    "LeaderboardEntry",
    "get_leaderboard",
]
