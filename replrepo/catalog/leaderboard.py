"""
"Most Used Templates" leaderboard.

Usage counts are curated by hand; they are not tracked by the application.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LeaderboardEntry:
    """One row of the leaderboard."""
    name: str
    uses: int
    type: str


LEADERBOARD: tuple[LeaderboardEntry, ...] = (
    LeaderboardEntry("Next.js Starter", 15234, "GitHub"),
    LeaderboardEntry("Python Flask API", 12789, "Replit"),
    LeaderboardEntry("React Todo App", 10567, "Replit"),
    LeaderboardEntry("Node.js Express Boilerplate", 9876, "GitHub"),
    LeaderboardEntry("Vue.js Dashboard", 8765, "GitHub"),
)


def get_leaderboard(limit: int = None) -> list[tuple[int, LeaderboardEntry]]:
    """
    Return leaderboard rows with their 1-based rank, most used first.

    Args:
        limit: Maximum number of rows (default: all).
    """
    ranked = sorted(LEADERBOARD, key=lambda e: e.uses, reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return list(enumerate(ranked, start=1))
