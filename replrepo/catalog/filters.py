"""
Catalog filtering for ReplRepo.

Provides pure, side-effect-free functions to:
1. Search projects by free text
2. Filter projects by source type
3. Break a rating down into star icons

All functions are deterministic and do not mutate input data.
"""

import math
from typing import Optional

from replrepo.models import Project


# =============================================================================
# Filtering Configuration
# =============================================================================

# Type filter value meaning "do not filter"
ALL_TYPES: str = "all"

# Number of star slots drawn for a rating
STAR_SLOTS: int = 5


# =============================================================================
# Search and Type Filters
# =============================================================================

def search_projects(projects: list[Project], query: Optional[str]) -> list[Project]:
    """
    Return the projects whose name, description or any tag contains the query.

    Matching rules:
    - Case-insensitive comparison
    - Substring matches (query can appear anywhere in the field)
    - Projects without tags are matched on name and description only
    - An empty or blank query returns every project

    Args:
        projects: Projects to search.
        query: Free-text search query.

    Returns:
        Matching projects, in input order.

    Example:
        >>> search_projects(projects, "FLASK")
        [Project(id=2, name='Python Flask API', type='Replit')]
    """
    if not query or not query.strip():
        return list(projects)
    return [p for p in projects if p.matches(query)]


def filter_by_type(projects: list[Project], project_type: Optional[str]) -> list[Project]:
    """
    Return the projects whose type equals the selected category.

    ``"all"`` (or an empty value) returns every project.
    """
    if not project_type or project_type == ALL_TYPES:
        return list(projects)
    return [p for p in projects if p.type == project_type]


def apply_filters(
    projects: list[Project],
    query: Optional[str] = None,
    project_type: Optional[str] = None,
) -> list[Project]:
    """
    Apply the type filter and the text search together.

    Both filters narrow the full set, so a category and a search term
    intersect rather than replacing each other.
    """
    return search_projects(filter_by_type(projects, project_type), query)


# =============================================================================
# Rating Display
# =============================================================================

def star_breakdown(rating: Optional[float]) -> list[str]:
    """
    Break a rating into star slots for display.

    Args:
        rating: Rating from 0.0 to 5.0, or None.

    Returns:
        Five entries of "full", "half" or "empty"; an empty list when unrated.

    Example:
        >>> star_breakdown(3.6)
        ['full', 'full', 'full', 'half', 'empty']
    """
    if rating is None:
        return []
    full = math.floor(rating)
    has_half = rating % 1 >= 0.5
    stars = []
    for i in range(STAR_SLOTS):
        if i < full:
            stars.append("full")
        elif i == full and has_half:
            stars.append("half")
        else:
            stars.append("empty")
    return stars
