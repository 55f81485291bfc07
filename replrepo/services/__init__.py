"""
Services module.

One service per screen; each catches backend failures, logs them, and
returns a message fit to show the user.
"""

from replrepo.services.results import ActionResult
from replrepo.services.listing import ListingService, ListingResult
from replrepo.services.repo_detail import RepoDetailService, RepoDetailResult, parse_repo_id
from replrepo.services.reviews import ReviewService, ReviewsResult, average_rating
from replrepo.services.lists import ListsService, filter_saved
from replrepo.services.accounts import AccountService

__all__ = [
    "ActionResult",
    "ListingService",
    "ListingResult",
    "RepoDetailService",
    "RepoDetailResult",
    "parse_repo_id",
    "ReviewService",
    "ReviewsResult",
    "average_rating",
    "ListsService",
    "filter_saved",
    "AccountService",
]
