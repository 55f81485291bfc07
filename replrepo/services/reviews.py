"""
Review service.

Lists a project's reviews newest first and appends new ones. Reviews are
never edited or deleted, and nothing stops a user reviewing twice.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from replrepo.models import Review, User, is_valid_rating
from replrepo.services.results import ActionResult
from replrepo.storage.base import Storage, StorageError


LOAD_FAILED = "Failed to load reviews"
LOGIN_REQUIRED = "You must be logged in to submit a review"
INVALID_RATING = "Please select a rating between 1 and 5"
SUBMIT_SUCCESS = "Review submitted successfully!"
SUBMIT_FAILED = "Failed to submit review"


@dataclass
class ReviewsResult:
    reviews: List[Review] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def average(self) -> Optional[float]:
        return average_rating(self.reviews)


def average_rating(reviews: List[Review]) -> Optional[float]:
    """Mean star rating of the reviews, or None when there are none."""
    if not reviews:
        return None
    return sum(r.rating for r in reviews) / len(reviews)


class ReviewService:
    """Backs the review panel on the repo detail page."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def list_reviews(self, repo_id: int) -> ReviewsResult:
        try:
            reviews = self.storage.get_reviews(repo_id)
        except StorageError as e:
            logger.error(f"Error fetching reviews for repo {repo_id}: {e}")
            return ReviewsResult(error=LOAD_FAILED)
        return ReviewsResult(reviews=reviews)

    def submit_review(
        self,
        user: Optional[User],
        repo_id: int,
        rating,
        content: str,
    ) -> ActionResult:
        """
        Append a review written by the signed-in user.

        Unauthenticated or invalid submissions are rejected without
        contacting the data service.
        """
        if user is None:
            return ActionResult.fail(LOGIN_REQUIRED)

        try:
            rating = int(rating)
        except (TypeError, ValueError):
            return ActionResult.fail(INVALID_RATING)
        if not is_valid_rating(rating):
            return ActionResult.fail(INVALID_RATING)

        try:
            review = self.storage.add_review(user.id, repo_id, rating, (content or "").strip())
        except StorageError as e:
            logger.error(f"Error submitting review for repo {repo_id}: {e}")
            return ActionResult.fail(SUBMIT_FAILED)

        logger.info(f"User {user.id} reviewed repo {repo_id} ({rating} stars)")
        return ActionResult.ok(SUBMIT_SUCCESS, data=review)
