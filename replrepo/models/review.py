"""
Review model.

A review is a star rating plus free text left by a signed-in user on a
project. Reviews are append-only: they are never edited or deleted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from replrepo.models.timestamps import parse_timestamp


MIN_RATING = 1
MAX_RATING = 5


def is_valid_rating(rating) -> bool:
    """Check that a rating is an integer star count between 1 and 5."""
    return isinstance(rating, int) and not isinstance(rating, bool) and MIN_RATING <= rating <= MAX_RATING


@dataclass
class Review:
    """
    A user-submitted rating and comment on a project.

    Attributes:
        id: Row identifier in the remote ``reviews`` table.
        user_id: Identifier of the author.
        repo_id: Identifier of the reviewed project.
        rating: Star rating from 1 to 5.
        content: Free-text review body.
        created_at: When the review was written.
    """

    id: int
    user_id: str
    repo_id: int
    rating: int
    content: str = ""
    created_at: Optional[datetime] = None

    @property
    def empty_stars(self) -> int:
        """Number of unfilled stars when drawing the rating out of five."""
        return MAX_RATING - self.rating

    @classmethod
    def from_record(cls, record: dict) -> Optional["Review"]:
        """Create a Review from a ``reviews`` row, or None if the row is invalid."""
        try:
            rating = int(record["rating"])
            if not is_valid_rating(rating):
                return None
            return cls(
                id=int(record["id"]),
                user_id=str(record.get("user_id") or ""),
                repo_id=int(record["repo_id"]),
                rating=rating,
                content=record.get("content") or "",
                created_at=parse_timestamp(record.get("created_at")),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def __str__(self) -> str:
        return f"{'★' * self.rating}{'☆' * self.empty_stars} by {self.user_id}"
