"""
Data models module.

Defines data structures for catalog projects, personal lists, reviews,
and authenticated sessions.
"""

from replrepo.models.project import Project, PROJECT_TYPES
from replrepo.models.user_list import UserList, ListMembership, SavedRepo, UNSORTED_LIST_ID
from replrepo.models.review import Review, MIN_RATING, MAX_RATING, is_valid_rating
from replrepo.models.session import AuthSession, User

__all__ = [
    "Project",
    "PROJECT_TYPES",
    "UserList",
    "ListMembership",
    "SavedRepo",
    "UNSORTED_LIST_ID",
    "Review",
    "MIN_RATING",
    "MAX_RATING",
    "is_valid_rating",
    "AuthSession",
    "User",
]
