"""
Listing screen service.

Loads the catalog, applies the search and type filters, and handles the
quick "save" action on project cards.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from replrepo.catalog import ALL_TYPES, apply_filters
from replrepo.config import SAVED_LIST_NAME
from replrepo.models import Project, User
from replrepo.services.results import ActionResult
from replrepo.storage.base import Storage, StorageError


LOGIN_REQUIRED_TO_SAVE = "You must be logged in to save repos."
SAVE_SUCCESS = 'Repo saved to "My Lists"!'
SAVE_FAILED = "Failed to save repo. Please try again."


@dataclass
class ListingResult:
    """
    Catalog as shown on the listing page.

    Attributes:
        projects: Every project fetched.
        filtered: Projects left after the filters.
        query: Search query that was applied.
        project_type: Type filter that was applied.
        error: User-visible error if loading failed.
    """
    projects: List[Project] = field(default_factory=list)
    filtered: List[Project] = field(default_factory=list)
    query: str = ""
    project_type: str = ALL_TYPES
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class ListingService:
    """Backs the home page: browsing, searching and quick-saving templates."""

    def __init__(self, storage: Storage, saved_list_name: str = None):
        self.storage = storage
        self.saved_list_name = saved_list_name or SAVED_LIST_NAME

    def load(self, query: Optional[str] = None, project_type: Optional[str] = None) -> ListingResult:
        """
        Fetch all projects and filter them.

        Args:
            query: Free-text search query.
            project_type: "GitHub", "Replit" or "all".
        """
        query = (query or "").strip()
        project_type = project_type or ALL_TYPES

        try:
            projects = self.storage.list_projects()
        except StorageError as e:
            logger.error(f"Error fetching projects: {e}")
            return ListingResult(
                query=query,
                project_type=project_type,
                error=f"Failed to load initial data: {e}",
            )

        filtered = apply_filters(projects, query, project_type)
        logger.debug(f"Listing: {len(filtered)}/{len(projects)} projects for q={query!r} type={project_type}")
        return ListingResult(
            projects=projects,
            filtered=filtered,
            query=query,
            project_type=project_type,
        )

    def save_repo(self, user: Optional[User], project_id: int) -> ActionResult:
        """
        Save a project into the user's default list, creating that list if needed.

        Args:
            user: Signed-in user, or None.
            project_id: Project to save.
        """
        if user is None:
            return ActionResult.fail(LOGIN_REQUIRED_TO_SAVE)

        try:
            saved_list = self.storage.find_list_by_name(user.id, self.saved_list_name)
            if saved_list is None:
                saved_list = self.storage.create_list(user.id, self.saved_list_name)
                logger.info(f"Created default list {saved_list.id} for user {user.id}")

            membership = self.storage.add_to_list(saved_list.id, project_id)
        except StorageError as e:
            logger.error(f"Error saving repo {project_id}: {e}")
            return ActionResult.fail(SAVE_FAILED)

        logger.info(f"Saved repo {project_id} to list {saved_list.id}")
        return ActionResult.ok(SAVE_SUCCESS, data=membership)
