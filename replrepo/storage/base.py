"""
Base storage abstraction for ReplRepo.

Defines the abstract interface that all storage backends must implement.
This allows swapping between Supabase and the in-memory mock used in tests.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from replrepo.models import Project, UserList, ListMembership, SavedRepo, Review


class StorageError(Exception):
    """
    Raised when the data service rejects or fails a request.

    Attributes:
        code: Backend error code when the service supplied one (e.g. "PGRST116").
        status: HTTP status code, if a response was received.
    """

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.status = status


class Storage(ABC):
    """
    Abstract base class for all storage backends.

    Implementations must provide:
    - Read access to the project catalog
    - Per-user lists and list memberships
    - Append-only reviews

    Methods raise StorageError on failure; callers decide what to show the user.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Return the name of this storage backend.

        Used for logging and debugging.
        """
        pass

    # =========================================================================
    # Catalog
    # =========================================================================

    @abstractmethod
    def list_projects(self) -> List[Project]:
        """
        Retrieve every project in the catalog.

        Returns:
            List of Project instances in backend order.
        """
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """
        Retrieve a single project.

        Args:
            project_id: Identifier of the project.

        Returns:
            Project if found, None otherwise.
        """
        pass

    # =========================================================================
    # Lists
    # =========================================================================

    @abstractmethod
    def get_lists(self, user_id: str) -> List[UserList]:
        """
        Retrieve the lists owned by a user.

        Returns:
            List of UserList instances, sorted by name.
        """
        pass

    @abstractmethod
    def find_list_by_name(self, user_id: str, name: str) -> Optional[UserList]:
        """Retrieve a user's list by exact name (the oldest if several share it), or None."""
        pass

    @abstractmethod
    def create_list(self, user_id: str, name: str, description: str = "") -> UserList:
        """
        Create a new list owned by a user.

        Returns:
            The created UserList as stored.
        """
        pass

    @abstractmethod
    def get_saved_repos(self, list_ids: List[int]) -> List[SavedRepo]:
        """
        Retrieve memberships of the given lists joined to their projects.

        Args:
            list_ids: Lists to include (normally all of one user's lists).

        Returns:
            List of SavedRepo instances, newest membership first.
        """
        pass

    @abstractmethod
    def add_to_list(self, list_id: int, repo_id: int) -> ListMembership:
        """Insert a membership row putting a project into a list."""
        pass

    @abstractmethod
    def upsert_membership(self, list_id: int, repo_id: int) -> ListMembership:
        """Insert or merge a membership row for a project and a list."""
        pass

    @abstractmethod
    def remove_memberships(self, repo_id: int, list_ids: List[int]) -> int:
        """
        Delete every membership of a project within the given lists.

        Returns:
            Number of membership rows deleted.
        """
        pass

    # =========================================================================
    # Reviews
    # =========================================================================

    @abstractmethod
    def get_reviews(self, repo_id: int) -> List[Review]:
        """
        Retrieve all reviews of a project.

        Returns:
            List of Review instances, newest first.
        """
        pass

    @abstractmethod
    def add_review(self, user_id: str, repo_id: int, rating: int, content: str) -> Review:
        """Append a review and return it as stored."""
        pass

    def __str__(self) -> str:
        return f"Storage({self.name})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
