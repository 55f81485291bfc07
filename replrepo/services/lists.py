"""
Lists screen service.

Holds one user's lists and saved repos for the duration of a request and
applies the list actions to both the data service and that local state.

Moving a repo is delete-then-upsert rather than an atomic update; moving
it to "Unsorted" just deletes its membership rows.
"""

from typing import List, Optional

from loguru import logger

from replrepo.models import SavedRepo, User, UserList, UNSORTED_LIST_ID
from replrepo.services.results import ActionResult
from replrepo.storage.base import Storage, StorageError


LOGIN_REQUIRED = "You must be logged in to manage lists."
FETCH_LISTS_FAILED = "Failed to fetch lists"
FETCH_SAVED_FAILED = "Failed to fetch saved repos"
NAME_REQUIRED = "List name is required"
CREATE_FAILED = "Failed to create list. Please try again."
MOVE_TO_UNSORTED_FAILED = "Failed to move repo to Unsorted"
MOVE_FAILED = "Failed to move repo"
REMOVE_FAILED = "Failed to remove repo"


class ListsService:
    """
    State and actions behind the "My Lists" page.

    Attributes:
        lists: The user's lists, sorted by name as loaded (new lists are appended).
        saved_repos: Saved repos across all of the user's lists, newest first.
        error: Last user-visible error, if any.
    """

    def __init__(self, storage: Storage, user: Optional[User]):
        self.storage = storage
        self.user = user
        self.lists: List[UserList] = []
        self.saved_repos: List[SavedRepo] = []
        self.error: Optional[str] = None

    @property
    def list_ids(self) -> List[int]:
        return [lst.id for lst in self.lists]

    def _fail(self, message: str) -> ActionResult:
        self.error = message
        return ActionResult.fail(message)

    def load(self) -> "ListsService":
        """Fetch the user's lists and the saved repos in them."""
        if self.user is None:
            return self

        try:
            self.lists = self.storage.get_lists(self.user.id)
        except StorageError as e:
            logger.error(f"Error fetching lists: {e}")
            self.error = FETCH_LISTS_FAILED
            return self

        try:
            self.saved_repos = self.storage.get_saved_repos(self.list_ids)
        except StorageError as e:
            logger.error(f"Error fetching saved repos: {e}")
            self.error = FETCH_SAVED_FAILED
        return self

    def get_list(self, list_id: Optional[int]) -> Optional[UserList]:
        for lst in self.lists:
            if lst.id == list_id:
                return lst
        return None

    def visible_repos(self, selected_list_id: Optional[int] = None) -> List[SavedRepo]:
        """Saved repos in the selected list, or all of them when none is selected."""
        return filter_saved(self.saved_repos, selected_list_id)

    def create_list(self, name: str, description: str = "") -> ActionResult:
        """Persist a new list owned by the current user and show it."""
        if self.user is None:
            return self._fail(LOGIN_REQUIRED)

        name = (name or "").strip()
        if not name:
            return self._fail(NAME_REQUIRED)

        try:
            created = self.storage.create_list(self.user.id, name, (description or "").strip())
        except StorageError as e:
            logger.error(f"Error creating list: {e}")
            return self._fail(CREATE_FAILED)

        self.lists.append(created)
        logger.info(f"List created successfully: {created.id} ({created.name})")
        return ActionResult.ok(data=created)

    def move_repo(self, repo_id: int, new_list_id: int) -> ActionResult:
        """
        Move a saved repo to another list.

        ``UNSORTED_LIST_ID`` removes the repo's membership rows instead.
        """
        if self.user is None:
            return self._fail(LOGIN_REQUIRED)

        if new_list_id == UNSORTED_LIST_ID:
            try:
                self.storage.remove_memberships(repo_id, self.list_ids)
            except StorageError as e:
                logger.error(f"Error removing repo {repo_id} from list: {e}")
                return self._fail(MOVE_TO_UNSORTED_FAILED)
            self._set_list(repo_id, None)
            return ActionResult.ok()

        if self.get_list(new_list_id) is None:
            logger.warning(f"User {self.user.id} tried to move repo {repo_id} into foreign list {new_list_id}")
            return self._fail(MOVE_FAILED)

        try:
            self.storage.remove_memberships(repo_id, self.list_ids)
            membership = self.storage.upsert_membership(new_list_id, repo_id)
        except StorageError as e:
            logger.error(f"Error moving repo {repo_id}: {e}")
            return self._fail(MOVE_FAILED)

        self._set_list(repo_id, new_list_id)
        return ActionResult.ok(data=membership)

    def remove_repo(self, repo_id: int) -> ActionResult:
        """Remove a saved repo from every one of the user's lists."""
        if self.user is None:
            return self._fail(LOGIN_REQUIRED)

        try:
            self.storage.remove_memberships(repo_id, self.list_ids)
        except StorageError as e:
            logger.error(f"Error removing repo {repo_id}: {e}")
            return self._fail(REMOVE_FAILED)

        self.saved_repos = [repo for repo in self.saved_repos if repo.id != repo_id]
        return ActionResult.ok()

    def _set_list(self, repo_id: int, list_id: Optional[int]) -> None:
        for repo in self.saved_repos:
            if repo.id == repo_id:
                repo.list_id = list_id


def filter_saved(saved: List[SavedRepo], selected_list_id: Optional[int]) -> List[SavedRepo]:
    if selected_list_id is None:
        return list(saved)
    return [repo for repo in saved if repo.list_id == selected_list_id]
