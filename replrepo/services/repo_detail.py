"""Repo detail screen service."""

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from replrepo.models import Project
from replrepo.storage.base import Storage, StorageError


INVALID_REPO_ID = "Invalid repo ID"
FETCH_FAILED = "Error fetching repo"
NOT_FOUND = "Repo not found"


@dataclass
class RepoDetailResult:
    repo: Optional[Project] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.repo is not None


def parse_repo_id(raw: Union[str, int, None]) -> Optional[int]:
    """Parse a repo identifier from a URL segment; None if it is not a positive integer."""
    if isinstance(raw, bool):
        return None
    try:
        repo_id = int(raw)
    except (TypeError, ValueError):
        return None
    return repo_id if repo_id > 0 else None


class RepoDetailService:
    """Fetches a single project for its detail page."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def get(self, raw_id: Union[str, int, None]) -> RepoDetailResult:
        repo_id = parse_repo_id(raw_id)
        if repo_id is None:
            return RepoDetailResult(error=INVALID_REPO_ID)

        try:
            repo = self.storage.get_project(repo_id)
        except StorageError as e:
            logger.error(f"Error fetching repo {repo_id}: {e}")
            return RepoDetailResult(error=FETCH_FAILED)

        if repo is None:
            return RepoDetailResult(error=NOT_FOUND)
        return RepoDetailResult(repo=repo)
