"""
Personal list models.

A user owns any number of named lists; each saved template is tied to a
list through a membership row in the ``list_repos`` table.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

from replrepo.models.timestamps import parse_timestamp


# Pseudo list id for saved repos that belong to no list
UNSORTED_LIST_ID = 0


@dataclass
class UserList:
    """A named collection of saved templates owned by one user."""

    id: int
    user_id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> Optional["UserList"]:
        """Create a UserList from a ``lists`` row, or None if incomplete."""
        try:
            name = record.get("name")
            if not name:
                return None
            return cls(
                id=int(record["id"]),
                user_id=str(record.get("user_id") or ""),
                name=name,
                description=record.get("description") or "",
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass
class ListMembership:
    """A single ``list_repos`` row joining a list and a project."""

    id: int
    list_id: int
    repo_id: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: dict) -> Optional["ListMembership"]:
        try:
            return cls(
                id=int(record["id"]),
                list_id=int(record["list_id"]),
                repo_id=int(record["repo_id"]),
                created_at=parse_timestamp(record.get("created_at")),
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass
class SavedRepo:
    """
    A saved template as shown on the lists page.

    This is a membership row with its project columns flattened in.
    ``list_id`` is None once the repo has been moved to "Unsorted".
    """

    id: int
    name: str
    url: str
    description: str = ""
    list_id: Optional[int] = None
    membership_id: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_joined_record(cls, record: dict) -> Optional["SavedRepo"]:
        """
        Create a SavedRepo from a ``list_repos`` row with an embedded ``repos`` object.

        Rows whose project is missing (e.g. deleted upstream) are skipped.
        """
        repo = record.get("repos")
        if not isinstance(repo, dict):
            return None
        try:
            list_id = record.get("list_id")
            return cls(
                id=int(repo["id"]),
                name=repo.get("name") or "",
                url=repo.get("url") or "",
                description=repo.get("description") or "",
                list_id=int(list_id) if list_id is not None else None,
                membership_id=int(record["id"]) if record.get("id") is not None else None,
            )
        except (KeyError, TypeError, ValueError):
            return None
