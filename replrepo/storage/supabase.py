"""
Supabase storage backend for ReplRepo.

Implements the Storage interface on top of Supabase's PostgREST API.
Uses plain REST calls for all operations.

PostgREST Documentation: https://postgrest.org/en/stable/references/api.html

=============================================================================
SUPABASE SCHEMA
=============================================================================

| Table       | Columns                                                        |
|-------------|----------------------------------------------------------------|
| repos       | id, name, description, icon, tags[], upvotes, type, rating, url |
| lists       | id, user_id, name, description                                 |
| list_repos  | id, list_id -> lists.id, repo_id -> repos.id, created_at       |
| reviews     | id, user_id, repo_id -> repos.id, rating, content, created_at  |

Row level security on lists, list_repos and reviews restricts writes to the
owning user, so data requests carry the user's access token when one exists.

=============================================================================
"""

from datetime import datetime, timezone
from itertools import count
from typing import List, Optional, Dict, Any

import requests
from loguru import logger

from replrepo.config import (
    SUPABASE_URL,
    SUPABASE_KEY,
    REQUEST_TIMEOUT,
)
from replrepo.models import (
    AuthSession,
    ListMembership,
    Project,
    Review,
    SavedRepo,
    UserList,
)
from replrepo.storage.base import Storage, StorageError


# Error code PostgREST returns when a single-object request matches no rows
NO_ROWS_CODE = "PGRST116"

# Error code PostgREST returns for an expired or invalid JWT
JWT_REJECTED_CODE = "PGRST301"

# Columns fetched when joining memberships to their projects
SAVED_REPOS_SELECT = "id,list_id,created_at,repos(id,name,description,url)"


def _error_from_response(response: requests.Response) -> StorageError:
    """Build a StorageError from a PostgREST error body."""
    code = None
    message = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = body.get("code")
        message = body.get("message") or body.get("details") or message
    return StorageError(message, code=code, status=response.status_code)


class SupabaseStorage(Storage):
    """
    Supabase-backed storage implementation.

    Configuration is pulled from environment variables via replrepo.config:
    - SUPABASE_URL: Project URL
    - SUPABASE_KEY: Anon/public API key

    Requests are authorized with the signed-in user's access token when the
    storage is bound to a session, otherwise with the API key itself.

    Attributes:
        session_rejected: Set once the service refuses the bound access token.
    """

    def __init__(
        self,
        url: str = None,
        api_key: str = None,
        access_token: str = None,
    ):
        """
        Initialize SupabaseStorage.

        Args:
            url: Supabase project URL. Defaults to config.SUPABASE_URL.
            api_key: Anon API key. Defaults to config.SUPABASE_KEY.
            access_token: User access token for row level security.
        """
        # Use provided values, or fall back to config if None (not empty string)
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SUPABASE_KEY
        self.access_token = access_token
        self.session_rejected = False

    @property
    def name(self) -> str:
        return "supabase"

    @property
    def _rest_url(self) -> str:
        """Construct the base URL for table requests."""
        return f"{self.url}/rest/v1"

    def _headers(self, prefer: str = None, single: bool = False) -> Dict[str, str]:
        """Construct headers for API requests."""
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        if single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        return headers

    def _validate_config(self) -> None:
        """Validate that required configuration is present."""
        if not self.url:
            raise ValueError("SUPABASE_URL is not configured")
        if not self.api_key:
            raise ValueError("SUPABASE_KEY is not configured")

    def with_session(self, session: Optional[AuthSession]) -> "SupabaseStorage":
        """Return a copy of this storage that acts as the session's user."""
        token = session.access_token if session else None
        return SupabaseStorage(url=self.url, api_key=self.api_key, access_token=token)

    # =========================================================================
    # API Operations
    # =========================================================================

    def _handle_response(self, response: requests.Response) -> Any:
        """Raise StorageError for error responses, otherwise decode the body."""
        if response.status_code >= 400:
            error = _error_from_response(response)
            if self.access_token and (error.status == 401 or error.code == JWT_REJECTED_CODE):
                logger.warning(f"Access token rejected: {error}")
                self.session_rejected = True
            raise error
        if not response.content:
            return None
        return response.json()

    def _select(
        self,
        table: str,
        params: Dict[str, str],
        single: bool = False,
    ) -> Any:
        """
        Read rows from a table.

        Args:
            table: Table name.
            params: PostgREST query parameters (select, filters, order).
            single: Ask for exactly one object instead of an array.

        Returns:
            Decoded JSON: a list of rows, or one row when ``single``.
        """
        self._validate_config()
        logger.debug(f"GET {table} {params}")
        try:
            response = requests.get(
                f"{self._rest_url}/{table}",
                headers=self._headers(single=single),
                params=params,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StorageError(f"Request to {table} failed: {e}") from e
        return self._handle_response(response)

    def _insert(
        self,
        table: str,
        rows: List[Dict[str, Any]],
        upsert: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Insert (or upsert) rows and return them as stored.

        Args:
            table: Table name.
            rows: Row dictionaries to write.
            upsert: Merge with existing rows on primary key conflict.
        """
        self._validate_config()
        prefer = "return=representation"
        if upsert:
            prefer = "resolution=merge-duplicates," + prefer
        logger.debug(f"POST {table} ({len(rows)} rows, upsert={upsert})")
        try:
            response = requests.post(
                f"{self._rest_url}/{table}",
                headers=self._headers(prefer=prefer),
                json=rows,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StorageError(f"Write to {table} failed: {e}") from e
        return self._handle_response(response) or []

    def _delete(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """Delete rows matching the filters and return the deleted rows."""
        self._validate_config()
        logger.debug(f"DELETE {table} {params}")
        try:
            response = requests.delete(
                f"{self._rest_url}/{table}",
                headers=self._headers(prefer="return=representation"),
                params=params,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StorageError(f"Delete from {table} failed: {e}") from e
        return self._handle_response(response) or []

    def _select_one(self, table: str, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """Read exactly one row, returning None when nothing matches."""
        try:
            return self._select(table, params, single=True)
        except StorageError as e:
            if e.code == NO_ROWS_CODE:
                return None
            raise

    @staticmethod
    def _first_row(rows: List[Dict[str, Any]], table: str) -> Dict[str, Any]:
        if not rows:
            raise StorageError(f"Write to {table} returned no rows")
        return rows[0]

    @staticmethod
    def _in_filter(values: List[int]) -> str:
        return f"in.({','.join(str(v) for v in values)})"

    # =========================================================================
    # Storage Interface Implementation
    # =========================================================================

    def list_projects(self) -> List[Project]:
        records = self._select("repos", {"select": "*"}) or []
        projects = []
        for record in records:
            project = Project.from_record(record)
            if project:
                projects.append(project)
            else:
                logger.warning(f"Skipping malformed repos row: {record.get('id')}")
        return projects

    def get_project(self, project_id: int) -> Optional[Project]:
        record = self._select_one("repos", {"select": "*", "id": f"eq.{project_id}"})
        if record is None:
            return None
        return Project.from_record(record)

    def get_lists(self, user_id: str) -> List[UserList]:
        records = self._select(
            "lists",
            {"select": "*", "user_id": f"eq.{user_id}", "order": "name.asc"},
        ) or []
        return [lst for lst in (UserList.from_record(r) for r in records) if lst]

    def find_list_by_name(self, user_id: str, name: str) -> Optional[UserList]:
        # Names are not unique; the oldest list with the name wins
        records = self._select(
            "lists",
            {
                "select": "*",
                "user_id": f"eq.{user_id}",
                "name": f"eq.{name}",
                "order": "id.asc",
                "limit": "1",
            },
        ) or []
        if not records:
            return None
        return UserList.from_record(records[0])

    def create_list(self, user_id: str, name: str, description: str = "") -> UserList:
        rows = self._insert(
            "lists",
            [{"user_id": user_id, "name": name, "description": description}],
        )
        created = UserList.from_record(self._first_row(rows, "lists"))
        if created is None:
            raise StorageError("Created list row is malformed")
        return created

    def get_saved_repos(self, list_ids: List[int]) -> List[SavedRepo]:
        if not list_ids:
            return []
        records = self._select(
            "list_repos",
            {
                "select": SAVED_REPOS_SELECT,
                "list_id": self._in_filter(list_ids),
                "order": "created_at.desc",
            },
        ) or []
        return [s for s in (SavedRepo.from_joined_record(r) for r in records) if s]

    def add_to_list(self, list_id: int, repo_id: int) -> ListMembership:
        rows = self._insert("list_repos", [{"list_id": list_id, "repo_id": repo_id}])
        return self._membership(rows)

    def upsert_membership(self, list_id: int, repo_id: int) -> ListMembership:
        rows = self._insert(
            "list_repos",
            [{"list_id": list_id, "repo_id": repo_id}],
            upsert=True,
        )
        return self._membership(rows)

    def _membership(self, rows: List[Dict[str, Any]]) -> ListMembership:
        membership = ListMembership.from_record(self._first_row(rows, "list_repos"))
        if membership is None:
            raise StorageError("Membership row is malformed")
        return membership

    def remove_memberships(self, repo_id: int, list_ids: List[int]) -> int:
        if not list_ids:
            return 0
        deleted = self._delete(
            "list_repos",
            {"repo_id": f"eq.{repo_id}", "list_id": self._in_filter(list_ids)},
        )
        return len(deleted)

    def get_reviews(self, repo_id: int) -> List[Review]:
        records = self._select(
            "reviews",
            {"select": "*", "repo_id": f"eq.{repo_id}", "order": "created_at.desc"},
        ) or []
        return [r for r in (Review.from_record(rec) for rec in records) if r]

    def add_review(self, user_id: str, repo_id: int, rating: int, content: str) -> Review:
        rows = self._insert(
            "reviews",
            [{"repo_id": repo_id, "user_id": user_id, "rating": rating, "content": content}],
        )
        review = Review.from_record(self._first_row(rows, "reviews"))
        if review is None:
            raise StorageError("Created review row is malformed")
        return review


class MockSupabaseStorage(Storage):
    """
    In-memory mock storage for testing and development.

    Use this when Supabase is not configured or for testing.
    Data is stored in memory and lost when the process ends.
    """

    def __init__(self, projects: Optional[List[Project]] = None):
        self._projects: Dict[int, Project] = {}
        self._lists: Dict[int, UserList] = {}
        self._memberships: Dict[int, ListMembership] = {}
        self._reviews: Dict[int, Review] = {}
        self._ids = count(1)
        for project in projects or []:
            self.add_project(project)

    @property
    def name(self) -> str:
        return "mock"

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def add_project(self, project: Project) -> None:
        """Seed a catalog project (for testing)."""
        self._projects[project.id] = project

    def list_projects(self) -> List[Project]:
        return list(self._projects.values())

    def get_project(self, project_id: int) -> Optional[Project]:
        return self._projects.get(project_id)

    def get_lists(self, user_id: str) -> List[UserList]:
        lists = [lst for lst in self._lists.values() if lst.user_id == user_id]
        return sorted(lists, key=lambda lst: lst.name)

    def find_list_by_name(self, user_id: str, name: str) -> Optional[UserList]:
        for lst in self._lists.values():
            if lst.user_id == user_id and lst.name == name:
                return lst
        return None

    def create_list(self, user_id: str, name: str, description: str = "") -> UserList:
        created = UserList(id=next(self._ids), user_id=user_id, name=name, description=description)
        self._lists[created.id] = created
        return created

    def get_saved_repos(self, list_ids: List[int]) -> List[SavedRepo]:
        memberships = [m for m in self._memberships.values() if m.list_id in list_ids]
        memberships.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        saved = []
        for m in memberships:
            project = self._projects.get(m.repo_id)
            if project is None:
                continue
            saved.append(SavedRepo(
                id=project.id,
                name=project.name,
                url=project.url,
                description=project.description,
                list_id=m.list_id,
                membership_id=m.id,
            ))
        return saved

    def add_to_list(self, list_id: int, repo_id: int) -> ListMembership:
        membership = ListMembership(
            id=next(self._ids),
            list_id=list_id,
            repo_id=repo_id,
            created_at=self._now(),
        )
        self._memberships[membership.id] = membership
        return membership

    def upsert_membership(self, list_id: int, repo_id: int) -> ListMembership:
        # No id is sent, so an upsert never conflicts and always inserts
        return self.add_to_list(list_id, repo_id)

    def remove_memberships(self, repo_id: int, list_ids: List[int]) -> int:
        doomed = [
            m.id for m in self._memberships.values()
            if m.repo_id == repo_id and m.list_id in list_ids
        ]
        for membership_id in doomed:
            del self._memberships[membership_id]
        return len(doomed)

    def get_reviews(self, repo_id: int) -> List[Review]:
        reviews = [r for r in self._reviews.values() if r.repo_id == repo_id]
        return sorted(reviews, key=lambda r: (r.created_at, r.id), reverse=True)

    def add_review(self, user_id: str, repo_id: int, rating: int, content: str) -> Review:
        review = Review(
            id=next(self._ids),
            user_id=user_id,
            repo_id=repo_id,
            rating=rating,
            content=content,
            created_at=self._now(),
        )
        self._reviews[review.id] = review
        return review

    def clear(self) -> None:
        """Clear all records (for testing)."""
        self._projects.clear()
        self._lists.clear()
        self._memberships.clear()
        self._reviews.clear()

    def count(self, table: str) -> int:
        """Return number of stored rows in a table (for testing)."""
        tables = {
            "repos": self._projects,
            "lists": self._lists,
            "list_repos": self._memberships,
            "reviews": self._reviews,
        }
        return len(tables[table])
