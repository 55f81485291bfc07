"""
Tests for storage abstraction and implementations.

Tests the PostgREST request shapes and error handling of SupabaseStorage
and the behavior of the in-memory MockSupabaseStorage.
"""

import pytest
import requests
from unittest.mock import Mock, patch

from replrepo.models import Project
from replrepo.storage.base import Storage, StorageError
from replrepo.storage.supabase import (
    NO_ROWS_CODE,
    SAVED_REPOS_SELECT,
    MockSupabaseStorage,
    SupabaseStorage,
)
from tests.test_config import CONFIG, TEST_DATA


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def supabase_storage():
    """SupabaseStorage with test credentials."""
    return SupabaseStorage(url=CONFIG["supabase_url"], api_key=CONFIG["supabase_key"])


def make_response(status_code=200, body=None):
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.content = b"" if body is None else b"{}"
    response.json.return_value = body
    return response


# =============================================================================
# Test Interface
# =============================================================================

class TestStorageInterface:
    """Tests that both backends satisfy the Storage contract."""

    def test_storage_is_abstract(self):
        with pytest.raises(TypeError):
            Storage()

    def test_backends_are_storage(self, supabase_storage):
        assert isinstance(supabase_storage, Storage)
        assert isinstance(MockSupabaseStorage(), Storage)

    def test_names(self, supabase_storage):
        assert supabase_storage.name == "supabase"
        assert MockSupabaseStorage().name == "mock"
        assert str(supabase_storage) == "Storage(supabase)"


# =============================================================================
# Test SupabaseStorage Configuration
# =============================================================================

class TestSupabaseStorageConfig:

    def test_trailing_slash_is_stripped(self):
        storage = SupabaseStorage(url="https://x.supabase.co/", api_key="k")
        assert storage._rest_url == "https://x.supabase.co/rest/v1"

    def test_headers_use_api_key_without_session(self, supabase_storage):
        headers = supabase_storage._headers()

        assert headers["apikey"] == CONFIG["supabase_key"]
        assert headers["Authorization"] == f"Bearer {CONFIG['supabase_key']}"
        assert "Prefer" not in headers

    def test_with_session_uses_access_token(self, supabase_storage, auth_session):
        bound = supabase_storage.with_session(auth_session)
        headers = bound._headers()

        assert headers["apikey"] == CONFIG["supabase_key"]
        assert headers["Authorization"] == "Bearer access-abc"
        assert supabase_storage.access_token is None

    def test_with_no_session_stays_anonymous(self, supabase_storage):
        assert supabase_storage.with_session(None).access_token is None

    def test_single_object_accept_header(self, supabase_storage):
        headers = supabase_storage._headers(single=True)
        assert headers["Accept"] == "application/vnd.pgrst.object+json"

    def test_missing_url_raises(self):
        storage = SupabaseStorage(url="", api_key="k")
        with pytest.raises(ValueError, match="SUPABASE_URL"):
            storage.list_projects()

    def test_missing_key_raises(self):
        storage = SupabaseStorage(url="https://x.supabase.co", api_key="")
        with pytest.raises(ValueError, match="SUPABASE_KEY"):
            storage.list_projects()


# =============================================================================
# Test SupabaseStorage API Calls (Mocked)
# =============================================================================

class TestSupabaseCatalog:
    """Tests for catalog reads."""

    def test_list_projects(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=TEST_DATA["repo_records"])

            projects = supabase_storage.list_projects()

            assert [p.id for p in projects] == [1, 2, 3, 4]
            url = mock_get.call_args.args[0]
            assert url == f"{CONFIG['supabase_url']}/rest/v1/repos"
            assert mock_get.call_args.kwargs["params"] == {"select": "*"}
            assert mock_get.call_args.kwargs["timeout"] > 0

    def test_list_projects_skips_malformed_rows(self, supabase_storage):
        rows = TEST_DATA["repo_records"][:1] + [{"id": 99, "name": "", "type": "GitHub"}]
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=rows)

            projects = supabase_storage.list_projects()

            assert [p.id for p in projects] == [1]

    def test_get_project_requests_single_object(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=TEST_DATA["repo_records"][1])

            project = supabase_storage.get_project(2)

            assert project.name == "Python Flask API"
            assert mock_get.call_args.kwargs["params"]["id"] == "eq.2"
            assert mock_get.call_args.kwargs["headers"]["Accept"] == "application/vnd.pgrst.object+json"

    def test_get_project_not_found(self, supabase_storage):
        body = {"code": NO_ROWS_CODE, "message": "JSON object requested, multiple (or no) rows returned"}
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(406, body)

            assert supabase_storage.get_project(404) is None

    def test_http_error_raises_storage_error(self, supabase_storage):
        body = {"code": "42501", "message": "permission denied for table repos"}
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(401, body)

            with pytest.raises(StorageError) as exc_info:
                supabase_storage.list_projects()

            assert exc_info.value.status == 401
            assert exc_info.value.code == "42501"
            assert "permission denied" in str(exc_info.value)

    def test_expired_token_marks_session_rejected(self, supabase_storage, auth_session):
        bound = supabase_storage.with_session(auth_session)
        body = {"code": "PGRST301", "message": "JWT expired"}
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(401, body)

            with pytest.raises(StorageError, match="JWT expired"):
                bound.list_projects()

        assert bound.session_rejected

    def test_anonymous_401_is_not_a_session_problem(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(401, {"message": "Invalid API key"})

            with pytest.raises(StorageError):
                supabase_storage.list_projects()

        assert not supabase_storage.session_rejected

    def test_network_error_raises_storage_error(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.side_effect = requests.ConnectionError("Network down")

            with pytest.raises(StorageError, match="Network down"):
                supabase_storage.list_projects()


class TestSupabaseLists:
    """Tests for lists and memberships."""

    def test_get_lists_filters_by_user_and_sorts_by_name(self, supabase_storage):
        rows = [{"id": 1, "user_id": "user-1", "name": "A"}, {"id": 2, "user_id": "user-1", "name": "B"}]
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=rows)

            lists = supabase_storage.get_lists("user-1")

            assert [lst.name for lst in lists] == ["A", "B"]
            params = mock_get.call_args.kwargs["params"]
            assert params["user_id"] == "eq.user-1"
            assert params["order"] == "name.asc"

    def test_find_list_by_name_takes_oldest_of_duplicates(self, supabase_storage):
        oldest = [{"id": 5, "user_id": "user-1", "name": "Saved"}]
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=oldest)

            found = supabase_storage.find_list_by_name("user-1", "Saved")

            assert found.id == 5
            params = mock_get.call_args.kwargs["params"]
            assert params["name"] == "eq.Saved"
            assert params["order"] == "id.asc"
            assert params["limit"] == "1"
            assert "Accept" not in mock_get.call_args.kwargs["headers"]

    def test_find_list_by_name_missing(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=[])

            assert supabase_storage.find_list_by_name("user-1", "Saved") is None

    def test_create_list_returns_stored_row(self, supabase_storage):
        stored = [{"id": 5, "user_id": "user-1", "name": "Saved", "description": ""}]
        with patch("replrepo.storage.supabase.requests.post") as mock_post:
            mock_post.return_value = make_response(201, stored)

            created = supabase_storage.create_list("user-1", "Saved")

            assert created.id == 5
            assert mock_post.call_args.kwargs["json"] == [
                {"user_id": "user-1", "name": "Saved", "description": ""}
            ]
            assert mock_post.call_args.kwargs["headers"]["Prefer"] == "return=representation"

    def test_create_list_with_empty_response_raises(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.post") as mock_post:
            mock_post.return_value = make_response(201, [])

            with pytest.raises(StorageError):
                supabase_storage.create_list("user-1", "Saved")

    def test_get_saved_repos_joins_projects(self, supabase_storage):
        rows = [{
            "id": 9,
            "list_id": 5,
            "created_at": "2024-01-01T00:00:00Z",
            "repos": {"id": 1, "name": "Next.js Starter", "description": "d", "url": "https://x"},
        }]
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=rows)

            saved = supabase_storage.get_saved_repos([5, 6])

            assert saved[0].id == 1
            assert saved[0].list_id == 5
            params = mock_get.call_args.kwargs["params"]
            assert params["select"] == SAVED_REPOS_SELECT
            assert params["list_id"] == "in.(5,6)"
            assert params["order"] == "created_at.desc"

    def test_get_saved_repos_without_lists_skips_request(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            assert supabase_storage.get_saved_repos([]) == []
            mock_get.assert_not_called()

    def test_upsert_membership_merges_duplicates(self, supabase_storage):
        stored = [{"id": 3, "list_id": 5, "repo_id": 1, "created_at": "2024-01-01T00:00:00Z"}]
        with patch("replrepo.storage.supabase.requests.post") as mock_post:
            mock_post.return_value = make_response(201, stored)

            membership = supabase_storage.upsert_membership(5, 1)

            assert membership.list_id == 5
            prefer = mock_post.call_args.kwargs["headers"]["Prefer"]
            assert "resolution=merge-duplicates" in prefer
            assert "return=representation" in prefer

    def test_remove_memberships_is_scoped_to_lists(self, supabase_storage):
        deleted = [{"id": 3, "list_id": 5, "repo_id": 1}]
        with patch("replrepo.storage.supabase.requests.delete") as mock_delete:
            mock_delete.return_value = make_response(200, deleted)

            count = supabase_storage.remove_memberships(1, [5, 6])

            assert count == 1
            params = mock_delete.call_args.kwargs["params"]
            assert params == {"repo_id": "eq.1", "list_id": "in.(5,6)"}

    def test_remove_memberships_without_lists_deletes_nothing(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.delete") as mock_delete:
            assert supabase_storage.remove_memberships(1, []) == 0
            mock_delete.assert_not_called()


class TestSupabaseReviews:

    def test_get_reviews_newest_first(self, supabase_storage):
        with patch("replrepo.storage.supabase.requests.get") as mock_get:
            mock_get.return_value = make_response(body=TEST_DATA["review_records"])

            reviews = supabase_storage.get_reviews(1)

            assert [r.id for r in reviews] == [10, 11]
            assert mock_get.call_args.kwargs["params"]["order"] == "created_at.desc"

    def test_add_review_posts_row(self, supabase_storage):
        stored = [dict(TEST_DATA["review_records"][0])]
        with patch("replrepo.storage.supabase.requests.post") as mock_post:
            mock_post.return_value = make_response(201, stored)

            review = supabase_storage.add_review("user-1", 1, 5, "Great starting point")

            assert review.id == 10
            assert mock_post.call_args.args[0].endswith("/rest/v1/reviews")
            assert mock_post.call_args.kwargs["json"] == [{
                "repo_id": 1, "user_id": "user-1", "rating": 5, "content": "Great starting point",
            }]


# =============================================================================
# Test MockSupabaseStorage
# =============================================================================

class TestMockSupabaseStorage:
    """Tests for the in-memory backend."""

    def test_seeded_catalog(self, memory_storage):
        assert memory_storage.count("repos") == 4
        assert memory_storage.get_project(2).name == "Python Flask API"
        assert memory_storage.get_project(99) is None

    def test_add_project(self):
        storage = MockSupabaseStorage()
        storage.add_project(Project(id=7, name="Svelte Kit", url="https://x", type="GitHub"))

        assert [p.id for p in storage.list_projects()] == [7]

    def test_lists_are_per_user_and_sorted(self, memory_storage):
        memory_storage.create_list("user-1", "Zeta")
        memory_storage.create_list("user-1", "Alpha")
        memory_storage.create_list("user-2", "Other")

        assert [lst.name for lst in memory_storage.get_lists("user-1")] == ["Alpha", "Zeta"]
        assert memory_storage.find_list_by_name("user-2", "Zeta") is None

    def test_saved_repos_newest_first(self, memory_storage):
        lst = memory_storage.create_list("user-1", "Saved")
        memory_storage.add_to_list(lst.id, 1)
        memory_storage.add_to_list(lst.id, 2)

        saved = memory_storage.get_saved_repos([lst.id])

        assert [s.id for s in saved] == [2, 1]

    def test_remove_memberships_only_touches_given_lists(self, memory_storage):
        mine = memory_storage.create_list("user-1", "Mine")
        theirs = memory_storage.create_list("user-2", "Theirs")
        memory_storage.add_to_list(mine.id, 1)
        memory_storage.add_to_list(theirs.id, 1)

        removed = memory_storage.remove_memberships(1, [mine.id])

        assert removed == 1
        assert [s.list_id for s in memory_storage.get_saved_repos([mine.id, theirs.id])] == [theirs.id]

    def test_reviews_append(self, memory_storage):
        memory_storage.add_review("user-1", 1, 4, "first")
        memory_storage.add_review("user-2", 1, 2, "second")

        reviews = memory_storage.get_reviews(1)

        assert [r.content for r in reviews] == ["second", "first"]
        assert memory_storage.get_reviews(2) == []

    def test_clear(self, memory_storage):
        memory_storage.create_list("user-1", "Saved")
        memory_storage.clear()

        assert memory_storage.count("repos") == 0
        assert memory_storage.count("lists") == 0
