"""
Tests for the listing service.

Covers loading and filtering the catalog and the quick-save action.
"""

from unittest.mock import Mock, patch

from replrepo.services import ListingService
from replrepo.services.listing import LOGIN_REQUIRED_TO_SAVE, SAVE_FAILED, SAVE_SUCCESS
from replrepo.storage import StorageError, SupabaseStorage
from tests.test_config import CONFIG


class TestLoad:
    """Tests for ListingService.load."""

    def test_load_without_filters(self, memory_storage):
        listing = ListingService(memory_storage).load()

        assert listing.success
        assert len(listing.projects) == 4
        assert listing.filtered == listing.projects
        assert listing.project_type == "all"
        assert listing.query == ""

    def test_search_and_type_combine(self, memory_storage):
        listing = ListingService(memory_storage).load(query="  react ", project_type="GitHub")

        assert listing.query == "react"
        assert [p.name for p in listing.filtered] == ["Next.js Starter"]
        assert len(listing.projects) == 4

    def test_storage_failure_becomes_error(self, mock_storage):
        mock_storage.list_projects.side_effect = StorageError("connection reset")

        listing = ListingService(mock_storage).load(query="x")

        assert not listing.success
        assert listing.error == "Failed to load initial data: connection reset"
        assert listing.projects == []
        assert listing.query == "x"


class TestSaveRepo:
    """Tests for ListingService.save_repo."""

    def test_requires_user(self, mock_storage):
        result = ListingService(mock_storage).save_repo(None, 1)

        assert not result.success
        assert result.message == LOGIN_REQUIRED_TO_SAVE
        mock_storage.add_to_list.assert_not_called()
        mock_storage.create_list.assert_not_called()

    def test_creates_default_list_on_first_save(self, memory_storage, user):
        result = ListingService(memory_storage).save_repo(user, 2)

        assert result.success
        assert result.message == SAVE_SUCCESS
        saved_list = memory_storage.find_list_by_name(user.id, "Saved")
        assert saved_list is not None
        assert [s.id for s in memory_storage.get_saved_repos([saved_list.id])] == [2]

    def test_reuses_existing_default_list(self, memory_storage, user):
        service = ListingService(memory_storage)
        service.save_repo(user, 1)
        service.save_repo(user, 3)

        assert memory_storage.count("lists") == 1
        assert memory_storage.count("list_repos") == 2

    def test_custom_list_name(self, memory_storage, user):
        ListingService(memory_storage, saved_list_name="Favorites").save_repo(user, 1)

        assert memory_storage.find_list_by_name(user.id, "Favorites") is not None

    def test_storage_failure(self, mock_storage, user):
        mock_storage.find_list_by_name.return_value = Mock(id=5)
        mock_storage.add_to_list.side_effect = StorageError("insert failed")

        result = ListingService(mock_storage).save_repo(user, 1)

        assert not result.success
        assert result.message == SAVE_FAILED

    def test_duplicate_default_lists_do_not_multiply(self, user):
        """A second list with the default name is reused, not treated as missing."""
        storage = SupabaseStorage(url=CONFIG["supabase_url"], api_key=CONFIG["supabase_key"])
        oldest = {"id": 5, "user_id": user.id, "name": "Saved", "description": ""}
        membership = {"id": 9, "list_id": 5, "repo_id": 2, "created_at": "2024-01-01T00:00:00Z"}

        with patch("replrepo.storage.supabase.requests.get") as mock_get, \
             patch("replrepo.storage.supabase.requests.post") as mock_post:
            mock_get.return_value = Mock(status_code=200, content=b"[]", **{"json.return_value": [oldest]})
            mock_post.return_value = Mock(status_code=201, content=b"[]", **{"json.return_value": [membership]})

            result = ListingService(storage, saved_list_name="Saved").save_repo(user, 2)

        assert result.success
        posted = [call.args[0] for call in mock_post.call_args_list]
        assert posted == [f"{CONFIG['supabase_url']}/rest/v1/list_repos"]
