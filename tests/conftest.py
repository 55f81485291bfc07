"""
Pytest configuration and shared fixtures.

Each test module is tagged with the marker named for it in
``tests/test_config.TEST_CATEGORIES``, so ``pytest -m web`` or
``pytest -m "services and not web"`` selects a category.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import test configuration
from tests.test_config import (
    CONFIG, EXPECTED, TEST_DATA, TEST_CATEGORIES,
    get_repo_record, get_all_repo_records
)


# =============================================================================
# MARKERS FOR TEST CATEGORIES
# =============================================================================

def pytest_configure(config):
    """Register one marker per test category."""
    registered = set()
    for category in TEST_CATEGORIES.values():
        if category["marker"] not in registered:
            config.addinivalue_line("markers", f"{category['marker']}: {category['description']}")
            registered.add(category["marker"])


def pytest_collection_modifyitems(config, items):
    """Tag every collected test with its module's category marker."""
    for item in items:
        stem = item.path.stem.replace("test_", "", 1)
        category = TEST_CATEGORIES.get(stem)
        if category:
            item.add_marker(category["marker"])


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture
def repo_record():
    """Provide a single repos row."""
    return get_repo_record(0)


@pytest.fixture
def repo_records():
    """Provide all repos rows."""
    return get_all_repo_records()


@pytest.fixture
def sample_projects(repo_records):
    """Catalog projects built from the sample rows."""
    from replrepo.models import Project
    return [Project.from_record(r) for r in repo_records]


@pytest.fixture
def user():
    from replrepo.models import User
    return User(**TEST_DATA["users"][0])


@pytest.fixture
def other_user():
    from replrepo.models import User
    return User(**TEST_DATA["users"][1])


@pytest.fixture
def auth_session(user):
    """A signed-in session for the first sample user."""
    from replrepo.models import AuthSession
    return AuthSession(
        access_token="access-abc",
        user=user,
        refresh_token="refresh-xyz",
        expires_in=3600,
        expires_at=4102444800,
    )


@pytest.fixture
def memory_storage(sample_projects):
    """In-memory storage seeded with the sample catalog."""
    from replrepo.storage import MockSupabaseStorage
    return MockSupabaseStorage(projects=sample_projects)


@pytest.fixture
def memory_auth():
    from replrepo.auth import MockAuth
    return MockAuth()


@pytest.fixture
def mock_storage():
    """Provide a Mock constrained to the Storage interface."""
    from unittest.mock import Mock
    from replrepo.storage.base import Storage

    storage = Mock(spec=Storage)
    storage.name = "mock_storage"
    storage.list_projects.return_value = []
    storage.get_lists.return_value = []
    storage.get_saved_repos.return_value = []
    storage.get_reviews.return_value = []

    return storage


@pytest.fixture
def test_config():
    """Provide access to test configuration."""
    return CONFIG


@pytest.fixture
def expected_values():
    """Provide access to expected values."""
    return EXPECTED


@pytest.fixture
def test_data():
    """Provide access to test data."""
    return TEST_DATA

