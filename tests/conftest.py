"""
Root test configuration and fixtures for the seating project.

This conftest.py provides common fixtures for all test categories:
- unit/seating/: Engine, store and settings tests against the in-memory store
- unit/api/: HTTP layer tests with FastAPI's TestClient

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def create_mock_pocketbase():
    """Create a mock PocketBase instance whose collections all share one mock."""
    mock_pb = Mock()

    mock_collection = Mock()

    # Collection auth (for _superusers collection)
    mock_collection.auth_with_password = Mock(return_value=True)

    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_one = Mock()
    mock_collection.create = Mock(return_value=Mock(id="mock-id"))
    mock_collection.update = Mock()
    mock_collection.delete = Mock()

    # Make collection callable to return itself for chaining
    mock_pb.collection = Mock(return_value=mock_collection)

    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"

    return mock_pb


@pytest.fixture
def mock_pocketbase():
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Automatically mock PocketBase to prevent real connections.

    Applied to all tests unless SKIP_MOCKING=true is set for a run against
    a live server.
    """
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()

    with patch("pocketbase.PocketBase") as mock_pb_class:
        mock_pb_class.return_value = mock_pb
        yield {"pocketbase": mock_pb}


@pytest.fixture(autouse=True)
def isolate_seating_environment(monkeypatch):
    """Keep operator overrides from the shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("SEATING_"):
            monkeypatch.delenv(key, raising=False)
    yield
