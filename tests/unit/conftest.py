"""
Unit Test Fixtures.

Fixtures for unit tests - collaborators are mocked where a test is about
a single layer. Unit tests are fast and isolated and never open a socket.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from notekeep.backend.core.store import StoreClient
from notekeep.backend.schemas.note import Note
from notekeep.backend.schemas.profile import Profile


# =============================================================================
# Store Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_store() -> MagicMock:
    """
    Mock StoreClient for repository and service tests.

    Usage:
        async def test_repository(mock_store: MagicMock):
            mock_store.rest.return_value = [{"id": "1", ...}]
            repo = NoteRepository(mock_store)
    """
    store = MagicMock(spec=StoreClient)
    store.access_token = None
    store.rest = AsyncMock(return_value=[])
    store.auth = AsyncMock(return_value={})
    store.request = AsyncMock(return_value=None)
    store.close = AsyncMock()

    def _set_access_token(token: str | None) -> None:
        store.access_token = token

    store.set_access_token = MagicMock(side_effect=_set_access_token)
    return store


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def sample_note() -> Note:
    return Note(
        id="note-1",
        user_id="user-1",
        title="Groceries",
        content="milk, eggs",
        created_at=datetime(2025, 1, 1, 10, tzinfo=timezone.utc),
        updated_at=datetime(2025, 1, 1, 10, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_profile() -> Profile:
    return Profile(id="user-1", full_name="Jane Doe", email="jane@example.com", phone="555-0100")
