"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Remote Store:
    Tests never reach a real store. The `backend` fixture is an in-memory
    FakeStoreBackend served through httpx.MockTransport, and `store` is a
    real StoreClient wired to it:

        async def test_something(backend, store):
            user_id = backend.add_user()
            store.set_access_token(backend.issue_token(user_id))
            rows = await store.rest("GET", "notes")
"""

from collections.abc import AsyncGenerator

import pytest

from fakes import FakeStoreBackend
from notekeep.backend.core.security import SessionFile
from notekeep.backend.core.store import StoreClient


# =============================================================================
# Remote Store Fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeStoreBackend:
    """Fresh in-memory store backend per test."""
    return FakeStoreBackend()


@pytest.fixture
async def store(backend: FakeStoreBackend) -> AsyncGenerator[StoreClient, None]:
    """StoreClient bound to the fake backend, closed after the test."""
    client = backend.client()
    yield client
    await client.close()


@pytest.fixture
def user_id(backend: FakeStoreBackend) -> str:
    """A registered user with a profile row."""
    return backend.add_user()


@pytest.fixture
def signed_in_store(store: StoreClient, backend: FakeStoreBackend, user_id: str) -> StoreClient:
    """Store client already carrying a valid access token for user_id."""
    store.set_access_token(backend.issue_token(user_id))
    return store


# =============================================================================
# Session File Fixtures
# =============================================================================


@pytest.fixture
def session_file(tmp_path) -> SessionFile:
    """Session file under a temporary directory."""
    return SessionFile(tmp_path / ".notekeep" / "session.json")
