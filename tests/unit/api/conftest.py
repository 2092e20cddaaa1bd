"""Fixtures for API unit tests: in-memory store, fresh engine per test, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from archive_lifecycle.main import app


@pytest.fixture
def app_with_overrides(store, engine):
    """App with the document store and engine overridden for testing."""
    from archive_lifecycle.api import dependencies

    app.dependency_overrides[dependencies.get_document_store] = lambda: store
    app.dependency_overrides[dependencies.get_lifecycle_engine] = lambda: engine
    yield app
    app.dependency_overrides.clear()
    dependencies.reset_singletons()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def actor_headers():
    return {"X-Actor-ID": "admin-1"}
