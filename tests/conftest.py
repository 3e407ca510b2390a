"""Shared fixtures for BruceOps client tests."""

import pytest

from bruceops import BruceOpsClient, InMemoryStore, LocationEnvironment, QueryCache


@pytest.fixture
def base_url() -> str:
    """Test base URL."""
    return "http://test.bruceops.local"


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def environment(store: InMemoryStore) -> LocationEnvironment:
    """Environment at the site root with no demo signals."""
    return LocationEnvironment("/", store=store)


@pytest.fixture
def demo_environment(store: InMemoryStore) -> LocationEnvironment:
    """Environment whose location carries ?demo=true."""
    return LocationEnvironment("/dashboard?demo=true", store=store)


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def client(base_url: str, environment: LocationEnvironment, cache: QueryCache) -> BruceOpsClient:
    """Create live-mode test client."""
    return BruceOpsClient(base_url=base_url, environment=environment, cache=cache)


@pytest.fixture
def demo_client(base_url: str, demo_environment: LocationEnvironment, cache: QueryCache) -> BruceOpsClient:
    """Create demo-mode test client."""
    return BruceOpsClient(base_url=base_url, environment=demo_environment, cache=cache)


@pytest.fixture
def user_payload() -> dict:
    return {
        "id": "u1",
        "email": "a@b.com",
        "firstName": "Ada",
        "lastName": "Bruce",
        "profileImageUrl": None,
        "createdAt": "2026-01-26T10:00:00Z",
        "updatedAt": "2026-01-26T10:00:00Z",
    }
