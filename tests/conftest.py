"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from exhibitflow.api.main import create_app
from exhibitflow.core.config import Settings
from exhibitflow.core.rbac import Capability, authorize
from exhibitflow.services import WorkflowService
from exhibitflow.store import WorkflowStore, default_seed


@pytest.fixture
def store():
    """A store preloaded with the built-in demo data."""
    return WorkflowStore(default_seed())


@pytest.fixture
def empty_store():
    """A store holding only the four default actors."""
    seed = default_seed()
    seed.products = []
    seed.exhibitions = []
    seed.exhibition_products = []
    seed.orders = []
    seed.product_lists = []
    seed.product_list_items = []
    return WorkflowStore(seed)


@pytest.fixture
def service(store):
    return WorkflowService(store)


@pytest.fixture
def admin(store):
    return store.get_actor("u1")


@pytest.fixture
def manager(store):
    return store.get_actor("u2")


@pytest.fixture
def operator(store):
    return store.get_actor("u3")


@pytest.fixture
def viewer(store):
    return store.get_actor("u4")


@pytest.fixture
def grant_for(store):
    """Issue a grant for a default actor: ``grant_for("u1", Capability.PRODUCT_CREATE)``."""
    def _grant(actor_id: str, capability: Capability):
        return authorize(store.get_actor(actor_id), capability)
    return _grant


@pytest.fixture
def settings():
    return Settings(_env_file=None, default_actor_id=None, file_logging=False)


@pytest.fixture
def client(settings, store):
    """API client over the seeded store."""
    return TestClient(create_app(settings, store))
