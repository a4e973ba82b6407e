"""API test fixtures — app around an in-memory store + httpx test client.

Invariants:
    - Every test gets a fresh store over a fresh InMemorySlotStorage
    - Lifespan disabled: no database file is created by route tests
    - Ids come from a counter env, so tests can address records as "id-N"

Design Decisions:
    - app.state wired by hand exactly as lifespan would, minus SQL
    - ASGITransport: requests never leave the process
"""

import pytest
from httpx import ASGITransport, AsyncClient

from teacherhub.infrastructure.slot_storage import InMemorySlotStorage
from teacherhub.main import create_app
from teacherhub.services.entity_store import EntityStore
from teacherhub.services.persistence import PersistenceAdapter
from tests.api.api_helpers import STORAGE_KEY
from tests.factories import make_env


@pytest.fixture
def storage():
    return InMemorySlotStorage()


@pytest.fixture
def store(storage):
    return EntityStore(PersistenceAdapter(storage, STORAGE_KEY), make_env())


@pytest.fixture
def app(storage, store):
    app = create_app(use_lifespan=False)
    app.state.storage = storage
    app.state.store = store
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as ac:
        yield ac
