from __future__ import annotations

import random
from collections.abc import AsyncIterator

import httpx
import pytest

from src.api.config import BackendConfig
from src.api.db.store import Store
from src.api.main import create_app
from src.api.services.ids import IdGenerator
from src.api.state import get_state


@pytest.fixture
def config() -> BackendConfig:
    """In-memory config; demo sites are not seeded so every test starts empty."""
    return BackendConfig(mongo_uri=None, seed_sample_sites=False)


@pytest.fixture
def ids() -> IdGenerator:
    """Id generator with a fixed seed so failures are reproducible."""
    return IdGenerator(random.Random(1234))


@pytest.fixture
def app(config: BackendConfig, ids: IdGenerator):
    """Fresh FastAPI app per test (its own memory store)."""
    return create_app(config, ids=ids)


@pytest.fixture
def store(app) -> Store:
    """The app's active store, for direct inspection."""
    return get_state(app).stores.get()


@pytest.fixture
async def async_client(app) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client bound to the FastAPI ASGI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def create_test_site(async_client: httpx.AsyncClient) -> dict:
    """Create a site via the API and return it."""
    res = await async_client.post("/api/sites", json={"name": "North Tower", "managerId": "mgr-1"})
    assert res.status_code == 200, res.text
    return res.json()
