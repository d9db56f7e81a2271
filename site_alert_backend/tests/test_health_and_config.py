from __future__ import annotations

import httpx
import pytest

from src.api.config import BackendConfig, load_config, sanitize_mongo_uri
from src.api.main import create_app
from src.api.state import get_state


@pytest.mark.anyio
async def test_health_reports_counts(async_client: httpx.AsyncClient, create_test_site: dict):
    await async_client.post(
        f"/api/sites/{create_test_site['id']}/join",
        json={"userId": "u1", "userName": "Ana", "role": "worker"},
    )
    await async_client.post("/api/alerts", json={"siteId": create_test_site["id"], "type": "fire", "userId": "u1"})

    res = await async_client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert isinstance(body["timestamp"], int)
    assert body["storage"] == "memory"
    assert (body["sites"], body["users"], body["alerts"], body["toolboxTalks"]) == (1, 1, 1, 0)


@pytest.mark.anyio
async def test_storage_diagnostics_in_memory(async_client: httpx.AsyncClient):
    res = await async_client.get("/api/health/storage")
    assert res.status_code == 200
    body = res.json()
    assert body["backend"] == "memory"
    assert body["mongoUriSource"] == "unset"
    assert body["mongoUriSanitized"] is None


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("MONGODB_URI", "MONGO_URI", "DATABASE_URL", "PORT", "SEED_SAMPLE_SITES", "MONGO_DB_NAME"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_load_config_defaults_to_memory(clean_env):
    cfg = load_config()
    assert cfg.mongo_uri is None
    assert cfg.mongo_uri_source == "unset"
    assert cfg.port == 3000
    assert cfg.seed_sample_sites is True
    assert cfg.company_id == "default-company"


def test_load_config_checks_alternate_uri_names(clean_env):
    clean_env.setenv("MONGO_URI", "mongodb://db.internal:27017/alerts")
    cfg = load_config()
    assert cfg.mongo_uri == "mongodb://db.internal:27017/alerts"
    assert cfg.mongo_uri_source == "MONGO_URI"

    clean_env.setenv("MONGODB_URI", "mongodb+srv://cluster.example.net/site")
    assert load_config().mongo_uri_source == "MONGODB_URI"


def test_load_config_ignores_non_mongo_database_url(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql://user:pw@localhost/app")
    cfg = load_config()
    assert cfg.mongo_uri is None
    assert cfg.mongo_uri_source == "unset"


def test_load_config_reads_port_and_flags(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("SEED_SAMPLE_SITES", "off")
    cfg = load_config()
    assert cfg.port == 8080
    assert cfg.seed_sample_sites is False


def test_sanitize_mongo_uri_masks_password():
    assert sanitize_mongo_uri("mongodb://app:s3cret@db:27017/x") == "mongodb://app:***@db:27017/x"
    assert sanitize_mongo_uri("mongodb://db:27017/x") == "mongodb://db:27017/x"


@pytest.mark.anyio
async def test_backend_resolves_on_first_request_when_seeding_disabled(app, async_client: httpx.AsyncClient):
    provider = get_state(app).stores
    assert provider.resolved is False

    res = await async_client.get("/api/health")
    assert res.status_code == 200
    assert provider.resolved is True


@pytest.mark.anyio
async def test_startup_seeding_resolves_backend_and_inserts_samples():
    app = create_app(BackendConfig(mongo_uri=None, seed_sample_sites=True))
    provider = get_state(app).stores
    assert provider.resolved is False

    async with app.router.lifespan_context(app):
        assert provider.resolved is True
        assert provider.get().sites.count() == 3
