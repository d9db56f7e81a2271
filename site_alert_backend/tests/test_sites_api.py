from __future__ import annotations

import re

import httpx
import pytest


@pytest.mark.anyio
async def test_create_site_returns_code_and_unique_ids(async_client: httpx.AsyncClient):
    created = []
    for name in ("North Tower", "  South Yard  "):
        res = await async_client.post("/api/sites", json={"name": name, "managerId": "mgr-1"})
        assert res.status_code == 200
        created.append(res.json())

    first, second = created
    assert re.fullmatch(r"[A-Z0-9]{5}", first["siteCode"])
    assert re.fullmatch(r"[A-Z0-9]{5}", second["siteCode"])
    assert first["id"] and second["id"] and first["id"] != second["id"]
    assert second["name"] == "South Yard"
    assert first["managerId"] == "mgr-1"
    assert first["companyId"] == "default-company"
    assert isinstance(first["createdAt"], int)

    res = await async_client.get("/api/sites")
    assert res.status_code == 200
    assert [s["id"] for s in res.json()] == [first["id"], second["id"]]


@pytest.mark.anyio
async def test_create_site_validates_required_fields(async_client: httpx.AsyncClient):
    for payload in ({"name": "   ", "managerId": "mgr-1"}, {"name": "Site"}, {}):
        res = await async_client.post("/api/sites", json=payload)
        assert res.status_code == 400
        assert res.json() == {"error": "Name and managerId are required"}

    res = await async_client.get("/api/sites")
    assert res.json() == []


@pytest.mark.anyio
async def test_get_site_by_code_is_case_insensitive(async_client: httpx.AsyncClient):
    res = await async_client.post("/api/init-samples")
    assert res.status_code == 200

    lower = await async_client.get("/api/sites/code/test1")
    upper = await async_client.get("/api/sites/code/TEST1")
    assert lower.status_code == upper.status_code == 200
    assert lower.json() == upper.json()
    assert upper.json()["id"] == "sample-1"

    missing = await async_client.get("/api/sites/code/NOPE9")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Site not found"}


@pytest.mark.anyio
async def test_get_site_by_id(async_client: httpx.AsyncClient, create_test_site: dict):
    res = await async_client.get(f"/api/sites/{create_test_site['id']}")
    assert res.status_code == 200
    assert res.json() == create_test_site

    res = await async_client.get("/api/sites/does-not-exist")
    assert res.status_code == 404
    assert res.json()["error"] == "Site not found"


@pytest.mark.anyio
async def test_join_unknown_site_creates_no_user(async_client: httpx.AsyncClient, store):
    res = await async_client.post(
        "/api/sites/ghost/join",
        json={"userId": "u1", "userName": "Ana", "role": "worker"},
    )
    assert res.status_code == 404
    assert store.users.count() == 0


@pytest.mark.anyio
async def test_join_requires_user_fields(async_client: httpx.AsyncClient, create_test_site: dict):
    res = await async_client.post(f"/api/sites/{create_test_site['id']}/join", json={"userId": "u1", "role": "worker"})
    assert res.status_code == 400
    assert res.json() == {"error": "userId, userName, and role are required"}


@pytest.mark.anyio
async def test_join_registers_user_on_roster(async_client: httpx.AsyncClient, create_test_site: dict):
    site_id = create_test_site["id"]
    res = await async_client.post(
        f"/api/sites/{site_id}/join",
        json={"userId": "u1", "userName": "Ana", "role": "worker"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["site"] == create_test_site

    roster = (await async_client.get(f"/api/sites/{site_id}/users")).json()
    assert len(roster) == 1
    assert roster[0]["id"] == "u1"
    assert roster[0]["siteId"] == site_id
    assert roster[0]["acknowledged"] is False
    assert roster[0]["needsHelp"] is False


@pytest.mark.anyio
async def test_rejoin_moves_user_and_keeps_acknowledgement(async_client: httpx.AsyncClient, create_test_site: dict):
    first_site = create_test_site["id"]
    other = (await async_client.post("/api/sites", json={"name": "Depot", "managerId": "mgr-2"})).json()

    await async_client.post(f"/api/sites/{first_site}/join", json={"userId": "u1", "userName": "Ana", "role": "worker"})
    await async_client.post("/api/alerts/any/acknowledge", json={"userId": "u1", "needsHelp": True})

    res = await async_client.post(
        f"/api/sites/{other['id']}/join",
        json={"userId": "u1", "userName": "Ana B", "role": "foreman"},
    )
    assert res.status_code == 200

    assert (await async_client.get(f"/api/sites/{first_site}/users")).json() == []
    roster = (await async_client.get(f"/api/sites/{other['id']}/users")).json()
    assert len(roster) == 1
    user = roster[0]
    assert user["name"] == "Ana B"
    assert user["role"] == "foreman"
    assert user["acknowledged"] is True
    assert user["needsHelp"] is True


@pytest.mark.anyio
async def test_init_samples_seeds_once(async_client: httpx.AsyncClient):
    res = await async_client.post("/api/init-samples")
    assert res.json() == {"success": True, "message": "Sample sites initialized", "sites": 3}

    res = await async_client.post("/api/init-samples")
    assert res.json() == {"success": True, "message": "Sample sites already initialized", "sites": 3}

    codes = [s["siteCode"] for s in (await async_client.get("/api/sites")).json()]
    assert codes == ["TEST1", "DEMO2", "SAMP3"]


@pytest.mark.anyio
async def test_storage_failure_on_create_site_returns_500(async_client: httpx.AsyncClient, store, monkeypatch):
    from src.api.errors import StorageError

    def _boom(doc):
        raise StorageError("disk full")

    monkeypatch.setattr(store.sites, "insert", _boom)
    res = await async_client.post("/api/sites", json={"name": "Site", "managerId": "mgr-1"})
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to create site", "message": "disk full"}
