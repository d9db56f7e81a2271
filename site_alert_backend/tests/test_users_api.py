from __future__ import annotations

import httpx
import pytest


@pytest.mark.anyio
async def test_upsert_user_twice_keeps_one_record(async_client: httpx.AsyncClient):
    res = await async_client.post("/api/users", json={"id": "u1", "name": "Ana", "role": "worker", "siteId": "s1"})
    assert res.status_code == 200
    created = res.json()
    assert created["acknowledged"] is False
    assert created["needsHelp"] is False

    await async_client.post("/api/alerts/a1/acknowledge", json={"userId": "u1", "needsHelp": True})

    res = await async_client.post("/api/users", json={"id": "u1", "name": "Ana Maria", "role": "worker"})
    assert res.status_code == 200
    updated = res.json()
    assert updated["name"] == "Ana Maria"
    assert updated["siteId"] is None
    assert updated["acknowledged"] is True
    assert updated["needsHelp"] is True

    users = (await async_client.get("/api/users")).json()
    assert len(users) == 1
    assert users[0]["name"] == "Ana Maria"


@pytest.mark.anyio
async def test_upsert_user_validates_required_fields(async_client: httpx.AsyncClient):
    res = await async_client.post("/api/users", json={"id": "u1", "name": "Ana"})
    assert res.status_code == 400
    assert res.json() == {"error": "id, name, and role are required"}


@pytest.mark.anyio
async def test_get_user_by_id(async_client: httpx.AsyncClient):
    await async_client.post("/api/users", json={"id": "u1", "name": "Ana", "role": "manager"})

    res = await async_client.get("/api/users/u1")
    assert res.status_code == 200
    assert res.json()["role"] == "manager"

    res = await async_client.get("/api/users/u2")
    assert res.status_code == 404
    assert res.json() == {"error": "User not found"}


@pytest.mark.anyio
async def test_upsert_user_accepts_numeric_values(async_client: httpx.AsyncClient):
    res = await async_client.post("/api/users", json={"id": 42, "name": "Ana", "role": "worker", "siteId": 7})
    assert res.status_code == 200, res.text
    user = res.json()
    assert user["id"] == "42"
    assert user["siteId"] == "7"

    res = await async_client.get("/api/users/42")
    assert res.status_code == 200
    assert res.json()["name"] == "Ana"
