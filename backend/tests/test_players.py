from __future__ import annotations
import uuid
import pytest


@pytest.mark.asyncio
async def test_register_list_and_get_player(ac, user_headers):
    r = await ac.post("/players", headers=user_headers, json={"name": "  Zed ", "instagram": "@zed.plays", "group_size": 3})
    assert r.status_code == 201, r.text
    zed = r.json()
    assert zed["name"] == "Zed"
    assert zed["instagram"] == "zed.plays"
    assert zed["event_id"] is None

    await ac.post("/players", headers=user_headers, json={"name": "Amy", "group_size": 1})
    names = [p["name"] for p in (await ac.get("/players")).json()]
    assert names == ["Amy", "Zed"]

    assert (await ac.get(f"/players/{zed['id']}")).json()["group_size"] == 3
    assert (await ac.get(f"/players/{uuid.uuid4()}")).status_code == 404


@pytest.mark.asyncio
async def test_player_name_is_unique(ac, user_headers):
    assert (await ac.post("/players", headers=user_headers, json={"name": "Ada", "group_size": 1})).status_code == 201
    r = await ac.post("/players", headers=user_headers, json={"name": "Ada ", "group_size": 2})
    assert r.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"name": " A ", "group_size": 1},
    {"name": "Bob", "group_size": 0},
    {"name": "Bob"},
])
async def test_player_validation(ac, user_headers, payload):
    r = await ac.post("/players", headers=user_headers, json=payload)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_registering_player_requires_login(ac):
    r = await ac.post("/players", json={"name": "Ada", "group_size": 1})
    assert r.status_code in (401, 403)
