from __future__ import annotations
import uuid
import pytest


async def _player(ac, headers, name, group_size=1):
    r = await ac.post("/players", headers=headers, json={"name": name, "group_size": group_size})
    assert r.status_code == 201
    return r.json()


@pytest.mark.asyncio
async def test_moderate_score_status_value_and_delete(ac, arcade, user_headers, admin_headers, feed, submit_score):
    score = (await submit_score(ac, user_headers, arcade["player"]["id"], 700, game_id=arcade["game"]["id"])).json()
    sub = feed.subscribe()

    r = await ac.patch(f"/admin/scores/{score['id']}/status", headers=admin_headers, json={"status": "approved"})
    assert r.status_code == 200 and r.json()["status"] == "approved"
    r = await ac.patch(f"/admin/scores/{score['id']}/status", headers=admin_headers, json={"status": "bogus"})
    assert r.status_code == 422

    r = await ac.patch(f"/admin/scores/{score['id']}/value", headers=admin_headers, json={"score_value": 650})
    assert r.status_code == 200 and r.json()["score_value"] == 650
    r = await ac.patch(f"/admin/scores/{score['id']}/value", headers=admin_headers, json={"score_value": -1})
    assert r.status_code == 422

    assert (await ac.delete(f"/admin/scores/{score['id']}", headers=admin_headers)).status_code == 204
    assert (await ac.delete(f"/admin/scores/{score['id']}", headers=admin_headers)).status_code == 404
    assert (await ac.get("/admin/scores", headers=admin_headers)).json() == []

    ops = [(await sub.get()).op for _ in range(3)]
    assert ops == ["updated", "updated", "deleted"]
    sub.cancel()


@pytest.mark.asyncio
async def test_list_scores_sorting_and_event_filter(ac, arcade, user_headers, admin_headers, submit_score):
    gid = arcade["game"]["id"]
    bob = await _player(ac, user_headers, "Bob")
    ev = (await ac.post("/admin/events", headers=admin_headers, json={"name": "Friday Night"})).json()
    r = await ac.post("/admin/players/assign-event", headers=admin_headers, json={"player_ids": [bob["id"]], "event_id": ev["id"]})
    assert r.status_code == 200
    assert r.json()[0]["event_name"] == "Friday Night"

    await submit_score(ac, user_headers, arcade["player"]["id"], 300, game_id=gid)
    await submit_score(ac, user_headers, bob["id"], 100, game_id=gid)
    await submit_score(ac, user_headers, bob["id"], 200, game_id=gid)

    rows = (await ac.get("/admin/scores?sort=score_value&direction=asc", headers=admin_headers)).json()
    assert [s["score_value"] for s in rows] == [100, 200, 300]
    rows = (await ac.get("/admin/scores?sort=player_name&direction=asc", headers=admin_headers)).json()
    assert [s["player_name"] for s in rows][0] == "Ada"
    rows = (await ac.get(f"/admin/scores?event_id={ev['id']}", headers=admin_headers)).json()
    assert {s["event_name"] for s in rows} == {"Friday Night"}
    assert len(rows) == 2
    assert (await ac.get("/admin/scores?sort=nope", headers=admin_headers)).status_code == 422


@pytest.mark.asyncio
async def test_games_crud(ac, admin_headers, user_headers):
    pac = (await ac.post("/admin/games", headers=admin_headers, json={"name": "Pac-Man"})).json()
    await ac.post("/admin/games", headers=admin_headers, json={"name": "Asteroids"})
    assert pac["is_active"] is True
    assert (await ac.post("/admin/games", headers=admin_headers, json={"name": "   "})).status_code == 422
    assert (await ac.post("/admin/games", headers=user_headers, json={"name": "Tempest"})).status_code == 403

    r = await ac.patch(f"/admin/games/{pac['id']}", headers=admin_headers, json={"name": "Ms. Pac-Man", "is_active": False})
    assert r.json() == {"id": pac["id"], "name": "Ms. Pac-Man", "is_active": False}

    assert [g["name"] for g in (await ac.get("/games")).json()] == ["Asteroids"]
    assert [g["name"] for g in (await ac.get("/games?include_inactive=1")).json()] == ["Asteroids", "Ms. Pac-Man"]

    assert (await ac.delete(f"/admin/games/{pac['id']}", headers=admin_headers)).status_code == 204
    assert (await ac.patch(f"/admin/games/{pac['id']}", headers=admin_headers, json={"is_active": True})).status_code == 404


@pytest.mark.asyncio
async def test_events_crud_keeps_players_in_step(ac, admin_headers, user_headers):
    old = (await ac.post("/admin/events", headers=admin_headers, json={"name": "Launch Party", "is_active": False})).json()
    ev = (await ac.post("/admin/events", headers=admin_headers, json={"name": "Retro Night"})).json()
    ada = await _player(ac, user_headers, "Ada")
    await ac.post("/admin/players/assign-event", headers=admin_headers, json={"player_ids": [ada["id"]], "event_id": ev["id"]})

    assert [e["id"] for e in (await ac.get("/events?active_only=true")).json()] == [ev["id"]]
    assert {e["id"] for e in (await ac.get("/events")).json()} == {ev["id"], old["id"]}

    await ac.patch(f"/admin/events/{ev['id']}", headers=admin_headers, json={"name": "Retro Night II"})
    assert (await ac.get(f"/players/{ada['id']}")).json()["event_name"] == "Retro Night II"

    assert (await ac.delete(f"/admin/events/{ev['id']}", headers=admin_headers)).status_code == 204
    assert (await ac.get(f"/players/{ada['id']}")).json()["event_id"] is None


@pytest.mark.asyncio
async def test_admin_players_sort_edit_delete(ac, arcade, admin_headers, user_headers, submit_score):
    ada = arcade["player"]
    await _player(ac, user_headers, "Bob", group_size=5)

    rows = (await ac.get("/admin/players?sort=group_size&direction=desc", headers=admin_headers)).json()
    assert [p["name"] for p in rows] == ["Bob", "Ada"]
    rows = (await ac.get("/admin/players?sort=name&direction=asc", headers=admin_headers)).json()
    assert [p["name"] for p in rows] == ["Ada", "Bob"]
    assert (await ac.get("/admin/players?sort=instagram", headers=admin_headers)).status_code == 422

    r = await ac.patch(f"/admin/players/{ada['id']}", headers=admin_headers, json={"name": "Bob"})
    assert r.status_code == 409
    r = await ac.patch(f"/admin/players/{ada['id']}", headers=admin_headers, json={"instagram": "@ada", "group_size": 4})
    assert r.json()["instagram"] == "ada" and r.json()["group_size"] == 4

    await submit_score(ac, user_headers, ada["id"], 42, game_id=arcade["game"]["id"])
    assert (await ac.delete(f"/admin/players/{ada['id']}", headers=admin_headers)).status_code == 204
    assert (await ac.get(f"/players/{ada['id']}")).status_code == 404
    # scores outlive the player
    rows = (await ac.get("/admin/scores", headers=admin_headers)).json()
    assert [s["player_name"] for s in rows] == ["Ada"]


@pytest.mark.asyncio
async def test_assign_event_requires_known_players_and_event(ac, arcade, admin_headers):
    ev = (await ac.post("/admin/events", headers=admin_headers, json={"name": "Retro Night"})).json()
    r = await ac.post("/admin/players/assign-event", headers=admin_headers,
                      json={"player_ids": [arcade["player"]["id"], str(uuid.uuid4())], "event_id": ev["id"]})
    assert r.status_code == 404
    r = await ac.post("/admin/players/assign-event", headers=admin_headers,
                      json={"player_ids": [arcade["player"]["id"]], "event_id": str(uuid.uuid4())})
    assert r.status_code == 404
    r = await ac.post("/admin/players/assign-event", headers=admin_headers, json={"player_ids": [], "event_id": ev["id"]})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_grant_and_revoke_admin(ac, admin_headers, user_headers):
    user_id = (await ac.get("/auth/me", headers=user_headers)).json()["id"]
    assert (await ac.get("/admin/players", headers=user_headers)).status_code == 403

    r = await ac.post("/admin/admins", headers=admin_headers, json={"user_id": user_id})
    assert r.status_code == 201
    assert (await ac.get("/auth/me", headers=user_headers)).json()["is_admin"] is True
    assert (await ac.get("/admin/players", headers=user_headers)).status_code == 200

    assert (await ac.delete(f"/admin/admins/{user_id}", headers=admin_headers)).status_code == 204
    assert (await ac.get("/admin/players", headers=user_headers)).status_code == 403
    assert (await ac.delete(f"/admin/admins/{user_id}", headers=admin_headers)).status_code == 404
    assert (await ac.post("/admin/admins", headers=admin_headers, json={"user_id": str(uuid.uuid4())})).status_code == 404

    admin_id = (await ac.get("/auth/me", headers=admin_headers)).json()["id"]
    assert (await ac.delete(f"/admin/admins/{admin_id}", headers=admin_headers)).status_code == 409
