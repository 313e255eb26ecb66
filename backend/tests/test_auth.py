from fastapi import status
import uuid

import pytest

@pytest.mark.asyncio
async def test_register_login_me(ac):
    unique_email = f"test-{uuid.uuid4()}@example.com"

    # register
    r = await ac.post("/auth/register", json={"email": unique_email, "password": "supersecret"})
    assert r.status_code == status.HTTP_201_CREATED
    # login
    r = await ac.post("/auth/login", json={"email": unique_email, "password": "supersecret"})
    assert r.status_code == 200
    tokens = r.json()
    assert "access" in tokens and "refresh" in tokens
    # me with access token
    me = await ac.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access']}"})
    assert me.status_code == 200
    body = me.json()
    assert body["email"] == unique_email
    assert body["is_admin"] is False
    # refresh to new pair
    r = await ac.post("/auth/refresh", headers={"Authorization": f"Bearer {tokens['refresh']}"})
    assert r.status_code == 200
    tokens2 = r.json()
    assert tokens2["access"] != tokens["access"]


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(ac):
    email = f"dup-{uuid.uuid4()}@example.com"
    assert (await ac.post("/auth/register", json={"email": email, "password": "supersecret"})).status_code == 201
    r = await ac.post("/auth/register", json={"email": email.upper(), "password": "supersecret"})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_wrong_password_and_token_type(ac):
    email = f"pw-{uuid.uuid4()}@example.com"
    await ac.post("/auth/register", json={"email": email, "password": "supersecret"})
    assert (await ac.post("/auth/login", json={"email": email, "password": "wrongwrong"})).status_code == 401

    tokens = (await ac.post("/auth/login", json={"email": email, "password": "supersecret"})).json()
    # a refresh token is not accepted where an access token is required
    r = await ac.get("/auth/me", headers={"Authorization": f"Bearer {tokens['refresh']}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_admin_flag_and_admin_only_routes(ac, admin_headers, user_headers):
    me = await ac.get("/auth/me", headers=admin_headers)
    assert me.json()["is_admin"] is True

    r = await ac.get("/admin/scores", headers=user_headers)
    assert r.status_code == 403
    r = await ac.get("/admin/scores", headers=admin_headers)
    assert r.status_code == 200
