from __future__ import annotations

import pytest

from app.tests.utils import ADMIN_PASSWORD, login_admin


@pytest.mark.asyncio
async def test_login_sets_cookie_and_me_resolves_admin(client, admin):
    token = await login_admin(client, admin)
    assert token
    assert "admin_token" in client.cookies

    response = await client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == admin.email


@pytest.mark.asyncio
async def test_bearer_token_is_accepted(client, admin):
    token = await login_admin(client, admin)
    client.cookies.clear()

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(client, admin):
    response = await client.post("/api/auth/login", json={"email": admin.email, "password": ADMIN_PASSWORD + "x"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(client):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
