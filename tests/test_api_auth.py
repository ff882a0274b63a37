from datetime import datetime, timezone

from conftest import auth_headers
from fortivus.core.security import create_refresh_token


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


async def test_register_login_refresh_and_me(client):
    r = await client.post(
        "/auth/register",
        json={"email": "Sam@Example.com", "password": "password123", "display_name": "Sam"},
    )
    assert r.status_code == 201
    assert r.json()["token_type"] == "bearer"

    r = await client.post("/auth/login", json={"email": "sam@example.com", "password": "password123"})
    assert r.status_code == 200
    tokens = r.json()

    r = await client.get("/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r.status_code == 200
    me = r.json()
    assert me["email"] == "sam@example.com"
    assert me["display_name"] == "Sam"
    assert me["total_xp"] == 0

    r = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    assert r.json()["access_token"]


async def test_register_duplicate_email(client, user):
    r = await client.post("/auth/register", json={"email": user.email, "password": "password123"})
    assert r.status_code == 409


async def test_login_wrong_password(client, user):
    r = await client.post("/auth/login", json={"email": user.email, "password": "nope-nope"})
    assert r.status_code == 401


async def test_refresh_token_cannot_be_used_as_access_token(client, user):
    r = await client.get("/me", headers={"Authorization": f"Bearer {create_refresh_token(user.id)}"})
    assert r.status_code == 401


async def test_missing_token(client):
    r = await client.get("/me")
    assert r.status_code == 401


async def test_banned_user_is_locked_out(client, db, user):
    user.banned_at = datetime.now(timezone.utc)
    await db.commit()

    r = await client.get("/me", headers=auth_headers(user))
    assert r.status_code == 403
    assert r.json()["detail"] == "Account is banned"

    r = await client.post("/auth/login", json={"email": user.email, "password": "password123"})
    assert r.status_code == 403
