import pytest

from userbff.core.security import create_access_token

ALICE = {"username": "alice", "email": "a@x.com", "password": "password123"}


async def register(client) -> dict:
    resp = await client.post("/users", json=ALICE)
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_sign_in_and_check(client):
    user = await register(client)

    signin_resp = await client.post(
        "/auth/signin",
        json={"email": "a@x.com", "password": "password123"},
    )
    assert signin_resp.status_code == 200
    body = signin_resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == user["id"]
    assert "password" not in body["user"]

    check_resp = await client.get(
        "/auth/check",
        headers={"Authorization": f"Bearer {body['token']}"},
    )
    assert check_resp.status_code == 200
    assert check_resp.json()["email"] == "a@x.com"


@pytest.mark.asyncio
async def test_sign_in_rejects_wrong_password(client):
    await register(client)

    resp = await client.post(
        "/auth/signin",
        json={"email": "a@x.com", "password": "wrong-password"},
    )

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_sign_in_rejects_unknown_email(client):
    resp = await client.post(
        "/auth/signin",
        json={"email": "nobody@x.com", "password": "password123"},
    )

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_check_requires_token(client):
    missing = await client.get("/auth/check")
    garbage = await client.get("/auth/check", headers={"Authorization": "Bearer not-a-jwt"})

    assert missing.status_code == 401
    assert garbage.status_code == 401


@pytest.mark.asyncio
async def test_check_rejects_token_for_deleted_user(client, settings):
    user = await register(client)
    token = create_access_token(user["id"], settings)
    await client.delete(f"/users/{user['id']}")

    resp = await client.get("/auth/check", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_sign_out(client):
    resp = await client.post("/auth/signout")

    assert resp.status_code == 200
    assert resp.json() == "Successfully signed out"
