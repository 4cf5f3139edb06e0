"""Registration, login and the bearer-token guard."""

import pytest

from auth.security import TokenService
from conftest import PASSWORD


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client, store):
    r = await client.post(
        "/auth/register",
        json={"username": "alice", "email": "Alice@DevPlatform.io", "password": PASSWORD},
    )
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "User registered successfully"
    assert data["user"] == {"id": 1, "username": "alice", "email": "alice@devplatform.io"}
    assert "password" not in r.text
    assert store.users[1]["password_hash"] != PASSWORD


@pytest.mark.asyncio
async def test_register_reports_field_errors(client, store):
    r = await client.post(
        "/auth/register",
        json={"username": "ab", "email": "bad", "password": "123456"},
    )
    assert r.status_code == 400
    data = r.json()
    assert data["error"] == "Validation failed"
    details = " ".join(data["details"])
    assert "Username must be at least" in details
    assert "Email must be a valid email" in details
    assert "Password" not in details
    assert store.calls == []


@pytest.mark.asyncio
async def test_register_rejects_password_longer_than_bcrypt_accepts(client, store):
    r = await client.post(
        "/auth/register",
        json={"username": "alice", "email": "alice@devplatform.io", "password": "a" * 100},
    )
    assert r.status_code == 400
    assert r.json()["details"] == ["Password must not exceed 72 bytes"]
    assert store.calls == []


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    body = {"username": "carol", "email": "carol@devplatform.io", "password": PASSWORD}
    r1 = await client.post("/auth/register", json=body)
    assert r1.status_code == 201

    r2 = await client.post("/auth/register", json={**body, "username": "carol2"})
    assert r2.status_code == 400
    assert r2.json() == {"error": "User with this email or username already exists"}


@pytest.mark.asyncio
async def test_register_duplicate_username(client):
    await client.post(
        "/auth/register",
        json={"username": "dave", "email": "dave@devplatform.io", "password": PASSWORD},
    )
    r = await client.post(
        "/auth/register",
        json={"username": "dave", "email": "other@devplatform.io", "password": PASSWORD},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_register_malformed_json(client, store):
    r = await client.post(
        "/auth/register",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["details"] == ["Request body must be valid JSON"]
    assert store.calls == []


@pytest.mark.asyncio
async def test_register_store_failure_is_generic(client, store):
    store.fail_with = RuntimeError("connection reset by peer")
    r = await client.post(
        "/auth/register",
        json={"username": "erin", "email": "erin@devplatform.io", "password": PASSWORD},
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to register user"}


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_then_login_token_resolves_to_user(client, app):
    r = await client.post(
        "/auth/register",
        json={"username": "frank", "email": "frank@devplatform.io", "password": PASSWORD},
    )
    user_id = r.json()["user"]["id"]

    r = await client.post("/auth/login", json={"email": "frank@devplatform.io", "password": PASSWORD})
    assert r.status_code == 200
    data = r.json()
    assert data["message"] == "Login successful"
    assert data["user"]["id"] == user_id
    assert app.state.token_service.verify(data["token"]) == user_id


@pytest.mark.asyncio
async def test_login_wrong_password(client, signup):
    await signup("gina", "gina@devplatform.io")
    r = await client.post("/auth/login", json={"email": "gina@devplatform.io", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    r = await client.post("/auth/login", json={"email": "ghost@devplatform.io", "password": PASSWORD})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_requires_fields(client):
    r = await client.post("/auth/login", json={"email": ""})
    assert r.status_code == 400
    assert r.json()["details"] == ["Email is required", "Password is required"]


# ═══════════════════════════════════════════════════════════
# Bearer guard
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, signup):
    user_id, headers = await signup("hank", "hank@devplatform.io")
    r = await client.get("/auth/me", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"id": user_id, "username": "hank", "email": "hank@devplatform.io"}


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/auth/me")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["Bearer garbage", "Basic abc", "Bearer", "token-only"])
async def test_protected_route_rejects_bad_header(client, store, header):
    r = await client.post(
        "/articles",
        json={"title": "t", "body": "b"},
        headers={"Authorization": header},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}
    assert store.calls == []


@pytest.mark.asyncio
async def test_expired_token_rejected(client, app, signup):
    user_id, _ = await signup("ivan", "ivan@devplatform.io")
    expired = TokenService(
        "test-signing-secret-with-enough-bytes-for-hs256",
        ttl_seconds=60,
        clock=lambda: 1_000_000,
    ).issue(user_id)
    r = await client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
