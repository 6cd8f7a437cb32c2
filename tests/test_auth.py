"""
Auth endpoint tests: registration, login, profile and token handling.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.security import create_access_token, decode_access_token, hash_password, verify_password
from app.exceptions import UnauthorizedError
from helpers import API, PASSWORD, auth_headers, register


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_returns_token_and_user(async_client: AsyncClient):
    body = await register(async_client, "alice")
    assert body["access_token"]
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["name"] == "Alice"
    assert "password" not in body["user"]
    assert "passwordHash" not in body["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email_conflict(async_client: AsyncClient):
    await register(async_client, "alice")
    resp = await async_client.post(f"{API}/auth/register", json={
        "email": "ALICE@example.com",
        "password": PASSWORD,
        "name": "Another Alice",
    })
    assert resp.status_code == 409
    assert resp.json()["message"] == "User with this email already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["abc", "onlyletters", "12345678", "has space1"])
async def test_register_rejects_weak_password(async_client: AsyncClient, password: str):
    resp = await async_client.post(f"{API}/auth/register", json={
        "email": "weak@example.com",
        "password": password,
        "name": "Weak",
    })
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Bad Request"
    assert any(msg.startswith("password") for msg in body["message"])


@pytest.mark.asyncio
async def test_register_rejects_invalid_email(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/auth/register", json={
        "email": "not-an-email",
        "password": PASSWORD,
        "name": "Nobody",
    })
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_success(async_client: AsyncClient):
    await register(async_client, "bob")
    resp = await async_client.post(f"{API}/auth/login", json={
        "email": "bob@example.com",
        "password": PASSWORD,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["email"] == "bob@example.com"
    assert decode_access_token(body["access_token"]) == body["user"]["id"]


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_look_the_same(async_client: AsyncClient):
    await register(async_client, "bob")
    wrong = await async_client.post(f"{API}/auth/login", json={
        "email": "bob@example.com",
        "password": "wrong123",
    })
    unknown = await async_client.post(f"{API}/auth/login", json={
        "email": "ghost@example.com",
        "password": PASSWORD,
    })
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"] == "Invalid credentials"


# ---------------------------------------------------------------------------
# Profile / bearer token
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_profile_with_token(async_client: AsyncClient):
    headers = await auth_headers(async_client, "carol")
    resp = await async_client.get(f"{API}/auth/profile", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "carol@example.com"


@pytest.mark.asyncio
async def test_profile_without_token_is_401(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/profile")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Missing authentication token"
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_profile_with_garbage_token_is_401(async_client: AsyncClient):
    resp = await async_client.get(
        f"{API}/auth/profile", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid authentication token"


@pytest.mark.asyncio
async def test_profile_with_expired_token_is_401(async_client: AsyncClient):
    body = await register(async_client, "dave")
    token = create_access_token(body["user"]["id"], "dave@example.com", timedelta(seconds=-5))
    resp = await async_client.get(
        f"{API}/auth/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token has expired"


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_401(async_client: AsyncClient):
    token = create_access_token(999, "ghost@example.com")
    resp = await async_client.get(
        f"{API}/auth/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------

def test_password_hash_round_trip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_decode_rejects_non_numeric_subject():
    import jwt
    from app.config import settings

    token = jwt.encode({"sub": "abc"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)
