"""
Tests for authentication endpoints: sign-up, login, logout and session.
"""

import pytest
from httpx import AsyncClient

from conftest import TEST_PASSWORD


async def signup_and_login(client: AsyncClient, email: str, display_name=None) -> dict:
    payload = {"email": email, "password": TEST_PASSWORD}
    if display_name:
        payload["display_name"] = display_name
    response = await client.post("/api/v1/auth/signup", json=payload)
    assert response.status_code == 201
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.mark.asyncio
async def test_signup(client: AsyncClient):
    """Successful sign-up returns the identity without its password hash."""
    response = await client.post("/api/v1/auth/signup", json={
        "email": "new@example.com",
        "password": "securepassword123",
        "display_name": "New Person",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["user_metadata"] == {"display_name": "New Person"}
    assert data["is_active"] is True
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_signup_creates_profile(client: AsyncClient):
    headers = await signup_and_login(client, "profiled@example.com", display_name="Pro File")

    response = await client.get("/api/v1/profiles/me", headers=headers)
    assert response.status_code == 200
    profile = response.json()
    assert profile["display_name"] == "Pro File"
    assert profile["email"] == "profiled@example.com"
    assert profile["notification_preferences"]["reminder_times"] == [24, 1]


@pytest.mark.asyncio
async def test_signup_duplicate_email(client: AsyncClient, attendee):
    """Duplicate email returns 409."""
    response = await client.post("/api/v1/auth/signup", json={
        "email": "attendee@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "constraint_violation"


@pytest.mark.asyncio
async def test_signup_weak_password(client: AsyncClient):
    """Password under 8 chars returns 422."""
    response = await client.post("/api/v1/auth/signup", json={
        "email": "weak@example.com",
        "password": "short",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_signup_invalid_email(client: AsyncClient):
    response = await client.post("/api/v1/auth/signup", json={
        "email": "not-an-email",
        "password": "securepassword123",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, attendee):
    """Valid credentials return a bearer token."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "attendee@example.com",
        "password": TEST_PASSWORD,
    })
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["expires_at"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, attendee):
    """Wrong password returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "attendee@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    """Non-existent email returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_current_session_and_user(client: AsyncClient, attendee, attendee_headers):
    response = await client.get("/api/v1/auth/session", headers=attendee_headers)
    assert response.status_code == 200
    session = response.json()
    assert session["user_id"] == str(attendee.id)
    assert session["active"] is True

    response = await client.get("/api/v1/auth/user", headers=attendee_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "attendee@example.com"


@pytest.mark.asyncio
async def test_logout_revokes_token(client: AsyncClient, attendee_headers):
    response = await client.post("/api/v1/auth/logout", headers=attendee_headers)
    assert response.status_code == 204

    response = await client.get("/api/v1/auth/session", headers=attendee_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/user")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
