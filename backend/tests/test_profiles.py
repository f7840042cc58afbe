"""
Tests for profile and notification-preference endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import delete, select, update

from event_hub.models.profile import Profile


@pytest.mark.asyncio
async def test_get_my_profile(client: AsyncClient, attendee, attendee_headers):
    response = await client.get("/api/v1/profiles/me", headers=attendee_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == str(attendee.id)
    assert data["display_name"] == "Alice Attendee"


@pytest.mark.asyncio
async def test_update_my_profile(client: AsyncClient, attendee_headers):
    response = await client.patch(
        "/api/v1/profiles/me",
        json={"display_name": "Alice A.", "avatar_url": "https://example.com/alice.png"},
        headers=attendee_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["display_name"] == "Alice A."
    assert data["avatar_url"] == "https://example.com/alice.png"


@pytest.mark.asyncio
async def test_create_profile_when_one_exists(client: AsyncClient, attendee_headers):
    response = await client.post("/api/v1/profiles/me", json={"display_name": "Again"}, headers=attendee_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_missing_profile(client: AsyncClient, db_session, attendee, attendee_headers):
    await db_session.execute(delete(Profile).where(Profile.user_id == attendee.id))
    await db_session.commit()

    response = await client.get("/api/v1/profiles/me", headers=attendee_headers)
    assert response.status_code == 404

    response = await client.post("/api/v1/profiles/me", json={"display_name": "Restored"}, headers=attendee_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["display_name"] == "Restored"
    assert data["email"] == "attendee@example.com"
    assert data["notification_preferences"] == {"email": True, "push": False, "reminder_times": [24, 1]}


@pytest.mark.asyncio
async def test_default_notification_preferences(client: AsyncClient, attendee_headers):
    response = await client.get("/api/v1/profiles/me/notification-preferences", headers=attendee_headers)
    assert response.status_code == 200
    assert response.json() == {"email": True, "push": False, "reminder_times": [24, 1]}


@pytest.mark.asyncio
async def test_replace_notification_preferences(client: AsyncClient, attendee_headers):
    response = await client.put(
        "/api/v1/profiles/me/notification-preferences",
        json={"email": False, "push": True, "reminder_times": [1, 168, 0.25, 1]},
        headers=attendee_headers,
    )
    assert response.status_code == 200
    # De-duplicated, longest lead time first
    assert response.json() == {"email": False, "push": True, "reminder_times": [168, 1, 0.25]}

    response = await client.get("/api/v1/profiles/me/notification-preferences", headers=attendee_headers)
    assert response.json()["reminder_times"] == [168, 1, 0.25]


@pytest.mark.asyncio
async def test_unsupported_reminder_time(client: AsyncClient, attendee_headers):
    response = await client.put(
        "/api/v1/profiles/me/notification-preferences",
        json={"email": True, "push": False, "reminder_times": [5]},
        headers=attendee_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_profile_requires_authentication(client: AsyncClient):
    response = await client.get("/api/v1/profiles/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_whole_reminder_hours_stay_integers(client: AsyncClient, db_session, attendee, attendee_headers):
    response = await client.get("/api/v1/profiles/me/notification-preferences", headers=attendee_headers)
    assert '"reminder_times":[24,1]' in response.text

    response = await client.put(
        "/api/v1/profiles/me/notification-preferences",
        json={"email": True, "push": False, "reminder_times": [24.0, 0.5, 3]},
        headers=attendee_headers,
    )
    assert response.status_code == 200
    assert '"reminder_times":[24,3,0.5]' in response.text

    stored = await db_session.scalar(
        select(Profile.notification_preferences).where(Profile.user_id == attendee.id)
    )
    assert stored["reminder_times"] == [24, 3, 0.5]
    assert [type(v) for v in stored["reminder_times"]] == [int, int, float]


@pytest.mark.asyncio
async def test_unreadable_stored_preferences(client: AsyncClient, db_session, attendee, attendee_headers):
    await db_session.execute(
        update(Profile)
        .where(Profile.user_id == attendee.id)
        .values(notification_preferences={"email": "sometimes", "push": True, "reminder_times": [24, 5, "1"]})
    )
    await db_session.commit()

    response = await client.get("/api/v1/profiles/me/notification-preferences", headers=attendee_headers)
    assert response.status_code == 200
    assert response.json() == {"email": True, "push": True, "reminder_times": [24]}
