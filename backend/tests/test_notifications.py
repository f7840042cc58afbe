"""
Tests for the notification queue endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from event_hub.models.notification import EventNotification


def notification_payload(event_id, user_id, **overrides) -> dict:
    payload = {
        "event_id": str(event_id),
        "user_id": str(user_id),
        "notification_type": "reminder",
        "message": "Your event starts in one hour",
        "scheduled_for": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_enqueue_and_read_notification(
    client: AsyncClient, attendee, creator_headers, attendee_headers, public_event
):
    response = await client.post(
        "/api/v1/notifications",
        json=notification_payload(public_event.id, attendee.id),
        headers=creator_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["sent_at"] is None
    assert created["notification_type"] == "reminder"

    response = await client.get("/api/v1/notifications", headers=attendee_headers)
    assert response.status_code == 200
    assert [n["id"] for n in response.json()] == [created["id"]]

    # The producer does not see notifications addressed to someone else
    response = await client.get("/api/v1/notifications", headers=creator_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_pending_only(client: AsyncClient, db_session, attendee, creator_headers, attendee_headers, public_event):
    ids = []
    for notification_type in ("reminder", "change"):
        response = await client.post(
            "/api/v1/notifications",
            json=notification_payload(public_event.id, attendee.id, notification_type=notification_type),
            headers=creator_headers,
        )
        ids.append(response.json()["id"])

    await db_session.execute(
        update(EventNotification)
        .where(EventNotification.notification_type == "reminder")
        .values(sent_at=datetime.now(timezone.utc))
    )
    await db_session.commit()

    response = await client.get("/api/v1/notifications?pending_only=true", headers=attendee_headers)
    assert [n["id"] for n in response.json()] == [ids[1]]

    response = await client.get("/api/v1/notifications", headers=attendee_headers)
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_invalid_notification_type(client: AsyncClient, attendee, creator_headers, public_event):
    response = await client.post(
        "/api/v1/notifications",
        json=notification_payload(public_event.id, attendee.id, notification_type="digest"),
        headers=creator_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_notification_for_unknown_event(client: AsyncClient, attendee, creator_headers):
    response = await client.post(
        "/api/v1/notifications",
        json=notification_payload("00000000-0000-0000-0000-000000000000", attendee.id),
        headers=creator_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "constraint_violation"


@pytest.mark.asyncio
async def test_notifications_require_authentication(client: AsyncClient):
    response = await client.get("/api/v1/notifications")
    assert response.status_code == 401
