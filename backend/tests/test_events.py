"""
Tests for event CRUD endpoints and the calendar listing.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient
from sqlalchemy import func, select

from conftest import create_event
from event_hub.models.notification import EventNotification
from event_hub.models.registration import EventRegistration


def event_payload(days_ahead: int = 30, **overrides) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    payload = {
        "title": "Python Meetup",
        "description": "Monthly gathering",
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=2)).isoformat(),
        "location": "Community Hall",
        "max_attendees": 50,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, creator, creator_headers):
    """Authenticated user can create an event and owns it."""
    response = await client.post(
        "/api/v1/events",
        json=event_payload(metadata={"room": "B2"}),
        headers=creator_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Python Meetup"
    assert data["created_by"] == str(creator.id)
    assert data["max_attendees"] == 50
    assert data["is_public"] is True
    assert data["event_type"] == "general"
    assert data["metadata"] == {"room": "B2"}
    assert data["registration_count"] == 0


@pytest.mark.asyncio
async def test_create_event_unauthenticated(client: AsyncClient):
    """Unauthenticated request returns 401."""
    response = await client.post("/api/v1/events", json=event_payload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_event_invalid_capacity(client: AsyncClient, creator_headers):
    """Zero or negative max_attendees returns 422."""
    response = await client.post(
        "/api/v1/events",
        json=event_payload(max_attendees=0),
        headers=creator_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_event_unknown_type(client: AsyncClient, creator_headers):
    response = await client.post(
        "/api/v1/events",
        json=event_payload(event_type="party"),
        headers=creator_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_events_hides_private_events(client: AsyncClient, public_event, private_event):
    """Anonymous callers see public events only."""
    response = await client.get("/api/v1/events")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert [e["id"] for e in data["events"]] == [str(public_event.id)]
    assert data["page"] == 1
    assert data["cached"] is False


@pytest.mark.asyncio
async def test_list_events_private_visible_to_creator(
    client: AsyncClient, creator_headers, other_headers, public_event, private_event
):
    response = await client.get("/api/v1/events", headers=creator_headers)
    assert {e["id"] for e in response.json()["events"]} == {str(public_event.id), str(private_event.id)}

    response = await client.get("/api/v1/events", headers=other_headers)
    assert {e["id"] for e in response.json()["events"]} == {str(public_event.id)}


@pytest.mark.asyncio
async def test_list_events_ordered_by_start_time(client: AsyncClient, db_session, creator):
    later = await create_event(db_session, creator, title="Later", days_ahead=20)
    sooner = await create_event(db_session, creator, title="Sooner", days_ahead=2)

    response = await client.get("/api/v1/events")
    assert [e["id"] for e in response.json()["events"]] == [str(sooner.id), str(later.id)]


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, db_session, creator):
    for day in range(1, 8):
        await create_event(db_session, creator, title=f"Day {day}", days_ahead=day)

    response = await client.get("/api/v1/events?page=2&page_size=5")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 7
    assert data["page_size"] == 5
    assert [e["title"] for e in data["events"]] == ["Day 6", "Day 7"]


@pytest.mark.asyncio
async def test_list_events_upcoming_only(client: AsyncClient, db_session, creator):
    await create_event(db_session, creator, title="Yesterday", days_ahead=-1)
    await create_event(db_session, creator, title="Tomorrow", days_ahead=1)

    response = await client.get("/api/v1/events")
    assert [e["title"] for e in response.json()["events"]] == ["Tomorrow"]

    response = await client.get("/api/v1/events?upcoming_only=false")
    assert [e["title"] for e in response.json()["events"]] == ["Yesterday", "Tomorrow"]


@pytest.mark.asyncio
async def test_list_events_filters(client: AsyncClient, db_session, creator, other_user, creator_headers):
    workshop = await create_event(db_session, creator, title="Workshop", days_ahead=3, event_type="workshop")
    await create_event(db_session, creator, title="Social", days_ahead=10, event_type="social")
    await create_event(db_session, other_user, title="Someone else's", days_ahead=3)

    response = await client.get("/api/v1/events?event_type=workshop")
    assert [e["title"] for e in response.json()["events"]] == ["Workshop"]

    day = workshop.start_time.astimezone(timezone.utc).date().isoformat()
    response = await client.get(f"/api/v1/events?on={day}")
    assert {e["title"] for e in response.json()["events"]} == {"Workshop", "Someone else's"}

    response = await client.get("/api/v1/events?mine=true", headers=creator_headers)
    assert {e["title"] for e in response.json()["events"]} == {"Workshop", "Social"}

    window_end = (datetime.now(timezone.utc) + timedelta(days=5)).isoformat()
    response = await client.get("/api/v1/events", params={"end": window_end})
    assert {e["title"] for e in response.json()["events"]} == {"Workshop", "Someone else's"}


@pytest.mark.asyncio
async def test_list_events_registration_count(
    client: AsyncClient, attendee_headers, other_headers, public_event
):
    for headers in (attendee_headers, other_headers):
        response = await client.post(f"/api/v1/events/{public_event.id}/registration", headers=headers)
        assert response.status_code == 201

    response = await client.get("/api/v1/events")
    assert response.json()["events"][0]["registration_count"] == 2


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient, public_event):
    """Get single event by ID."""
    response = await client.get(f"/api/v1/events/{public_event.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(public_event.id)
    assert data["title"] == "Public Meetup"
    assert data["registration_count"] == 0


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    """Non-existent event returns 404."""
    response = await client.get("/api/v1/events/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_get_private_event(client: AsyncClient, creator_headers, other_headers, private_event):
    """A private event is indistinguishable from a missing one for non-creators."""
    response = await client.get(f"/api/v1/events/{private_event.id}", headers=other_headers)
    assert response.status_code == 404

    response = await client.get(f"/api/v1/events/{private_event.id}", headers=creator_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_event(client: AsyncClient, creator_headers, public_event):
    response = await client.patch(
        f"/api/v1/events/{public_event.id}",
        json={"title": "Renamed Meetup", "event_type": "social", "metadata": {"tags": ["python"]}},
        headers=creator_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Renamed Meetup"
    assert data["event_type"] == "social"
    assert data["metadata"] == {"tags": ["python"]}
    assert data["updated_at"] != data["created_at"]


@pytest.mark.asyncio
async def test_update_event_by_non_creator(client: AsyncClient, other_headers, public_event):
    response = await client.patch(
        f"/api/v1/events/{public_event.id}",
        json={"title": "Hijacked"},
        headers=other_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"] == "policy_violation"

    response = await client.get(f"/api/v1/events/{public_event.id}")
    assert response.json()["title"] == "Public Meetup"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "start_time", "end_time"])
async def test_update_event_null_required_field(client: AsyncClient, creator_headers, public_event, field):
    """Required fields may be left out of an update but not nulled."""
    response = await client.patch(
        f"/api/v1/events/{public_event.id}",
        json={field: None},
        headers=creator_headers,
    )
    assert response.status_code == 422

    # Optional columns can still be cleared
    response = await client.patch(
        f"/api/v1/events/{public_event.id}",
        json={"location": None, "max_attendees": None},
        headers=creator_headers,
    )
    assert response.status_code == 200
    assert response.json()["location"] is None
    assert response.json()["max_attendees"] is None
    assert response.json()["title"] == "Public Meetup"


@pytest.mark.asyncio
async def test_delete_event_cascades(client: AsyncClient, db_session, creator_headers, attendee, attendee_headers, public_event):
    event_id = public_event.id
    response = await client.post(f"/api/v1/events/{event_id}/registration", headers=attendee_headers)
    assert response.status_code == 201
    response = await client.post(
        "/api/v1/notifications",
        json={
            "event_id": str(event_id),
            "user_id": str(attendee.id),
            "notification_type": "reminder",
            "message": "Starts tomorrow",
            "scheduled_for": (datetime.now(timezone.utc) + timedelta(days=29)).isoformat(),
        },
        headers=creator_headers,
    )
    assert response.status_code == 201

    response = await client.delete(f"/api/v1/events/{event_id}", headers=creator_headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/events/{event_id}")
    assert response.status_code == 404

    registrations = await db_session.scalar(
        select(func.count()).select_from(EventRegistration).where(EventRegistration.event_id == event_id)
    )
    notifications = await db_session.scalar(
        select(func.count()).select_from(EventNotification).where(EventNotification.event_id == event_id)
    )
    assert registrations == 0
    assert notifications == 0


@pytest.mark.asyncio
async def test_delete_event_by_non_creator(client: AsyncClient, other_headers, public_event):
    response = await client.delete(f"/api/v1/events/{public_event.id}", headers=other_headers)
    assert response.status_code == 403
