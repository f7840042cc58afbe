"""
Event service handling CRUD operations and the calendar listing.
"""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import false

from event_hub.core.logging import get_logger
from event_hub.models.event import Event, EventType
from event_hub.models.registration import EventRegistration, RegistrationStatus
from event_hub.schemas.event import EventCreate, EventResponse, EventUpdate
from event_hub.store.store import RowSecureStore

logger = get_logger(__name__)


async def create_event(store: RowSecureStore, event_data: EventCreate) -> Event:
    """Create an event owned by the caller."""
    event = Event(
        title=event_data.title,
        description=event_data.description,
        start_time=event_data.start_time,
        end_time=event_data.end_time,
        location=event_data.location,
        max_attendees=event_data.max_attendees,
        is_public=event_data.is_public,
        event_type=event_data.event_type.value,
        metadata_=event_data.metadata,
        created_by=store.principal.user_id,
    )
    event = await store.insert(event)

    logger.info(
        "event_created",
        event_id=str(event.id),
        title=event.title,
        max_attendees=event.max_attendees,
        is_public=event.is_public,
    )
    return event


async def get_event(store: RowSecureStore, event_id: uuid.UUID) -> Event:
    """Get a single event the caller is allowed to see."""
    return await store.get(Event, event_id)


async def update_event(store: RowSecureStore, event_id: uuid.UUID, event_data: EventUpdate) -> Event:
    values = event_data.model_dump(exclude_unset=True)
    if "metadata" in values:
        values["metadata_"] = values.pop("metadata")
    if isinstance(values.get("event_type"), EventType):
        values["event_type"] = values["event_type"].value

    event = await store.update(Event, event_id, values)
    logger.info("event_updated", event_id=str(event_id), fields=sorted(values))
    return event


async def delete_event(store: RowSecureStore, event_id: uuid.UUID) -> None:
    """Delete an event; its registrations and notifications cascade."""
    await store.delete(Event, event_id)
    logger.info("event_deleted", event_id=str(event_id))


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC [start, end) of a calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


async def list_events(
    store: RowSecureStore,
    page: int = 1,
    page_size: int = 50,
    upcoming_only: bool = True,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    on: Optional[date] = None,
    event_type: Optional[EventType] = None,
    mine: bool = False,
) -> tuple[list[Event], int]:
    """
    Calendar listing: visible events ordered by start time.

    `start`/`end` bound start_time to a window, `on` to one UTC day.
    `upcoming_only` hides events that already started.
    """
    criteria = []
    if upcoming_only:
        criteria.append(Event.start_time >= datetime.now(timezone.utc))
    if on is not None:
        day_start, day_end = day_bounds(on)
        criteria.extend([Event.start_time >= day_start, Event.start_time < day_end])
    if start is not None:
        criteria.append(Event.start_time >= start)
    if end is not None:
        criteria.append(Event.start_time < end)
    if event_type is not None:
        criteria.append(Event.event_type == event_type.value)
    if mine:
        user_id = store.principal.user_id
        criteria.append(Event.created_by == user_id if user_id is not None else false())

    total = await store.count(Event, *criteria)
    events = await store.select(
        Event,
        *criteria,
        order_by=(Event.start_time.asc(), Event.id.asc()),
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    return events, total


async def registration_counts(store: RowSecureStore, event_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
    """Registered attendees per event, counted across all users."""
    if not event_ids:
        return {}
    return await store.tally(
        EventRegistration,
        EventRegistration.event_id,
        EventRegistration.event_id.in_(event_ids),
        EventRegistration.status == RegistrationStatus.registered.value,
    )


async def to_responses(store: RowSecureStore, events: list[Event]) -> list[EventResponse]:
    counts = await registration_counts(store, [e.id for e in events])
    responses = []
    for event in events:
        response = EventResponse.model_validate(event)
        response.registration_count = counts.get(event.id, 0)
        responses.append(response)
    return responses
