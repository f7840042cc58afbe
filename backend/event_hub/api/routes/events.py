"""
Event endpoints with Redis caching on the calendar listing.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.logging import get_logger
from event_hub.core.security import get_current_principal, get_optional_principal
from event_hub.db.session import get_db
from event_hub.models.event import EventType
from event_hub.schemas.event import EventCreate, EventListResponse, EventResponse, EventUpdate
from event_hub.services.cache_service import commit_and_invalidate, get_cached_events, set_cached_events
from event_hub.services.event_service import (
    create_event,
    delete_event,
    get_event,
    list_events,
    to_responses,
    update_event,
)
from event_hub.store.principal import Principal
from event_hub.store.store import RowSecureStore

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create a new event owned by the caller."""
    store = RowSecureStore(db, principal)
    event = await create_event(store, event_data)
    await commit_and_invalidate(db)
    return EventResponse.model_validate(event)


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    upcoming_only: bool = Query(True),
    start: Optional[datetime] = Query(None, description="Earliest start_time (inclusive)"),
    end: Optional[datetime] = Query(None, description="Latest start_time (exclusive)"),
    on: Optional[date] = Query(None, description="Only events starting on this UTC day"),
    event_type: Optional[EventType] = Query(None),
    mine: bool = Query(False, description="Only events created by the caller"),
    principal: Principal = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Calendar listing of the events the caller may see, ordered by start time.
    Results are cached per caller until the next event or registration write.
    """
    caller = str(principal.user_id) if principal.is_authenticated else "anonymous"
    filters = {
        "page": page,
        "page_size": page_size,
        "upcoming_only": upcoming_only,
        "start": start.isoformat() if start else None,
        "end": end.isoformat() if end else None,
        "on": on.isoformat() if on else None,
        "event_type": event_type.value if event_type else None,
        "mine": mine,
    }

    cached = await get_cached_events(caller, filters)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    store = RowSecureStore(db, principal)
    events, total = await list_events(
        store,
        page=page,
        page_size=page_size,
        upcoming_only=upcoming_only,
        start=start,
        end=end,
        on=on,
        event_type=event_type,
        mine=mine,
    )

    response = EventListResponse(
        events=await to_responses(store, events),
        total=total,
        page=page,
        page_size=page_size,
        cached=False,
    )
    await set_cached_events(caller, filters, response.model_dump(mode="json"))
    return response


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: uuid.UUID,
    principal: Principal = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
):
    """Get a single event with its live registration count. Not cached."""
    store = RowSecureStore(db, principal)
    event = await get_event(store, event_id)
    responses = await to_responses(store, [event])
    return responses[0]


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: uuid.UUID,
    event_data: EventUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Update an event. Only its creator may do so."""
    store = RowSecureStore(db, principal)
    event = await update_event(store, event_id, event_data)
    responses = await to_responses(store, [event])
    await commit_and_invalidate(db)
    return responses[0]


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event together with its registrations and notifications."""
    store = RowSecureStore(db, principal)
    await delete_event(store, event_id)
    await commit_and_invalidate(db)
