"""
Registration endpoints. Capacity is enforced by the configured strategy
inside the request transaction.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.metrics import registration_latency
from event_hub.core.security import get_current_principal
from event_hub.db.session import get_db
from event_hub.schemas.registration import (
    RegistrationCreate,
    RegistrationInfo,
    RegistrationResponse,
    RegistrationUpdate,
)
from event_hub.services.cache_service import commit_and_invalidate
from event_hub.services.registration_service import (
    list_event_registrations,
    list_my_registrations,
    register,
    registration_info,
    set_status,
    unregister,
)
from event_hub.store.principal import Principal
from event_hub.store.store import RowSecureStore

router = APIRouter(tags=["Registrations"])


@router.get("/events/{event_id}/registrations", response_model=list[RegistrationResponse])
async def list_event_registrations_endpoint(
    event_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """The event creator sees every registration; anyone else only their own."""
    store = RowSecureStore(db, principal)
    return await list_event_registrations(store, event_id)


@router.get("/events/{event_id}/registration", response_model=RegistrationInfo)
async def registration_info_endpoint(
    event_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    store = RowSecureStore(db, principal)
    return await registration_info(store, event_id)


@router.post(
    "/events/{event_id}/registration",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_endpoint(
    event_id: uuid.UUID,
    data: Optional[RegistrationCreate] = Body(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Register for an event.

    Returns 409 with error "event_full" when no place is left, unless
    join_waitlist is set, in which case the registration is waitlisted.
    """
    data = data or RegistrationCreate()
    store = RowSecureStore(db, principal)
    with registration_latency.time():
        registration = await register(store, event_id, join_waitlist=data.join_waitlist)
    await commit_and_invalidate(db)
    return registration


@router.delete("/events/{event_id}/registration", status_code=status.HTTP_204_NO_CONTENT)
async def unregister_endpoint(
    event_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw from an event, freeing the place."""
    store = RowSecureStore(db, principal)
    await unregister(store, event_id)
    await commit_and_invalidate(db)


@router.get("/registrations", response_model=list[RegistrationResponse])
async def list_my_registrations_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    store = RowSecureStore(db, principal)
    return await list_my_registrations(store)


@router.patch("/registrations/{registration_id}", response_model=RegistrationResponse)
async def update_registration_endpoint(
    registration_id: uuid.UUID,
    data: RegistrationUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Change a registration's status, e.g. cancel it or claim a place from the waitlist."""
    store = RowSecureStore(db, principal)
    with registration_latency.time():
        registration = await set_status(store, registration_id, data.status)
    await commit_and_invalidate(db)
    return registration
