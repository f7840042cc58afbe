"""
Registration service: register, unregister and status changes, each gated by
the configured capacity strategy.

A user has at most one registration row per event. Re-registering after a
cancellation, or leaving the waitlist for a place, re-activates that row in
place rather than inserting a second one.
"""

import uuid
from typing import Optional

from event_hub.core.errors import ConstraintViolationError, EventFullError, NotFoundError, ValidationError
from event_hub.core.logging import get_logger
from event_hub.core.metrics import record_registration_attempt
from event_hub.db.base import utcnow
from event_hub.models.event import Event
from event_hub.models.registration import EventRegistration, RegistrationStatus
from event_hub.schemas.registration import RegistrationInfo, RegistrationResponse
from event_hub.services.interfaces.capacity import CapacityStrategy, registered_count
from event_hub.services.strategy_factory import get_capacity_strategy
from event_hub.store import policies
from event_hub.store.policies import Operation
from event_hub.store.store import RowSecureStore

logger = get_logger(__name__)

REGISTERED = RegistrationStatus.registered.value
WAITLIST = RegistrationStatus.waitlist.value


async def _own_registration(store: RowSecureStore, event_id: uuid.UUID) -> Optional[EventRegistration]:
    return await store.first(
        EventRegistration,
        EventRegistration.event_id == event_id,
        EventRegistration.user_id == store.principal.user_id,
    )


async def register(
    store: RowSecureStore,
    event_id: uuid.UUID,
    join_waitlist: bool = False,
    strategy: Optional[CapacityStrategy] = None,
) -> EventRegistration:
    """
    Register the caller for an event.

    Raises:
        NotFoundError: event missing or not visible
        ValidationError: caller created the event
        ConstraintViolationError: already registered / already waitlisted
        EventFullError: no place left and join_waitlist is False
    """
    strategy = strategy or get_capacity_strategy()
    user_id = store.principal.user_id

    event = await strategy.acquire(store, event_id)
    if event.created_by is not None and event.created_by == user_id:
        raise ValidationError("Event creators cannot register for their own event", field="event_id")

    existing = await _own_registration(store, event_id)
    if existing is not None and existing.status == REGISTERED:
        record_registration_attempt("duplicate")
        raise ConstraintViolationError("You are already registered for this event")

    if await strategy.admit(store, event):
        status = REGISTERED
    elif join_waitlist:
        if existing is not None and existing.status == WAITLIST:
            record_registration_attempt("duplicate")
            raise ConstraintViolationError("You are already on the waitlist for this event")
        status = WAITLIST
    else:
        record_registration_attempt("full")
        logger.warning(
            "registration_rejected_full",
            event_id=str(event_id),
            max_attendees=event.max_attendees,
            strategy=strategy.name,
        )
        raise EventFullError(event_id, event.max_attendees)

    if existing is not None:
        registration = await store.update(
            EventRegistration,
            existing.id,
            {"status": status, "registered_at": utcnow()},
        )
    else:
        registration = await store.insert(
            EventRegistration(event_id=event_id, user_id=user_id, status=status)
        )

    record_registration_attempt("registered" if status == REGISTERED else "waitlisted")
    logger.info(
        "registration_created",
        registration_id=str(registration.id),
        event_id=str(event_id),
        status=status,
        strategy=strategy.name,
    )
    return registration


async def unregister(store: RowSecureStore, event_id: uuid.UUID) -> EventRegistration:
    """Remove the caller's registration row for an event, whatever its status."""
    registration = await _own_registration(store, event_id)
    if registration is None:
        raise NotFoundError("Registration for event", event_id)

    await store.delete(EventRegistration, registration.id)
    logger.info(
        "registration_deleted",
        registration_id=str(registration.id),
        event_id=str(event_id),
        previous_status=registration.status,
    )
    return registration


async def set_status(
    store: RowSecureStore,
    registration_id: uuid.UUID,
    status: RegistrationStatus,
    strategy: Optional[CapacityStrategy] = None,
) -> EventRegistration:
    """Change the status of one of the caller's registrations.

    Moving to 'registered' goes through the capacity strategy like a new
    registration does.
    """
    registration = await store.get(EventRegistration, registration_id)
    # Creators can see attendees' rows; only the attendee may change them
    if registration.user_id != store.principal.user_id:
        policies.deny(EventRegistration.__tablename__, Operation.UPDATE, store.principal)
    if registration.status == status.value:
        return registration

    if status == RegistrationStatus.registered:
        return await register(store, registration.event_id, strategy=strategy)

    updated = await store.update(EventRegistration, registration_id, {"status": status.value})
    logger.info(
        "registration_status_changed",
        registration_id=str(registration_id),
        event_id=str(updated.event_id),
        status=status.value,
    )
    return updated


async def list_my_registrations(store: RowSecureStore) -> list[EventRegistration]:
    return await store.select(
        EventRegistration,
        EventRegistration.user_id == store.principal.user_id,
        order_by=(EventRegistration.registered_at.desc(),),
    )


async def list_event_registrations(store: RowSecureStore, event_id: uuid.UUID) -> list[EventRegistration]:
    """Registrations for one event: all of them for its creator, the caller's own otherwise."""
    await store.get(Event, event_id)
    return await store.select(
        EventRegistration,
        EventRegistration.event_id == event_id,
        order_by=(EventRegistration.registered_at.asc(),),
    )


async def registration_info(store: RowSecureStore, event_id: uuid.UUID) -> RegistrationInfo:
    event = await store.get(Event, event_id)
    own = await _own_registration(store, event_id)
    count = await registered_count(store, event_id)

    is_creator = store.principal.user_id is not None and event.created_by == store.principal.user_id
    is_full = event.max_attendees is not None and count >= event.max_attendees
    is_registered = own is not None and own.status == REGISTERED

    return RegistrationInfo(
        event_id=event_id,
        registration=RegistrationResponse.model_validate(own) if own is not None else None,
        registration_count=count,
        max_attendees=event.max_attendees,
        is_full=is_full,
        is_creator=is_creator,
        can_register=bool(event.is_public) and not is_creator and not is_registered and not is_full,
        can_unregister=is_registered,
    )
