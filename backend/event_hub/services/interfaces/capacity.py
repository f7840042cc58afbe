"""
Capacity strategy interface.
Allows swapping between different ways of enforcing Event.max_attendees.
"""

import uuid
from abc import ABC, abstractmethod

from event_hub.models.event import Event
from event_hub.models.registration import EventRegistration, RegistrationStatus
from event_hub.store.store import RowSecureStore


async def registered_count(store: RowSecureStore, event_id: uuid.UUID) -> int:
    """Number of 'registered' rows for an event, across all users."""
    return await store.count_all(
        EventRegistration,
        EventRegistration.event_id == event_id,
        EventRegistration.status == RegistrationStatus.registered.value,
    )


class CapacityStrategy(ABC):
    """
    Interface for capacity enforcement strategies.

    Implementations:
    - AdvisoryCapacity: plain read, count, then insert; concurrent registrations
      at the boundary can overbook
    - LockingCapacity: row lock on the event for the rest of the transaction,
      so count-then-insert is atomic per event
    """

    name: str = "abstract"

    @abstractmethod
    async def acquire(self, store: RowSecureStore, event_id: uuid.UUID) -> Event:
        """
        Load the event a registration targets, taking whatever lock the
        strategy needs before counting.

        Raises:
            NotFoundError: event missing or not visible to the caller
        """
        pass

    async def admit(self, store: RowSecureStore, event: Event) -> bool:
        """
        Check whether one more 'registered' row fits.

        Returns:
            True if the event has no limit or is below it
            False if the event is full
        """
        if event.max_attendees is None:
            return True
        return await registered_count(store, event.id) < event.max_attendees
