"""
Advisory capacity strategy - check, then act.
Relies on nothing but a count read before the insert.
"""

import uuid

from event_hub.models.event import Event
from event_hub.services.interfaces.capacity import CapacityStrategy
from event_hub.store.store import RowSecureStore


class AdvisoryCapacity(CapacityStrategy):
    """
    No lock - count and compare, then let the caller insert.

    Two registrations racing for the last place can both read a count below
    the limit and both insert, overbooking the event.

    Use when:
    - Reproducing the behaviour of clients that pre-check capacity themselves
    - Comparing against LockingCapacity under load
    """

    name = "advisory"

    async def acquire(self, store: RowSecureStore, event_id: uuid.UUID) -> Event:
        return await store.get(Event, event_id)
