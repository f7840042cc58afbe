"""
Pydantic schemas for event registration request/response validation.
"""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from event_hub.models.registration import RegistrationStatus


class RegistrationCreate(BaseModel):
    join_waitlist: bool = False


class RegistrationUpdate(BaseModel):
    status: RegistrationStatus


class RegistrationResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    status: Optional[str]
    registered_at: datetime

    model_config = {"from_attributes": True}


class RegistrationInfo(BaseModel):
    """What the event detail panel needs to decide which actions to offer."""

    event_id: uuid.UUID
    registration: Optional[RegistrationResponse] = None
    registration_count: int
    max_attendees: Optional[int]
    is_full: bool
    is_creator: bool
    can_register: bool
    can_unregister: bool
