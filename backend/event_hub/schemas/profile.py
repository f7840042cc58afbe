"""
Pydantic schemas for profiles and notification preferences.
"""

import uuid
from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field, ValidationError, field_validator

from event_hub.models.profile import REMINDER_TIME_OPTIONS


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = False
    # Hours before the event; whole hours stay integers
    reminder_times: list[Union[int, float]] = Field(default_factory=lambda: [24, 1])

    @field_validator("reminder_times")
    @classmethod
    def normalize_reminder_times(cls, value: list[Union[int, float]]) -> list[Union[int, float]]:
        invalid = [v for v in value if v not in REMINDER_TIME_OPTIONS]
        if invalid:
            raise ValueError(f"Unsupported reminder times {invalid}; choose from {list(REMINDER_TIME_OPTIONS)}")
        hours = {int(v) if float(v).is_integer() else v for v in value}
        return sorted(hours, reverse=True)

    @classmethod
    def from_stored(cls, stored: Optional[dict]) -> "NotificationPreferences":
        """Read a stored document leniently.

        Missing or unreadable keys take their defaults and unsupported
        reminder times are dropped, so a hand-edited row never fails a read.
        """
        if not isinstance(stored, dict):
            stored = {}
        values = {}
        for name in cls.model_fields:
            value = stored.get(name)
            if name == "reminder_times" and isinstance(value, list):
                value = [v for v in value if not isinstance(v, bool) and v in REMINDER_TIME_OPTIONS]
            if value is None:
                continue
            try:
                cls.model_validate({name: value})
            except ValidationError:
                continue
            values[name] = value
        return cls(**values)


class ProfileResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    display_name: Optional[str]
    email: Optional[str]
    avatar_url: Optional[str]
    notification_preferences: Optional[dict]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileCreate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=2048)


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=2048)
