"""
Pydantic schemas for event-related request/response validation.
"""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator

from event_hub.models.event import EventType


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    start_time: datetime
    end_time: datetime
    location: Optional[str] = Field(None, max_length=255)
    max_attendees: Optional[int] = Field(None, gt=0, le=100000)
    is_public: bool = True
    event_type: EventType = EventType.general
    metadata: dict = Field(default_factory=dict)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    max_attendees: Optional[int] = Field(None, gt=0, le=100000)
    is_public: Optional[bool] = None
    event_type: Optional[EventType] = None
    metadata: Optional[dict] = None

    @field_validator("title", "start_time", "end_time")
    @classmethod
    def reject_null(cls, value):
        # May be left out, but the columns are NOT NULL
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class EventResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    start_time: datetime
    end_time: datetime
    location: Optional[str]
    max_attendees: Optional[int]
    created_by: Optional[uuid.UUID]
    is_public: Optional[bool]
    event_type: Optional[str]
    metadata: dict = Field(default_factory=dict, validation_alias=AliasChoices("metadata_", "metadata"))
    created_at: datetime
    updated_at: datetime
    registration_count: int = 0

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
