"""
Pydantic schemas for event notifications.
"""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from event_hub.models.notification import NotificationType


class NotificationCreate(BaseModel):
    event_id: uuid.UUID
    user_id: uuid.UUID
    notification_type: NotificationType
    message: str = Field(..., min_length=1, max_length=2000)
    scheduled_for: datetime


class NotificationResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    notification_type: str
    message: str
    scheduled_for: datetime
    sent_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}
