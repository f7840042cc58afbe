from event_hub.schemas.user import SignUpRequest, LoginRequest, UserResponse, Token, SessionResponse
from event_hub.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from event_hub.schemas.registration import (
    RegistrationCreate, RegistrationUpdate, RegistrationResponse, RegistrationInfo,
)
from event_hub.schemas.profile import NotificationPreferences, ProfileCreate, ProfileResponse, ProfileUpdate
from event_hub.schemas.notification import NotificationCreate, NotificationResponse

__all__ = [
    "SignUpRequest", "LoginRequest", "UserResponse", "Token", "SessionResponse",
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "RegistrationCreate", "RegistrationUpdate", "RegistrationResponse", "RegistrationInfo",
    "NotificationPreferences", "ProfileCreate", "ProfileResponse", "ProfileUpdate",
    "NotificationCreate", "NotificationResponse",
]
