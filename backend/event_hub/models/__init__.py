from event_hub.models.user import User
from event_hub.models.auth_session import AuthSession
from event_hub.models.event import Event, EventType
from event_hub.models.registration import EventRegistration, RegistrationStatus
from event_hub.models.profile import Profile
from event_hub.models.notification import EventNotification, NotificationType

__all__ = [
    "User", "AuthSession",
    "Event", "EventType",
    "EventRegistration", "RegistrationStatus",
    "Profile",
    "EventNotification", "NotificationType",
]
