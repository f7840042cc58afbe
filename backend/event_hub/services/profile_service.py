"""
Profile and notification-preference service.
"""

from event_hub.core.errors import ConstraintViolationError, NotFoundError
from event_hub.core.logging import get_logger
from event_hub.models.profile import Profile, default_notification_preferences
from event_hub.schemas.profile import NotificationPreferences, ProfileCreate, ProfileUpdate
from event_hub.store.store import RowSecureStore

logger = get_logger(__name__)


async def get_my_profile(store: RowSecureStore) -> Profile:
    profile = await store.first(Profile, Profile.user_id == store.principal.user_id)
    if profile is None:
        raise NotFoundError("Profile")
    return profile


async def create_my_profile(store: RowSecureStore, data: ProfileCreate) -> Profile:
    """
    Create the caller's profile when the sign-up trigger left none behind.
    Raises 409 if a profile already exists.
    """
    existing = await store.first(Profile, Profile.user_id == store.principal.user_id)
    if existing is not None:
        raise ConstraintViolationError("Profile already exists")

    profile = await store.insert(
        Profile(
            user_id=store.principal.user_id,
            display_name=data.display_name or store.principal.email,
            email=store.principal.email,
            avatar_url=data.avatar_url,
            notification_preferences=default_notification_preferences(),
        )
    )
    logger.info("profile_created", profile_id=str(profile.id))
    return profile


async def update_my_profile(store: RowSecureStore, data: ProfileUpdate) -> Profile:
    profile = await get_my_profile(store)
    values = data.model_dump(exclude_unset=True)
    profile = await store.update(Profile, profile.id, values)
    logger.info("profile_updated", profile_id=str(profile.id), fields=sorted(values))
    return profile


async def get_notification_preferences(store: RowSecureStore) -> NotificationPreferences:
    profile = await get_my_profile(store)
    return NotificationPreferences.from_stored(profile.notification_preferences)


async def update_notification_preferences(
    store: RowSecureStore,
    preferences: NotificationPreferences,
) -> NotificationPreferences:
    profile = await get_my_profile(store)
    # Assign a new document so the JSON column is detected as changed
    profile = await store.update(
        Profile,
        profile.id,
        {"notification_preferences": preferences.model_dump()},
    )
    logger.info(
        "notification_preferences_updated",
        profile_id=str(profile.id),
        email=preferences.email,
        push=preferences.push,
        reminder_times=preferences.reminder_times,
    )
    return NotificationPreferences.from_stored(profile.notification_preferences)
