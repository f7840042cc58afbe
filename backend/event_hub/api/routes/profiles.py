"""
Profile endpoints for the caller's own profile and notification preferences.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.security import get_current_principal
from event_hub.db.session import get_db
from event_hub.schemas.profile import NotificationPreferences, ProfileCreate, ProfileResponse, ProfileUpdate
from event_hub.services.profile_service import (
    create_my_profile,
    get_my_profile,
    get_notification_preferences,
    update_my_profile,
    update_notification_preferences,
)
from event_hub.store.principal import Principal
from event_hub.store.store import RowSecureStore

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/me", response_model=ProfileResponse)
async def read_my_profile(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await get_my_profile(RowSecureStore(db, principal))


@router.post("/me", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    data: ProfileCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create the caller's profile if sign-up did not. 409 if one exists."""
    return await create_my_profile(RowSecureStore(db, principal), data)


@router.patch("/me", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await update_my_profile(RowSecureStore(db, principal), data)


@router.get("/me/notification-preferences", response_model=NotificationPreferences)
async def read_notification_preferences(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await get_notification_preferences(RowSecureStore(db, principal))


@router.put("/me/notification-preferences", response_model=NotificationPreferences)
async def replace_notification_preferences(
    preferences: NotificationPreferences,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Replace email/push toggles and reminder times (hours before an event)."""
    return await update_notification_preferences(RowSecureStore(db, principal), preferences)
