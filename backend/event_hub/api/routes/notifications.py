"""
Notification queue endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.security import get_current_principal
from event_hub.db.session import get_db
from event_hub.schemas.notification import NotificationCreate, NotificationResponse
from event_hub.services.notification_service import enqueue_notification, list_my_notifications
from event_hub.store.principal import Principal
from event_hub.store.store import RowSecureStore

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    pending_only: bool = Query(False, description="Only notifications not yet sent"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """The caller's notifications, soonest first."""
    store = RowSecureStore(db, principal)
    return await list_my_notifications(store, pending_only=pending_only, page=page, page_size=page_size)


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Queue a notification for any user."""
    return await enqueue_notification(RowSecureStore(db, principal), data)
