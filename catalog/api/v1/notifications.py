"""
Notification endpoints - the caller's inbox.

Every route is scoped to the authenticated user; another user's
notification id behaves exactly like an unknown one (404).
"""

import uuid
from typing import List

from fastapi import APIRouter, Query

from catalog.api.deps import CurrentUser, DbSession
from catalog.notifications.store import NotificationStore
from catalog.schemas.common import SuccessResponse
from catalog.schemas.notification import NotificationCount, NotificationResponse

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    user: CurrentUser,
    db: DbSession,
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(100, ge=1, le=500),
):
    """List the caller's notifications, newest first."""
    store = NotificationStore(db)
    return await store.list_by_recipient(user.id, unread_only=unread_only, limit=limit)


@router.get("/count", response_model=NotificationCount)
async def count_notifications(user: CurrentUser, db: DbSession):
    """Unread and total counts."""
    return await NotificationStore(db).count(user.id)


@router.put("/read-all", response_model=SuccessResponse)
async def mark_all_read(user: CurrentUser, db: DbSession):
    """Mark every unread notification of the caller as read."""
    updated = await NotificationStore(db).mark_all_read(user.id)
    return SuccessResponse(
        message="All notifications marked as read",
        data={"updated": updated},
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Mark one notification as read."""
    return await NotificationStore(db).mark_read(notification_id, user.id)


@router.delete("/clear-all", response_model=SuccessResponse)
async def clear_all(user: CurrentUser, db: DbSession):
    """Delete every notification of the caller."""
    deleted = await NotificationStore(db).delete_all(user.id)
    return SuccessResponse(
        message="All notifications cleared",
        data={"deleted": deleted},
    )


@router.delete("/{notification_id}", response_model=SuccessResponse)
async def delete_notification(notification_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Delete one notification."""
    await NotificationStore(db).delete(notification_id, user.id)
    return SuccessResponse(message="Notification deleted")
