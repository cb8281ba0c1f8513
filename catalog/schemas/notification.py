"""
Notification schemas.

``NotificationResponse`` is both the REST representation and the payload of
a live push, so a client renders either without a follow-up fetch.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from catalog.kernel.models.notification import Notification, NotificationType
from catalog.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    """A persisted notification, field for field."""

    id: uuid.UUID
    recipient_user_id: uuid.UUID
    message: str
    notification_type: NotificationType
    project_id: uuid.UUID
    comment_id: Optional[uuid.UUID] = None
    project_title: Optional[str] = None
    comment_text: Optional[str] = None
    commenter_name: Optional[str] = None
    approver_name: Optional[str] = None
    rejection_reason: Optional[str] = None
    is_read: bool
    created_at: datetime


class NotificationCount(CamelModel):
    """Unread and total notifications of one recipient."""

    unread_count: int
    total_count: int


def notification_payload(notification: Notification) -> Dict[str, Any]:
    """JSON-ready camelCase dict of a notification record."""
    return NotificationResponse.model_validate(notification).model_dump(
        mode="json",
        by_alias=True,
    )
