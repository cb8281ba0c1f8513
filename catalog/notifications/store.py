"""
Notification store: durable, recipient-scoped notification records.

Every read and write is scoped by recipient id. Asking for another
recipient's notification fails exactly like asking for one that does not
exist, so ids cannot be probed across users.
"""

import uuid
from typing import List, Optional

from sqlalchemy import and_, delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.kernel.errors import NotFoundError
from catalog.kernel.models.notification import Notification, NotificationType
from catalog.schemas.notification import NotificationCount


class NotificationStore:
    """
    Service over the notifications table.

    Usage:
        store = NotificationStore(session)
        notification = await store.create(
            recipient_user_id=owner_id,
            message="Ada commented on your project.",
            notification_type=NotificationType.COMMENT,
            project_id=project_id,
        )
        await session.commit()

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        recipient_user_id: uuid.UUID,
        message: str,
        notification_type: NotificationType,
        project_id: uuid.UUID,
        comment_id: Optional[uuid.UUID] = None,
        project_title: Optional[str] = None,
        comment_text: Optional[str] = None,
        commenter_name: Optional[str] = None,
        approver_name: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> Notification:
        """
        Insert an unread notification.

        Returns:
            The record with ``id`` and ``created_at`` populated
        """
        notification = Notification(
            recipient_user_id=recipient_user_id,
            message=message,
            notification_type=notification_type,
            project_id=project_id,
            comment_id=comment_id,
            project_title=project_title,
            comment_text=comment_text,
            commenter_name=commenter_name,
            approver_name=approver_name,
            rejection_reason=rejection_reason,
            is_read=False,
        )
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def get(self, notification_id: uuid.UUID, recipient_id: uuid.UUID) -> Notification:
        """
        Fetch one notification of ``recipient_id``.

        Raises:
            NotFoundError: if it does not exist or belongs to someone else
        """
        query = select(Notification).where(
            and_(
                Notification.id == notification_id,
                Notification.recipient_user_id == recipient_id,
            )
        )
        result = await self.session.execute(query)
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        return notification

    async def list_by_recipient(
        self,
        recipient_id: uuid.UUID,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[Notification]:
        """Notifications of ``recipient_id``, newest first."""
        query = select(Notification).where(Notification.recipient_user_id == recipient_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(desc(Notification.created_at), desc(Notification.id))
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def mark_read(self, notification_id: uuid.UUID, recipient_id: uuid.UUID) -> Notification:
        """
        Mark one notification read.

        Raises:
            NotFoundError: if it does not belong to ``recipient_id``
        """
        notification = await self.get(notification_id, recipient_id)
        notification.is_read = True
        await self.session.flush()
        return notification

    async def mark_all_read(self, recipient_id: uuid.UUID) -> int:
        """
        Mark every unread notification of ``recipient_id`` read.

        Only rows that are unread when the statement runs are touched, so a
        notification inserted concurrently stays unread. Idempotent.

        Returns:
            Number of notifications that changed
        """
        stmt = (
            update(Notification)
            .where(
                and_(
                    Notification.recipient_user_id == recipient_id,
                    Notification.is_read.is_(False),
                )
            )
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def delete(self, notification_id: uuid.UUID, recipient_id: uuid.UUID) -> None:
        """
        Delete one notification.

        Raises:
            NotFoundError: if it does not belong to ``recipient_id``
        """
        notification = await self.get(notification_id, recipient_id)
        await self.session.delete(notification)
        await self.session.flush()

    async def delete_all(self, recipient_id: uuid.UUID) -> int:
        """Delete every notification of ``recipient_id``. Returns how many were removed."""
        stmt = (
            delete(Notification)
            .where(Notification.recipient_user_id == recipient_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def count(self, recipient_id: uuid.UUID) -> NotificationCount:
        """Unread and total counts for ``recipient_id``."""
        total_query = select(func.count(Notification.id)).where(
            Notification.recipient_user_id == recipient_id
        )
        unread_query = total_query.where(Notification.is_read.is_(False))

        total = (await self.session.execute(total_query)).scalar() or 0
        unread = (await self.session.execute(unread_query)).scalar() or 0
        return NotificationCount(unread_count=unread, total_count=total)
