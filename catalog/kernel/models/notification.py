"""
Notification records materialized from domain events.

A notification outlives the event that produced it: it is the durable
artifact a recipient reads through the API or receives over the live channel.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.kernel.models.base import Base, generate_uuid, utcnow


class NotificationType(str, Enum):
    """Kinds of notification, one per domain event variant."""
    COMMENT = "COMMENT"
    APPROVAL = "APPROVAL"
    REJECTION = "REJECTION"
    REACTION = "REACTION"
    SUBMIT = "SUBMIT"


class Notification(Base):
    """A message addressed to one recipient."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    # Plain column, no FK: notifications survive user/project clean-up
    recipient_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    notification_type: Mapped[NotificationType] = mapped_column(
        String(20),
        nullable=False,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    comment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )

    # Type-specific context so clients can render without a follow-up fetch
    project_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    comment_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    commenter_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    approver_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_notifications_recipient_time", "recipient_user_id", "created_at"),
        Index("ix_notifications_recipient_unread", "recipient_user_id", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<Notification {self.notification_type} to={self.recipient_user_id}>"
