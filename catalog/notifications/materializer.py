"""
Notification materializer: domain event -> stored notification -> live push.

Each event variant has a builder that decides the recipient and renders the
notification. The handler persists the result in its own transaction and
only then pushes it, so an offline recipient still finds it later.
"""

import uuid
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.kernel.events.event_bus import EventBus
from catalog.kernel.events.event_types import (
    EVENT_TYPES,
    CommentCreated,
    DomainEvent,
    ProjectApproved,
    ProjectRejected,
    ProjectSubmitted,
    ReactionAdded,
)
from catalog.kernel.models.notification import Notification, NotificationType
from catalog.kernel.models.user import UserRole
from catalog.logging_config import get_logger
from catalog.notifications.delivery import DeliveryChannel
from catalog.notifications.store import NotificationStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotificationDraft:
    """Everything NotificationStore.create needs."""

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


def _from_comment(event: CommentCreated) -> Optional[NotificationDraft]:
    # Admin owners do not get comment notifications
    if UserRole(event.owner_role) == UserRole.ADMIN:
        return None
    return NotificationDraft(
        recipient_user_id=event.owner_id,
        message=f"{event.commenter_name} commented on your project.",
        notification_type=NotificationType.COMMENT,
        project_id=event.project_id,
        comment_id=event.comment_id,
        comment_text=event.comment_text,
        commenter_name=event.commenter_name,
    )


def _from_approval(event: ProjectApproved) -> NotificationDraft:
    return NotificationDraft(
        recipient_user_id=event.owner_id,
        message=f"Your project '{event.title}' was approved by {event.approver_name}.",
        notification_type=NotificationType.APPROVAL,
        project_id=event.project_id,
        project_title=event.title,
        approver_name=event.approver_name,
    )


def _from_rejection(event: ProjectRejected) -> NotificationDraft:
    message = f"Your project '{event.title}' was rejected by {event.rejector_name}."
    if event.reason:
        message = f"{message} Reason: {event.reason}"
    return NotificationDraft(
        recipient_user_id=event.owner_id,
        message=message,
        notification_type=NotificationType.REJECTION,
        project_id=event.project_id,
        project_title=event.title,
        approver_name=event.rejector_name,
        rejection_reason=event.reason,
    )


def _from_submission(event: ProjectSubmitted) -> NotificationDraft:
    return NotificationDraft(
        recipient_user_id=event.approver_id,
        message=f"{event.owner_name} submitted '{event.title}' for your approval.",
        notification_type=NotificationType.SUBMIT,
        project_id=event.project_id,
        project_title=event.title,
        approver_name=event.approver_name,
        commenter_name=event.owner_name,
    )


def _from_reaction(event: ReactionAdded) -> NotificationDraft:
    return NotificationDraft(
        recipient_user_id=event.owner_id,
        message=f"{event.reactor_name} reacted to your project '{event.title}'.",
        notification_type=NotificationType.REACTION,
        project_id=event.project_id,
        project_title=event.title,
        commenter_name=event.reactor_name,
    )


_BUILDERS: Dict[Type[Any], Callable[[Any], Optional[NotificationDraft]]] = {
    CommentCreated: _from_comment,
    ProjectApproved: _from_approval,
    ProjectRejected: _from_rejection,
    ProjectSubmitted: _from_submission,
    ReactionAdded: _from_reaction,
}

_unmapped = [t.__name__ for t in EVENT_TYPES if t not in _BUILDERS]
if _unmapped:
    raise RuntimeError(f"No notification builder for: {', '.join(_unmapped)}")


def build_notification(event: DomainEvent) -> Optional[NotificationDraft]:
    """
    Render the notification an event should produce.

    Returns:
        The draft, or None when the event is suppressed

    Raises:
        TypeError: for an object that is not a domain event
    """
    builder = _BUILDERS.get(type(event))
    if builder is None:
        raise TypeError(f"Not a domain event: {type(event).__name__}")
    return builder(event)


class NotificationMaterializer:
    """
    Bus handlers that turn events into stored and pushed notifications.

    Usage:
        materializer = NotificationMaterializer(session_factory, delivery)
        materializer.register(bus)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        delivery: DeliveryChannel,
    ):
        self.session_factory = session_factory
        self.delivery = delivery

    def register(self, bus: EventBus) -> None:
        """Subscribe the handler to every event variant."""
        for event_type in EVENT_TYPES:
            bus.subscribe(event_type, self.handle)

    async def handle(self, event: DomainEvent) -> Optional[Notification]:
        """Persist then push. Persistence errors propagate to the bus, which logs them."""
        draft = build_notification(event)
        if draft is None:
            logger.debug(
                "Event produces no notification",
                extra={"event_kind": event.kind, "project_id": str(event.project_id)},
            )
            return None

        async with self.session_factory() as session:
            store = NotificationStore(session)
            notification = await store.create(**asdict(draft))
            await session.commit()
            # Push exactly what a later fetch returns
            await session.refresh(notification)

        logger.info(
            "Notification stored",
            extra={
                "event_kind": event.kind,
                "notification_id": str(notification.id),
                "recipient_id": str(notification.recipient_user_id),
            },
        )
        await self.delivery.push(notification.recipient_user_id, notification)
        return notification
