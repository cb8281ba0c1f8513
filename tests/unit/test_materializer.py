"""Unit tests for event -> notification materialization."""

import uuid

import pytest
from pydantic import BaseModel

from catalog.kernel.events.event_bus import EventBus
from catalog.kernel.events.event_types import (
    EVENT_TYPES,
    CommentCreated,
    ProjectApproved,
    ProjectRejected,
    ProjectSubmitted,
    ReactionAdded,
)
from catalog.kernel.models.notification import NotificationType
from catalog.kernel.models.user import UserRole
from catalog.notifications.delivery import DeliveryChannel
from catalog.notifications.materializer import NotificationMaterializer, build_notification
from catalog.notifications.registry import SessionRegistry
from catalog.notifications.store import NotificationStore


PROJECT_ID = uuid.uuid4()
OWNER_ID = uuid.uuid4()


def _comment(owner_role: UserRole = UserRole.USER) -> CommentCreated:
    return CommentCreated(
        project_id=PROJECT_ID,
        comment_id=uuid.uuid4(),
        owner_id=OWNER_ID,
        owner_role=owner_role,
        comment_text="Could you cite the dataset?",
        commenter_name="Dave Reader",
    )


class TestBuildNotification:
    """The mapping from event variant to notification."""

    def test_comment(self):
        event = _comment()
        draft = build_notification(event)

        assert draft.notification_type == NotificationType.COMMENT
        assert draft.recipient_user_id == OWNER_ID
        assert draft.message == "Dave Reader commented on your project."
        assert draft.comment_id == event.comment_id
        assert draft.comment_text == "Could you cite the dataset?"
        assert draft.commenter_name == "Dave Reader"

    @pytest.mark.parametrize("role", [UserRole.USER, UserRole.SUPERVISOR])
    def test_comment_for_non_admin_owner_is_kept(self, role):
        assert build_notification(_comment(role)) is not None

    def test_comment_on_admin_project_is_suppressed(self):
        assert build_notification(_comment(UserRole.ADMIN)) is None

    def test_approval(self):
        draft = build_notification(ProjectApproved(
            project_id=PROJECT_ID,
            owner_id=OWNER_ID,
            title="Sorting Networks",
            approver_name="Bob Supervisor",
        ))

        assert draft.notification_type == NotificationType.APPROVAL
        assert draft.recipient_user_id == OWNER_ID
        assert draft.message == "Your project 'Sorting Networks' was approved by Bob Supervisor."
        assert draft.project_title == "Sorting Networks"
        assert draft.approver_name == "Bob Supervisor"

    def test_rejection_with_reason(self):
        draft = build_notification(ProjectRejected(
            project_id=PROJECT_ID,
            owner_id=OWNER_ID,
            title="Sorting Networks",
            rejector_name="Bob Supervisor",
            reason="Missing evaluation",
        ))

        assert draft.notification_type == NotificationType.REJECTION
        assert draft.message == (
            "Your project 'Sorting Networks' was rejected by Bob Supervisor. Reason: Missing evaluation"
        )
        assert draft.approver_name == "Bob Supervisor"
        assert draft.rejection_reason == "Missing evaluation"

    def test_rejection_without_reason(self):
        draft = build_notification(ProjectRejected(
            project_id=PROJECT_ID,
            owner_id=OWNER_ID,
            title="Sorting Networks",
            rejector_name="Bob Supervisor",
        ))

        assert draft.message == "Your project 'Sorting Networks' was rejected by Bob Supervisor."
        assert draft.rejection_reason is None

    def test_submission_goes_to_approver(self):
        approver_id = uuid.uuid4()
        draft = build_notification(ProjectSubmitted(
            project_id=PROJECT_ID,
            approver_id=approver_id,
            owner_name="Alice Owner",
            title="Sorting Networks",
            approver_name="Bob Supervisor",
        ))

        assert draft.notification_type == NotificationType.SUBMIT
        assert draft.recipient_user_id == approver_id
        assert draft.message == "Alice Owner submitted 'Sorting Networks' for your approval."
        assert draft.commenter_name == "Alice Owner"
        assert draft.approver_name == "Bob Supervisor"

    def test_reaction(self):
        draft = build_notification(ReactionAdded(
            project_id=PROJECT_ID,
            owner_id=OWNER_ID,
            reaction_id=uuid.uuid4(),
            title="Sorting Networks",
            reactor_name="Carol Student",
        ))

        assert draft.notification_type == NotificationType.REACTION
        assert draft.recipient_user_id == OWNER_ID
        assert draft.message == "Carol Student reacted to your project 'Sorting Networks'."
        assert draft.commenter_name == "Carol Student"

    def test_unknown_object_raises(self):
        class NotAnEvent(BaseModel):
            kind: str = "mystery"

        with pytest.raises(TypeError):
            build_notification(NotAnEvent())


class TestNotificationMaterializer:
    """Tests for the bus handler: persist, then push."""

    async def test_register_subscribes_every_variant(self, session_factory):
        bus = EventBus()
        materializer = NotificationMaterializer(session_factory, DeliveryChannel(SessionRegistry()))
        materializer.register(bus)

        for event_type in EVENT_TYPES:
            assert bus.handler_count(event_type) == 1

    async def test_handle_persists_before_push(self, session_factory):
        registry = SessionRegistry()
        seen_in_store = []

        class _CheckingChannel:
            async def send_json(self, data):
                async with session_factory() as session:
                    rows = await NotificationStore(session).list_by_recipient(OWNER_ID)
                    seen_in_store.extend(str(n.id) for n in rows)

        registry.register(OWNER_ID, _CheckingChannel())
        materializer = NotificationMaterializer(session_factory, DeliveryChannel(registry))

        notification = await materializer.handle(_comment())

        assert notification is not None
        assert seen_in_store == [str(notification.id)]

    async def test_handle_offline_recipient_still_stores(self, session_factory):
        materializer = NotificationMaterializer(session_factory, DeliveryChannel(SessionRegistry()))

        notification = await materializer.handle(_comment())

        async with session_factory() as session:
            stored = await NotificationStore(session).get(notification.id, OWNER_ID)
        assert stored.is_read is False
        assert stored.notification_type == NotificationType.COMMENT.value

    async def test_handle_admin_comment_stores_nothing(self, session_factory):
        materializer = NotificationMaterializer(session_factory, DeliveryChannel(SessionRegistry()))

        assert await materializer.handle(_comment(UserRole.ADMIN)) is None

        async with session_factory() as session:
            count = await NotificationStore(session).count(OWNER_ID)
        assert count.total_count == 0
