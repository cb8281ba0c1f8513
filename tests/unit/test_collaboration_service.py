"""Unit tests for comments and reactions."""

import uuid

import pytest

from catalog.kernel.collaboration.collaboration_service import CollaborationService
from catalog.kernel.errors import NotFoundError, PermissionDeniedError
from catalog.kernel.events.event_types import CommentCreated, ReactionAdded
from catalog.kernel.models.project import Project
from catalog.kernel.models.user import UserRole
from catalog.orchestration.state_machine import ApprovalStateMachine


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)
        return 1


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def service(db_session, publisher) -> CollaborationService:
    return CollaborationService(db_session, publisher)


async def _project(db_session, owner, supervisor) -> Project:
    project = await ApprovalStateMachine(db_session, RecordingPublisher()).create_project(
        owner.id, "Sorting Networks", None, supervisor.id
    )
    await db_session.commit()
    return project


class TestComments:
    """Tests for create/list/delete comment."""

    async def test_create_comment_queues_event(self, service, db_session, publisher, owner, supervisor, commenter):
        project = await _project(db_session, owner, supervisor)

        comment = await service.create_comment(project.id, commenter.id, "Nice bitonic merge")
        await db_session.commit()

        assert comment.author_id == commenter.id
        assert len(publisher.events) == 1
        event = publisher.events[0]
        assert isinstance(event, CommentCreated)
        assert event.recipient_id == owner.id
        assert event.owner_role == UserRole.USER
        assert event.comment_id == comment.id
        assert event.commenter_name == "Dave Reader"
        assert event.comment_text == "Nice bitonic merge"

    async def test_comment_on_admin_project_carries_admin_role(self, service, db_session, publisher, admin, commenter):
        project = await ApprovalStateMachine(db_session, RecordingPublisher()).create_project(admin.id, "Guidelines")
        await db_session.commit()

        await service.create_comment(project.id, commenter.id, "Thanks")
        await db_session.commit()

        assert publisher.events[0].owner_role == UserRole.ADMIN

    async def test_comment_on_unknown_project(self, service, publisher, commenter):
        with pytest.raises(NotFoundError):
            await service.create_comment(uuid.uuid4(), commenter.id, "Hello?")
        assert publisher.events == []

    async def test_list_comments_newest_first(self, service, db_session, owner, supervisor, commenter):
        project = await _project(db_session, owner, supervisor)
        first = await service.create_comment(project.id, commenter.id, "first")
        second = await service.create_comment(project.id, owner.id, "second")
        await db_session.commit()

        comments = await service.list_comments(project.id)

        assert [c.id for c in comments] == [second.id, first.id]
        assert comments[0].author.full_name == "Alice Owner"

    async def test_only_author_deletes(self, service, db_session, owner, supervisor, commenter):
        project = await _project(db_session, owner, supervisor)
        comment = await service.create_comment(project.id, commenter.id, "oops")
        await db_session.commit()

        with pytest.raises(PermissionDeniedError):
            await service.delete_comment(comment.id, owner.id)

        await service.delete_comment(comment.id, commenter.id)
        await db_session.commit()
        assert await service.list_comments(project.id) == []


class TestReactions:
    """Tests for toggle_reaction."""

    async def test_toggle_adds_then_removes(self, service, db_session, publisher, owner, supervisor, other_user):
        project = await _project(db_session, owner, supervisor)

        added = await service.toggle_reaction(project.id, other_user.id)
        await db_session.commit()

        assert added.reacted is True
        assert added.total_reactions == 1
        assert len(publisher.events) == 1
        event = publisher.events[0]
        assert isinstance(event, ReactionAdded)
        assert event.recipient_id == owner.id
        assert event.reactor_name == "Carol Student"
        assert event.title == "Sorting Networks"

        removed = await service.toggle_reaction(project.id, other_user.id)
        await db_session.commit()

        assert removed.reacted is False
        assert removed.total_reactions == 0
        assert len(publisher.events) == 1

    async def test_reactions_are_counted_per_user(self, service, db_session, owner, supervisor, other_user, commenter):
        project = await _project(db_session, owner, supervisor)

        await service.toggle_reaction(project.id, other_user.id)
        state = await service.toggle_reaction(project.id, commenter.id)

        assert state.total_reactions == 2

    async def test_reaction_by_unknown_user(self, service, db_session, owner, supervisor):
        project = await _project(db_session, owner, supervisor)

        with pytest.raises(NotFoundError):
            await service.toggle_reaction(project.id, uuid.uuid4())
