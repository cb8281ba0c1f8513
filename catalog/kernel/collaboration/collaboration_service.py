"""
Collaboration service - comments and reactions on catalog projects.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.kernel.errors import NotFoundError, PermissionDeniedError
from catalog.kernel.events.event_types import CommentCreated, ReactionAdded
from catalog.kernel.events.outbox import EventPublisher, publish_after_commit
from catalog.kernel.models.collaboration import Comment, Reaction
from catalog.kernel.models.project import Project
from catalog.kernel.models.user import User
from catalog.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReactionState:
    """Result of a reaction toggle."""

    project_id: uuid.UUID
    user_id: uuid.UUID
    reacted: bool
    total_reactions: int


class CollaborationService:
    """
    Comments and reactions, each publishing its domain event on commit.

    Usage:
        service = CollaborationService(session, hub.bus)
        comment = await service.create_comment(project_id, user.id, "Nice work")
    """

    def __init__(self, session: AsyncSession, publisher: EventPublisher):
        self.session = session
        self.publisher = publisher

    async def _get_project(self, project_id: uuid.UUID) -> Project:
        project = await self.session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def _get_user(self, user_id: uuid.UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    # Comments

    async def create_comment(
        self,
        project_id: uuid.UUID,
        author_id: uuid.UUID,
        content: str,
    ) -> Comment:
        """Add a comment and queue CommentCreated for the project owner."""
        project = await self._get_project(project_id)
        author = await self._get_user(author_id)
        owner = await self._get_user(project.owner_id)

        comment = Comment(
            project_id=project.id,
            author_id=author.id,
            content=content,
        )
        comment.author = author
        self.session.add(comment)
        await self.session.flush()

        publish_after_commit(
            self.session,
            self.publisher,
            CommentCreated(
                project_id=project.id,
                comment_id=comment.id,
                owner_id=owner.id,
                owner_role=owner.role_value,
                comment_text=comment.content,
                commenter_name=author.full_name,
            ),
        )
        logger.info(
            "Comment created",
            extra={"project_id": str(project.id), "comment_id": str(comment.id)},
        )
        return comment

    async def list_comments(self, project_id: uuid.UUID) -> List[Comment]:
        """Comments on a project, newest first."""
        await self._get_project(project_id)
        result = await self.session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.project_id == project_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.scalars().all())

    async def delete_comment(self, comment_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a comment. Only its author may do so."""
        comment = await self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        if comment.author_id != user_id:
            raise PermissionDeniedError("Only the author can delete this comment")
        await self.session.delete(comment)
        await self.session.flush()

    # Reactions

    async def toggle_reaction(self, project_id: uuid.UUID, user_id: uuid.UUID) -> ReactionState:
        """
        Add the user's reaction, or remove it if already present.

        Only an add queues ReactionAdded; removing notifies no one.
        """
        project = await self._get_project(project_id)
        user = await self._get_user(user_id)

        existing = await self._find_reaction(project.id, user.id)
        if existing is not None:
            await self.session.delete(existing)
            await self.session.flush()
            reacted = False
        else:
            reaction = Reaction(project_id=project.id, user_id=user.id)
            self.session.add(reaction)
            await self.session.flush()
            reacted = True
            publish_after_commit(
                self.session,
                self.publisher,
                ReactionAdded(
                    project_id=project.id,
                    owner_id=project.owner_id,
                    reaction_id=reaction.id,
                    title=project.title,
                    reactor_name=user.full_name,
                ),
            )

        return ReactionState(
            project_id=project.id,
            user_id=user.id,
            reacted=reacted,
            total_reactions=await self.count_reactions(project.id),
        )

    async def count_reactions(self, project_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Reaction).where(Reaction.project_id == project_id)
        )
        return result.scalar_one()

    async def _find_reaction(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[Reaction]:
        result = await self.session.execute(
            select(Reaction).where(
                Reaction.project_id == project_id,
                Reaction.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()
