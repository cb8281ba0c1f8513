"""
Approval state machine for catalog projects.

PENDING -> APPROVED | REJECTED, and APPROVED <-> REJECTED on re-review.
Every check runs before the first mutation, so a refused call leaves the
project exactly as it was and queues no event. Events are bound to the
session and reach the bus only when the caller's transaction commits.
"""

import uuid
from typing import Dict, FrozenSet, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catalog.kernel.errors import (
    InvalidSupervisorError,
    MissingSupervisorError,
    NotFoundError,
    UnauthorizedTransitionError,
)
from catalog.kernel.events.event_types import ProjectApproved, ProjectRejected, ProjectSubmitted
from catalog.kernel.events.outbox import EventPublisher, publish_after_commit
from catalog.kernel.models.base import utcnow
from catalog.kernel.models.project import ApprovalStatus, Project
from catalog.kernel.models.user import User
from catalog.logging_config import get_logger

logger = get_logger(__name__)


# Valid review transitions: from_status -> reachable statuses
_TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}),
    ApprovalStatus.APPROVED: frozenset({ApprovalStatus.REJECTED}),
    ApprovalStatus.REJECTED: frozenset({ApprovalStatus.APPROVED}),
}


def valid_transitions(from_status: ApprovalStatus) -> FrozenSet[ApprovalStatus]:
    """Statuses a reviewer can move a project to from ``from_status``."""
    return _TRANSITIONS.get(ApprovalStatus(from_status), frozenset())


def initial_status(creator: User) -> ApprovalStatus:
    """Admins publish directly; everyone else waits for a supervisor."""
    return ApprovalStatus.APPROVED if creator.is_admin else ApprovalStatus.PENDING


def can_review(actor: User, project: Project) -> bool:
    """The assigned supervisor, any SUPERVISOR and any ADMIN may approve or reject."""
    if project.supervisor_id is not None and actor.id == project.supervisor_id:
        return True
    return actor.is_reviewer


class ApprovalStateMachine:
    """
    Performs approval transitions and queues the matching domain events.

    Usage:
        machine = ApprovalStateMachine(session, hub.bus)
        project = await machine.approve(project_id, current_user.id)
        await session.commit()   # ProjectApproved is published here

    The caller owns the transaction; nothing is published unless it commits.
    """

    def __init__(self, session: AsyncSession, publisher: EventPublisher):
        self.session = session
        self.publisher = publisher

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get_project(self, project_id: uuid.UUID) -> Project:
        project = await self.session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def _get_user(self, user_id: uuid.UUID, entity: str = "User") -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError(entity, user_id)
        return user

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def create_project(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        supervisor_id: Optional[uuid.UUID] = None,
    ) -> Project:
        """Create a project owned by ``owner_id`` and submit it."""
        owner = await self._get_user(owner_id)
        project = Project(
            title=title,
            description=description,
            owner_id=owner.id,
        )
        return await self.submit(project, owner, supervisor_id)

    async def submit(
        self,
        project: Project,
        actor: User,
        supervisor_id: Optional[uuid.UUID] = None,
    ) -> Project:
        """
        Put a project into the workflow.

        An admin's project is approved immediately and the admin receives the
        submission notice. Anyone else must name a supervisor, who receives it.
        ``supervisor_id`` is ignored for admins.

        Raises:
            MissingSupervisorError: non-admin without ``supervisor_id``
            NotFoundError: ``supervisor_id`` does not resolve
            InvalidSupervisorError: supervisor is neither SUPERVISOR nor ADMIN
        """
        if actor.is_admin:
            approver = actor
        else:
            if supervisor_id is None:
                raise MissingSupervisorError("A supervisor is required for non-admin submissions")
            approver = await self._get_user(supervisor_id, "Supervisor")
            if not approver.is_reviewer:
                raise InvalidSupervisorError(f"User {supervisor_id} is not a supervisor")

        status = initial_status(actor)
        project.approval_status = status
        project.rejection_reason = None
        if status == ApprovalStatus.APPROVED:
            project.approved_by = actor.id
            project.approved_at = utcnow()
        else:
            project.supervisor_id = approver.id
            project.approved_by = None
            project.approved_at = None

        self.session.add(project)
        await self.session.flush()

        publish_after_commit(
            self.session,
            self.publisher,
            ProjectSubmitted(
                project_id=project.id,
                approver_id=approver.id,
                owner_name=actor.full_name,
                title=project.title,
                approver_name=approver.full_name,
            ),
        )
        logger.info(
            "Project submitted",
            extra={
                "project_id": str(project.id),
                "approval_status": status.value,
                "approver_id": str(approver.id),
            },
        )
        return project

    async def approve(self, project_id: uuid.UUID, approver_id: uuid.UUID) -> Project:
        """
        Approve a project and notify its owner.

        Approving an already approved project changes nothing and notifies no one.

        Raises:
            NotFoundError: unknown project or approver
            UnauthorizedTransitionError: approver may not review this project
        """
        project = await self._get_project(project_id)
        approver = await self._get_user(approver_id)
        if not self._begin_transition(project, approver, ApprovalStatus.APPROVED):
            return project

        project.approval_status = ApprovalStatus.APPROVED
        project.approved_at = utcnow()
        project.approved_by = approver.id
        project.rejection_reason = None
        await self.session.flush()

        publish_after_commit(
            self.session,
            self.publisher,
            ProjectApproved(
                project_id=project.id,
                owner_id=project.owner_id,
                title=project.title,
                approver_name=approver.full_name,
            ),
        )
        logger.info(
            "Project approved",
            extra={"project_id": str(project.id), "approver_id": str(approver.id)},
        )
        return project

    async def reject(
        self,
        project_id: uuid.UUID,
        rejecter_id: uuid.UUID,
        reason: Optional[str] = None,
    ) -> Project:
        """
        Reject a project and notify its owner.

        ``approved_by``/``approved_at`` record who acted and when, for both
        outcomes. Rejecting an already rejected project is a no-op.

        Raises:
            NotFoundError: unknown project or rejecter
            UnauthorizedTransitionError: rejecter may not review this project
        """
        project = await self._get_project(project_id)
        rejecter = await self._get_user(rejecter_id)
        if not self._begin_transition(project, rejecter, ApprovalStatus.REJECTED):
            return project

        project.approval_status = ApprovalStatus.REJECTED
        project.approved_at = utcnow()
        project.approved_by = rejecter.id
        project.rejection_reason = reason
        await self.session.flush()

        publish_after_commit(
            self.session,
            self.publisher,
            ProjectRejected(
                project_id=project.id,
                owner_id=project.owner_id,
                title=project.title,
                rejector_name=rejecter.full_name,
                reason=reason,
            ),
        )
        logger.info(
            "Project rejected",
            extra={"project_id": str(project.id), "rejecter_id": str(rejecter.id)},
        )
        return project

    async def assign_supervisor(self, project_id: uuid.UUID, supervisor_id: uuid.UUID) -> Project:
        """
        Set the project's supervisor. Status is untouched and no event is queued.

        Raises:
            NotFoundError: unknown project or supervisor
            InvalidSupervisorError: user is neither SUPERVISOR nor ADMIN
        """
        project = await self._get_project(project_id)
        supervisor = await self._get_user(supervisor_id, "Supervisor")
        if not supervisor.is_reviewer:
            raise InvalidSupervisorError(f"User {supervisor_id} is not a supervisor")

        project.supervisor_id = supervisor.id
        await self.session.flush()
        logger.info(
            "Supervisor assigned",
            extra={"project_id": str(project.id), "supervisor_id": str(supervisor.id)},
        )
        return project

    def _begin_transition(self, project: Project, actor: User, to_status: ApprovalStatus) -> bool:
        """
        Authorize a review transition.

        Returns:
            False when the project already has ``to_status`` (nothing to do)
        """
        if not can_review(actor, project):
            raise UnauthorizedTransitionError(
                f"User {actor.id} is not authorized to review project {project.id}"
            )
        if project.status == to_status:
            logger.info(
                "Project already %s, nothing to do",
                to_status.value,
                extra={"project_id": str(project.id), "actor_id": str(actor.id)},
            )
            return False
        if to_status not in valid_transitions(project.status):
            raise UnauthorizedTransitionError(
                f"Invalid transition: {project.status.value} -> {to_status.value}"
            )
        return True
