"""
Project endpoints - creation and the approval workflow.
"""

import uuid
from typing import List

from fastapi import APIRouter, status
from sqlalchemy import and_, select

from catalog.api.deps import AdminUser, CurrentUser, DbSession, Hub, ReviewerUser
from catalog.kernel.errors import NotFoundError
from catalog.kernel.models.project import ApprovalStatus, Project
from catalog.orchestration.state_machine import ApprovalStateMachine
from catalog.schemas.project import (
    ApprovalAction,
    ApprovalRequest,
    ProjectCreate,
    ProjectResponse,
    RejectRequest,
)

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    user: CurrentUser,
    db: DbSession,
    hub: Hub,
):
    """Create a project and submit it for approval (admins are approved directly)."""
    machine = ApprovalStateMachine(db, hub.bus)
    return await machine.create_project(
        owner_id=user.id,
        title=data.title,
        description=data.description,
        supervisor_id=data.supervisor_id,
    )


# Listing routes are declared before /{project_id} so they are matched first

@router.get("/pending", response_model=List[ProjectResponse])
async def list_pending(user: ReviewerUser, db: DbSession):
    """Pending projects assigned to the calling supervisor."""
    query = (
        select(Project)
        .where(
            and_(
                Project.supervisor_id == user.id,
                Project.approval_status == ApprovalStatus.PENDING.value,
            )
        )
        .order_by(Project.created_at.desc())
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/status/{approval_status}", response_model=List[ProjectResponse])
async def list_by_status(approval_status: ApprovalStatus, user: ReviewerUser, db: DbSession):
    """All projects in one approval status."""
    query = (
        select(Project)
        .where(Project.approval_status == approval_status.value)
        .order_by(Project.created_at.desc())
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/without-supervisor", response_model=List[ProjectResponse])
async def list_without_supervisor(user: AdminUser, db: DbSession):
    """Projects nobody supervises yet."""
    query = (
        select(Project)
        .where(Project.supervisor_id.is_(None))
        .order_by(Project.created_at.desc())
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """Get project details."""
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


@router.post("/{project_id}/approve", response_model=ProjectResponse)
async def approve_project(project_id: uuid.UUID, user: CurrentUser, db: DbSession, hub: Hub):
    """Approve a project; the owner is notified."""
    return await ApprovalStateMachine(db, hub.bus).approve(project_id, user.id)


@router.post("/{project_id}/reject", response_model=ProjectResponse)
async def reject_project(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    hub: Hub,
    data: RejectRequest = RejectRequest(),
):
    """Reject a project with an optional reason; the owner is notified."""
    return await ApprovalStateMachine(db, hub.bus).reject(project_id, user.id, data.reason)


@router.post("/{project_id}/approval", response_model=ProjectResponse)
async def review_project(
    project_id: uuid.UUID,
    data: ApprovalRequest,
    user: CurrentUser,
    db: DbSession,
    hub: Hub,
):
    """Approve or reject in one endpoint."""
    machine = ApprovalStateMachine(db, hub.bus)
    if data.action == ApprovalAction.APPROVE:
        return await machine.approve(project_id, user.id)
    return await machine.reject(project_id, user.id, data.reason)


@router.post("/{project_id}/assign-supervisor/{supervisor_id}", response_model=ProjectResponse)
async def assign_supervisor(
    project_id: uuid.UUID,
    supervisor_id: uuid.UUID,
    user: AdminUser,
    db: DbSession,
    hub: Hub,
):
    """Assign (or replace) a project's supervisor."""
    return await ApprovalStateMachine(db, hub.bus).assign_supervisor(project_id, supervisor_id)
