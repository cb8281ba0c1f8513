"""
Project schemas.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from catalog.kernel.models.project import ApprovalStatus
from catalog.schemas.common import CamelModel


class ProjectCreate(CamelModel):
    """Project creation request. Non-admins must name a supervisor."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    supervisor_id: Optional[uuid.UUID] = None


class ProjectResponse(CamelModel):
    """Project response."""

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    owner_id: uuid.UUID
    supervisor_id: Optional[uuid.UUID] = None
    approval_status: ApprovalStatus
    approved_at: Optional[datetime] = None
    approved_by: Optional[uuid.UUID] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RejectRequest(CamelModel):
    """Rejection request body."""

    reason: Optional[str] = Field(None, max_length=2000)


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ApprovalRequest(CamelModel):
    """Combined approve/reject request."""

    action: ApprovalAction
    reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def reason_only_on_reject(self) -> "ApprovalRequest":
        if self.action == ApprovalAction.APPROVE and self.reason:
            raise ValueError("reason is only accepted when rejecting")
        return self
