"""
Catalog project model and its approval status.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from catalog.kernel.models.user import User
    from catalog.kernel.models.collaboration import Comment, Reaction


class ApprovalStatus(str, Enum):
    """Where a project sits in the approval workflow."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Project(Base, TimestampMixin):
    """An academic project submitted to the catalog."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Ownership and review
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    supervisor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )

    # Approval workflow (mutated only by ApprovalStateMachine)
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        String(20),
        default=ApprovalStatus.PENDING,
        nullable=False,
        index=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="owned_projects",
        foreign_keys=[owner_id],
    )
    supervisor: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[supervisor_id],
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="project",
        cascade="all, delete-orphan",
    )
    reactions: Mapped[List["Reaction"]] = relationship(
        "Reaction",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    @property
    def status(self) -> ApprovalStatus:
        return ApprovalStatus(self.approval_status)

    def __repr__(self) -> str:
        return f"<Project {self.title[:50]} {self.status.value}>"
