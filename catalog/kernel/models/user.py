"""
User model for identity lookups (name and role resolution).
"""

import uuid
from enum import Enum
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from catalog.kernel.models.project import Project


class UserRole(str, Enum):
    """User roles in the system."""
    USER = "USER"
    SUPERVISOR = "SUPERVISOR"
    ADMIN = "ADMIN"


# Roles allowed to supervise a project or act on its approval
REVIEWER_ROLES = frozenset({UserRole.SUPERVISOR, UserRole.ADMIN})


class User(Base, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        String(50),
        default=UserRole.USER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    owned_projects: Mapped[List["Project"]] = relationship(
        "Project",
        back_populates="owner",
        foreign_keys="Project.owner_id",
    )

    @property
    def role_value(self) -> UserRole:
        """Role as an enum; rows loaded from the database hold the raw string."""
        return UserRole(self.role)

    @property
    def is_admin(self) -> bool:
        return self.role_value == UserRole.ADMIN

    @property
    def is_reviewer(self) -> bool:
        return self.role_value in REVIEWER_ROLES

    def __repr__(self) -> str:
        return f"<User {self.email}>"
