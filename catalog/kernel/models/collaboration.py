"""
Collaboration models - comments and reactions on catalog projects.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from catalog.kernel.models.project import Project
    from catalog.kernel.models.user import User


class Comment(Base, TimestampMixin):
    """A comment left on a project."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="comments",
    )
    author: Mapped["User"] = relationship("User")

    def __repr__(self) -> str:
        return f"<Comment {self.id} by {self.author_id}>"


class Reaction(Base, TimestampMixin):
    """A user's reaction to a project; at most one per user and project."""

    __tablename__ = "reactions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
    )

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="reactions",
    )

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_reactions_project_user"),
    )

    def __repr__(self) -> str:
        return f"<Reaction project={self.project_id} user={self.user_id}>"
