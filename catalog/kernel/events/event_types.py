"""
Domain event definitions.

Events are immutable pydantic models forming a closed union discriminated by
``kind``. They are created only after a state change succeeded and are never
persisted; the Notification materialized from them is the durable record.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from catalog.kernel.models.user import UserRole


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _EventFields(BaseModel):
    """Shared configuration: frozen, no unknown fields, timestamped."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    occurred_at: datetime = Field(default_factory=_now)


class CommentCreated(_EventFields):
    """Someone commented on a project; the owner is notified."""

    kind: Literal["comment_created"] = "comment_created"
    project_id: uuid.UUID
    comment_id: uuid.UUID
    owner_id: uuid.UUID
    owner_role: UserRole
    comment_text: str
    commenter_name: str

    @property
    def recipient_id(self) -> uuid.UUID:
        return self.owner_id


class ProjectApproved(_EventFields):
    kind: Literal["project_approved"] = "project_approved"
    project_id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    approver_name: str

    @property
    def recipient_id(self) -> uuid.UUID:
        return self.owner_id


class ProjectRejected(_EventFields):
    kind: Literal["project_rejected"] = "project_rejected"
    project_id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    rejector_name: str
    reason: Optional[str] = None

    @property
    def recipient_id(self) -> uuid.UUID:
        return self.owner_id


class ProjectSubmitted(_EventFields):
    """A project entered the workflow.

    ``approver_id`` is the assigned supervisor, or the submitting admin when
    the project was approved on creation.
    """

    kind: Literal["project_submitted"] = "project_submitted"
    project_id: uuid.UUID
    approver_id: uuid.UUID
    owner_name: str
    title: str
    approver_name: str

    @property
    def recipient_id(self) -> uuid.UUID:
        return self.approver_id


class ReactionAdded(_EventFields):
    kind: Literal["reaction_added"] = "reaction_added"
    project_id: uuid.UUID
    owner_id: uuid.UUID
    reaction_id: uuid.UUID
    title: str
    reactor_name: str

    @property
    def recipient_id(self) -> uuid.UUID:
        return self.owner_id


DomainEvent = Union[
    CommentCreated,
    ProjectApproved,
    ProjectRejected,
    ProjectSubmitted,
    ReactionAdded,
]

# Every variant, in declaration order
EVENT_TYPES: Tuple[Type[BaseModel], ...] = (
    CommentCreated,
    ProjectApproved,
    ProjectRejected,
    ProjectSubmitted,
    ReactionAdded,
)

_event_adapter: TypeAdapter = TypeAdapter(
    Annotated[DomainEvent, Field(discriminator="kind")]
)


def parse_event(data: Dict[str, Any]) -> DomainEvent:
    """
    Rebuild an event from its JSON form (as written to the logs on failure).

    Raises:
        pydantic.ValidationError: if ``kind`` is unknown or fields are invalid
    """
    return _event_adapter.validate_python(data)
