"""
Kernel Layer

Foundational components shared by the API and the notification pipeline:
- Models (users, projects, comments, reactions, notifications)
- Domain events and the in-process event bus
- Domain errors
- Identity (bearer token verification)

Invariants:
- Domain events are published only after the transaction that produced them commits
- Project approval state changes only through ApprovalStateMachine
"""

from catalog.kernel.models import (
    User,
    UserRole,
    Project,
    ApprovalStatus,
    Comment,
    Reaction,
    Notification,
    NotificationType,
)
from catalog.kernel.errors import (
    CatalogError,
    NotFoundError,
    PermissionDeniedError,
    WorkflowError,
    UnauthorizedTransitionError,
    InvalidSupervisorError,
    MissingSupervisorError,
)

__all__ = [
    # Models
    "User",
    "UserRole",
    "Project",
    "ApprovalStatus",
    "Comment",
    "Reaction",
    "Notification",
    "NotificationType",
    # Errors
    "CatalogError",
    "NotFoundError",
    "PermissionDeniedError",
    "WorkflowError",
    "UnauthorizedTransitionError",
    "InvalidSupervisorError",
    "MissingSupervisorError",
]
