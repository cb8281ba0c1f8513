"""
Pydantic schemas for API request/response validation.
"""

from catalog.schemas.common import (
    CamelModel,
    ErrorResponse,
    SuccessResponse,
    HealthResponse,
)
from catalog.schemas.notification import (
    NotificationResponse,
    NotificationCount,
    notification_payload,
)
from catalog.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    RejectRequest,
    ApprovalAction,
    ApprovalRequest,
)
from catalog.schemas.collaboration import (
    CommentCreate,
    CommentResponse,
    ReactionResponse,
)

__all__ = [
    # Common
    "CamelModel",
    "ErrorResponse",
    "SuccessResponse",
    "HealthResponse",
    # Notifications
    "NotificationResponse",
    "NotificationCount",
    "notification_payload",
    # Projects
    "ProjectCreate",
    "ProjectResponse",
    "RejectRequest",
    "ApprovalAction",
    "ApprovalRequest",
    # Collaboration
    "CommentCreate",
    "CommentResponse",
    "ReactionResponse",
]
