"""
Kernel Data Models

SQLAlchemy models for the catalog: users, projects, collaboration and
notifications.
"""

from catalog.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from catalog.kernel.models.user import User, UserRole, REVIEWER_ROLES
from catalog.kernel.models.project import Project, ApprovalStatus
from catalog.kernel.models.collaboration import Comment, Reaction
from catalog.kernel.models.notification import Notification, NotificationType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # User
    "User",
    "UserRole",
    "REVIEWER_ROLES",
    # Project
    "Project",
    "ApprovalStatus",
    # Collaboration
    "Comment",
    "Reaction",
    # Notifications
    "Notification",
    "NotificationType",
]
