"""
Domain events and their in-process delivery.
"""

from catalog.kernel.events.event_bus import EventBus, EventHandler
from catalog.kernel.events.event_types import (
    DomainEvent,
    EVENT_TYPES,
    CommentCreated,
    ProjectApproved,
    ProjectRejected,
    ProjectSubmitted,
    ReactionAdded,
    parse_event,
)
from catalog.kernel.events.outbox import publish_after_commit, pending_events

__all__ = [
    "EventBus",
    "EventHandler",
    "DomainEvent",
    "EVENT_TYPES",
    "CommentCreated",
    "ProjectApproved",
    "ProjectRejected",
    "ProjectSubmitted",
    "ReactionAdded",
    "parse_event",
    "publish_after_commit",
    "pending_events",
]
