"""
Notification pipeline: store, live-session registry, delivery and the
materializer that connects them to the event bus.
"""

from catalog.notifications.store import NotificationStore
from catalog.notifications.registry import SessionRegistry, LiveChannel
from catalog.notifications.delivery import DeliveryChannel, build_push_message
from catalog.notifications.materializer import (
    NotificationMaterializer,
    NotificationDraft,
    build_notification,
)
from catalog.notifications.hub import NotificationHub

__all__ = [
    "NotificationStore",
    "SessionRegistry",
    "LiveChannel",
    "DeliveryChannel",
    "build_push_message",
    "NotificationMaterializer",
    "NotificationDraft",
    "build_notification",
    "NotificationHub",
]
