"""
Best-effort live delivery of notifications.

A push goes to the recipient's registered channel if there is one. Nothing
here is retried: the notification is already stored, and the recipient will
see it on their next fetch. A channel that fails or hangs is treated as dead
and dropped from the registry.
"""

import asyncio
import uuid
from typing import Any, Dict

from catalog.kernel.models.notification import Notification
from catalog.logging_config import get_logger
from catalog.notifications.registry import SessionRegistry
from catalog.schemas.notification import notification_payload

logger = get_logger(__name__)

MESSAGE_TYPE_NOTIFICATION = "NOTIFICATION"


def build_push_message(notification: Notification) -> Dict[str, Any]:
    """Envelope sent over the live channel; ``payload`` is the full record."""
    return {
        "type": MESSAGE_TYPE_NOTIFICATION,
        "payload": notification_payload(notification),
    }


class DeliveryChannel:
    """Pushes stored notifications to live sessions looked up in a SessionRegistry."""

    def __init__(self, registry: SessionRegistry, send_timeout: float = 5.0):
        self.registry = registry
        self.send_timeout = send_timeout

    async def push(self, recipient_id: uuid.UUID, notification: Notification) -> bool:
        """
        Send ``notification`` to the recipient's live channel.

        Never raises for delivery problems.

        Returns:
            True if the channel accepted the message; False when the recipient
            is offline or the send failed or timed out
        """
        channel = self.registry.lookup(recipient_id)
        if channel is None:
            logger.debug(
                "No live channel, notification stays stored only",
                extra={"recipient_id": str(recipient_id), "notification_id": str(notification.id)},
            )
            return False

        message = build_push_message(notification)
        try:
            await asyncio.wait_for(channel.send_json(message), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            self.registry.unregister(recipient_id, channel)
            logger.warning(
                "Live push timed out after %.1fs, channel dropped",
                self.send_timeout,
                extra={"recipient_id": str(recipient_id), "notification_id": str(notification.id)},
            )
            return False
        except Exception as exc:
            self.registry.unregister(recipient_id, channel)
            logger.warning(
                "Live push failed, channel dropped: %s",
                exc,
                extra={"recipient_id": str(recipient_id), "notification_id": str(notification.id)},
            )
            return False

        logger.info(
            "Notification pushed",
            extra={"recipient_id": str(recipient_id), "notification_id": str(notification.id)},
        )
        return True
