"""
Registry of live notification channels, one per recipient.

The registry does not own the channels (the connection layer does); it only
answers "where do I push for this recipient right now". It is touched by
connection handlers and by bus workers at the same time, so every public
method is a single atomic step under an internal lock.
"""

import threading
import uuid
from typing import Any, Dict, List, Optional, Protocol

from catalog.logging_config import get_logger

logger = get_logger(__name__)


class LiveChannel(Protocol):
    """Anything that can push a JSON message to one client (a FastAPI WebSocket qualifies)."""

    async def send_json(self, data: Any) -> None: ...


class SessionRegistry:
    """Maps recipient id -> the live channel that currently represents them."""

    def __init__(self) -> None:
        self._channels: Dict[uuid.UUID, LiveChannel] = {}
        self._lock = threading.Lock()

    def register(self, recipient_id: uuid.UUID, channel: LiveChannel) -> Optional[LiveChannel]:
        """
        Make ``channel`` the recipient's live channel. Last writer wins.

        Returns:
            The channel this one replaced, if any
        """
        with self._lock:
            previous = self._channels.get(recipient_id)
            self._channels[recipient_id] = channel

        if previous is not None and previous is not channel:
            logger.info(
                "Live channel replaced",
                extra={"recipient_id": str(recipient_id)},
            )
        return previous

    def unregister(self, recipient_id: uuid.UUID, channel: Optional[LiveChannel] = None) -> bool:
        """
        Remove the recipient's registration.

        When ``channel`` is given the entry is removed only if it still points
        at that channel, so a stale connection cannot evict its replacement.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            current = self._channels.get(recipient_id)
            if current is None:
                return False
            if channel is not None and current is not channel:
                return False
            del self._channels[recipient_id]
            return True

    def unregister_by_handle(self, channel: LiveChannel) -> List[uuid.UUID]:
        """Remove every registration pointing at ``channel``. Returns the affected recipients."""
        with self._lock:
            removed = [rid for rid, ch in self._channels.items() if ch is channel]
            for rid in removed:
                del self._channels[rid]
        return removed

    def lookup(self, recipient_id: uuid.UUID) -> Optional[LiveChannel]:
        with self._lock:
            return self._channels.get(recipient_id)

    def recipients(self) -> List[uuid.UUID]:
        """Snapshot of currently registered recipients."""
        with self._lock:
            return list(self._channels)

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)

    def __contains__(self, recipient_id: object) -> bool:
        with self._lock:
            return recipient_id in self._channels
