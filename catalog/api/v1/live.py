"""
Live notification channel.

Connection URL: WS /api/v1/ws?token=<jwt>

Client messages:
    {"type": "SUBSCRIBE", "destination": "/topic/notifications/{userId}"}
    {"type": "PING"}

Server messages:
    {"type": "SUBSCRIBED", "message": "Successfully subscribed to notifications"}
    {"type": "NOTIFICATION", "payload": {...}}
    {"type": "PONG"}
    {"type": "ERROR", "message": "..."}

A socket may only subscribe to its own user's topic. On disconnect every
registration held by the socket is removed.
"""

import json
import uuid
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from catalog.config import get_settings
from catalog.kernel.identity.jwt import verify_access_token
from catalog.logging_config import get_logger
from catalog.notifications.hub import NotificationHub

logger = get_logger(__name__)

router = APIRouter()

SUBSCRIBED_MESSAGE = "Successfully subscribed to notifications"


def parse_destination(destination: object, prefix: Optional[str] = None) -> Optional[uuid.UUID]:
    """User id from ``/topic/notifications/{userId}``, or None if malformed."""
    prefix = prefix or get_settings().live_topic_prefix
    if not isinstance(destination, str) or not destination.startswith(prefix):
        return None
    try:
        return uuid.UUID(destination[len(prefix):])
    except ValueError:
        return None


def _token_user_id(subject: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(subject)
    except ValueError:
        return None


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"type": "ERROR", "message": message})


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket, token: str = Query(...)):
    """Subscribe to the caller's live notifications."""
    payload = verify_access_token(token)
    user_id = _token_user_id(payload.sub) if payload is not None else None
    if user_id is None:
        await websocket.close(code=4001, reason="Invalid or expired token")
        return

    hub: NotificationHub = websocket.app.state.hub
    await websocket.accept()

    try:
        while True:
            try:
                data = json.loads(await websocket.receive_text())
            except ValueError:
                await _send_error(websocket, "Malformed message")
                continue
            message_type = data.get("type") if isinstance(data, dict) else None

            if message_type == "SUBSCRIBE":
                recipient_id = parse_destination(data.get("destination"))
                if recipient_id is None:
                    await _send_error(websocket, "Invalid destination")
                    continue
                if recipient_id != user_id:
                    await _send_error(websocket, "Cannot subscribe to another user's notifications")
                    continue
                hub.registry.register(recipient_id, websocket)
                logger.info("Live channel subscribed", extra={"recipient_id": str(recipient_id)})
                await websocket.send_json({"type": "SUBSCRIBED", "message": SUBSCRIBED_MESSAGE})

            elif message_type == "PING":
                await websocket.send_json({"type": "PONG"})

            else:
                await _send_error(websocket, f"Unsupported message type: {message_type}")

    except WebSocketDisconnect:
        pass
    finally:
        removed = hub.registry.unregister_by_handle(websocket)
        if removed:
            logger.info(
                "Live channel closed",
                extra={"recipient_ids": [str(r) for r in removed]},
            )
