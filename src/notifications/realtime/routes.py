"""WebSocket endpoint of the real-time channel.

Clients connect to ``/notifications/ws?token=<jwt>`` and receive
``{"event": "new_notification", "payload": {...}}`` messages. Nothing is
replayed on connect: clients re-fetch the unread count and the first page
of notifications over HTTP after every (re)connect.
"""

import asyncio

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from notifications.realtime.registry import get_registry
from shared.auth import verify_connection_token
from shared.exceptions import AuthorizationError

logger = structlog.get_logger(__name__)

router = APIRouter()

UNAUTHORIZED_CLOSE_CODE = 4401


async def _pump(websocket: WebSocket, connection) -> None:
    """Send queued messages to the client, in order."""
    while True:
        message = await connection.mailbox.get()
        await websocket.send_json(message)


@router.websocket("/notifications/ws")
async def notifications_socket(websocket: WebSocket, token: str | None = None):
    try:
        user_id = verify_connection_token(token)
    except AuthorizationError as exc:
        logger.info("websocket_rejected", reason=str(exc.messages))
        await websocket.accept()
        await websocket.close(code=UNAUTHORIZED_CLOSE_CODE)
        return

    registry = get_registry()
    connection = registry.register(user_id, loop=asyncio.get_running_loop())
    sender = None

    try:
        await websocket.accept()
        sender = asyncio.create_task(_pump(websocket, connection))
        while True:
            # Client frames are keep-alives only
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(connection)
        if sender is not None:
            sender.cancel()
