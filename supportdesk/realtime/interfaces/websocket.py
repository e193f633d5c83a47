"""
Realtime WebSocket Endpoint
===========================

Binds a WebSocket connection to the RealtimeGateway.

The endpoint only moves frames: it authenticates at handshake, hands each
inbound frame to the gateway and sends whatever the broker delivers.
"""

import json
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from supportdesk.core import UnauthorizedException
from supportdesk.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Realtime"])

# Application-defined close code for a failed handshake
CLOSE_UNAUTHORIZED = 4401


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket):
    engine = websocket.app.state.engine
    connection_id = str(uuid.uuid4())
    await websocket.accept()

    try:
        actor = engine.authenticator.authenticate(websocket.headers)
    except UnauthorizedException as e:
        logger.info("WebSocket handshake rejected", extra={"connection_id": connection_id, "reason": e.message})
        await websocket.close(code=CLOSE_UNAUTHORIZED)
        return

    conn_logger = get_context_logger(__name__, connection_id=connection_id, actor_id=actor.id)
    session = engine.gateway.connect(connection_id, actor, websocket.send_json)
    conn_logger.info(f"WebSocket connected as {actor.role}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            text = message.get("text")
            if text is None:
                # Binary frames are rejected by the gateway like any malformed frame
                frame = message.get("bytes")
            else:
                try:
                    frame = json.loads(text)
                except ValueError:
                    frame = text
            await engine.gateway.handle_frame(session, frame)
    except WebSocketDisconnect as e:
        conn_logger.info(f"WebSocket disconnected with code {e.code}")
    finally:
        engine.gateway.disconnect(connection_id)
