from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from services.connection import ConnectionContext, WebSocketConnection
from services.session_manager import SessionManager

router = APIRouter(tags=["game"])
logger = logging.getLogger(__name__)


async def _receive_frame(websocket: WebSocket) -> str | bytes:
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    if message.get("text") is not None:
        return message["text"]
    return message.get("bytes") or b""


@router.websocket("/")
@router.websocket("/ws")
async def ws_game(websocket: WebSocket) -> None:
    """
    Play Tic-Tac-Toe over JSON frames.

    Inbound:  {"action": "create" | "join" | "move", "sessionId"?: str, "cell"?: int}
    Outbound: {"type": "game_created" | "game_joined" | "opponent_joined" |
               "move_made" | "game_over" | "info" | "error", ...}
    """
    manager: SessionManager = websocket.app.state.session_manager
    peer = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
    logger.info("[game_ws] New client connected from %s", peer)
    try:
        await websocket.accept()
    except Exception as e:
        logger.warning("[game_ws] accept() failed peer=%s: %s", peer, e)
        return

    connection = WebSocketConnection(websocket, label=peer)
    ctx = ConnectionContext(connection=connection)
    writer_task = asyncio.create_task(connection.run_writer())
    try:
        while True:
            raw = await _receive_frame(websocket)
            logger.debug("[game_ws] Received from %s: %.120r", ctx.mark.value if ctx.mark else "unknown", raw)
            await manager.handle_message(ctx, raw)
    except WebSocketDisconnect:
        logger.info("[game_ws] Client disconnected peer=%s (was %s)", peer, ctx.mark.value if ctx.mark else "unknown")
    finally:
        connection.close()
        await manager.handle_disconnect(ctx)
        writer_task.cancel()
        with suppress(asyncio.CancelledError):
            await writer_task
