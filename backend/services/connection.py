from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from models import Mark
from services.errors import ConnectionFault

logger = logging.getLogger(__name__)

OUTBOX_SIZE = 32


class Connection(Protocol):
    """What the session manager needs from a client connection."""

    @property
    def is_open(self) -> bool: ...

    def send(self, payload: dict[str, Any]) -> None: ...


@dataclass
class ConnectionContext:
    """
    Routing slot attached to one client connection.

    Holds the mark the client plays and the session it sits in. The manager
    reads and updates it; the connection itself stays owned by the route.
    """

    connection: Connection
    mark: Mark | None = None
    session_id: str | None = None

    def seat(self, session_id: str, mark: Mark) -> None:
        self.session_id = session_id
        self.mark = mark

    def clear(self) -> None:
        self.session_id = None
        self.mark = None


class WebSocketConnection:
    """
    Outbox-backed adapter around a FastAPI WebSocket.

    - send() only enqueues, so the caller never suspends.
    - run_writer() drains the outbox onto the socket until close() is called
      or the peer goes away.
    - The outbox holds at most OUTBOX_SIZE payloads; a slow reader loses the
      oldest ones first.
    """

    def __init__(self, websocket: WebSocket, *, label: str = "") -> None:
        self._websocket = websocket
        self._outbox: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue(maxsize=OUTBOX_SIZE)
        self._open = True
        self.label = label

    @property
    def is_open(self) -> bool:
        return self._open and self._websocket.client_state is WebSocketState.CONNECTED

    def send(self, payload: dict[str, Any]) -> None:
        if not self._open:
            logger.debug("[connection] Dropping %s for closed connection %s", payload.get("type"), self.label)
            return
        self._enqueue(payload)

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        # Wake the writer so it can exit.
        self._enqueue(None)

    def _enqueue(self, item: dict[str, Any] | None) -> None:
        if self._outbox.full():
            try:
                dropped = self._outbox.get_nowait()
            except asyncio.QueueEmpty:
                dropped = None
            if dropped is not None:
                logger.warning("[connection] Outbox full for %s, dropped %s", self.label, dropped.get("type"))
        self._outbox.put_nowait(item)

    async def run_writer(self) -> None:
        while True:
            payload = await self._outbox.get()
            if payload is None:
                return
            try:
                await self._write(payload)
            except ConnectionFault as exc:
                logger.debug("[connection] Send to %s failed, closing outbox: %s", self.label, exc.message)
                self._open = False
                return

    async def _write(self, payload: dict[str, Any]) -> None:
        try:
            await self._websocket.send_json(payload)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            raise ConnectionFault(str(exc) or type(exc).__name__) from exc
