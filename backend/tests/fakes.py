"""Test doubles shared by the session manager and route tests."""

from __future__ import annotations

import asyncio
from typing import Any

from services.connection import ConnectionContext
from services.session_manager import SessionManager


async def settle(rounds: int = 10) -> None:
    """Let freshly woken tasks run to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Clock whose sleepers only wake when the test calls advance()."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._sleepers: list[tuple[float, asyncio.Future[None]]] = []

    async def sleep(self, seconds: float) -> None:
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._sleepers.append((self._now + seconds, fut))
        await fut

    @property
    def pending(self) -> int:
        return sum(1 for _, fut in self._sleepers if not fut.done())

    async def advance(self, seconds: float) -> None:
        await settle()
        self._now += seconds
        due = [fut for deadline, fut in self._sleepers if deadline <= self._now]
        self._sleepers = [(d, f) for d, f in self._sleepers if d > self._now]
        for fut in due:
            if not fut.done():
                fut.set_result(None)
        await settle()


class RecordingConnection:
    def __init__(self, name: str = "") -> None:
        self.name = name
        self.is_open = True
        self.sent: list[dict[str, Any]] = []

    def send(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)

    def close(self) -> None:
        self.is_open = False

    def types(self) -> list[str]:
        return [payload["type"] for payload in self.sent]

    def last(self) -> dict[str, Any]:
        return self.sent[-1]

    def drain(self) -> list[dict[str, Any]]:
        out = list(self.sent)
        self.sent.clear()
        return out


def make_player(name: str = "") -> ConnectionContext:
    return ConnectionContext(connection=RecordingConnection(name))


def outbox(ctx: ConnectionContext) -> RecordingConnection:
    assert isinstance(ctx.connection, RecordingConnection)
    return ctx.connection


async def start_game(mgr: SessionManager) -> tuple[ConnectionContext, ConnectionContext, str]:
    """Create a session as X, join it as O, and clear both outboxes."""
    x = make_player("x")
    o = make_player("o")
    session = await mgr.create_session(x)
    await mgr.join_session(o, session.id)
    outbox(x).drain()
    outbox(o).drain()
    return x, o, session.id


async def play(mgr: SessionManager, x: ConnectionContext, o: ConnectionContext, session_id: str, cells: list[int]) -> None:
    """Play cells alternately, X first."""
    for turn, cell in enumerate(cells):
        await mgr.submit_move(x if turn % 2 == 0 else o, session_id, cell)
