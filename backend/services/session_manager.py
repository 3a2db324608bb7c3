"""
Session manager: owns the session registry and every game rule.

Each operation runs under one asyncio.Lock and never awaits between
validating a request and mutating state. Outbound events go through
Connection.send(), which only enqueues, so holding the lock never waits
on the network.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from pydantic import BaseModel

from models import BOARD_SIZE, DRAW, FIRST_MARK, SECOND_MARK, GameSession, Mark, SessionPhase, find_winner, is_full
from services.clock import Clock, SystemClock
from services.connection import Connection, ConnectionContext
from services.errors import (
    ALREADY_IN_GAME,
    GAME_ALREADY_STARTED,
    GAME_FULL,
    GAME_NOT_FOUND,
    GAME_NOT_IN_PROGRESS,
    INVALID_MOVE,
    NOT_YOUR_TURN,
    OPPONENT_LEFT,
    UNKNOWN_ACTION,
    GameError,
    ProtocolError,
    ValidationError,
)
from services.protocol import (
    Action,
    ClientMessage,
    Error,
    GameCreated,
    GameJoined,
    GameOver,
    Info,
    MoveMade,
    OpponentJoined,
    parse_client_message,
    to_payload,
)
from services.store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD_SEC = 30.0
DEFAULT_SWEEP_INTERVAL_SEC = 60.0

_SESSION_ID_MIN = 100_000
_SESSION_ID_SPAN = 900_000


def generate_session_id() -> str:
    """Six-digit numeric token, easy to read out loud."""
    return str(_SESSION_ID_MIN + secrets.randbelow(_SESSION_ID_SPAN))


def _cell_index(cell: Any) -> int | None:
    if isinstance(cell, bool):
        return None
    if isinstance(cell, float) and cell.is_integer():
        cell = int(cell)
    if isinstance(cell, int) and 0 <= cell < BOARD_SIZE:
        return cell
    return None


class SessionManager:
    def __init__(
        self,
        store: SessionStore | None = None,
        *,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD_SEC,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SEC,
    ) -> None:
        self.store = store if store is not None else SessionStore()
        self.grace_period = grace_period
        self.sweep_interval = sweep_interval
        self._clock = clock or SystemClock()
        self._new_id = id_factory or generate_session_id
        self._lock = asyncio.Lock()
        self._timers: set[asyncio.Task[None]] = set()
        self._sweeper: asyncio.Task[None] | None = None

    # ---- inbound ----

    async def handle_message(self, ctx: ConnectionContext, raw: str | bytes) -> None:
        """Parse one inbound frame and run it. Rejections become a single error reply."""
        try:
            message = parse_client_message(raw)
            await self.dispatch(ctx, message)
        except GameError as exc:
            logger.warning(
                "[session_manager] Rejected request from mark=%s session=%s: %s",
                ctx.mark.value if ctx.mark else "unknown",
                ctx.session_id,
                exc.message,
            )
            self._send(ctx.connection, Error(message=exc.message))

    async def dispatch(self, ctx: ConnectionContext, message: ClientMessage) -> None:
        if message.action == Action.CREATE:
            await self.create_session(ctx)
        elif message.action == Action.JOIN:
            await self.join_session(ctx, message.session_id)
        elif message.action == Action.MOVE:
            await self.submit_move(ctx, message.session_id, message.cell)
        else:
            raise ProtocolError(UNKNOWN_ACTION)

    # ---- operations ----

    async def create_session(self, ctx: ConnectionContext) -> GameSession:
        async with self._lock:
            self._leave_current(ctx)
            session = GameSession(id=self._issue_id())
            session.participants[FIRST_MARK] = ctx.connection
            self.store.add(session)
            ctx.seat(session.id, FIRST_MARK)
            logger.info("[session_manager] Game created: %s by player %s", session.id, FIRST_MARK.value)
            self._send(ctx.connection, GameCreated(session_id=session.id, mark=FIRST_MARK))
            return session

    async def join_session(self, ctx: ConnectionContext, session_id: Any) -> GameSession:
        async with self._lock:
            session = self.store.get(session_id)
            if session is None:
                raise ValidationError(GAME_NOT_FOUND)
            if self._seated_session(ctx) is session:
                raise ValidationError(ALREADY_IN_GAME)
            if SECOND_MARK in session.participants:
                raise ValidationError(GAME_FULL)
            if session.phase is not SessionPhase.AWAITING_OPPONENT:
                raise ValidationError(GAME_ALREADY_STARTED)

            self._leave_current(ctx)
            session.participants[SECOND_MARK] = ctx.connection
            session.phase = SessionPhase.IN_PROGRESS
            ctx.seat(session.id, SECOND_MARK)
            logger.info("[session_manager] Player %s joined game: %s", SECOND_MARK.value, session.id)

            self._send(
                ctx.connection,
                GameJoined(
                    mark=SECOND_MARK,
                    session_id=session.id,
                    current_turn=session.turn,
                    board=list(session.board),
                ),
            )
            self._send(
                session.connection_for(FIRST_MARK),
                OpponentJoined(mark=FIRST_MARK, current_turn=session.turn, board=list(session.board)),
            )
            return session

    async def submit_move(self, ctx: ConnectionContext, session_id: Any, cell: Any) -> GameSession:
        async with self._lock:
            session = self.store.get(session_id if session_id is not None else ctx.session_id)
            if session is None:
                raise ValidationError(GAME_NOT_FOUND)
            if session.phase is not SessionPhase.IN_PROGRESS:
                raise ValidationError(GAME_NOT_IN_PROGRESS)
            if session.connection_for(session.turn) is not ctx.connection:
                raise ValidationError(NOT_YOUR_TURN)
            index = _cell_index(cell)
            if index is None or session.board[index] is not None:
                raise ValidationError(INVALID_MOVE)

            mark = session.turn
            session.board[index] = mark
            session.turn = mark.other
            logger.info("[session_manager] Game %s: %s played cell %d", session.id, mark.value, index)
            self._settle(session)
            return session

    async def handle_disconnect(self, ctx: ConnectionContext) -> None:
        async with self._lock:
            self._leave_current(ctx)

    async def sweep(self) -> list[str]:
        """Remove concluded sessions and sessions nobody is connected to. Sends nothing."""
        async with self._lock:
            removed: list[str] = []
            for session in self.store:
                if session.phase is SessionPhase.CONCLUDED or not session.has_open_participant():
                    if self.store.remove(session.id, expected=session):
                        removed.append(session.id)
            if removed:
                logger.info("[session_manager] Sweep removed %d session(s): %s", len(removed), ", ".join(removed))
            return removed

    def lookup(self, session_id: str) -> GameSession | None:
        return self.store.get(session_id)

    # ---- background tasks ----

    def start_sweeper(self) -> None:
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_forever())
        logger.info("[session_manager] Sweeper started (every %.0fs)", self.sweep_interval)

    async def aclose(self) -> None:
        tasks = list(self._timers)
        if self._sweeper is not None:
            tasks.append(self._sweeper)
            self._sweeper = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task

    async def _sweep_forever(self) -> None:
        while True:
            await self._clock.sleep(self.sweep_interval)
            try:
                await self.sweep()
            except Exception:
                logger.exception("[session_manager] Sweep failed")

    def _schedule_removal(self, session: GameSession) -> None:
        task = asyncio.create_task(self._remove_after_grace(session))
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)

    async def _remove_after_grace(self, session: GameSession) -> None:
        await self._clock.sleep(self.grace_period)
        async with self._lock:
            if self.store.remove(session.id, expected=session):
                logger.info("[session_manager] Game %s removed after grace period", session.id)

    # ---- helpers (call with the lock held) ----

    def _issue_id(self) -> str:
        while True:
            candidate = self._new_id()
            if candidate not in self.store:
                return candidate
            logger.info("[session_manager] Session id %s already active, re-rolling", candidate)

    def _seated_session(self, ctx: ConnectionContext) -> GameSession | None:
        if ctx.session_id is None or ctx.mark is None:
            return None
        session = self.store.get(ctx.session_id)
        if session is None or session.connection_for(ctx.mark) is not ctx.connection:
            return None
        return session

    def _leave_current(self, ctx: ConnectionContext) -> None:
        session = self._seated_session(ctx)
        mark = ctx.mark
        ctx.clear()
        if session is None or mark is None:
            return
        self._send(session.connection_for(mark.other), Info(message=OPPONENT_LEFT))
        self.store.remove(session.id, expected=session)
        logger.info("[session_manager] Player %s left game %s (%s); game removed", mark.value, session.id, session.phase.value)

    def _settle(self, session: GameSession) -> None:
        winner = find_winner(session.board)
        if winner is None and not is_full(session.board):
            self._broadcast(session, MoveMade(board=list(session.board), next_turn=session.turn))
            return

        session.conclude(winner if winner is not None else DRAW)
        logger.info("[session_manager] Game %s over: winner=%s", session.id, session.wire_winner())
        self._broadcast(session, GameOver(winner=session.wire_winner(), board=list(session.board)))
        self._schedule_removal(session)

    def _broadcast(self, session: GameSession, event: BaseModel) -> None:
        for mark in Mark:
            self._send(session.connection_for(mark), event)

    @staticmethod
    def _send(connection: Connection | None, event: BaseModel) -> None:
        if connection is None:
            return
        if not connection.is_open:
            logger.debug("[session_manager] Skipping %s for closed connection", event.__class__.__name__)
            return
        connection.send(to_payload(event))
