from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .board import FIRST_MARK, Mark, empty_board

if TYPE_CHECKING:
    from services.connection import Connection


class SessionPhase(str, Enum):
    AWAITING_OPPONENT = "waiting"
    IN_PROGRESS = "playing"
    CONCLUDED = "ended"


@dataclass
class GameSession:
    id: str                                # six-digit numeric token
    participants: dict[Mark, Connection] = field(default_factory=dict)
    board: list[Mark | None] = field(default_factory=empty_board)
    turn: Mark = FIRST_MARK
    phase: SessionPhase = SessionPhase.AWAITING_OPPONENT
    winner: Mark | str | None = None       # Mark, DRAW, or None while undecided

    def connection_for(self, mark: Mark) -> Connection | None:
        return self.participants.get(mark)

    def has_open_participant(self) -> bool:
        return any(conn.is_open for conn in self.participants.values())

    def wire_winner(self) -> str | None:
        if isinstance(self.winner, Mark):
            return self.winner.value
        return self.winner

    def conclude(self, winner: Mark | str) -> None:
        self.phase = SessionPhase.CONCLUDED
        self.winner = winner
