from .board import (
    BOARD_SIZE,
    DRAW,
    FIRST_MARK,
    SECOND_MARK,
    WINNING_LINES,
    Mark,
    find_winner,
    is_full,
)
from .session import GameSession, SessionPhase

__all__ = [
    "GameSession",
    "SessionPhase",
    "Mark",
    "FIRST_MARK",
    "SECOND_MARK",
    "BOARD_SIZE",
    "WINNING_LINES",
    "DRAW",
    "find_winner",
    "is_full",
]
