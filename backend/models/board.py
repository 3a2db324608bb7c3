from __future__ import annotations

from enum import Enum

BOARD_SIZE = 9

# Rows, columns, diagonals of the row-major 3x3 grid.
WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

DRAW = "draw"


class Mark(str, Enum):
    X = "X"
    O = "O"  # noqa: E741

    @property
    def other(self) -> Mark:
        return Mark.O if self is Mark.X else Mark.X


FIRST_MARK = Mark.X
SECOND_MARK = Mark.O


def empty_board() -> list[Mark | None]:
    return [None] * BOARD_SIZE


def find_winner(board: list[Mark | None]) -> Mark | None:
    """Return the mark holding any complete winning line, else None."""
    for a, b, c in WINNING_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


def is_full(board: list[Mark | None]) -> bool:
    return all(cell is not None for cell in board)
