"""Error taxonomy for the game server. Every error carries the message shown to the client."""

from __future__ import annotations


class GameError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProtocolError(GameError):
    """Unparsable body or unknown action. The connection stays open."""


class ValidationError(GameError):
    """A request that breaks a game rule. Raised before any state is touched."""


class ConnectionFault(GameError):
    """The peer went away while a message was being written."""


INVALID_FORMAT = "Invalid message format"
UNKNOWN_ACTION = "Unknown action"
GAME_NOT_FOUND = "Game not found"
GAME_FULL = "Game is full"
GAME_ALREADY_STARTED = "Game already in progress"
ALREADY_IN_GAME = "Already in this game"
GAME_NOT_IN_PROGRESS = "Game not in progress"
NOT_YOUR_TURN = "Not your turn"
INVALID_MOVE = "Invalid move"
OPPONENT_LEFT = "Opponent disconnected. Game ended."
