"""
Wire protocol for the game WebSocket.

Inbound frames are JSON objects with an ``action`` field:
  {"action": "create"}
  {"action": "join", "sessionId": "123456"}
  {"action": "move", "sessionId": "123456", "cell": 4}

``gameId`` is accepted as an alias of ``sessionId``. Outbound events are the
models below, serialized with ``to_payload``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from models import Mark
from services.errors import INVALID_FORMAT, ProtocolError


class Action(str, Enum):
    CREATE = "create"
    JOIN = "join"
    MOVE = "move"


class ClientMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Any value is accepted; only create, join and move match an action.
    action: Any = None
    session_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("sessionId", "gameId", "session_id"),
    )
    # Id lookup and cell range are game rules, checked by the session manager.
    cell: Any = None

    @field_validator("session_id", mode="before")
    @classmethod
    def _numeric_session_id(cls, value: Any) -> Any:
        # Clients built around the six-digit ids sometimes send them as numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


def parse_client_message(raw: str | bytes) -> ClientMessage:
    try:
        return ClientMessage.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise ProtocolError(INVALID_FORMAT) from exc


Board = list[Mark | None]


class GameCreated(BaseModel):
    type: Literal["game_created"] = "game_created"
    session_id: str = Field(serialization_alias="sessionId")
    mark: Mark


class GameJoined(BaseModel):
    type: Literal["game_joined"] = "game_joined"
    mark: Mark
    session_id: str = Field(serialization_alias="sessionId")
    current_turn: Mark
    board: Board


class OpponentJoined(BaseModel):
    type: Literal["opponent_joined"] = "opponent_joined"
    mark: Mark
    current_turn: Mark
    board: Board


class MoveMade(BaseModel):
    type: Literal["move_made"] = "move_made"
    board: Board
    next_turn: Mark


class GameOver(BaseModel):
    type: Literal["game_over"] = "game_over"
    winner: str                            # "X", "O" or "draw"
    board: Board


class Info(BaseModel):
    type: Literal["info"] = "info"
    message: str


class Error(BaseModel):
    type: Literal["error"] = "error"
    message: str


def to_payload(event: BaseModel) -> dict[str, Any]:
    return event.model_dump(mode="json", by_alias=True)
