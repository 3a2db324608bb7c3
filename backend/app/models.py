from pydantic import BaseModel

from models import GameSession, Mark, SessionPhase


class SessionReadResponse(BaseModel):
    session_id: str
    phase: SessionPhase
    board: list[Mark | None]
    current_turn: Mark | None = None       # only meaningful while playing
    winner: str | None = None
    players: list[Mark]

    @classmethod
    def from_session(cls, session: GameSession) -> "SessionReadResponse":
        return cls(
            session_id=session.id,
            phase=session.phase,
            board=list(session.board),
            current_turn=session.turn if session.phase is not SessionPhase.CONCLUDED else None,
            winner=session.wire_winner(),
            players=[mark for mark in Mark if mark in session.participants],
        )
