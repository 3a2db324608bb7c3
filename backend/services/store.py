"""In-memory session registry. Keyed by session ID."""

from __future__ import annotations

from collections.abc import Iterator

from models.session import GameSession


class SessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[GameSession]:
        return iter(list(self._sessions.values()))

    def get(self, session_id: object) -> GameSession | None:
        if not isinstance(session_id, str):
            return None
        return self._sessions.get(session_id)

    def add(self, session: GameSession) -> None:
        if session.id in self._sessions:
            raise KeyError(f"session id already active: {session.id}")
        self._sessions[session.id] = session

    def remove(self, session_id: str, *, expected: GameSession | None = None) -> bool:
        """
        Drop a session. Returns False when it was already gone.

        With ``expected`` set, only that exact object is removed; a session that
        re-used the id in the meantime is left alone.
        """
        current = self._sessions.get(session_id)
        if current is None:
            return False
        if expected is not None and current is not expected:
            return False
        del self._sessions[session_id]
        return True

    def ids(self) -> list[str]:
        return list(self._sessions)
