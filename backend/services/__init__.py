from .session_manager import SessionManager
from .store import SessionStore

__all__ = ["SessionManager", "SessionStore"]
