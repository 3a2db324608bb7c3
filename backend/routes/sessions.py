"""Read-only session status over HTTP. Gameplay itself happens on the WebSocket."""

import logging

from fastapi import APIRouter, HTTPException, Request

from app.models import SessionReadResponse
from services.errors import GAME_NOT_FOUND
from services.session_manager import SessionManager

router = APIRouter(tags=["sessions"])
logger = logging.getLogger(__name__)


@router.get(
    "/sessions/{session_id}",
    response_model=SessionReadResponse,
    status_code=200,
)
def get_session(session_id: str, request: Request) -> SessionReadResponse:
    """Get a game's phase, board and turn. Finished games stay readable for the grace period."""
    manager: SessionManager = request.app.state.session_manager
    session = manager.lookup(session_id)
    if session is None:
        logger.info("[sessions] GET /api/sessions/%s -> 404", session_id)
        raise HTTPException(status_code=404, detail=GAME_NOT_FOUND)
    return SessionReadResponse.from_session(session)
