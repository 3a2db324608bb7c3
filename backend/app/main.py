from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from app.config import Settings
from routes.game_ws import router as game_ws_router
from routes.sessions import router as sessions_router
from services.session_manager import SessionManager


def create_app(manager: SessionManager | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    if manager is None:
        manager = SessionManager(
            grace_period=settings.grace_period_sec,
            sweep_interval=settings.sweep_interval_sec,
        )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        manager.start_sweeper()
        try:
            yield
        finally:
            await manager.aclose()

    app = FastAPI(title="Tic Tac Toe Live", version="0.1.0", lifespan=lifespan)
    app.state.session_manager = manager
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "Tic Tac Toe game server running!"

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(sessions_router, prefix="/api")
    app.include_router(game_ws_router)
    return app


app = create_app()
