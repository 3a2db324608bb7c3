from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

from app.config import Settings
from app.main import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    # Load .env from backend dir (where server.py runs)
    load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    logger.info("Server starting on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
