"""Journal du hacker scraper — entry point."""

from __future__ import annotations

import logging

import uvicorn

from api.app import create_app
from config.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
log = logging.getLogger(__name__)

app = create_app()


if __name__ == "__main__":
    log.info("Serving on port %d", settings.API_PORT)
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=False,
    )
