from __future__ import annotations

import logging

from fastapi import FastAPI

from api.routers import stories

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Journal du hacker scraper", version="0.1.0")

    # Register API routers
    app.include_router(stories.router)

    # Health check
    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
