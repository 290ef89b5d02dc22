from __future__ import annotations

import logging

from fastapi import FastAPI

from content_analysis.api.routes import router
from content_analysis.core.config import settings
from content_analysis.core.logging import configure_logging
from content_analysis.recognition.factory import build_orchestrator
from content_analysis.recognition.orchestrator import RecognitionOrchestrator


def create_app(orchestrator: RecognitionOrchestrator | None = None) -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Image Content Analysis", version="0.1.0")
    app.state.orchestrator = orchestrator or build_orchestrator()
    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the Image Content Analysis API",
            "docs": "/docs",
            "health": "/health"
        }

    @app.on_event("startup")
    async def _startup() -> None:
        logging.getLogger(__name__).info("startup")
        if settings.cache_backend.lower().strip() == "sql":
            from content_analysis.db.init_db import init_db
            await init_db()

    return app


app = create_app()
