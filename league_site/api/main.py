"""
FastAPI application — league_site/api/main.py
Join/contact submission endpoint plus a health check.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent.parent / ".env")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from league_site.capabilities import build_orchestrator
from league_site.channels.contact_handler import router as contact_router
from league_site.config import Settings
from league_site.pipeline.orchestrator import SubmissionOrchestrator

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    orchestrator: SubmissionOrchestrator | None = None,
) -> FastAPI:
    """
    Build the API. An explicit orchestrator skips capability resolution,
    otherwise it is built from settings on startup.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.orchestrator is None:
            app.state.orchestrator = build_orchestrator(settings)
        logger.info("League site API started — league=%s", settings.league_name)
        yield

    app = FastAPI(
        title="League Site API",
        description="Join-the-league form relay: staff email + spreadsheet ledger",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(contact_router)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    @app.get("/health")
    async def health_check():
        current: SubmissionOrchestrator | None = app.state.orchestrator
        notifier = current.notifier if current else None
        ledger = current.ledger if current else None
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "capabilities": {
                "email": notifier.sender.name if notifier else "inactive",
                "ledger": ledger.target.name if ledger else "inactive",
            },
        }

    return app


app = create_app()
