"""FastAPI main application for the Delegate campaign orchestrator."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from delegate import __version__
from delegate.campaign import OrchestratorRegistry
from delegate.config import Config
from delegate.logging_config import setup_logging

from .deps import CampaignServices
from .routes import campaigns

logger = logging.getLogger(__name__)


def create_app(services: CampaignServices | None = None) -> FastAPI:
    """Build the app; ``services`` defaults to collaborators from ``Config``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown lifecycle."""
        setup_logging(Config.LOG_LEVEL)
        logger.info("Delegate orchestrator starting up")
        for issue in Config.validate():
            logger.warning(f"Config: {issue}")

        wired = services or CampaignServices.from_config()
        app.state.services = wired
        app.state.registry = OrchestratorRegistry(wired.new_orchestrator)
        yield
        # Shutdown: stop every campaign and drain pending saves
        await app.state.registry.stop_all()
        await wired.aclose()
        logger.info("Delegate orchestrator shut down cleanly")

    app = FastAPI(
        title="Delegate Campaign API",
        description="Model UN campaign orchestration",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware for web frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(campaigns.router, prefix="/api/campaigns", tags=["Campaigns"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": __version__,
            "campaigns": len(app.state.registry),
        }

    return app


app = create_app()
