"""Collaborator wiring for the HTTP app.

``CampaignServices`` holds what every orchestrator the app starts is built
from; the lifespan creates one from ``Config`` and tests pass their own.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException, Request

from delegate.campaign import (
    CampaignOrchestrator,
    Clock,
    DiplomaticGenerator,
    OrchestratorRegistry,
    OrchestratorSettings,
    PersistenceGateway,
    SystemClock,
    VoicePlayback,
)
from delegate.config import Config

logger = logging.getLogger(__name__)


@dataclass
class CampaignServices:
    generator: DiplomaticGenerator | None = None
    voice: VoicePlayback | None = None
    persistence: PersistenceGateway | None = None
    clock: Clock = field(default_factory=SystemClock)
    settings: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    rng: random.Random | None = None
    # False leaves cycles to the caller (tests drive run_cycle by hand).
    autostart: bool = True
    _closeables: list[Any] = field(default_factory=list)

    @classmethod
    def from_config(cls, cfg: type[Config] = Config) -> "CampaignServices":
        """Build the production collaborators named by the environment."""
        from delegate.services import CampaignServiceClient, VoiceServiceClient

        settings = OrchestratorSettings.from_config(cfg)
        # Without a backend URL the engine runs on fallback actions only.
        campaign_api = CampaignServiceClient.from_config(cfg, settings) if cfg.CAMPAIGN_API_URL else None
        voice = VoiceServiceClient.from_config(cfg) if cfg.VOICE_API_URL else None

        backend = cfg.PERSISTENCE_BACKEND
        if backend == "sql":
            from delegate.db import SqlCampaignStore
            from delegate.db.session import build_engine

            persistence = SqlCampaignStore(build_engine(cfg.get_database_url()))
        elif backend == "http" and campaign_api is not None:
            persistence = campaign_api
        else:
            persistence = None
        logger.info(
            f"Campaign services: generator={'remote' if campaign_api else 'fallback only'} "
            f"voice={'on' if voice else 'off'} persistence={backend if persistence else 'none'}"
        )

        services = cls(
            generator=campaign_api,
            voice=voice,
            persistence=persistence,
            settings=settings,
        )
        services._closeables = [c for c in (campaign_api, voice) if c is not None]
        return services

    def new_orchestrator(self) -> CampaignOrchestrator:
        return CampaignOrchestrator(
            self.generator,
            self.voice,
            self.persistence,
            clock=self.clock,
            settings=self.settings,
            rng=self.rng,
        )

    async def aclose(self) -> None:
        for client in self._closeables:
            try:
                await client.aclose()
            except Exception as e:
                logger.warning(f"Error closing {type(client).__name__}: {e}")


def get_services(request: Request) -> CampaignServices:
    return request.app.state.services


def get_registry(request: Request) -> OrchestratorRegistry:
    return request.app.state.registry


def require_orchestrator(registry: OrchestratorRegistry, session_id: str) -> CampaignOrchestrator:
    orchestrator = registry.get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=404, detail=f"Campaign not found: {session_id}")
    return orchestrator
