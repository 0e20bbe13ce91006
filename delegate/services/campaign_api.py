"""Client for the Delegate backend's campaign endpoints.

Implements the diplomatic generator and the persistence gateway the
orchestrator depends on:

    generate()  -> POST /ai/campaign/process-player-input
    save()      -> POST /sessions/campaign/save
    load()      -> GET  /sessions/campaign/{session_id}
"""

import logging
from datetime import datetime, timezone
from typing import Any

from ..campaign.collaborators import DiplomaticDevelopment, parse_development
from ..campaign.errors import CollaboratorError
from ..campaign.models import CampaignSession
from ..campaign.settings import DEFAULT_SETTINGS, OrchestratorSettings
from ..config import Config
from .base import DelegateApiClient

logger = logging.getLogger(__name__)


class CampaignServiceClient(DelegateApiClient):
    name = "campaign-api"

    def __init__(self, base_url: str, *, log_context_window: int = DEFAULT_SETTINGS.log_context_window, **kwargs):
        super().__init__(base_url, **kwargs)
        # Log entries sent back to the generator as conversational context.
        self.log_context_window = log_context_window

    @classmethod
    def from_config(
        cls,
        cfg: type[Config] = Config,
        settings: OrchestratorSettings | None = None,
    ) -> "CampaignServiceClient":
        settings = settings or OrchestratorSettings.from_config(cfg)
        return cls(
            cfg.CAMPAIGN_API_URL,
            api_token=cfg.API_TOKEN,
            timeout=cfg.GENERATOR_TIMEOUT_SECONDS,
            log_context_window=settings.log_context_window,
        )

    async def generate(self, prompt: str, session: CampaignSession) -> DiplomaticDevelopment | None:
        """Ask the backend's AI for the next development.

        Raises:
            CollaboratorError: every attempt failed.
            pydantic.ValidationError: the backend answered with a malformed payload.
        """
        payload = {
            "sessionId": session.id,
            "transcript": prompt,
            "playerCharacter": session.player_character.to_dict() if session.player_character else None,
            "aiCharacters": [c.to_dict() for c in session.ai_characters],
            "currentCrisis": session.current_crisis.to_dict() if session.current_crisis else None,
            "campaignLog": [e.to_dict() for e in session.campaign_log[-self.log_context_window:]],
            "difficulty": session.scenario.get("difficulty"),
        }
        data = await self._request("POST", "/ai/campaign/process-player-input", payload)
        return parse_development(data)

    async def save(self, session: CampaignSession) -> bool:
        """Persist the session document. Raises ``CollaboratorError`` on failure."""
        payload = {
            "sessionId": session.id,
            "sessionData": session.to_dict(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        await self._request("POST", "/sessions/campaign/save", payload)
        logger.debug(f"Saved campaign session {session.id}")
        return True

    async def load(self, session_id: str) -> CampaignSession | None:
        """Fetch a stored session, or None if the backend has none."""
        try:
            data: Any = await self._request("GET", f"/sessions/campaign/{session_id}")
        except CollaboratorError as e:
            logger.error(f"Error loading campaign session {session_id}: {e}")
            return None
        if not data:
            return None
        return CampaignSession.from_dict(data)
