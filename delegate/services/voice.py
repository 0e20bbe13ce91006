"""Client for the Delegate backend's character voice endpoint."""

import logging
from typing import Any

from ..config import Config
from .base import DelegateApiClient

logger = logging.getLogger(__name__)


class VoiceServiceClient(DelegateApiClient):
    """Voice playback collaborator: ``POST /voice/speak``.

    Playback only happens when the session's voice settings enable it;
    missing settings mean silence.
    Failures raise; the orchestrator logs and absorbs them.
    """

    name = "voice-api"

    @classmethod
    def from_config(cls, cfg: type[Config] = Config) -> "VoiceServiceClient":
        # One attempt: a late line of dialogue is worse than a missing one.
        return cls(cfg.VOICE_API_URL, api_token=cfg.API_TOKEN, retry_attempts=1)

    async def speak(self, text: str, voice_id: str, voice_settings: dict[str, Any]) -> None:
        settings = voice_settings or {}
        if not settings.get("enabled"):
            logger.debug(f"Voice disabled; not speaking for {voice_id}")
            return
        voices = settings.get("characterVoices") or {}
        await self._request("POST", "/voice/speak", {
            "text": text,
            "voiceId": voices.get(voice_id, voice_id),
            "speechRate": settings.get("speechRate", 1.0),
            "volume": settings.get("volume", 0.8),
        })
