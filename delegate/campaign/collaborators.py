"""Contracts for the components the orchestrator calls but does not own.

Any object with the right async methods will do; the HTTP clients in
``delegate.services`` and the SQL store in ``delegate.db`` are the
production implementations, tests pass small fakes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..enums import Collaborator
from .models import CampaignSession, Character


# ── Generator payload ──────────────────────────────────────────────────

class CharacterPayload(BaseModel):
    """Character as the generator backend returns it (camelCase)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    title: str = "Ambassador"
    country: str = "Unknown"
    faction: str = "Independent"
    voice_id: Optional[str] = Field(default=None, alias="voiceId")
    color: str = "#60A5FA"
    personality: str = "diplomatic"

    def to_character(self) -> Character:
        return Character(
            id=self.id,
            name=self.name or self.id,
            title=self.title,
            country=self.country,
            faction=self.faction,
            voice_id=self.voice_id,
            color=self.color,
            personality=self.personality,
        )


class CharacterResponse(BaseModel):
    """One AI delegate's statement."""
    character: CharacterPayload
    content: str = ""


class DiplomaticDevelopment(BaseModel):
    """What the generator returns for a prompt."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    character_responses: list[CharacterResponse] = Field(
        default_factory=list, alias="characterResponses"
    )
    crisis_update: Optional[str] = Field(default=None, alias="crisisUpdate")
    consequences: list[str] = Field(default_factory=list)

    def first_usable_response(self) -> CharacterResponse | None:
        for response in self.character_responses:
            if response.content.strip():
                return response
        return None


def parse_development(raw: Any) -> DiplomaticDevelopment | None:
    """Coerce a generator result into ``DiplomaticDevelopment``.

    Returns None for empty results; raises ``ValidationError`` for
    malformed ones.
    """
    if raw is None:
        return None
    if isinstance(raw, DiplomaticDevelopment):
        return raw
    return DiplomaticDevelopment.model_validate(raw)


# ── Collaborator protocols ─────────────────────────────────────────────

class DiplomaticGenerator(Protocol):
    async def generate(
        self, prompt: str, session: CampaignSession
    ) -> DiplomaticDevelopment | dict[str, Any] | None:
        """Ask for the next diplomatic development. May raise."""
        ...


class VoicePlayback(Protocol):
    async def speak(self, text: str, voice_id: str, voice_settings: dict[str, Any]) -> None:
        """Best-effort playback of a character's line."""
        ...


class PersistenceGateway(Protocol):
    async def save(self, session: CampaignSession) -> bool:
        """Durably store the session. False or an exception means failure."""
        ...


# ── Degraded-mode reporting ────────────────────────────────────────────

@dataclass(frozen=True)
class CollaboratorFailure:
    """A non-fatal failure the orchestrator absorbed."""
    collaborator: Collaborator
    operation: str
    error: str
    timestamp: datetime

    @classmethod
    def from_exception(
        cls, collaborator: Collaborator, operation: str, exc: BaseException | None, now: datetime,
        message: str | None = None,
    ) -> "CollaboratorFailure":
        if message is None:
            message = f"{type(exc).__name__}: {exc}" if exc is not None else "unknown error"
        return cls(collaborator=collaborator, operation=operation, error=message, timestamp=now)


__all__ = [
    "CharacterPayload",
    "CharacterResponse",
    "CollaboratorFailure",
    "DiplomaticDevelopment",
    "DiplomaticGenerator",
    "PersistenceGateway",
    "VoicePlayback",
    "parse_development",
]
