"""Pydantic request/response models for the Campaign API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from delegate.campaign import CampaignSession, Character, Crisis


class StartCampaignRequest(BaseModel):
    """Request to start orchestrating a campaign session."""
    session_id: str = Field(min_length=1)
    title: str = ""
    theme: str = ""
    description: str = ""
    scenario: Dict[str, Any] = {}
    player_character: Optional[Dict[str, Any]] = None  # camelCase character document
    ai_characters: List[Dict[str, Any]] = []
    current_crisis: Optional[Dict[str, Any]] = None
    voice_settings: Dict[str, Any] = {}
    duration_minutes: float = 30

    def to_session(self) -> CampaignSession:
        return CampaignSession(
            id=self.session_id,
            title=self.title,
            theme=self.theme,
            description=self.description,
            scenario=dict(self.scenario),
            player_character=Character.from_dict(self.player_character) if self.player_character else None,
            ai_characters=[Character.from_dict(c) for c in self.ai_characters],
            current_crisis=Crisis.from_dict(self.current_crisis) if self.current_crisis else None,
            voice_settings=dict(self.voice_settings),
        )


class CampaignStatusResponse(BaseModel):
    """Orchestrator snapshot for one campaign."""
    session_id: str
    is_active: bool
    is_concluded: bool
    current_phase: Optional[str] = None
    autonomous_actions: int
    next_action_in_ms: int
    time_remaining: Optional[float] = None  # minutes
    progress_percentage: Optional[float] = None
    timeline: Optional[Dict[str, Any]] = None
    resolution: Optional[Dict[str, Any]] = None
    recent_failures: List[Dict[str, Any]] = []


class StartCampaignResponse(BaseModel):
    session_id: str
    filled_defaults: List[str] = []  # session fields completed with stand-ins
    status: CampaignStatusResponse


class CampaignSummary(BaseModel):
    session_id: str
    is_active: bool
    current_phase: Optional[str] = None
    autonomous_actions: int


class CampaignListResponse(BaseModel):
    campaigns: List[CampaignSummary]


class CampaignLogResponse(BaseModel):
    session_id: str
    total: int
    entries: List[Dict[str, Any]]


class StopCampaignResponse(BaseModel):
    session_id: str
    stopped: bool
    status: CampaignStatusResponse
