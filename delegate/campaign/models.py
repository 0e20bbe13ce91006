"""
Campaign state for the Model UN orchestrator.

Timeline, phases and actions are owned by one orchestrator for the life
of a campaign run. ``CampaignSession`` is the application's document: the
orchestrator appends to its log and annotates its outcome fields but
never creates or destroys it.

All timestamps are timezone-aware UTC datetimes and serialize as ISO-8601.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..enums import (
    ActionType,
    LogEntryType,
    ResolutionType,
    TriggerType,
)

SYSTEM_ACTOR = "system"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# ── Roster and crisis ──────────────────────────────────────────────────

@dataclass
class Character:
    """A delegate at the table (player or AI-controlled)."""
    id: str
    name: str
    title: str = "Ambassador"
    country: str = "Unknown"
    faction: str = "Independent"
    voice_id: str | None = None
    color: str = "#60A5FA"
    personality: str = "diplomatic"

    def to_log_dict(self) -> dict[str, str]:
        """The character stamp attached to campaign log entries."""
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "color": self.color,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "country": self.country,
            "faction": self.faction,
            "voiceId": self.voice_id,
            "color": self.color,
            "personality": self.personality,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Character":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            title=data.get("title", "Ambassador"),
            country=data.get("country", "Unknown"),
            faction=data.get("faction", "Independent"),
            voice_id=data.get("voiceId", data.get("voice_id")),
            color=data.get("color", "#60A5FA"),
            personality=data.get("personality", "diplomatic"),
        )


@dataclass
class Crisis:
    """The situation currently under negotiation."""
    id: str
    title: str
    description: str
    urgency: str = "high"        # low | medium | high | critical
    category: str = "political"
    status: str = "active"       # active | resolved | escalated | ignored

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "urgency": self.urgency,
            "category": self.category,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Crisis":
        return cls(
            id=str(data.get("id", "crisis")),
            title=data.get("title", "Diplomatic Crisis"),
            description=data.get("description", ""),
            urgency=data.get("urgency", "high"),
            category=data.get("category", "political"),
            status=data.get("status", "active"),
        )


# ── Timeline ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Trigger:
    """Declarative reason a phase may end early or be forced to end."""
    type: TriggerType
    condition: str
    action: str

    def to_dict(self) -> dict[str, str]:
        return {"type": str(self.type), "condition": self.condition, "action": self.action}


@dataclass
class Phase:
    """A named stage of the campaign. Durations are in minutes.

    Mutated only by the phase state machine; retained after completion.
    """
    id: str
    name: str
    description: str
    min_duration: int
    max_duration: int
    objectives: list[str] = field(default_factory=list)
    triggers: list[Trigger] = field(default_factory=list)
    completed: bool = False
    start_time: datetime | None = None
    end_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "minDuration": self.min_duration,
            "maxDuration": self.max_duration,
            "objectives": list(self.objectives),
            "triggers": [t.to_dict() for t in self.triggers],
            "completed": self.completed,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
        }


@dataclass
class CampaignTimeline:
    """Phases plus the campaign's wall-clock window.

    ``time_remaining`` (minutes) and ``progress_percentage`` (0-100) are
    derived by ``refresh_timeline``; they are stored so status snapshots
    don't need a clock.
    """
    total_duration: float
    phases: list[Phase]
    start_time: datetime
    end_time: datetime
    current_phase: int = 0
    time_remaining: float = 0.0
    progress_percentage: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDuration": self.total_duration,
            "phases": [p.to_dict() for p in self.phases],
            "currentPhase": self.current_phase,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "timeRemaining": self.time_remaining,
            "progressPercentage": self.progress_percentage,
        }


# ── Actions and resolution ─────────────────────────────────────────────

@dataclass(frozen=True)
class AutonomousAction:
    """An event the orchestrator injected without direct player input."""
    type: ActionType
    executed_by: str
    description: str
    impact: tuple[str, ...]
    timestamp: datetime
    character: Character | None = None

    @property
    def title(self) -> str:
        """Log title, e.g. ``CHARACTER INITIATIVE``."""
        return str(self.type).replace("_", " ").upper()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": str(self.type),
            "executedBy": self.executed_by,
            "description": self.description,
            "impact": list(self.impact),
            "timestamp": _iso(self.timestamp),
        }


@dataclass(frozen=True)
class Resolution:
    """Evaluated end-state of a campaign at one point in time."""
    type: ResolutionType
    description: str
    player_score: float
    relationship_changes: dict[str, float] = field(default_factory=dict)
    outcomes: tuple[str, ...] = ()
    can_end_early: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": str(self.type),
            "description": self.description,
            "playerScore": self.player_score,
            "relationshipChanges": dict(self.relationship_changes),
            "outcomes": list(self.outcomes),
            "canEndEarly": self.can_end_early,
        }


# ── Campaign log ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class LogEntry:
    """One record of the campaign log, as the UI renders it."""
    title: str
    content: str
    timestamp: datetime
    type: LogEntryType
    character: Character | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "timestamp": _iso(self.timestamp),
            "type": str(self.type),
        }
        if self.character is not None:
            data["character"] = self.character.to_log_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        character = data.get("character")
        return cls(
            title=data["title"],
            content=data.get("content", ""),
            timestamp=_parse_dt(data["timestamp"]),
            type=LogEntryType(data.get("type", LogEntryType.SYSTEM_MESSAGE)),
            character=Character.from_dict(character) if character else None,
        )


# ── Session document ───────────────────────────────────────────────────

@dataclass
class CampaignSession:
    """The application-owned campaign document.

    Field names serialize in camelCase, matching the document the UI and
    the Delegate backend exchange.
    """
    id: str
    title: str = ""
    theme: str = ""
    description: str = ""
    scenario: dict[str, Any] = field(default_factory=dict)
    player_character: Character | None = None
    ai_characters: list[Character] = field(default_factory=list)
    current_crisis: Crisis | None = None
    campaign_log: list[LogEntry] = field(default_factory=list)
    voice_settings: dict[str, Any] = field(default_factory=dict)
    outcomes: list[str] = field(default_factory=list)
    player_stats: dict[str, Any] = field(default_factory=dict)
    session_state: str = "active"

    def find_character(self, character_id: str) -> Character | None:
        for character in self.ai_characters:
            if character.id == character_id:
                return character
        if self.player_character and self.player_character.id == character_id:
            return self.player_character
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for persistence."""
        return {
            "id": self.id,
            "title": self.title,
            "theme": self.theme,
            "description": self.description,
            "scenario": self.scenario,
            "playerCharacter": self.player_character.to_dict() if self.player_character else None,
            "aiCharacters": [c.to_dict() for c in self.ai_characters],
            "currentCrisis": self.current_crisis.to_dict() if self.current_crisis else None,
            "campaignLog": [entry.to_dict() for entry in self.campaign_log],
            "voiceSettings": self.voice_settings,
            "outcomes": list(self.outcomes),
            "playerStats": self.player_stats,
            "sessionState": self.session_state,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignSession":
        """Deserialize from dictionary."""
        player = data.get("playerCharacter")
        crisis = data.get("currentCrisis")
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            theme=data.get("theme", ""),
            description=data.get("description", ""),
            scenario=data.get("scenario") or {},
            player_character=Character.from_dict(player) if player else None,
            ai_characters=[Character.from_dict(c) for c in data.get("aiCharacters", [])],
            current_crisis=Crisis.from_dict(crisis) if crisis else None,
            campaign_log=[LogEntry.from_dict(e) for e in data.get("campaignLog", [])],
            voice_settings=data.get("voiceSettings") or {},
            outcomes=list(data.get("outcomes", [])),
            player_stats=data.get("playerStats") or {},
            session_state=data.get("sessionState", "active"),
        )


# ── Status snapshot ────────────────────────────────────────────────────

@dataclass(frozen=True)
class CampaignStatus:
    """Read-only orchestrator snapshot, safe to poll at any rate."""
    timeline: dict[str, Any] | None
    is_active: bool
    current_phase: str | None
    autonomous_actions: int
    next_action_in: int  # milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeline": self.timeline,
            "isActive": self.is_active,
            "currentPhase": self.current_phase,
            "autonomousActions": self.autonomous_actions,
            "nextActionIn": self.next_action_in,
        }
