"""Campaign orchestration package for the Delegate Model UN mode."""

from .actions import AutonomousActionEngine, EngineOutcome
from .clock import Clock, ManualClock, SystemClock, Ticker
from .collaborators import (
    CollaboratorFailure,
    DiplomaticDevelopment,
    DiplomaticGenerator,
    PersistenceGateway,
    VoicePlayback,
)
from .errors import CollaboratorError, InvalidConfiguration, OrchestratorError
from .log import CampaignLog
from .models import (
    AutonomousAction,
    CampaignSession,
    CampaignStatus,
    CampaignTimeline,
    Character,
    Crisis,
    LogEntry,
    Phase,
    Resolution,
    Trigger,
)
from .orchestrator import CampaignOrchestrator, CycleReport, OrchestratorRegistry
from .phases import PhaseStateMachine, PhaseTransition
from .resolution import evaluate_resolution, safe_evaluate
from .settings import DEFAULT_SETTINGS, OrchestratorSettings
from .timeline import create_timeline, refresh_timeline

__all__ = [
    "AutonomousAction",
    "AutonomousActionEngine",
    "CampaignLog",
    "CampaignOrchestrator",
    "CampaignSession",
    "CampaignStatus",
    "CampaignTimeline",
    "Character",
    "Clock",
    "CollaboratorError",
    "CollaboratorFailure",
    "Crisis",
    "CycleReport",
    "DEFAULT_SETTINGS",
    "DiplomaticDevelopment",
    "DiplomaticGenerator",
    "EngineOutcome",
    "InvalidConfiguration",
    "LogEntry",
    "ManualClock",
    "OrchestratorError",
    "OrchestratorRegistry",
    "OrchestratorSettings",
    "PersistenceGateway",
    "Phase",
    "PhaseStateMachine",
    "PhaseTransition",
    "Resolution",
    "SystemClock",
    "Ticker",
    "Trigger",
    "VoicePlayback",
    "create_timeline",
    "evaluate_resolution",
    "refresh_timeline",
    "safe_evaluate",
]
