"""
Canonical string enumerations for the campaign orchestrator.

StrEnum values serialize as plain strings, so they're drop-in
replacements for the raw literals the UI and the Delegate backend
exchange in JSON payloads.
"""

from enum import StrEnum


# ── Timeline ───────────────────────────────────────────────────────────

class PhaseId(StrEnum):
    """The three fixed campaign phases, in order."""
    OPENING = "opening"
    NEGOTIATION = "negotiation"
    RESOLUTION = "resolution"


class TriggerType(StrEnum):
    """Why a phase may end early or be forced to end."""
    TIME = "time"
    PLAYER_ACTION = "player_action"
    CRISIS_ESCALATION = "crisis_escalation"
    RESOLUTION_REACHED = "resolution_reached"


# ── Autonomous actions ─────────────────────────────────────────────────

class ActionType(StrEnum):
    """Kinds of events the orchestrator injects without player input."""
    CHARACTER_INITIATIVE = "character_initiative"
    CRISIS_DEVELOPMENT = "crisis_development"
    PHASE_TRANSITION = "phase_transition"
    RESOLUTION_PROPOSAL = "resolution_proposal"


class ActionSource(StrEnum):
    """Where the engine's outcome for a cycle came from."""
    GENERATOR = "generator"
    FALLBACK = "fallback"
    COOLDOWN = "cooldown"
    DISCARDED = "discarded"


# ── Resolution ─────────────────────────────────────────────────────────

class ResolutionType(StrEnum):
    """End-state classification of a campaign."""
    DIPLOMATIC_SUCCESS = "diplomatic_success"
    PARTIAL_RESOLUTION = "partial_resolution"
    STALEMATE = "stalemate"
    CRISIS_ESCALATION = "crisis_escalation"
    TIME_EXPIRED = "time_expired"


# ── Campaign log ───────────────────────────────────────────────────────

class LogEntryType(StrEnum):
    """Type tag of a campaign log record (read by the UI)."""
    SYSTEM_MESSAGE = "system_message"
    AUTONOMOUS_ACTION = "autonomous_action"
    CRISIS_DEVELOPMENT = "crisis_development"
    PHASE_TRANSITION = "phase_transition"
    CAMPAIGN_CONCLUSION = "campaign_conclusion"


# ── Collaborators ──────────────────────────────────────────────────────

class Collaborator(StrEnum):
    """External components the orchestrator calls but does not implement."""
    GENERATOR = "generator"
    VOICE = "voice"
    PERSISTENCE = "persistence"
    EVALUATOR = "evaluator"
