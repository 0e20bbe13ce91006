"""Tests for the orchestrator's StrEnum types.

The values are the literals the UI and the Delegate backend exchange, so
the member sets are pinned.
"""

import json

from delegate.enums import (
    ActionType,
    Collaborator,
    LogEntryType,
    PhaseId,
    ResolutionType,
    TriggerType,
)


class TestPhaseId:
    def test_members_in_order(self):
        assert [e.value for e in PhaseId] == ["opening", "negotiation", "resolution"]


class TestActionType:
    def test_members(self):
        assert {e.value for e in ActionType} == {
            "character_initiative", "crisis_development", "phase_transition", "resolution_proposal",
        }

    def test_equality_with_raw_string(self):
        assert ActionType.PHASE_TRANSITION == "phase_transition"


class TestResolutionType:
    def test_members(self):
        assert {e.value for e in ResolutionType} == {
            "diplomatic_success", "partial_resolution", "stalemate", "crisis_escalation", "time_expired",
        }


class TestLogEntryType:
    def test_members(self):
        assert {e.value for e in LogEntryType} == {
            "system_message", "autonomous_action", "crisis_development",
            "phase_transition", "campaign_conclusion",
        }

    def test_json_serializable(self):
        assert json.dumps({"type": LogEntryType.CAMPAIGN_CONCLUSION}) == '{"type": "campaign_conclusion"}'


class TestTriggerType:
    def test_members(self):
        assert {e.value for e in TriggerType} == {
            "time", "player_action", "crisis_escalation", "resolution_reached",
        }


class TestCollaborator:
    def test_str(self):
        assert f"{Collaborator.PERSISTENCE}" == "persistence"
