"""Tests for completing incomplete session documents."""

import random

from delegate.campaign import CampaignSession
from delegate.campaign.fallbacks import (
    DEFAULT_CRISIS_TEXT,
    DELEGATE_COLORS,
    complete_session,
    fallback_ai_characters,
    fallback_crisis,
    fallback_player_character,
)


class TestFallbackRoster:
    def test_player_is_seeded(self):
        first = fallback_player_character(random.Random(5))
        second = fallback_player_character(random.Random(5))
        assert first == second
        assert first.id == "player"
        assert first.name == f"Player {first.title}"

    def test_ai_characters_from_scenario(self):
        characters = fallback_ai_characters({"characters": [{"name": "Amb. Ruiz", "country": "Mexico"}, "Observer"]})
        assert [c.id for c in characters] == ["ai-0", "ai-1"]
        assert characters[0].country == "Mexico"
        assert characters[1].name == "Observer"
        assert characters[1].color == DELEGATE_COLORS[1]

    def test_no_scenario_characters(self):
        assert fallback_ai_characters({}) == []


class TestFallbackCrisis:
    def test_uses_initial_text(self):
        assert fallback_crisis("Famine looms.").description == "Famine looms."

    def test_default_text(self):
        assert fallback_crisis().description == DEFAULT_CRISIS_TEXT


class TestCompleteSession:
    def test_fills_what_is_missing(self):
        session = CampaignSession(id="s", scenario={"scenarios": ["Border clash at dawn."]})
        filled = complete_session(session, random.Random(1))
        assert filled == ["player_character", "current_crisis"]
        assert session.current_crisis.description == "Border clash at dawn."

    def test_complete_session_is_untouched(self, sample_session):
        crisis = sample_session.current_crisis
        assert complete_session(sample_session) == []
        assert sample_session.current_crisis is crisis
