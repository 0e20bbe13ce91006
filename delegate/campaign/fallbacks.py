"""Stand-in delegates and crisis for sessions that arrive incomplete.

Used when the backend could not generate a roster or a crisis before the
campaign starts; the orchestrator itself works without either.
"""

import random
from typing import Any

from .models import CampaignSession, Character, Crisis

DELEGATE_COLORS = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7", "#DDA0DD",
    "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9", "#F8C471", "#82E0AA",
)

PLAYER_COUNTRIES = ("United States", "United Kingdom", "France", "Germany", "Canada", "Australia")
PLAYER_TITLES = ("Ambassador", "Minister", "Secretary", "Representative", "Delegate")

DEFAULT_CRISIS_TEXT = "A diplomatic crisis requires immediate attention and careful negotiation."


def fallback_player_character(rng: random.Random | None = None) -> Character:
    rng = rng or random.Random()
    title = rng.choice(PLAYER_TITLES)
    return Character(
        id="player",
        name=f"Player {title}",
        title=title,
        country=rng.choice(PLAYER_COUNTRIES),
        faction="Independent",
        voice_id="player",
        color="#60A5FA",
        personality="diplomatic",
    )


def fallback_ai_characters(scenario: dict[str, Any]) -> list[Character]:
    """One delegate per scenario character entry, with defaults filled in."""
    characters = []
    for index, entry in enumerate(scenario.get("characters") or []):
        entry = entry if isinstance(entry, dict) else {"name": str(entry)}
        characters.append(Character(
            id=f"ai-{index}",
            name=entry.get("name") or f"Delegate {index + 1}",
            title=entry.get("title") or "Ambassador",
            country=entry.get("country") or "Unknown",
            faction=entry.get("faction") or "Independent",
            voice_id=f"voice-{index}",
            color=DELEGATE_COLORS[index % len(DELEGATE_COLORS)],
            personality=entry.get("personality") or "diplomatic",
        ))
    return characters


def fallback_crisis(initial_crisis: str | None = None) -> Crisis:
    return Crisis(
        id="crisis-fallback",
        title="Urgent Diplomatic Crisis",
        description=initial_crisis or DEFAULT_CRISIS_TEXT,
        urgency="high",
        category="political",
        status="active",
    )


def complete_session(session: CampaignSession, rng: random.Random | None = None) -> list[str]:
    """Fill in any missing player, roster or crisis. Returns what was filled."""
    filled = []
    if session.player_character is None:
        session.player_character = fallback_player_character(rng)
        filled.append("player_character")
    if not session.ai_characters:
        session.ai_characters = fallback_ai_characters(session.scenario)
        if session.ai_characters:
            filled.append("ai_characters")
    if session.current_crisis is None:
        scenarios = session.scenario.get("scenarios") or []
        initial = scenarios[0] if scenarios and isinstance(scenarios[0], str) else None
        session.current_crisis = fallback_crisis(initial)
        filled.append("current_crisis")
    return filled
