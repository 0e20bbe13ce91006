"""
Shared test fixtures for the Delegate orchestrator test suite.

Provides:
- ManualClock: virtual time, so a 30-minute campaign runs instantly
- Collaborator fakes: scripted/failing generator, recording voice and
  persistence gateways
- A sample campaign session with a full roster and a crisis
"""

import asyncio
import os
import random
from collections import deque
from typing import Any

import pytest

# Set test environment BEFORE any delegate imports
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PERSISTENCE_BACKEND", "none")

from delegate.campaign import (
    CampaignOrchestrator,
    CampaignSession,
    Character,
    Crisis,
    ManualClock,
    OrchestratorSettings,
)

# ---------------------------------------------------------------------------
# Generator fakes
# ---------------------------------------------------------------------------


def development(character_id: str = "ai-0", content: str = "We propose a ceasefire.", **extra) -> dict:
    """A generator payload in the backend's camelCase shape."""
    return {
        "characterResponses": [
            {"character": {"id": character_id, "name": character_id.upper()}, "content": content}
        ],
        **extra,
    }


class ScriptedGenerator:
    """Generator that returns queued results in order.

    Queued exceptions are raised; once the queue is empty ``default`` is
    returned.
    """

    def __init__(self, *results: Any, default: Any = None):
        self._queue: deque[Any] = deque(results)
        self.default = default
        self.prompts: list[str] = []

    def queue(self, result: Any) -> None:
        self._queue.append(result)

    async def generate(self, prompt: str, session: CampaignSession):
        self.prompts.append(prompt)
        result = self._queue.popleft() if self._queue else self.default
        if isinstance(result, BaseException):
            raise result
        return result


class FailingGenerator:
    """Generator whose every call raises."""

    def __init__(self):
        self.calls = 0

    async def generate(self, prompt: str, session: CampaignSession):
        self.calls += 1
        raise ConnectionError("generator offline")


class BlockingGenerator:
    """Generator that waits until released (or forever)."""

    def __init__(self, result: Any = None):
        self.result = result
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, prompt: str, session: CampaignSession):
        self.started.set()
        await self.release.wait()
        return self.result


# ---------------------------------------------------------------------------
# Voice and persistence fakes
# ---------------------------------------------------------------------------


class RecordingVoice:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def speak(self, text: str, voice_id: str, voice_settings: dict[str, Any]) -> None:
        self.calls.append((text, voice_id))
        if self.fail:
            raise RuntimeError("speaker unplugged")


class RecordingPersistence:
    """Keeps a snapshot of every saved session, in save order."""

    def __init__(self, fail: bool = False, result: bool = True):
        self.fail = fail
        self.result = result
        self.saved: list[CampaignSession] = []

    async def save(self, session: CampaignSession) -> bool:
        if self.fail:
            raise RuntimeError("database unavailable")
        self.saved.append(session)
        return self.result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def settings():
    return OrchestratorSettings()


@pytest.fixture
def sample_session():
    return CampaignSession(
        id="session-1",
        title="Arctic Shipping Lanes Summit",
        theme="climate",
        scenario={"difficulty": "medium", "characters": [{"name": "Amb. Sato"}]},
        player_character=Character(
            id="player", name="Alex Morgan", title="Ambassador", country="Canada", voice_id="player"
        ),
        ai_characters=[
            Character(id="ai-0", name="Amb. Sato", country="Japan", voice_id="voice-sato"),
            Character(id="ai-1", name="Min. Okafor", title="Minister", country="Nigeria"),
        ],
        current_crisis=Crisis(
            id="crisis-1",
            title="Blocked Strait",
            description="A grounded tanker blocks the only ice-free shipping lane.",
        ),
        voice_settings={"enabled": True},
    )


@pytest.fixture
def make_orchestrator(clock, settings):
    """Factory for orchestrators on the shared manual clock."""

    def _make(generator=None, voice=None, persistence=None, **kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("rng", random.Random(7))
        return CampaignOrchestrator(generator, voice, persistence, **kwargs)

    return _make
