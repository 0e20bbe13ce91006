"""Autonomous action engine.

At most one action per cooldown window. Each eligible cycle asks the
diplomatic generator for a character-driven development; when the
generator fails, times out or returns nothing usable, a system
``crisis_development`` is drawn from the phase's fixed fallback list, so
the campaign always keeps moving.
"""

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pydantic import ValidationError

from ..enums import ActionSource, ActionType, Collaborator, LogEntryType, PhaseId
from .collaborators import (
    CollaboratorFailure,
    DiplomaticDevelopment,
    DiplomaticGenerator,
    VoicePlayback,
    parse_development,
)
from .log import CampaignLog
from .models import SYSTEM_ACTOR, AutonomousAction, CampaignSession, Character, Phase
from .settings import DEFAULT_SETTINGS, OrchestratorSettings

logger = logging.getLogger(__name__)


FALLBACK_ACTIONS: dict[str, tuple[str, ...]] = {
    PhaseId.OPENING: (
        "A new diplomatic position paper is circulated",
        "Additional stakeholders express interest in the negotiations",
        "Economic data relevant to the crisis is released",
    ),
    PhaseId.NEGOTIATION: (
        "A potential breakthrough proposal emerges from backroom discussions",
        "External pressure mounts for a quick resolution",
        "New information changes the dynamics of the negotiation",
    ),
    PhaseId.RESOLUTION: (
        "Final objections must be addressed before agreement",
        "Last-minute concessions are proposed",
        "A deadline is set for final decision-making",
    ),
}

CHARACTER_IMPACT = ("Advances diplomatic discussion", "Creates new negotiation opportunities")
SYSTEM_IMPACT = ("Drives campaign progression", "Creates new opportunities for resolution")


@dataclass
class EngineOutcome:
    """What the engine did in one cycle, including absorbed failures."""
    source: ActionSource
    action: AutonomousAction | None = None
    failures: list[CollaboratorFailure] = field(default_factory=list)

    @property
    def acted(self) -> bool:
        return self.action is not None


def _always() -> bool:
    return True


class AutonomousActionEngine:
    """Decides, produces and records autonomous actions for one campaign."""

    def __init__(
        self,
        generator: DiplomaticGenerator | None = None,
        voice: VoicePlayback | None = None,
        settings: OrchestratorSettings = DEFAULT_SETTINGS,
        rng: random.Random | None = None,
    ):
        self.generator = generator
        self.voice = voice
        self.settings = settings
        self.rng = rng or random.Random()
        self.history: list[AutonomousAction] = []
        self.last_action_time: datetime | None = None

    @property
    def cooldown(self) -> timedelta:
        return timedelta(seconds=self.settings.action_cooldown_seconds)

    def start(self, now: datetime) -> None:
        """Begin the first cooldown window at campaign start."""
        self.last_action_time = now

    def cooldown_remaining(self, now: datetime) -> timedelta:
        if self.last_action_time is None:
            return timedelta(0)
        return max(timedelta(0), self.cooldown - (now - self.last_action_time))

    def is_ready(self, now: datetime) -> bool:
        return self.cooldown_remaining(now) == timedelta(0)

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def build_prompt(self, phase: Phase, time_remaining: float) -> str:
        recent = self.history[-self.settings.recent_action_window:] if self.settings.recent_action_window else []
        recent_text = "; ".join(a.description for a in recent) or "None yet"
        return (
            f'The Model UN campaign is in the "{phase.name}" phase. Based on the current '
            "situation, one of the AI characters should take initiative to drive the "
            "campaign forward toward resolution.\n\n"
            f"Current Phase: {phase.name}\n"
            f"Phase Objectives: {', '.join(phase.objectives)}\n"
            f"Time Remaining: {time_remaining:.1f} minutes\n"
            f"Recent Actions: {recent_text}\n\n"
            "Generate a proactive diplomatic statement or proposal from one of the AI "
            "characters that will:\n"
            "1. Address the current phase objectives\n"
            "2. Move negotiations forward\n"
            "3. Create opportunities for player engagement\n"
            "4. Work toward eventual resolution\n\n"
            "The response should be realistic, diplomatic, and create meaningful choices "
            "for the player."
        )

    @staticmethod
    def build_crisis_prompt(crisis_description: str, time_remaining: float) -> str:
        return (
            f'The current crisis is: "{crisis_description}"\n\n'
            "Generate a brief crisis development that:\n"
            "1. Escalates the urgency or changes dynamics\n"
            "2. Creates new opportunities for resolution\n"
            "3. Maintains diplomatic realism\n"
            f"4. Is appropriate for the time remaining ({time_remaining:.1f} minutes)\n\n"
            "Provide a single paragraph update (2-3 sentences max)."
        )

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def maybe_act(
        self,
        session: CampaignSession,
        log: CampaignLog,
        phase: Phase | None,
        time_remaining: float,
        now: datetime,
        should_continue: Callable[[], bool] = _always,
    ) -> EngineOutcome:
        """Run one engine step.

        Args:
            should_continue: checked after the generator returns; if it
                reports False (the orchestrator was stopped meanwhile) the
                result is discarded and nothing is recorded.
        """
        if phase is None or not self.is_ready(now):
            return EngineOutcome(source=ActionSource.COOLDOWN)

        failures: list[CollaboratorFailure] = []
        development, failure = await self._request(self.build_prompt(phase, time_remaining), session, now)
        if failure:
            failures.append(failure)

        if not should_continue():
            logger.info("Orchestrator stopped during generator call; discarding result")
            return EngineOutcome(source=ActionSource.DISCARDED, failures=failures)

        action = self._character_action(development, session, now) if development else None
        source = ActionSource.GENERATOR
        if action is None:
            action = self.fallback_action(phase, now)
            source = ActionSource.FALLBACK
            logger.warning(f"Generator unavailable; using fallback action for phase '{phase.id}'")

        failures.extend(await self.execute(action, session, log, now))
        return EngineOutcome(source=source, action=action, failures=failures)

    async def execute(
        self, action: AutonomousAction, session: CampaignSession, log: CampaignLog, now: datetime
    ) -> list[CollaboratorFailure]:
        """Record ``action`` and voice it if a character took it."""
        logger.info(
            f"Executing autonomous action: type={action.type} executed_by={action.executed_by} "
            f"description={action.description[:80]!r}"
        )
        self.history.append(action)
        self.last_action_time = now
        log.append_action(action)

        failures = []
        if action.type == ActionType.CHARACTER_INITIATIVE:
            failure = await self._play_voice(action, session, now)
            if failure:
                failures.append(failure)
        return failures

    # ------------------------------------------------------------------
    # Action construction
    # ------------------------------------------------------------------

    def _character_action(
        self, development: DiplomaticDevelopment, session: CampaignSession, now: datetime
    ) -> AutonomousAction | None:
        response = development.first_usable_response()
        if response is None:
            return None
        character: Character = (
            session.find_character(response.character.id) or response.character.to_character()
        )
        return AutonomousAction(
            type=ActionType.CHARACTER_INITIATIVE,
            executed_by=character.id,
            description=response.content.strip(),
            impact=CHARACTER_IMPACT,
            timestamp=now,
            character=character,
        )

    def fallback_action(self, phase: Phase, now: datetime) -> AutonomousAction:
        """Uniformly pick a system development for ``phase``."""
        choices = FALLBACK_ACTIONS.get(phase.id, FALLBACK_ACTIONS[PhaseId.NEGOTIATION])
        return AutonomousAction(
            type=ActionType.CRISIS_DEVELOPMENT,
            executed_by=SYSTEM_ACTOR,
            description=self.rng.choice(choices),
            impact=SYSTEM_IMPACT,
            timestamp=now,
        )

    # ------------------------------------------------------------------
    # Collaborator calls
    # ------------------------------------------------------------------

    async def _request(
        self, prompt: str, session: CampaignSession, now: datetime
    ) -> tuple[DiplomaticDevelopment | None, CollaboratorFailure | None]:
        if self.generator is None:
            return None, None
        try:
            raw = await asyncio.wait_for(
                self.generator.generate(prompt, session),
                timeout=self.settings.generator_timeout_seconds,
            )
            return parse_development(raw), None
        except asyncio.TimeoutError as e:
            logger.warning(
                f"Generator call timed out after {self.settings.generator_timeout_seconds}s"
            )
            return None, CollaboratorFailure.from_exception(
                Collaborator.GENERATOR, "generate", e, now, message="timed out"
            )
        except ValidationError as e:
            logger.warning(f"Generator returned malformed development: {e}")
            return None, CollaboratorFailure.from_exception(Collaborator.GENERATOR, "generate", e, now)
        except Exception as e:
            logger.error(f"Error determining autonomous action: {e}")
            return None, CollaboratorFailure.from_exception(Collaborator.GENERATOR, "generate", e, now)

    async def _play_voice(
        self, action: AutonomousAction, session: CampaignSession, now: datetime
    ) -> CollaboratorFailure | None:
        if self.voice is None:
            return None
        character = action.character
        voice_id = (character.voice_id if character else None) or action.executed_by
        try:
            await asyncio.wait_for(
                self.voice.speak(action.description, voice_id, session.voice_settings),
                timeout=self.settings.voice_timeout_seconds,
            )
        except Exception as e:
            logger.warning(f"Voice playback failed for autonomous action: {e}")
            return CollaboratorFailure.from_exception(Collaborator.VOICE, "speak", e, now)
        return None

    async def maybe_generate_crisis_update(
        self,
        session: CampaignSession,
        log: CampaignLog,
        time_remaining: float,
        now: datetime,
        should_continue: Callable[[], bool] = _always,
    ) -> tuple[str | None, list[CollaboratorFailure]]:
        """Refresh the crisis when nothing has happened for a while.

        Fires only when the session has a current crisis and the last
        action is at least ``crisis_idle_seconds`` old.
        """
        crisis = session.current_crisis
        if crisis is None or self.last_action_time is None:
            return None, []
        idle = now - self.last_action_time
        if idle < timedelta(seconds=self.settings.crisis_idle_seconds):
            return None, []

        prompt = self.build_crisis_prompt(crisis.description, time_remaining)
        development, failure = await self._request(prompt, session, now)
        failures = [failure] if failure else []
        if not should_continue():
            return None, failures

        update = (development.crisis_update or "").strip() if development else ""
        if not update:
            if failure is None and self.generator is not None:
                logger.debug("Generator returned no crisis update")
            return None, failures

        crisis.description = update
        log.append("CRISIS UPDATE", update, LogEntryType.CRISIS_DEVELOPMENT, now)
        logger.info(f"Crisis '{crisis.title}' updated after {idle.total_seconds():.0f}s of inactivity")
        return update, failures
