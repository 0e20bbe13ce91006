"""Phase state machine.

One state per phase index plus a terminal ``Concluded`` state. A phase
that has run for at least its minimum duration advances once its
objective score reaches the threshold or it hits its maximum duration.
Advancing out of the last phase means the campaign must conclude; the
orchestrator then scores it and calls ``conclude``.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from ..enums import ActionType
from .models import SYSTEM_ACTOR, AutonomousAction, CampaignTimeline, Phase, Resolution
from .settings import DEFAULT_SETTINGS, OrchestratorSettings
from .timeline import current_phase, elapsed_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseTransition:
    """Result of a transition check that moved the machine."""
    from_phase: Phase
    to_phase: Phase | None          # None when the last phase just finished
    announcement: AutonomousAction | None
    objective_score: float

    @property
    def requires_conclusion(self) -> bool:
        return self.to_phase is None


class PhaseStateMachine:
    """Tracks and advances the current phase of one campaign timeline."""

    def __init__(self, timeline: CampaignTimeline, settings: OrchestratorSettings = DEFAULT_SETTINGS):
        self.timeline = timeline
        self.settings = settings
        self._resolution: Resolution | None = None
        self._concluded_at: datetime | None = None

    # -- state ------------------------------------------------------------

    @property
    def current(self) -> Phase | None:
        if self.is_concluded:
            return None
        return current_phase(self.timeline)

    @property
    def is_concluded(self) -> bool:
        return self._resolution is not None

    @property
    def resolution(self) -> Resolution | None:
        return self._resolution

    @property
    def concluded_at(self) -> datetime | None:
        return self._concluded_at

    # -- heuristics -------------------------------------------------------

    def objective_score(
        self, phase: Phase, actions: Sequence[AutonomousAction], now: datetime
    ) -> float:
        """How far the phase's objectives are judged to be met (0-1).

        Either sustained autonomous activity or elapsed time pressure can
        satisfy a phase:
        ``min(1, actions_since_start * 0.2 + (elapsed / max_duration) * 0.8)``
        """
        if phase.start_time is None:
            return 0.0
        actions_in_phase = sum(1 for a in actions if a.timestamp >= phase.start_time)
        if phase.max_duration > 0:
            time_fraction = elapsed_minutes(phase.start_time, now) / phase.max_duration
        else:
            time_fraction = 1.0
        score = (
            actions_in_phase * self.settings.objective_action_weight
            + time_fraction * self.settings.objective_time_weight
        )
        return round(min(1.0, score), 6)

    # -- transitions ------------------------------------------------------

    def check_transition(
        self, actions: Sequence[AutonomousAction], now: datetime
    ) -> PhaseTransition | None:
        """Advance the timeline if the current phase's exit conditions hold."""
        phase = self.current
        if phase is None or phase.completed:
            return None

        phase_elapsed = elapsed_minutes(phase.start_time, now) if phase.start_time else 0.0
        if phase_elapsed < phase.min_duration:
            return None

        score = self.objective_score(phase, actions, now)
        if score < self.settings.objective_threshold and phase_elapsed < phase.max_duration:
            return None

        return self._advance(phase, score, now)

    def _advance(self, phase: Phase, score: float, now: datetime) -> PhaseTransition:
        phase.completed = True
        phase.end_time = now

        if self.timeline.current_phase >= len(self.timeline.phases) - 1:
            logger.info(f"Final phase '{phase.name}' complete; campaign must conclude")
            return PhaseTransition(from_phase=phase, to_phase=None, announcement=None, objective_score=score)

        self.timeline.current_phase += 1
        next_phase = self.timeline.phases[self.timeline.current_phase]
        next_phase.start_time = now

        logger.info(
            f"Transitioning to next campaign phase: {phase.name} -> {next_phase.name} "
            f"(objectives {score:.2f})"
        )
        announcement = AutonomousAction(
            type=ActionType.PHASE_TRANSITION,
            executed_by=SYSTEM_ACTOR,
            description=f"The campaign now enters the {next_phase.name} phase. {next_phase.description}",
            impact=("Phase transition", "New objectives available"),
            timestamp=now,
        )
        return PhaseTransition(
            from_phase=phase, to_phase=next_phase, announcement=announcement, objective_score=score
        )

    def conclude(self, resolution: Resolution, now: datetime) -> bool:
        """Enter the terminal state. Returns False if already concluded."""
        if self.is_concluded:
            return False
        phase = current_phase(self.timeline)
        if phase is not None and phase.end_time is None:
            phase.end_time = now
        self._resolution = resolution
        self._concluded_at = now
        return True
