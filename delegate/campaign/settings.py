"""Tunable constants for campaign orchestration.

Every threshold and weight used by the timeline split, the phase
transition heuristic and the resolution score lives here, with the
defaults the Delegate UI was built against. Change them per campaign by
constructing a modified ``OrchestratorSettings``; the formulas in
``timeline``, ``phases`` and ``resolution`` read nothing else.
"""

from dataclasses import dataclass, field

from ..config import Config
from ..enums import PhaseId


@dataclass(frozen=True)
class PhaseSplit:
    """Proportional share of total campaign time for one phase."""

    min_fraction: float
    max_fraction: float


DEFAULT_PHASE_SPLITS: dict[PhaseId, PhaseSplit] = {
    PhaseId.OPENING: PhaseSplit(0.15, 0.25),
    PhaseId.NEGOTIATION: PhaseSplit(0.40, 0.60),
    PhaseId.RESOLUTION: PhaseSplit(0.10, 0.20),
}


@dataclass(frozen=True)
class OrchestratorSettings:
    """Named configuration for one orchestrator instance.

    Cadence
        tick_interval_seconds: period of the orchestration cycle.
        action_cooldown_seconds: minimum spacing between autonomous actions.
        crisis_idle_seconds: inactivity after which a crisis update is requested.
        generator_timeout_seconds: upper bound on one generator call.
        voice_timeout_seconds: upper bound on one voice playback call.

    Resolution score
        score = base_score
                + (phase_index / total_phases) * phase_weight
                + min(action_count * action_weight, action_score_cap)

    Early end
        allowed when score >= resolution_threshold, phase index >=
        early_end_min_phase_index and timeline progress >=
        early_end_min_progress.

    Phase objectives
        objective = min(1, actions_in_phase * objective_action_weight
                           + phase_time_fraction * objective_time_weight)
        a phase past its minimum duration advances when objective >=
        objective_threshold or it has run for its maximum duration.
    """

    tick_interval_seconds: float = 15.0
    action_cooldown_seconds: float = 30.0
    crisis_idle_seconds: float = 120.0
    generator_timeout_seconds: float = 20.0
    voice_timeout_seconds: float = 15.0

    base_score: float = 0.5
    phase_weight: float = 0.3
    action_weight: float = 0.05
    action_score_cap: float = 0.2

    resolution_threshold: float = 0.8
    early_end_min_phase_index: int = 1
    early_end_min_progress: float = 60.0

    success_threshold: float = 0.9
    partial_threshold: float = 0.7
    stalemate_threshold: float = 0.4

    objective_threshold: float = 0.7
    objective_action_weight: float = 0.2
    objective_time_weight: float = 0.8

    phase_floor_minutes: int = 2
    phase_splits: dict[PhaseId, PhaseSplit] = field(
        default_factory=lambda: dict(DEFAULT_PHASE_SPLITS)
    )

    recent_action_window: int = 3
    log_context_window: int = 10

    @classmethod
    def from_config(cls, cfg: type[Config] = Config) -> "OrchestratorSettings":
        """Build settings with cadence overrides from the environment."""
        return cls(
            tick_interval_seconds=cfg.ORCHESTRATOR_TICK_SECONDS,
            action_cooldown_seconds=cfg.ACTION_COOLDOWN_SECONDS,
            generator_timeout_seconds=cfg.GENERATOR_TIMEOUT_SECONDS,
        )


DEFAULT_SETTINGS = OrchestratorSettings()
