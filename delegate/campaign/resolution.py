"""Resolution scoring.

``evaluate_resolution`` is pure: the same inputs always give the same
``Resolution`` and nothing is mutated, so the loop may call it every
cycle. ``safe_evaluate`` is what the loop actually calls; a scoring bug
degrades to a neutral stalemate instead of stopping the campaign.
"""

import logging

from ..enums import ResolutionType
from .models import Resolution
from .settings import DEFAULT_SETTINGS, OrchestratorSettings

logger = logging.getLogger(__name__)


def resolution_score(
    current_phase_index: int,
    total_phases: int,
    autonomous_action_count: int,
    settings: OrchestratorSettings = DEFAULT_SETTINGS,
) -> float:
    if total_phases <= 0:
        raise ValueError("total_phases must be positive")
    phase_component = (current_phase_index / total_phases) * settings.phase_weight
    action_component = min(autonomous_action_count * settings.action_weight, settings.action_score_cap)
    # Rounded so threshold comparisons (0.8, 0.9) don't hinge on float noise.
    return round(min(1.0, settings.base_score + phase_component + action_component), 6)


def classify(
    score: float,
    time_remaining: float | None = None,
    settings: OrchestratorSettings = DEFAULT_SETTINGS,
) -> ResolutionType:
    if score >= settings.success_threshold:
        return ResolutionType.DIPLOMATIC_SUCCESS
    if score >= settings.partial_threshold:
        return ResolutionType.PARTIAL_RESOLUTION
    if score >= settings.stalemate_threshold:
        return ResolutionType.STALEMATE
    if time_remaining == 0:
        return ResolutionType.TIME_EXPIRED
    return ResolutionType.CRISIS_ESCALATION


def describe(score: float) -> str:
    if score >= 0.9:
        return "Comprehensive agreement reached through skilled diplomacy"
    if score >= 0.7:
        return "Significant progress made with partial resolution achieved"
    if score >= 0.4:
        return "Negotiations reached a stalemate with limited progress"
    return "Crisis escalated with insufficient diplomatic progress"


def outcomes_for(score: float) -> tuple[str, ...]:
    if score >= 0.8:
        return ("International cooperation strengthened", "Lasting diplomatic framework established")
    if score >= 0.6:
        return ("Temporary agreements reached", "Foundation laid for future negotiations")
    if score >= 0.4:
        return ("Positions clarified but no agreement", "Need for continued diplomatic engagement identified")
    return ("Diplomatic tensions remain high", "Alternative resolution mechanisms may be needed")


def evaluate_resolution(
    timeline_progress_percentage: float,
    current_phase_index: int,
    total_phases: int,
    autonomous_action_count: int,
    time_remaining: float | None = None,
    settings: OrchestratorSettings = DEFAULT_SETTINGS,
) -> Resolution:
    """Score the campaign as it stands.

    Args:
        timeline_progress_percentage: 0-100, share of campaign time used.
        current_phase_index: zero-based index of the active phase.
        total_phases: number of phases in the timeline.
        autonomous_action_count: actions the engine has taken so far.
        time_remaining: minutes left; ``0`` turns a failing score into
            ``time_expired`` instead of ``crisis_escalation``.
    """
    score = resolution_score(current_phase_index, total_phases, autonomous_action_count, settings)
    can_end_early = (
        score >= settings.resolution_threshold
        and current_phase_index >= settings.early_end_min_phase_index
        and timeline_progress_percentage >= settings.early_end_min_progress
    )
    return Resolution(
        type=classify(score, time_remaining, settings),
        description=describe(score),
        player_score=score,
        relationship_changes={},
        outcomes=outcomes_for(score),
        can_end_early=can_end_early,
    )


def neutral_resolution(description: str = "Unable to evaluate campaign resolution") -> Resolution:
    return Resolution(
        type=ResolutionType.STALEMATE,
        description=description,
        player_score=0.5,
        relationship_changes={},
        outcomes=(),
        can_end_early=False,
    )


def safe_evaluate(*args, **kwargs) -> tuple[Resolution, Exception | None]:
    """``evaluate_resolution`` that never raises.

    Returns the resolution and the swallowed error, if any, so the caller
    can report degraded cycles.
    """
    try:
        return evaluate_resolution(*args, **kwargs), None
    except Exception as e:
        logger.error(f"Error evaluating resolution: {e}", exc_info=True)
        return neutral_resolution(), e


def time_expired_resolution(evaluated: Resolution) -> Resolution:
    """Resolution used when the deadline forces the campaign to end.

    Keeps the evaluated score and outcomes; the classification is always
    ``time_expired`` and early end no longer applies.
    """
    return Resolution(
        type=ResolutionType.TIME_EXPIRED,
        description="Campaign concluded due to time limit",
        player_score=evaluated.player_score,
        relationship_changes=dict(evaluated.relationship_changes),
        outcomes=("Time limit reached", "Session concluded", *evaluated.outcomes),
        can_end_early=False,
    )
