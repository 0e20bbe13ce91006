"""Timeline construction and refresh.

A campaign is always three phases (opening, negotiation, resolution)
carved out of the total duration by the proportional splits in
``OrchestratorSettings``. Every phase gets at least
``phase_floor_minutes`` and its maximum is never below its minimum.
"""

import logging
import math
from datetime import datetime, timedelta

from ..enums import PhaseId, TriggerType
from .errors import InvalidConfiguration
from .models import CampaignTimeline, Phase, Trigger
from .settings import DEFAULT_SETTINGS, OrchestratorSettings

logger = logging.getLogger(__name__)


# Static description of each phase; durations are filled in per campaign.
PHASE_BLUEPRINTS: list[dict] = [
    {
        "id": PhaseId.OPENING,
        "name": "Opening Statements",
        "description": "Initial presentations and position establishment",
        "objectives": [
            "Establish character positions",
            "Present initial proposals",
            "Identify key stakeholders and conflicts",
        ],
        "triggers": [
            Trigger(TriggerType.TIME, "phase_duration_exceeded", "force_transition_to_negotiation"),
        ],
    },
    {
        "id": PhaseId.NEGOTIATION,
        "name": "Active Negotiation",
        "description": "Core diplomatic negotiations and deal-making",
        "objectives": [
            "Facilitate bilateral and multilateral discussions",
            "Develop compromise proposals",
            "Address crisis developments",
            "Build coalitions and alliances",
        ],
        "triggers": [
            Trigger(TriggerType.CRISIS_ESCALATION, "urgency_critical", "escalate_negotiations"),
            Trigger(TriggerType.RESOLUTION_REACHED, "consensus_threshold_met", "transition_to_resolution"),
        ],
    },
    {
        "id": PhaseId.RESOLUTION,
        "name": "Resolution and Conclusion",
        "description": "Final agreement formulation and campaign conclusion",
        "objectives": [
            "Finalize agreements",
            "Address remaining objections",
            "Conclude with formal resolution or documented outcomes",
        ],
        "triggers": [
            Trigger(TriggerType.TIME, "campaign_time_expired", "force_conclusion"),
        ],
    },
]


def _phase_bounds(
    total: float, phase_id: PhaseId, settings: OrchestratorSettings
) -> tuple[int, int]:
    split = settings.phase_splits[phase_id]
    min_duration = max(settings.phase_floor_minutes, math.floor(total * split.min_fraction))
    max_duration = max(min_duration, math.floor(total * split.max_fraction))
    return min_duration, max_duration


def create_timeline(
    total_duration_minutes: float,
    start_time: datetime,
    settings: OrchestratorSettings = DEFAULT_SETTINGS,
) -> CampaignTimeline:
    """Build the three-phase timeline for a campaign starting at ``start_time``.

    Raises:
        InvalidConfiguration: total duration is not a positive finite number.
    """
    if isinstance(total_duration_minutes, bool) or not isinstance(total_duration_minutes, (int, float)):
        raise InvalidConfiguration(
            f"Campaign duration must be a number of minutes, got {total_duration_minutes!r}"
        )
    if not math.isfinite(total_duration_minutes) or total_duration_minutes <= 0:
        raise InvalidConfiguration(
            f"Campaign duration must be positive, got {total_duration_minutes}"
        )

    phases = []
    for blueprint in PHASE_BLUEPRINTS:
        min_duration, max_duration = _phase_bounds(total_duration_minutes, blueprint["id"], settings)
        phases.append(Phase(
            id=str(blueprint["id"]),
            name=blueprint["name"],
            description=blueprint["description"],
            min_duration=min_duration,
            max_duration=max_duration,
            objectives=list(blueprint["objectives"]),
            triggers=list(blueprint["triggers"]),
        ))

    floor_total = sum(p.min_duration for p in phases)
    if floor_total > total_duration_minutes:
        logger.warning(
            f"Phase minimums ({floor_total} min) exceed campaign duration "
            f"({total_duration_minutes} min); the deadline will cut the campaign short"
        )

    phases[0].start_time = start_time
    return CampaignTimeline(
        total_duration=total_duration_minutes,
        phases=phases,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=total_duration_minutes),
        current_phase=0,
        time_remaining=float(total_duration_minutes),
        progress_percentage=0.0,
    )


def elapsed_minutes(since: datetime, now: datetime) -> float:
    return max(0.0, (now - since).total_seconds() / 60.0)


def refresh_timeline(timeline: CampaignTimeline, now: datetime) -> CampaignTimeline:
    """Recompute ``time_remaining`` and ``progress_percentage`` in place.

    Never moves progress backwards or remaining time forwards, even if
    ``now`` is earlier than the previous refresh.
    """
    elapsed = elapsed_minutes(timeline.start_time, now)
    remaining = max(0.0, timeline.total_duration - elapsed)
    progress = min(100.0, (elapsed / timeline.total_duration) * 100.0)

    timeline.time_remaining = min(timeline.time_remaining, remaining)
    timeline.progress_percentage = max(timeline.progress_percentage, progress)
    return timeline


def current_phase(timeline: CampaignTimeline) -> Phase | None:
    if 0 <= timeline.current_phase < len(timeline.phases):
        return timeline.phases[timeline.current_phase]
    return None
