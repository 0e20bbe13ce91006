"""Campaign orchestrator: drives one timed Model UN session to a conclusion.

Each tick runs one cycle, strictly in this order:

    refresh timeline
    -> deadline reached?            conclude (time_expired), stop
    -> evaluate resolution
    -> can end early?               conclude, stop
    -> phase transition check       (leaving the last phase concludes)
    -> autonomous action engine
    -> crisis update after inactivity
    -> queue a save

Cycles are serialized by a lock, so the timeline and the engine's
cooldown are only ever mutated by one cycle at a time. Collaborator
failures never escape a cycle; they are logged and returned in the
``CycleReport``.
"""

import asyncio
import logging
import random
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..enums import ActionType, Collaborator, LogEntryType
from ..utils.tasks import safe_create_task
from .actions import AutonomousActionEngine, EngineOutcome
from .clock import Clock, SystemClock, Ticker
from .collaborators import (
    CollaboratorFailure,
    DiplomaticGenerator,
    PersistenceGateway,
    VoicePlayback,
)
from .errors import OrchestratorError
from .log import CampaignLog
from .models import (
    SYSTEM_ACTOR,
    AutonomousAction,
    CampaignSession,
    CampaignStatus,
    CampaignTimeline,
    Resolution,
)
from .persistence import PersistenceWriter
from .phases import PhaseStateMachine, PhaseTransition
from .resolution import safe_evaluate, time_expired_resolution
from .settings import OrchestratorSettings
from .timeline import create_timeline, current_phase, refresh_timeline

logger = logging.getLogger(__name__)

MAX_TRACKED_FAILURES = 200
# Finished campaigns kept for status lookups before eviction.
RETAIN_FINISHED = 20


@dataclass
class CycleReport:
    """Everything one orchestration cycle did."""
    started_at: datetime
    ran: bool = True
    resolution: Resolution | None = None
    concluded: bool = False
    transition: PhaseTransition | None = None
    engine: EngineOutcome | None = None
    crisis_update: str | None = None
    save_queued: bool = False
    failures: list[CollaboratorFailure] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.failures)


class CampaignOrchestrator:
    """Autonomous controller for a single campaign run.

    Construct one per campaign; instances share no state, so a process can
    run any number of campaigns side by side (see ``OrchestratorRegistry``).
    """

    def __init__(
        self,
        generator: DiplomaticGenerator | None = None,
        voice: VoicePlayback | None = None,
        persistence: PersistenceGateway | None = None,
        *,
        clock: Clock | None = None,
        settings: OrchestratorSettings | None = None,
        rng: random.Random | None = None,
    ):
        self.clock = clock or SystemClock()
        self.settings = settings or OrchestratorSettings()
        self.engine = AutonomousActionEngine(generator, voice, self.settings, rng)
        self.failures: deque[CollaboratorFailure] = deque(maxlen=MAX_TRACKED_FAILURES)
        self.writer = PersistenceWriter(persistence, self.clock.now, on_failure=self.failures.append)

        self.session: CampaignSession | None = None
        self.timeline: CampaignTimeline | None = None
        self.machine: PhaseStateMachine | None = None
        self.log: CampaignLog | None = None
        self.transitions: list[AutonomousAction] = []
        self.last_report: CycleReport | None = None

        self._active = False
        self._lock = asyncio.Lock()
        self._ticker: Ticker | None = None
        self._closer: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_concluded(self) -> bool:
        return self.machine is not None and self.machine.is_concluded

    @property
    def session_id(self) -> str | None:
        return self.session.id if self.session else None

    @property
    def autonomous_actions(self) -> list[AutonomousAction]:
        return self.engine.history

    async def initialize_campaign(
        self,
        session: CampaignSession,
        total_duration_minutes: float,
        *,
        start_clock: bool = True,
    ) -> None:
        """Build the timeline, attach the session and start ticking.

        Raises:
            InvalidConfiguration: the duration cannot produce a timeline.
            OrchestratorError: this instance already ran a campaign.
        """
        if self.timeline is not None:
            raise OrchestratorError("Orchestrator already initialized; create a new one per campaign")

        logger.info(
            f"Initializing AI campaign orchestration: session={session.id} "
            f"duration={total_duration_minutes}min"
        )
        now = self.clock.now()
        self.timeline = create_timeline(total_duration_minutes, now, self.settings)
        self.machine = PhaseStateMachine(self.timeline, self.settings)
        self.session = session
        self.log = CampaignLog(session)
        self.engine.start(now)

        if len(self.log) == 0:
            self.log.append(
                "CAMPAIGN INITIATED",
                self._welcome_text(session),
                LogEntryType.SYSTEM_MESSAGE,
                now,
            )

        self._active = True
        if start_clock:
            self._ticker = Ticker(
                self.settings.tick_interval_seconds,
                self.run_cycle,
                name=f"campaign-{session.id}",
            )
            self._ticker.start()
        logger.info("Campaign orchestration initialized successfully")

    def stop(self) -> None:
        """Stop orchestrating. Idempotent and safe before initialization.

        A cycle already in progress finishes, but any generator result it
        is still waiting for is discarded; no further cycle starts.
        """
        was_active = self._active
        self._active = False
        if self._ticker is not None:
            self._ticker.stop()
        if was_active:
            logger.info(f"Campaign orchestration stopped: session={self.session_id}")

    async def shutdown(self) -> None:
        """Stop, let the ticker exit and drain pending saves."""
        self.stop()
        if self._ticker is not None:
            await self._ticker.wait_stopped()
        await self.writer.close()
        await self.wait_closed()

    async def flush(self) -> None:
        """Wait for every queued save to reach the persistence gateway."""
        await self.writer.flush()

    async def wait_closed(self) -> None:
        """Wait until a concluded campaign has written its final save."""
        if self._closer is not None:
            await self._closer

    # ------------------------------------------------------------------
    # The cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> CycleReport:
        """Execute one orchestration cycle (see module docstring)."""
        async with self._lock:
            now = self.clock.now()
            report = CycleReport(started_at=now)
            if not self._active or self.timeline is None:
                report.ran = False
                return report
            try:
                await self._cycle(now, report)
            finally:
                self.failures.extend(report.failures)
                self.last_report = report
            return report

    async def _cycle(self, now: datetime, report: CycleReport) -> None:
        timeline = self.timeline
        refresh_timeline(timeline, now)

        if timeline.time_remaining <= 0:
            evaluated = self._evaluate(now, report)
            await self._conclude(time_expired_resolution(evaluated), now, report)
            return

        resolution = self._evaluate(now, report)
        report.resolution = resolution
        if resolution.can_end_early and resolution.player_score >= self.settings.resolution_threshold:
            self._propose_resolution(resolution, now)
            await self._conclude(resolution, now, report)
            return

        transition = self.machine.check_transition(self.engine.history, now)
        if transition is not None:
            report.transition = transition
            if transition.requires_conclusion:
                await self._conclude(self._evaluate(now, report), now, report)
                return
            self.transitions.append(transition.announcement)
            self.log.append_action(transition.announcement)

        report.engine = await self.engine.maybe_act(
            self.session,
            self.log,
            self.machine.current,
            timeline.time_remaining,
            now,
            should_continue=lambda: self._active,
        )
        report.failures.extend(report.engine.failures)
        if not self._active:
            return

        report.crisis_update, crisis_failures = await self.engine.maybe_generate_crisis_update(
            self.session, self.log, timeline.time_remaining, now, should_continue=lambda: self._active
        )
        report.failures.extend(crisis_failures)
        if not self._active:
            return

        report.save_queued = self.writer.submit(self.session)

    def _evaluate(self, now: datetime, report: CycleReport) -> Resolution:
        timeline = self.timeline
        resolution, error = safe_evaluate(
            timeline.progress_percentage,
            timeline.current_phase,
            len(timeline.phases),
            len(self.engine.history),
            timeline.time_remaining,
            self.settings,
        )
        if error is not None:
            report.failures.append(
                CollaboratorFailure.from_exception(Collaborator.EVALUATOR, "evaluate", error, now)
            )
        return resolution

    def _propose_resolution(self, resolution: Resolution, now: datetime) -> None:
        proposal = AutonomousAction(
            type=ActionType.RESOLUTION_PROPOSAL,
            executed_by=SYSTEM_ACTOR,
            description=f"A resolution is put to the floor: {resolution.description}",
            impact=tuple(resolution.outcomes),
            timestamp=now,
        )
        self.log.append_action(proposal)

    async def _conclude(self, resolution: Resolution, now: datetime, report: CycleReport) -> None:
        if not self.machine.conclude(resolution, now):
            return
        logger.info(
            f"Concluding campaign {self.session_id} with resolution: {resolution.type} "
            f"(score {resolution.player_score:.2f})"
        )
        self._active = False
        if self._ticker is not None:
            self._ticker.stop()

        session = self.session
        self.log.append(
            "CAMPAIGN CONCLUDED",
            resolution.description,
            LogEntryType.CAMPAIGN_CONCLUSION,
            now,
        )
        session.outcomes = list(resolution.outcomes)
        session.player_stats = {
            **session.player_stats,
            "finalScore": resolution.player_score,
            "resolutionType": str(resolution.type),
        }
        session.session_state = "concluded"

        report.resolution = resolution
        report.concluded = True
        report.save_queued = self.writer.submit(session)
        # Nothing is saved after the conclusion; release the save worker.
        self._closer = safe_create_task(self.writer.close(), name=f"campaign-{session.id}-final-save")

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_campaign_status(self) -> CampaignStatus:
        """Read-only snapshot; never mutates orchestrator state."""
        now = self.clock.now()
        phase = current_phase(self.timeline) if self.timeline else None
        return CampaignStatus(
            timeline=self.timeline.to_dict() if self.timeline else None,
            is_active=self._active,
            current_phase=phase.name if phase else None,
            autonomous_actions=len(self.engine.history),
            next_action_in=int(self.engine.cooldown_remaining(now).total_seconds() * 1000),
        )

    @staticmethod
    def _welcome_text(session: CampaignSession) -> str:
        title = session.title or "Model UN campaign"
        player = session.player_character
        if player is None:
            return f"Welcome to the {title}. Delegates are taking their seats."
        return (
            f"Welcome to the {title}. As {player.title} representing {player.country}, "
            "you must navigate complex diplomatic negotiations."
        )


class OrchestratorRegistry:
    """Live orchestrators keyed by session id.

    Owned by whoever hosts campaigns (the API app keeps one on
    ``app.state``); there is no module-level instance. Finished campaigns
    stay visible until more than ``retain_finished`` of them pile up;
    the oldest are then shut down and dropped when the next one starts.
    """

    def __init__(
        self,
        factory: Callable[[], CampaignOrchestrator],
        *,
        retain_finished: int = RETAIN_FINISHED,
    ):
        self._factory = factory
        self.retain_finished = max(0, retain_finished)
        self._orchestrators: dict[str, CampaignOrchestrator] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._orchestrators

    def __len__(self) -> int:
        return len(self._orchestrators)

    def get(self, session_id: str) -> CampaignOrchestrator | None:
        return self._orchestrators.get(session_id)

    def items(self) -> list[tuple[str, CampaignOrchestrator]]:
        return list(self._orchestrators.items())

    async def start(
        self,
        session: CampaignSession,
        total_duration_minutes: float,
        *,
        start_clock: bool = True,
    ) -> CampaignOrchestrator:
        """Create and start an orchestrator for ``session``.

        A finished campaign for the same id is replaced; a running one is
        an error, since two orchestrators must never share a session.
        """
        existing = self._orchestrators.get(session.id)
        if existing is not None and existing.is_active:
            raise OrchestratorError(f"Campaign {session.id} is already being orchestrated")
        if existing is not None:
            await existing.shutdown()
            del self._orchestrators[session.id]

        orchestrator = self._factory()
        await orchestrator.initialize_campaign(session, total_duration_minutes, start_clock=start_clock)
        self._orchestrators[session.id] = orchestrator
        await self.evict_finished()
        return orchestrator

    async def evict_finished(self) -> list[str]:
        """Drop the oldest finished campaigns beyond ``retain_finished``."""
        finished = [sid for sid, o in self._orchestrators.items() if not o.is_active]
        evicted = finished[: max(0, len(finished) - self.retain_finished)]
        for session_id in evicted:
            orchestrator = self._orchestrators.pop(session_id)
            await orchestrator.shutdown()
        if evicted:
            logger.info(f"Evicted {len(evicted)} finished campaign(s); {len(self)} tracked")
        return evicted

    async def stop(self, session_id: str) -> bool:
        orchestrator = self._orchestrators.get(session_id)
        if orchestrator is None:
            return False
        await orchestrator.shutdown()
        return True

    async def stop_all(self) -> None:
        for session_id, orchestrator in self.items():
            try:
                await orchestrator.shutdown()
            except Exception as e:
                logger.error(f"Failed to shut down orchestrator {session_id}: {e}")
