"""Tests for the phase state machine."""

from datetime import timedelta

import pytest

from delegate.campaign import (
    AutonomousAction,
    OrchestratorSettings,
    PhaseStateMachine,
    create_timeline,
    evaluate_resolution,
)
from delegate.enums import ActionType


def _action(at, description="A position paper is circulated"):
    return AutonomousAction(
        type=ActionType.CRISIS_DEVELOPMENT,
        executed_by="system",
        description=description,
        impact=(),
        timestamp=at,
    )


@pytest.fixture
def machine(clock):
    return PhaseStateMachine(create_timeline(30, clock.now()))


class TestObjectiveScore:
    def test_zero_at_phase_start(self, machine, clock):
        phase = machine.current
        assert machine.objective_score(phase, [], clock.now()) == 0.0

    def test_time_component(self, machine, clock):
        phase = machine.current  # opening, max 7 min
        now = clock.advance(minutes=3.5)
        assert machine.objective_score(phase, [], now) == pytest.approx(0.4)

    def test_action_component(self, machine, clock):
        phase = machine.current
        now = clock.now()
        actions = [_action(now), _action(now)]
        assert machine.objective_score(phase, actions, now) == pytest.approx(0.4)

    def test_capped_at_one(self, machine, clock):
        phase = machine.current
        now = clock.advance(minutes=1)
        actions = [_action(now) for _ in range(8)]
        assert machine.objective_score(phase, actions, now) == 1.0

    def test_ignores_actions_before_phase_start(self, machine, clock):
        phase = machine.current
        before = clock.now() - timedelta(seconds=1)
        assert machine.objective_score(phase, [_action(before)], clock.now()) == 0.0


class TestCheckTransition:
    def test_not_before_minimum(self, machine, clock):
        start = clock.now()
        actions = [_action(start) for _ in range(10)]
        assert machine.check_transition(actions, clock.advance(minutes=3.9)) is None
        assert machine.timeline.current_phase == 0

    def test_advances_on_objectives_after_minimum(self, machine, clock):
        start = clock.now()
        actions = [_action(start), _action(start)]
        now = clock.advance(minutes=4)
        transition = machine.check_transition(actions, now)

        assert transition is not None
        assert transition.from_phase.id == "opening"
        assert transition.from_phase.completed is True
        assert transition.from_phase.end_time == now
        assert transition.to_phase.id == "negotiation"
        assert transition.to_phase.start_time == now
        assert transition.requires_conclusion is False
        assert machine.timeline.current_phase == 1
        assert machine.current.name == "Active Negotiation"

    def test_announcement(self, machine, clock):
        transition = machine.check_transition([], clock.advance(minutes=7))
        announcement = transition.announcement
        assert announcement.type == ActionType.PHASE_TRANSITION
        assert announcement.executed_by == "system"
        assert announcement.description == (
            "The campaign now enters the Active Negotiation phase. "
            "Core diplomatic negotiations and deal-making"
        )
        assert announcement.impact == ("Phase transition", "New objectives available")

    def test_time_pressure_alone_eventually_advances(self, machine, clock):
        # 0.8 * elapsed / 7 reaches 0.7 at 6.125 minutes
        assert machine.check_transition([], clock.advance(minutes=6)) is None
        assert machine.check_transition([], clock.advance(minutes=0.5)) is not None

    def test_maximum_duration_forces_transition(self, clock):
        settings = OrchestratorSettings(objective_time_weight=0.0)
        machine = PhaseStateMachine(create_timeline(30, clock.now(), settings), settings)
        assert machine.check_transition([], clock.advance(minutes=6.9)) is None
        transition = machine.check_transition([], clock.advance(minutes=0.1))
        assert transition is not None
        assert transition.objective_score == 0.0

    def test_only_one_phase_per_check(self, machine, clock):
        machine.check_transition([], clock.advance(minutes=30))
        assert machine.timeline.current_phase == 1

    def test_leaving_last_phase_requires_conclusion(self, machine, clock):
        machine.check_transition([], clock.advance(minutes=7))
        machine.check_transition([], clock.advance(minutes=18))
        assert machine.timeline.current_phase == 2

        transition = machine.check_transition([], clock.advance(minutes=6))
        assert transition.requires_conclusion is True
        assert transition.to_phase is None
        assert transition.announcement is None
        assert machine.timeline.current_phase == 2
        assert machine.timeline.phases[2].completed is True
        # A completed final phase does not transition again
        assert machine.check_transition([], clock.advance(minutes=1)) is None


class TestConclude:
    def test_conclude_once(self, machine, clock):
        resolution = evaluate_resolution(50, 0, 3, 0)
        now = clock.advance(minutes=2)
        assert machine.conclude(resolution, now) is True
        assert machine.is_concluded
        assert machine.resolution is resolution
        assert machine.concluded_at == now
        assert machine.current is None
        assert machine.timeline.phases[0].end_time == now

        assert machine.conclude(evaluate_resolution(90, 2, 3, 4), clock.advance(1)) is False
        assert machine.resolution is resolution
        assert machine.concluded_at == now

    def test_no_transitions_after_conclusion(self, machine, clock):
        machine.conclude(evaluate_resolution(50, 0, 3, 0), clock.now())
        assert machine.check_transition([], clock.advance(minutes=10)) is None
