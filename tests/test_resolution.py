"""Tests for resolution scoring and classification."""

import pytest

from delegate.campaign import OrchestratorSettings, evaluate_resolution, safe_evaluate
from delegate.campaign.resolution import (
    classify,
    describe,
    neutral_resolution,
    outcomes_for,
    resolution_score,
    time_expired_resolution,
)
from delegate.enums import ResolutionType


class TestResolutionScore:
    def test_threshold_case_is_exact(self):
        assert resolution_score(1, 3, 4) == 0.8

    def test_action_component_is_capped(self):
        assert resolution_score(0, 3, 4) == resolution_score(0, 3, 40) == 0.7

    def test_starting_score(self):
        assert resolution_score(0, 3, 0) == 0.5

    def test_last_phase_with_full_actions(self):
        assert resolution_score(2, 3, 4) == 0.9

    def test_capped_at_one(self):
        settings = OrchestratorSettings(base_score=0.95)
        assert resolution_score(2, 3, 10, settings) == 1.0

    def test_zero_phases_rejected(self):
        with pytest.raises(ValueError):
            resolution_score(0, 0, 1)


class TestClassify:
    @pytest.mark.parametrize("score,expected", [
        (0.95, ResolutionType.DIPLOMATIC_SUCCESS),
        (0.9, ResolutionType.DIPLOMATIC_SUCCESS),
        (0.8, ResolutionType.PARTIAL_RESOLUTION),
        (0.7, ResolutionType.PARTIAL_RESOLUTION),
        (0.5, ResolutionType.STALEMATE),
        (0.4, ResolutionType.STALEMATE),
        (0.3, ResolutionType.CRISIS_ESCALATION),
    ])
    def test_bands(self, score, expected):
        assert classify(score, 10) == expected

    def test_low_score_at_deadline_is_time_expired(self):
        assert classify(0.3, 0) == ResolutionType.TIME_EXPIRED

    def test_deadline_does_not_override_passing_bands(self):
        assert classify(0.5, 0) == ResolutionType.STALEMATE

    def test_unknown_time_remaining(self):
        assert classify(0.2) == ResolutionType.CRISIS_ESCALATION


class TestEvaluateResolution:
    def test_negotiation_with_four_actions_can_end_early(self):
        resolution = evaluate_resolution(65, 1, 3, 4, 10)
        assert resolution.player_score == 0.8
        assert resolution.type == ResolutionType.PARTIAL_RESOLUTION
        assert resolution.can_end_early is True
        assert resolution.description == describe(0.8)
        assert resolution.outcomes == outcomes_for(0.8)
        assert resolution.relationship_changes == {}

    def test_early_end_needs_progress(self):
        assert evaluate_resolution(59.9, 1, 3, 4).can_end_early is False

    def test_early_end_needs_phase_index(self):
        # 0.5 + 0 + 0.2 = 0.7 in the opening phase
        resolution = evaluate_resolution(90, 0, 3, 4)
        assert resolution.player_score == 0.7
        assert resolution.can_end_early is False

    def test_early_end_needs_score(self):
        assert evaluate_resolution(80, 1, 3, 2).can_end_early is False

    def test_pure(self):
        first = evaluate_resolution(70, 2, 3, 5, 4.5)
        second = evaluate_resolution(70, 2, 3, 5, 4.5)
        assert first == second

    def test_descriptions_and_outcomes_by_band(self):
        assert describe(0.92).startswith("Comprehensive agreement")
        assert describe(0.1).startswith("Crisis escalated")
        assert outcomes_for(0.65) == (
            "Temporary agreements reached",
            "Foundation laid for future negotiations",
        )
        assert outcomes_for(0.1)[0] == "Diplomatic tensions remain high"


class TestSafeEvaluate:
    def test_passes_through(self):
        resolution, error = safe_evaluate(65, 1, 3, 4)
        assert error is None
        assert resolution.player_score == 0.8

    def test_failure_degrades_to_neutral(self):
        resolution, error = safe_evaluate(50, 0, 0, 1)
        assert isinstance(error, ValueError)
        assert resolution == neutral_resolution()
        assert resolution.type == ResolutionType.STALEMATE
        assert resolution.player_score == 0.5
        assert resolution.can_end_early is False


class TestTimeExpiredResolution:
    def test_keeps_score_and_prepends_outcomes(self):
        evaluated = evaluate_resolution(100, 2, 3, 4, 0)
        expired = time_expired_resolution(evaluated)
        assert expired.type == ResolutionType.TIME_EXPIRED
        assert expired.player_score == evaluated.player_score
        assert expired.outcomes[:2] == ("Time limit reached", "Session concluded")
        assert expired.outcomes[2:] == evaluated.outcomes
        assert expired.can_end_early is False
