"""
Tests for ScenarioSet ordering, consensus and filters.
"""

from decimal import Decimal

import pytest

from src.elliott_wave.scenario_set import ScenarioSet
from src.elliott_wave.types import Phase, ScenarioType

from helpers import make_scenario


@pytest.fixture
def mixed_set():
    return ScenarioSet.of(
        [
            make_scenario("c", Phase.CORRECTIVE_B, 0.3),
            make_scenario("a", Phase.WAVE3, 0.62),
            make_scenario("b", Phase.WAVE3, 0.5),
        ],
        evaluation_index=20,
    )


class TestOrdering:
    """Tests for construction invariants."""

    def test_sorted_by_confidence(self, mixed_set):
        assert mixed_set.ids == ["a", "b", "c"]
        assert mixed_set.base().id == "a"
        assert [s.id for s in mixed_set.alternatives()] == ["b", "c"]

    def test_ties_broken_by_id(self):
        scenario_set = ScenarioSet.of(
            [make_scenario("z", Phase.WAVE1, 0.5), make_scenario("m", Phase.WAVE1, 0.5)], 5
        )
        assert scenario_set.ids == ["m", "z"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate scenario id"):
            ScenarioSet.of([make_scenario("a", Phase.WAVE1, 0.5), make_scenario("a", Phase.WAVE2, 0.4)], 5)

    def test_empty_set(self):
        scenario_set = ScenarioSet.empty(3)
        assert scenario_set.is_empty
        assert scenario_set.base() is None
        assert scenario_set.alternatives() == []
        assert scenario_set.consensus() is Phase.NONE
        assert scenario_set.consensus_share() == 0.0
        assert scenario_set.summary() == "No scenarios"

    def test_lookup(self, mixed_set):
        assert mixed_set.get("b").current_phase is Phase.WAVE3
        assert mixed_set.get("missing") is None
        assert len(mixed_set) == 3


class TestConsensus:
    """Tests for phase consensus."""

    def test_heaviest_phase_wins(self, mixed_set):
        assert mixed_set.consensus() is Phase.WAVE3
        assert mixed_set.phase_weights()[Phase.WAVE3] == pytest.approx(1.12)
        assert mixed_set.has_strong_consensus()
        assert [s.id for s in mixed_set.consensus_members()] == ["a", "b"]

    def test_weight_tie_goes_to_larger_group(self):
        scenario_set = ScenarioSet.of(
            [
                make_scenario("a", Phase.WAVE3, 0.5),
                make_scenario("b", Phase.WAVE5, 0.25),
                make_scenario("c", Phase.WAVE5, 0.25),
            ],
            10,
        )
        assert scenario_set.consensus() is Phase.WAVE5
        assert not scenario_set.has_strong_consensus()

    def test_full_tie_goes_to_phase_name(self):
        scenario_set = ScenarioSet.of(
            [make_scenario("a", Phase.WAVE3, 0.4), make_scenario("b", Phase.CORRECTIVE_A, 0.4)], 10
        )
        assert scenario_set.consensus() is Phase.CORRECTIVE_A

    def test_consensus_share(self, mixed_set):
        assert mixed_set.consensus_share() == pytest.approx(1.12 / 1.42)


class TestFilters:
    def test_by_phase_and_type(self, mixed_set):
        assert [s.id for s in mixed_set.by_phase(Phase.WAVE3)] == ["a", "b"]
        assert [s.id for s in mixed_set.by_type(ScenarioType.CORRECTIVE_ZIGZAG)] == ["c"]

    def test_invalidation_filters(self):
        scenario_set = ScenarioSet.of(
            [
                make_scenario("up", Phase.WAVE3, 0.6, bullish=True, invalidation=100),
                make_scenario("down", Phase.WAVE3, 0.5, bullish=False, invalidation=120),
            ],
            10,
        )
        assert [s.id for s in scenario_set.valid_at(Decimal("110"))] == ["up", "down"]
        assert [s.id for s in scenario_set.invalidated_by(Decimal("95"))] == ["up"]
        assert [s.id for s in scenario_set.invalidated_by(Decimal("125"))] == ["down"]

    def test_confidence_statistics(self):
        scenario_set = ScenarioSet.of(
            [
                make_scenario("a", Phase.WAVE3, 0.8),
                make_scenario("b", Phase.WAVE5, 0.5),
                make_scenario("c", Phase.WAVE1, 0.2),
            ],
            10,
        )
        assert scenario_set.high_confidence_count == 1
        assert scenario_set.low_confidence_count == 1
        assert scenario_set.confidence_spread == pytest.approx(0.6)

    def test_spread_needs_two(self):
        assert ScenarioSet.of([make_scenario("a", Phase.WAVE3, 0.8)], 1).confidence_spread == 0.0


class TestSummary:
    def test_summary_line(self, mixed_set):
        assert mixed_set.summary() == "3 scenario(s): Base case=WAVE3 (62.0%), 2 alternative(s), consensus=WAVE3"

    def test_trend_bias(self, mixed_set):
        bias = mixed_set.trend_bias()
        assert bias.is_bullish
        assert bias.strength == pytest.approx(1.0)
