"""
Tests for pairwise and group scenario comparisons.
"""

from decimal import Decimal

import pytest

from src.elliott_wave.numeric import is_nan
from src.elliott_wave.scenario_comparison import (
    average_confidence,
    common_target_range,
    compare_summary,
    divergence_score,
    has_directional_consensus,
    high_confidence_phase,
    shared_invalidation,
)
from src.elliott_wave.types import Phase, ScenarioType

from helpers import make_scenario


class TestDivergenceScore:
    def test_identical_readings(self):
        first = make_scenario("a", Phase.WAVE3, 0.7)
        second = make_scenario("b", Phase.WAVE3, 0.5)
        assert divergence_score(first, second) == 0.0

    def test_phase_only(self):
        first = make_scenario("a", Phase.WAVE3, 0.7)
        second = make_scenario("b", Phase.WAVE5, 0.5)
        assert divergence_score(first, second) == pytest.approx(0.2)

    def test_corrective_type_only(self):
        first = make_scenario("a", Phase.CORRECTIVE_C, 0.7, scenario_type=ScenarioType.CORRECTIVE_ZIGZAG)
        second = make_scenario("b", Phase.CORRECTIVE_C, 0.5, scenario_type=ScenarioType.CORRECTIVE_FLAT)
        assert divergence_score(first, second) == pytest.approx(0.15)

    def test_everything_differs(self):
        first = make_scenario("a", Phase.WAVE3, 0.7, bullish=True)
        second = make_scenario("b", Phase.CORRECTIVE_A, 0.5, bullish=False)
        assert divergence_score(first, second) == pytest.approx(1.0)

    def test_missing_scenario(self):
        assert divergence_score(make_scenario("a", Phase.WAVE3, 0.7), None) == 1.0


class TestSharedInvalidation:
    def test_bullish_takes_lowest(self):
        scenarios = [
            make_scenario("a", Phase.WAVE3, 0.7, invalidation=100),
            make_scenario("b", Phase.WAVE5, 0.5, invalidation=95),
        ]
        assert shared_invalidation(scenarios) == Decimal("95")

    def test_bearish_takes_highest(self):
        scenarios = [
            make_scenario("a", Phase.WAVE3, 0.7, bullish=False, invalidation=100),
            make_scenario("b", Phase.WAVE5, 0.5, bullish=False, invalidation=110),
        ]
        assert shared_invalidation(scenarios) == Decimal("110")

    def test_mixed_directions_is_nan(self):
        scenarios = [
            make_scenario("a", Phase.WAVE3, 0.7, bullish=True),
            make_scenario("b", Phase.WAVE5, 0.5, bullish=False),
        ]
        assert is_nan(shared_invalidation(scenarios))

    def test_empty_is_none(self):
        assert shared_invalidation([]) is None


class TestGroupHelpers:
    def test_average_confidence(self):
        scenarios = [make_scenario("a", Phase.WAVE3, 0.8), make_scenario("b", Phase.WAVE5, 0.4)]
        assert average_confidence(scenarios) == pytest.approx(0.6)
        assert average_confidence([]) == 0.0

    def test_high_confidence_phase(self):
        agree = [
            make_scenario("a", Phase.WAVE3, 0.8),
            make_scenario("b", Phase.WAVE3, 0.75),
            make_scenario("c", Phase.WAVE5, 0.3),
        ]
        assert high_confidence_phase(agree) is Phase.WAVE3
        differ = agree + [make_scenario("d", Phase.WAVE1, 0.9)]
        assert high_confidence_phase(differ) is Phase.NONE
        assert high_confidence_phase([make_scenario("e", Phase.WAVE3, 0.2)]) is Phase.NONE

    def test_directional_consensus_ignores_weak_scenarios(self):
        scenarios = [
            make_scenario("a", Phase.WAVE3, 0.8, bullish=True),
            make_scenario("b", Phase.WAVE3, 0.3, bullish=False),
        ]
        assert has_directional_consensus(scenarios)
        scenarios.append(make_scenario("c", Phase.WAVE5, 0.9, bullish=False))
        assert not has_directional_consensus(scenarios)
        assert not has_directional_consensus([])

    def test_common_target_range(self):
        scenarios = [
            make_scenario("a", Phase.WAVE3, 0.8, targets=(130, 140)),
            make_scenario("b", Phase.WAVE5, 0.6, targets=(125,)),
            make_scenario("c", Phase.WAVE1, 0.4),
        ]
        assert common_target_range(scenarios) == (Decimal("125"), Decimal("130"))
        assert common_target_range(scenarios[2:]) is None


class TestCompareSummary:
    def test_summary_lines(self):
        first = make_scenario("a", Phase.WAVE3, 0.8)
        second = make_scenario("b", Phase.WAVE5, 0.6)
        assert compare_summary(first, second).splitlines() == [
            "Scenario comparison:",
            "  a: WAVE3 (80.0%)",
            "  b: WAVE5 (60.0%)",
            "  Divergence: 20.0%",
            "  Phase: DIFFER",
            "  Direction: AGREE (bullish)",
        ]

    def test_opposite_directions(self):
        first = make_scenario("a", Phase.WAVE3, 0.8, bullish=True)
        second = make_scenario("b", Phase.WAVE3, 0.6, bullish=False)
        lines = compare_summary(first, second).splitlines()
        assert "  Phase: AGREE" in lines
        assert "  Direction: DIFFER" in lines

    def test_missing(self):
        assert compare_summary(None, None) == "Cannot compare missing scenarios"


class TestPackageExports:
    def test_helpers_exported_from_package(self):
        import src.elliott_wave as elliott_wave

        first = make_scenario("a", Phase.WAVE3, 0.8)
        second = make_scenario("b", Phase.WAVE5, 0.6)
        assert elliott_wave.divergence_score is divergence_score
        assert elliott_wave.divergence_score(first, second) == pytest.approx(0.2)
        assert elliott_wave.compare_summary is compare_summary
        assert elliott_wave.shared_invalidation([first, second]) == Decimal("100")
