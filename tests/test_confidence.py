"""
Tests for multi-factor confidence scoring.
"""

import pytest

from src.elliott_wave.channel import ChannelFitter
from src.elliott_wave.confidence import (
    Confidence,
    ConfidenceScorer,
    score_extension,
    score_retracement,
)
from src.elliott_wave.types import Phase, ScenarioType
from src.elliott_wave.wave_config import ConfidenceWeights

from conftest import make_swing


class TestRangeScores:
    """Tests for the ratio scoring helpers."""

    def test_retracement_inside_range(self):
        assert score_retracement(0.5, (0.382, 0.786)) == 1.0

    def test_retracement_near_range(self):
        assert score_retracement(0.35, (0.382, 0.786)) == pytest.approx(1 - 0.032 / 0.382)

    def test_retracement_far_outside(self):
        assert score_retracement(0.2, (0.382, 0.786)) == 0.0
        assert score_retracement(float("nan"), (0.382, 0.786)) == 0.0

    def test_extension_at_ideal(self):
        assert score_extension(1.618, (1.0, 2.618), 1.618) == pytest.approx(1.0)

    def test_extension_inside_range_off_ideal(self):
        assert score_extension(1.1, (0.618, 1.618), 1.0) == pytest.approx(0.97)

    def test_extension_outside_range(self):
        assert score_extension(4.0, (1.0, 2.618), 1.618) == 0.0


class TestConfidenceScorer:
    """Tests for the aggregate scorer."""

    def test_textbook_impulse(self, impulse_swings):
        confidence = ConfidenceScorer().score(impulse_swings, Phase.WAVE5)
        assert confidence.overall == pytest.approx(0.805833, abs=1e-4)
        assert confidence.is_high_confidence
        assert confidence.time == 1.0
        assert confidence.completeness == 1.0
        assert confidence.channel == 0.5
        assert confidence.alternation == pytest.approx(0.225)
        assert confidence.primary_reason == "Strong Fibonacci conformance"
        assert confidence.weakest_factor == "Wave alternation"

    def test_channel_adherence(self, impulse_swings):
        channel = ChannelFitter().fit(impulse_swings, 28)
        confidence = ConfidenceScorer().score(impulse_swings, Phase.WAVE5, channel)
        assert confidence.channel == 1.0

    def test_partial_structure_completeness(self, impulse_swings):
        confidence = ConfidenceScorer().score(impulse_swings[:3], Phase.WAVE3)
        assert confidence.completeness == pytest.approx(0.6)
        assert confidence.alternation == 0.5

    def test_corrective_time_proportions(self, cycle_swings):
        scorer = ConfidenceScorer()
        assert scorer.score_time(cycle_swings[5:8], Phase.CORRECTIVE_C) == 1.0

    def test_flat_uses_deep_b_range(self):
        wave_a = make_swing(0, 5, 120, 100)
        wave_b = make_swing(5, 9, 100, 118)
        scorer = ConfidenceScorer()
        flat = scorer.score_fibonacci([wave_a, wave_b], Phase.CORRECTIVE_B, ScenarioType.CORRECTIVE_FLAT)
        zigzag = scorer.score_fibonacci([wave_a, wave_b], Phase.CORRECTIVE_B, ScenarioType.CORRECTIVE_ZIGZAG)
        assert flat == 1.0
        assert zigzag < 1.0
        assert scorer.score_fibonacci([make_swing(0, 5, 120, 100), make_swing(5, 9, 100, 110)],
                                      Phase.CORRECTIVE_B, ScenarioType.CORRECTIVE_FLAT) < 1.0

    def test_empty_or_none_phase_is_zero(self, impulse_swings):
        scorer = ConfidenceScorer()
        assert scorer.score([], Phase.WAVE1) == Confidence.zero()
        assert scorer.score(impulse_swings, Phase.NONE).overall == 0.0

    def test_scores_stay_in_unit_interval(self):
        erratic = [make_swing(0, 1, 100, 300), make_swing(1, 40, 300, 299), make_swing(40, 41, 299, 1000)]
        confidence = ConfidenceScorer().score(erratic, Phase.WAVE3)
        for value in confidence.factor_scores().values():
            assert 0.0 <= value <= 1.0
        assert 0.0 <= confidence.overall <= 1.0

    def test_custom_weights(self, impulse_swings):
        weights = ConfidenceWeights(fibonacci=0.0, time=0.0, alternation=0.0, channel=0.0, completeness=1.0)
        confidence = ConfidenceScorer(weights).score(impulse_swings, Phase.WAVE5)
        assert confidence.overall == pytest.approx(1.0)
        assert confidence.primary_reason == "Complete structure"


class TestConfidence:
    def test_levels(self):
        assert Confidence.zero().is_low_confidence
        assert Confidence.zero().as_percentage == 0.0
