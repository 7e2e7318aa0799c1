"""
Tests for wave phase classification.

Verifies the impulse/corrective state machine, rule failures, the fresh
cycle after a complete structure, and per-bar memoised classification.
"""

from decimal import Decimal

from src.elliott_wave.degree import Degree
from src.elliott_wave.phase_classifier import PhaseAssessment, PhaseClassifier, WaveRules, assess_swings
from src.elliott_wave.swing_detector import SwingDetector
from src.elliott_wave.types import Phase, Swing
from src.elliott_wave.wave_config import ZigzagConfig

from conftest import BTC_PIVOTS, make_swing, swing_chain


class TestAssessSwings:
    """Tests for the pure classification function."""

    def test_empty_is_none(self):
        assessment = assess_swings([])
        assert assessment.phase is Phase.NONE
        assert assessment == PhaseAssessment.none()

    def test_single_swing_is_wave_one(self):
        assert assess_swings(swing_chain(BTC_PIVOTS[:2])).phase is Phase.WAVE1

    def test_partial_impulse(self, impulse_swings):
        assessment = assess_swings(impulse_swings[:3])
        assert assessment.phase is Phase.WAVE3
        assert not assessment.impulse_confirmed
        assert assessment.impulse_swings == []

    def test_complete_impulse(self, impulse_swings):
        assessment = assess_swings(impulse_swings)
        assert assessment.phase is Phase.WAVE5
        assert assessment.impulse_confirmed
        assert not assessment.corrective_confirmed
        assert assessment.is_impulse_rising
        assert assessment.impulse_swings == impulse_swings

    def test_complete_cycle(self, cycle_swings):
        assessment = assess_swings(cycle_swings)
        assert assessment.phase is Phase.CORRECTIVE_C
        assert assessment.impulse_phase is Phase.WAVE5
        assert assessment.corrective_confirmed
        assert assessment.corrective_swings == cycle_swings[5:8]

    def test_wave_a_only(self, cycle_swings):
        assert assess_swings(cycle_swings[:6]).phase is Phase.CORRECTIVE_A

    def test_swings_after_complete_cycle_start_fresh(self, cycle_swings):
        swings = cycle_swings + [make_swing(43, 46, 32400, 34200)]
        assessment = assess_swings(swings)
        assert assessment.phase is Phase.WAVE1
        assert assessment.start == 8
        assert assessment.corrective_phase is Phase.NONE

    def test_shallow_wave_two_stops_at_wave_one(self):
        swings = swing_chain([(0, 100), (5, 110), (7, 109)])
        assert assess_swings(swings).phase is Phase.WAVE1

    def test_wave_four_overlap_stops_at_wave_three(self):
        """Wave 4 ending below the wave 1 top breaks the impulse."""
        swings = swing_chain([(0, 100), (5, 110), (8, 104), (15, 120), (18, 108)])
        assert assess_swings(swings).phase is Phase.WAVE3

    def test_falling_impulse(self):
        swings = swing_chain([(0, 200), (5, 180), (8, 192), (15, 160), (18, 168), (24, 148)])
        assessment = assess_swings(swings)
        assert assessment.phase is Phase.WAVE5
        assert not assessment.is_impulse_rising

    def test_nan_swing_gives_none(self, impulse_swings):
        broken = impulse_swings[:2] + [Swing(10, 18, Decimal("NaN"), Decimal("36000"), Degree.MINOR)]
        assert assess_swings(broken).phase is Phase.NONE

    def test_is_pure(self, cycle_swings):
        assert assess_swings(cycle_swings) == assess_swings(list(cycle_swings))


class TestWaveRules:
    def test_correction_must_oppose_impulse(self):
        rules = WaveRules()
        rising_leg = swing_chain([(28, 37500), (33, 39000)])
        assert rules.corrective_phase(rising_leg, impulse_rising=True) is Phase.NONE
        assert rules.corrective_phase(rising_leg, impulse_rising=False) is Phase.CORRECTIVE_A


class TestPhaseClassifier:
    """Tests for per-bar classification over a series."""

    def test_phase_per_bar(self, btc_series):
        classifier = PhaseClassifier(btc_series, SwingDetector(ZigzagConfig.fixed(0.03)))
        assert classifier.phase(46) is Phase.CORRECTIVE_C
        assert classifier.phase(30) is Phase.WAVE5
        assert classifier.is_impulse_confirmed(46)
        assert classifier.is_corrective_confirmed(46)
        assert not classifier.is_corrective_confirmed(30)

    def test_swing_lists(self, btc_series):
        classifier = PhaseClassifier(btc_series, SwingDetector(ZigzagConfig.fixed(0.03)))
        assert len(classifier.impulse_swings(46)) == 5
        assert len(classifier.corrective_swings(46)) == 3
        assert classifier.corrective_swings(30) == []

    def test_memoised(self, btc_series):
        classifier = PhaseClassifier(btc_series, SwingDetector(ZigzagConfig.fixed(0.03)))
        assert classifier.assess(46) is classifier.assess(46)

    def test_early_bar_has_no_phase(self, btc_series):
        classifier = PhaseClassifier(btc_series, SwingDetector(ZigzagConfig.fixed(0.03)))
        assert classifier.phase(1) is Phase.NONE
