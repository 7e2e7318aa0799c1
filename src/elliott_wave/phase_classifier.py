"""
Wave phase classification.

Walks the swing sequence as a state machine
NONE -> WAVE1 .. WAVE5 -> CORRECTIVE_A .. CORRECTIVE_C. Each new leg must
alternate with the previous one and pass the Fibonacci and price-boundary
rule for its position; the first leg that fails stops the walk, and the
phase reached so far is reported.

After a complete impulse and complete correction, any further swings start
a fresh cycle, so the reported phase always describes the most recent
structure.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .constants import CORRECTION_LENGTH, IMPULSE_LENGTH
from .fibonacci import FibonacciValidator
from .numeric import is_nan
from .price_series import PriceSeries
from .swing_detector import SwingDetector
from .types import Phase, Swing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseAssessment:
    """
    Classification of a swing sequence.

    Attributes:
        phase: Corrective phase when a correction follows a complete
            impulse, otherwise the impulse phase, otherwise NONE.
        impulse_phase: Furthest impulse wave validated.
        corrective_phase: Furthest corrective wave validated (NONE if none).
        impulse_segment: Swings the impulse walk examined (up to 5).
        correction_segment: Swings the correction walk examined (up to 3).
        start: Position in the swing list where the reported cycle starts.
    """
    phase: Phase
    impulse_phase: Phase
    corrective_phase: Phase
    impulse_segment: Tuple[Swing, ...] = ()
    correction_segment: Tuple[Swing, ...] = ()
    start: int = 0

    @property
    def impulse_confirmed(self) -> bool:
        return self.impulse_phase is Phase.WAVE5

    @property
    def corrective_confirmed(self) -> bool:
        return self.impulse_confirmed and self.corrective_phase is Phase.CORRECTIVE_C

    @property
    def impulse_swings(self) -> List[Swing]:
        """The five impulse swings when confirmed, else empty."""
        if not self.impulse_confirmed:
            return []
        return list(self.impulse_segment)

    @property
    def corrective_swings(self) -> List[Swing]:
        """The three corrective swings when confirmed, else empty."""
        if not self.corrective_confirmed:
            return []
        return list(self.correction_segment)

    @property
    def is_impulse_rising(self) -> bool:
        return bool(self.impulse_segment) and self.impulse_segment[0].is_rising

    @classmethod
    def none(cls) -> "PhaseAssessment":
        return cls(Phase.NONE, Phase.NONE, Phase.NONE)


def _beyond(candidate, boundary, rising: bool) -> bool:
    """Strictly past ``boundary`` in the trend direction."""
    if is_nan(candidate) or is_nan(boundary):
        return False
    return candidate > boundary if rising else candidate < boundary


def _not_past(candidate, boundary, rising: bool) -> bool:
    """Does not cross ``boundary`` against the trend direction."""
    if is_nan(candidate) or is_nan(boundary):
        return False
    return not (candidate < boundary) if rising else not (candidate > boundary)


class WaveRules:
    """Per-wave validity rules shared by the classifier and scenario generator."""

    def __init__(self, validator: Optional[FibonacciValidator] = None):
        self.validator = validator or FibonacciValidator()

    def wave_two(self, wave1: Swing, wave2: Swing, rising: bool) -> bool:
        return (
            wave2.is_valid
            and wave2.is_rising != wave1.is_rising
            and self.validator.is_wave_two_retracement_valid(wave1, wave2)
            and _not_past(wave2.to_price, wave1.from_price, rising)
        )

    def wave_three(self, wave1: Swing, wave3: Swing, rising: bool) -> bool:
        return (
            wave3.is_valid
            and wave3.is_rising == rising
            and self.validator.is_wave_three_extension_valid(wave1, wave3)
            and _beyond(wave3.to_price, wave1.to_price, rising)
        )

    def wave_four(self, wave1: Swing, wave3: Swing, wave4: Swing, rising: bool) -> bool:
        return (
            wave4.is_valid
            and wave4.is_rising != rising
            and self.validator.is_wave_four_retracement_valid(wave3, wave4)
            and _not_past(wave4.to_price, wave1.to_price, rising)
        )

    def wave_five(self, wave1: Swing, wave3: Swing, wave5: Swing, rising: bool) -> bool:
        return (
            wave5.is_valid
            and wave5.is_rising == rising
            and self.validator.is_wave_five_projection_valid(wave1, wave5)
            and _beyond(wave5.to_price, wave3.to_price, rising)
        )

    def wave_b(self, wave_a: Swing, wave_b: Swing, impulse_rising: bool) -> bool:
        return (
            wave_b.is_valid
            and wave_b.is_rising == impulse_rising
            and self.validator.is_wave_b_retracement_valid(wave_a, wave_b)
            and _not_past(wave_b.to_price, wave_a.from_price, not impulse_rising)
        )

    def wave_c(self, wave_a: Swing, wave_c: Swing, impulse_rising: bool) -> bool:
        return (
            wave_c.is_valid
            and wave_c.is_rising != impulse_rising
            and self.validator.is_wave_c_extension_valid(wave_a, wave_c)
            and _beyond(wave_c.to_price, wave_a.to_price, not impulse_rising)
        )

    def impulse_phase(self, swings: List[Swing]) -> Phase:
        """Furthest impulse wave the swings satisfy, NONE if wave 1 is unusable."""
        if not swings or not swings[0].is_valid:
            return Phase.NONE
        wave1 = swings[0]
        rising = wave1.is_rising
        phase = Phase.WAVE1
        if len(swings) < 2 or not self.wave_two(wave1, swings[1], rising):
            return phase
        phase = Phase.WAVE2
        if len(swings) < 3 or not self.wave_three(wave1, swings[2], rising):
            return phase
        phase = Phase.WAVE3
        if len(swings) < 4 or not self.wave_four(wave1, swings[2], swings[3], rising):
            return phase
        phase = Phase.WAVE4
        if len(swings) < 5 or not self.wave_five(wave1, swings[2], swings[4], rising):
            return phase
        return Phase.WAVE5

    def corrective_phase(self, swings: List[Swing], impulse_rising: bool) -> Phase:
        """Furthest corrective wave following an impulse in ``impulse_rising`` direction."""
        if not swings or not swings[0].is_valid:
            return Phase.NONE
        wave_a = swings[0]
        if wave_a.is_rising == impulse_rising:
            return Phase.NONE
        if len(swings) < 2 or not self.wave_b(wave_a, swings[1], impulse_rising):
            return Phase.CORRECTIVE_A
        if len(swings) < 3 or not self.wave_c(wave_a, swings[2], impulse_rising):
            return Phase.CORRECTIVE_B
        return Phase.CORRECTIVE_C


def assess_swings(swings: List[Swing], rules: Optional[WaveRules] = None) -> PhaseAssessment:
    """
    Classify a swing sequence.

    Pure function of its input. Empty or invalid input gives a NONE
    assessment rather than an error.
    """
    rules = rules or WaveRules()
    if not swings or any(not s.is_valid for s in swings):
        return PhaseAssessment.none()

    start = 0
    for _ in range(len(swings)):
        segment = swings[start:start + IMPULSE_LENGTH]
        impulse_phase = rules.impulse_phase(segment)
        if impulse_phase is not Phase.WAVE5:
            phase = impulse_phase if impulse_phase.is_impulse else Phase.NONE
            return PhaseAssessment(phase, impulse_phase, Phase.NONE, tuple(segment), (), start)

        correction_start = start + IMPULSE_LENGTH
        if len(swings) <= correction_start:
            return PhaseAssessment(Phase.WAVE5, Phase.WAVE5, Phase.NONE, tuple(segment), (), start)

        correction = swings[correction_start:correction_start + CORRECTION_LENGTH]
        corrective_phase = rules.corrective_phase(correction, segment[0].is_rising)
        correction_end = correction_start + len(correction)

        if corrective_phase is Phase.CORRECTIVE_C and len(swings) > correction_end:
            start = correction_end
            continue
        if not corrective_phase.is_corrective:
            return PhaseAssessment(Phase.WAVE5, Phase.WAVE5, Phase.NONE, tuple(segment), (), start)
        return PhaseAssessment(
            corrective_phase, Phase.WAVE5, corrective_phase,
            tuple(segment), tuple(correction[:corrective_phase.corrective_index]), start,
        )

    return PhaseAssessment.none()


class PhaseClassifier:
    """
    Per-bar phase indicator over a price series.

    Swings are detected up to each requested index and classified with
    ``assess_swings``. Assessments are memoised per index in a table owned
    by this instance, so repeated queries for the same bar are cheap.

    Args:
        series: Price series to classify.
        detector: Swing detector for the degree being analysed.
        validator: Fibonacci validator used by the wave rules.
    """

    def __init__(
        self,
        series: PriceSeries,
        detector: Optional[SwingDetector] = None,
        validator: Optional[FibonacciValidator] = None,
    ):
        self.series = series
        self.detector = detector or SwingDetector()
        self.rules = WaveRules(validator)
        self._memo: Dict[int, PhaseAssessment] = {}

    def assess(self, index: int) -> PhaseAssessment:
        if index not in self._memo:
            swings = self.detector.detect(self.series, index)
            self._memo[index] = assess_swings(swings, self.rules)
        return self._memo[index]

    def phase(self, index: int) -> Phase:
        return self.assess(index).phase

    def is_impulse_confirmed(self, index: int) -> bool:
        return self.assess(index).impulse_confirmed

    def is_corrective_confirmed(self, index: int) -> bool:
        return self.assess(index).corrective_confirmed

    def impulse_swings(self, index: int) -> List[Swing]:
        return self.assess(index).impulse_swings

    def corrective_swings(self, index: int) -> List[Swing]:
        return self.assess(index).corrective_swings
