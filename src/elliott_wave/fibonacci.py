"""
Fibonacci ratio validation between swings.

Ratios are amplitude(a) / amplitude(b) and are handled as floats; a zero
denominator or NaN price gives NaN, which never validates.
"""

import math
from typing import Iterable, Optional, Tuple

from .constants import (
    CANONICAL_FIB_RATIOS,
    FLAT_WAVEB_MIN_RETRACEMENT,
    WAVE2_RETRACEMENT,
    WAVE3_EXTENSION,
    WAVE4_RETRACEMENT,
    WAVE5_PROJECTION,
    WAVEB_RETRACEMENT,
    WAVEC_EXTENSION,
)
from .numeric import to_float
from .types import Swing
from .wave_config import FibonacciConfig


def swing_ratio(numerator: Swing, denominator: Swing) -> float:
    """amplitude(numerator) / amplitude(denominator), NaN when undefined."""
    num = to_float(numerator.amplitude)
    den = to_float(denominator.amplitude)
    if math.isnan(num) or math.isnan(den) or den == 0:
        return float("nan")
    return num / den


class FibonacciValidator:
    """
    Checks swing relationships against canonical Fibonacci ratios.

    Args:
        config: Tolerance and tolerance mode.
        ratios: Canonical ratio set used by ``is_near_fibonacci``.
    """

    def __init__(self, config: Optional[FibonacciConfig] = None, ratios: Iterable[float] = CANONICAL_FIB_RATIOS):
        self.config = config or FibonacciConfig()
        self.ratios = tuple(ratios)

    @property
    def tolerance(self) -> float:
        return self.config.tolerance

    def ratio(self, a: Swing, b: Swing) -> float:
        return swing_ratio(a, b)

    def is_near(self, ratio: float, target: float, tolerance: Optional[float] = None) -> bool:
        if ratio is None or math.isnan(ratio):
            return False
        tol = self.tolerance if tolerance is None else tolerance
        if self.config.mode == "relative":
            tol = tol * target
        return abs(ratio - target) <= tol

    def is_near_fibonacci(self, ratio: float, tolerance: Optional[float] = None) -> bool:
        """True iff ``ratio`` is within tolerance of any canonical ratio."""
        return any(self.is_near(ratio, target, tolerance) for target in self.ratios)

    def nearest_ratio(self, ratio: float) -> Optional[float]:
        if ratio is None or math.isnan(ratio):
            return None
        return min(self.ratios, key=lambda target: (abs(ratio - target), target))

    def in_range(self, ratio: float, bounds: Tuple[float, float]) -> bool:
        """``bounds`` widened by the tolerance on both ends."""
        if ratio is None or math.isnan(ratio):
            return False
        lower, upper = bounds
        if self.config.mode == "relative":
            return lower * (1 - self.tolerance) <= ratio <= upper * (1 + self.tolerance)
        return lower - self.tolerance <= ratio <= upper + self.tolerance

    def is_wave_two_retracement_valid(self, wave1: Swing, wave2: Swing) -> bool:
        return self.in_range(swing_ratio(wave2, wave1), WAVE2_RETRACEMENT)

    def is_wave_three_extension_valid(self, wave1: Swing, wave3: Swing) -> bool:
        return self.in_range(swing_ratio(wave3, wave1), WAVE3_EXTENSION)

    def is_wave_four_retracement_valid(self, wave3: Swing, wave4: Swing) -> bool:
        return self.in_range(swing_ratio(wave4, wave3), WAVE4_RETRACEMENT)

    def is_wave_five_projection_valid(self, wave1: Swing, wave5: Swing) -> bool:
        return self.in_range(swing_ratio(wave5, wave1), WAVE5_PROJECTION)

    def is_wave_b_retracement_valid(self, wave_a: Swing, wave_b: Swing) -> bool:
        return self.in_range(swing_ratio(wave_b, wave_a), WAVEB_RETRACEMENT)

    def is_wave_b_flat_retracement_valid(self, wave_a: Swing, wave_b: Swing) -> bool:
        ratio = swing_ratio(wave_b, wave_a)
        if math.isnan(ratio):
            return False
        if self.config.mode == "relative":
            return ratio >= FLAT_WAVEB_MIN_RETRACEMENT * (1 - self.tolerance)
        return ratio >= FLAT_WAVEB_MIN_RETRACEMENT - self.tolerance

    def is_wave_c_extension_valid(self, wave_a: Swing, wave_c: Swing) -> bool:
        return self.in_range(swing_ratio(wave_c, wave_a), WAVEC_EXTENSION)

    def proximity_score(self, ratio: float, bounds: Tuple[float, float], ideal: float) -> float:
        """
        Closeness of ``ratio`` to ``ideal`` within ``bounds``, in [0, 1].

        1.0 at the ideal, falling by half at a half-range distance, and 0
        outside the tolerance-widened range.
        """
        if not self.in_range(ratio, bounds):
            return 0.0
        lower, upper = bounds
        half_range = (upper - lower) / 2
        if half_range <= 0:
            return 1.0 if ratio == ideal else 0.0
        score = 1.0 - (abs(ratio - ideal) / half_range) * 0.5
        return max(0.0, min(1.0, score))
