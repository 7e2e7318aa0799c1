"""
Directional lean across a set of scenarios.

Each scenario votes +1 (bullish) or -1 (bearish) weighted by its
confidence. The weighted mean is the signed bias score; its magnitude is
the strength. Leans weaker than the neutral threshold are reported as
UNKNOWN.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from .constants import DEFAULT_TREND_NEUTRAL_THRESHOLD
from .numeric import clamp01
from .scenario import Scenario
from .types import TrendDirection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendBias:
    """
    Aggregate direction.

    Attributes:
        direction: BULLISH, BEARISH or UNKNOWN.
        strength: |score| in [0, 1].
        score: Signed confidence-weighted mean in [-1, 1].
    """
    direction: TrendDirection
    strength: float
    score: float = 0.0

    @property
    def is_bullish(self) -> bool:
        return self.direction is TrendDirection.BULLISH

    @property
    def is_bearish(self) -> bool:
        return self.direction is TrendDirection.BEARISH

    @property
    def is_unknown(self) -> bool:
        return self.direction is TrendDirection.UNKNOWN

    @classmethod
    def unknown(cls) -> "TrendBias":
        return cls(TrendDirection.UNKNOWN, 0.0, 0.0)


class TrendBiasAggregator:
    """
    Confidence-weighted vote over scenario directions.

    Args:
        neutral_threshold: Scores with magnitude below this are UNKNOWN.
    """

    def __init__(self, neutral_threshold: float = DEFAULT_TREND_NEUTRAL_THRESHOLD):
        if not 0.0 <= neutral_threshold < 1.0:
            raise ValueError(f"neutral_threshold must be within [0, 1), got {neutral_threshold}")
        self.neutral_threshold = neutral_threshold

    def aggregate(self, scenarios: Iterable[Scenario]) -> TrendBias:
        weighted = 0.0
        total = 0.0
        for scenario in scenarios:
            weight = clamp01(scenario.confidence_score)
            weighted += weight if scenario.bullish_direction else -weight
            total += weight
        if total <= 0:
            return TrendBias.unknown()

        score = max(-1.0, min(1.0, weighted / total))
        strength = abs(score)
        if strength < self.neutral_threshold:
            logger.debug("Trend bias %.3f below neutral threshold %.3f", score, self.neutral_threshold)
            return TrendBias(TrendDirection.UNKNOWN, strength, score)
        direction = TrendDirection.BULLISH if score > 0 else TrendDirection.BEARISH
        return TrendBias(direction, strength, score)
