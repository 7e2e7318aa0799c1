"""
Latest-swing ratio, confluence and invalidation levels.

These summarise where the most recent leg sits relative to the one before
it, whether that agrees with the fitted channel, and which price would
falsify the current scenarios.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .channel import Channel
from .constants import (
    CONFLUENCE_CHANNEL_TOLERANCE,
    CONFLUENCE_EXTENSION_LEVELS,
    CONFLUENCE_MIN_SCORE,
    CONFLUENCE_RATIO_TOLERANCE,
    CONFLUENCE_RETRACEMENT_LEVELS,
)
from .fibonacci import swing_ratio
from .numeric import Num, is_nan, nan_like
from .scenario_set import ScenarioSet
from .types import Swing


class RatioType(Enum):
    RETRACEMENT = "RETRACEMENT"
    EXTENSION = "EXTENSION"
    NONE = "NONE"


class InvalidationMode(Enum):
    """
    PRIMARY: the base case's invalidation price.
    CONSERVATIVE: tightest level among high-confidence scenarios.
    AGGRESSIVE: widest level among all scenarios.
    """
    PRIMARY = "PRIMARY"
    CONSERVATIVE = "CONSERVATIVE"
    AGGRESSIVE = "AGGRESSIVE"


@dataclass(frozen=True)
class SwingRatio:
    """Latest leg amplitude over the previous leg's; ``value`` is NaN for NONE."""
    type: RatioType
    value: float

    @classmethod
    def none(cls) -> "SwingRatio":
        return cls(RatioType.NONE, float("nan"))


def latest_ratio(swings: Sequence[Swing]) -> SwingRatio:
    """
    Ratio of the last swing to the one before it.

    A ratio up to 1.0 is a retracement of the previous leg, anything larger
    an extension beyond it.
    """
    if len(swings) < 2:
        return SwingRatio.none()
    value = swing_ratio(swings[-1], swings[-2])
    if math.isnan(value):
        return SwingRatio.none()
    kind = RatioType.EXTENSION if value > 1.0 else RatioType.RETRACEMENT
    return SwingRatio(kind, value)


def matches_ratio_level(ratio: SwingRatio, tolerance: float = CONFLUENCE_RATIO_TOLERANCE) -> bool:
    if ratio.type is RatioType.NONE or math.isnan(ratio.value):
        return False
    if ratio.type is RatioType.RETRACEMENT:
        levels = CONFLUENCE_RETRACEMENT_LEVELS
    else:
        levels = CONFLUENCE_EXTENSION_LEVELS
    return any(abs(ratio.value - level) <= tolerance for level in levels)


def confluence_score(
    ratio: SwingRatio,
    price: Optional[Num],
    channel: Optional[Channel],
    index: Optional[int] = None,
    channel_tolerance: float = CONFLUENCE_CHANNEL_TOLERANCE,
) -> int:
    """One point for a ratio near a Fibonacci level, one for price inside the channel."""
    score = 0
    if matches_ratio_level(ratio):
        score += 1
    if channel is not None and channel.is_valid and not is_nan(price):
        if channel.contains(price, index, tolerance=channel_tolerance):
            score += 1
    return score


def is_confluent(score: int, minimum: int = CONFLUENCE_MIN_SCORE) -> bool:
    return score >= minimum


def invalidation_level(scenario_set: ScenarioSet, mode: InvalidationMode = InvalidationMode.PRIMARY) -> Num:
    """
    Price level that falsifies the set under ``mode``.

    CONSERVATIVE takes the highest level for bullish and the lowest for
    bearish high-confidence scenarios; AGGRESSIVE the reverse over every
    scenario. Direction is fixed by the first usable scenario. NaN when no
    scenario qualifies.
    """
    base = scenario_set.base()
    like = base.invalidation_price if base is not None else None
    if mode is InvalidationMode.PRIMARY:
        return base.invalidation_price if base is not None else nan_like(like)

    level = None
    bullish = None
    for scenario in scenario_set:
        if mode is InvalidationMode.CONSERVATIVE and not scenario.is_high_confidence:
            continue
        price = scenario.invalidation_price
        if is_nan(price):
            continue
        if level is None:
            level, bullish = price, scenario.bullish_direction
        elif (mode is InvalidationMode.CONSERVATIVE) == bullish:
            level = max(level, price)
        else:
            level = min(level, price)
    return nan_like(like) if level is None else level
