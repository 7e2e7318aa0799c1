"""
Price channel fitting.

The upper boundary runs through the ends of the two most recent rising
swings (peaks), the lower boundary through the ends of the two most recent
falling swings (troughs). Both lines are projected to the evaluation index.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .numeric import Num, is_nan, nan_like, to_float, to_num
from .types import Swing

logger = logging.getLogger(__name__)

MIN_CHANNEL_SWINGS = 4


@dataclass(frozen=True)
class ChannelLine:
    """Straight line through two (bar index, price) anchors."""
    index1: int
    price1: Num
    index2: int
    price2: Num

    def value_at(self, index: int) -> Num:
        if self.index2 == self.index1:
            return self.price2
        offset = to_num(index - self.index1, like=self.price1)
        span = to_num(self.index2 - self.index1, like=self.price1)
        return self.price1 + (self.price2 - self.price1) * offset / span


@dataclass(frozen=True)
class Channel:
    """
    Linear price envelope evaluated at ``evaluation_index``.

    ``upper``/``lower``/``median`` are NaN when no channel could be fitted.
    """
    upper: Num
    lower: Num
    median: Num
    evaluation_index: int
    upper_line: Optional[ChannelLine] = None
    lower_line: Optional[ChannelLine] = None

    @property
    def is_valid(self) -> bool:
        if is_nan(self.upper) or is_nan(self.lower):
            return False
        return self.upper > self.lower

    @property
    def reference(self) -> Num:
        return self.median

    @property
    def width(self) -> Num:
        if not self.is_valid:
            return nan_like(self.upper)
        return self.upper - self.lower

    def upper_at(self, index: int) -> Num:
        if self.upper_line is None:
            return self.upper
        return self.upper_line.value_at(index)

    def lower_at(self, index: int) -> Num:
        if self.lower_line is None:
            return self.lower
        return self.lower_line.value_at(index)

    def contains(self, price: Num, index: Optional[int] = None, tolerance: float = 0.0) -> bool:
        """
        True when ``price`` lies inside the channel at ``index``.

        Args:
            price: Price to test.
            index: Bar to evaluate the boundaries at; defaults to the
                evaluation index.
            tolerance: Allowed overshoot as a fraction of the channel width.
        """
        if not self.is_valid or is_nan(price):
            return False
        at = self.evaluation_index if index is None else index
        upper = to_float(self.upper_at(at))
        lower = to_float(self.lower_at(at))
        value = to_float(price)
        slack = abs(upper - lower) * tolerance + 1e-9 * max(abs(upper), abs(lower), 1.0)
        return lower - slack <= value <= upper + slack

    @classmethod
    def invalid(cls, evaluation_index: int, like: Optional[Num] = None) -> "Channel":
        nan = nan_like(like)
        return cls(nan, nan, nan, evaluation_index)


class ChannelFitter:
    """Fits a channel to the most recent swings."""

    def fit(self, swings: List[Swing], evaluation_index: int) -> Channel:
        """
        Fit a channel projected to ``evaluation_index``.

        Needs at least four swings with two rising and two falling among
        them; otherwise an invalid (NaN) channel is returned.
        """
        like = swings[0].to_price if swings else None
        if len(swings) < MIN_CHANNEL_SWINGS:
            return Channel.invalid(evaluation_index, like)

        rising = _latest(swings, rising=True)
        falling = _latest(swings, rising=False)
        if len(rising) < 2 or len(falling) < 2:
            return Channel.invalid(evaluation_index, like)

        upper_line = ChannelLine(rising[0].to_index, rising[0].to_price, rising[1].to_index, rising[1].to_price)
        lower_line = ChannelLine(falling[0].to_index, falling[0].to_price, falling[1].to_index, falling[1].to_price)
        upper = upper_line.value_at(evaluation_index)
        lower = lower_line.value_at(evaluation_index)
        if is_nan(upper) or is_nan(lower) or not upper > lower:
            logger.debug("Channel collapsed at bar %d (upper=%s, lower=%s)", evaluation_index, upper, lower)
            return Channel.invalid(evaluation_index, like)

        median = (upper + lower) / to_num(2, like=upper)
        return Channel(upper, lower, median, evaluation_index, upper_line, lower_line)


def _latest(swings: List[Swing], rising: bool) -> List[Swing]:
    """Last two valid swings in the given direction, oldest first."""
    picked = []
    for swing in reversed(swings):
        if swing.is_valid and swing.is_rising == rising:
            picked.append(swing)
            if len(picked) == 2:
                break
    picked.reverse()
    return picked
