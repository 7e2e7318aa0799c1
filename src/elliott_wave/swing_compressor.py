"""
Swing compression (noise filtering).

Removes swings whose amplitude or bar length is too small to matter at the
analysed degree. Work happens on the pivot sequence behind the swings:
removing a swing deletes one of its pivots and merges the two same-type
pivots that become adjacent, keeping the more extreme. Legs left pointing
the wrong way are removed the same way. The output therefore still
alternates.
"""

import logging
import math
from typing import List, Optional

from .numeric import Num, is_nan, to_num
from .swing_detector import Pivot, merge_same_type, pivots_to_swings
from .types import Swing
from .wave_config import CompressorConfig

logger = logging.getLogger(__name__)


class SwingCompressor:
    """
    Filters short or shallow swings.

    Args:
        config: Minimum amplitude (fraction of the reference price) and
            minimum bar length. A disabled config returns the input unchanged.
    """

    def __init__(self, config: Optional[CompressorConfig] = None):
        self.config = config or CompressorConfig()

    def compress(self, swings: List[Swing], reference_price: Optional[Num] = None) -> List[Swing]:
        """
        Compress ``swings``.

        Args:
            swings: Alternating swing sequence.
            reference_price: Price the amplitude percentage applies to,
                normally the latest close. Defaults to the last swing's end.

        Returns:
            A new alternating swing list.
        """
        if not swings or not self.config.enabled:
            return list(swings)

        degree = swings[0].degree
        min_amplitude = self._min_amplitude(swings, reference_price)
        pivots = swings_to_pivots(swings)
        while True:
            index = self._worst_swing(pivots, min_amplitude)
            if index is None:
                break
            pivots = _drop_leg(pivots, index)
            pivots = _drop_inverted_legs(pivots)

        result = pivots_to_swings(pivots, degree)
        if len(result) != len(swings):
            logger.debug("Compressed %d swings to %d", len(swings), len(result))
        return result

    def _min_amplitude(self, swings: List[Swing], reference_price: Optional[Num]) -> Optional[Num]:
        if self.config.min_amplitude_percent <= 0:
            return None
        reference = reference_price if reference_price is not None else swings[-1].to_price
        if is_nan(reference):
            return None
        return abs(reference) * to_num(self.config.min_amplitude_percent, like=reference)

    def _worst_swing(self, pivots: List[Pivot], min_amplitude: Optional[Num]) -> Optional[int]:
        """Index of the smallest offending leg (pivots[i] -> pivots[i+1]), or None."""
        worst = None
        worst_key = None
        for i, (start, end) in enumerate(zip(pivots, pivots[1:])):
            amplitude = abs(end.price - start.price)
            too_short = self.config.min_bars > 0 and end.index - start.index < self.config.min_bars
            too_small = min_amplitude is not None and amplitude < min_amplitude
            if not (too_short or too_small):
                continue
            key = (amplitude, i)
            if worst_key is None or key < worst_key:
                worst, worst_key = i, key
        return worst


def swings_to_pivots(swings: List[Swing]) -> List[Pivot]:
    """Pivot sequence behind an alternating swing list."""
    if not swings:
        return []
    first = swings[0]
    pivots = [Pivot(first.from_index, first.from_price, not first.is_rising)]
    for swing in swings:
        pivots.append(Pivot(swing.to_index, swing.to_price, swing.is_rising))
    return pivots


def _drop_leg(pivots: List[Pivot], index: int) -> List[Pivot]:
    """
    Remove the leg ``pivots[index] -> pivots[index + 1]``.

    One of the leg's two pivots is deleted and the same-type pivots left
    adjacent are merged, keeping the more extreme. The pivot deleted is the
    one that loses less price extreme against its remaining same-type
    neighbours; ties delete the leg's start.
    """
    start_loss = _extreme_loss(pivots, index)
    end_loss = _extreme_loss(pivots, index + 1)
    drop = index if start_loss <= end_loss else index + 1
    return merge_same_type(pivots[:drop] + pivots[drop + 1:])


def _extreme_loss(pivots: List[Pivot], index: int) -> float:
    """How far ``pivots[index]`` lies beyond its nearest same-type neighbours (inf when it has none)."""
    pivot = pivots[index]
    neighbours = [pivots[j].price for j in (index - 2, index + 2) if 0 <= j < len(pivots)]
    if not neighbours:
        return math.inf
    if pivot.is_high:
        return max(0.0, float(pivot.price - max(neighbours)))
    return max(0.0, float(min(neighbours) - pivot.price))


def _drop_inverted_legs(pivots: List[Pivot]) -> List[Pivot]:
    """Remove legs whose end does not lie beyond their start in the pivot's direction."""
    changed = True
    while changed and len(pivots) >= 2:
        changed = False
        for i, (start, end) in enumerate(zip(pivots, pivots[1:])):
            inverted = end.price <= start.price if end.is_high else end.price >= start.price
            if inverted:
                pivots = _drop_leg(pivots, i)
                changed = True
                break
    return pivots
