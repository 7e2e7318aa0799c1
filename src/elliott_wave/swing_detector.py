"""
Zigzag swing detection.

Scans a price series and emits the ordered sequence of alternating
pivot-to-pivot swings. Two threshold strategies share one scanner:

- fixed: a pivot is confirmed once price reverses by a fixed fraction of
  the running extreme.
- adaptive: the reversal threshold is a Wilder-smoothed average true range
  times a multiplier, optionally floored and capped by absolute bounds.

Only confirmed pivots produce swings; the leg still forming after the last
pivot is not reported.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd

from .degree import Degree
from .numeric import Num, is_nan, to_num
from .price_series import PriceSeries
from .types import Swing
from .wave_config import ZigzagConfig

logger = logging.getLogger(__name__)


class Pivot(NamedTuple):
    """Confirmed turning point."""
    index: int
    price: Num
    is_high: bool


def average_true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int) -> np.ndarray:
    """
    Wilder-smoothed average true range.

    The first bar's true range is its high-low span. Bars with NaN prices
    keep the previous smoothed value.

    Args:
        highs: Bar highs.
        lows: Bar lows.
        closes: Bar closes.
        period: Smoothing period (alpha = 1 / period).

    Returns:
        Array of ATR values, one per bar.
    """
    if len(closes) == 0:
        return np.array([], dtype=float)
    prev_close = np.concatenate(([np.nan], closes[:-1]))
    true_range = np.fmax(highs - lows, np.fmax(np.abs(highs - prev_close), np.abs(lows - prev_close)))
    smoothed = pd.Series(true_range).ewm(alpha=1.0 / period, adjust=False).mean()
    return smoothed.to_numpy()


class SwingDetector:
    """
    Zigzag swing detector for one degree.

    Args:
        config: Zigzag sensitivity (fixed or adaptive).
        degree: Degree stamped on every emitted swing.

    Example:
        >>> detector = SwingDetector(ZigzagConfig.fixed(0.05), Degree.MINOR)
        >>> swings = detector.detect(series)
    """

    def __init__(self, config: Optional[ZigzagConfig] = None, degree: Degree = Degree.MINOR):
        self.config = config or ZigzagConfig.default()
        self.degree = degree
        self.logger = logging.getLogger(__name__)

    def detect(self, series: PriceSeries, end_index: Optional[int] = None) -> List[Swing]:
        """
        Detect swings ending at or before ``end_index``.

        Returns an empty list for empty or too-short input.
        """
        if series.is_empty:
            return []
        last = series.end_index if end_index is None else min(end_index, series.end_index)
        if last < 1:
            return []

        pivots = self.detect_pivots(series, last)
        swings = pivots_to_swings(pivots, self.degree)
        self.logger.debug(
            "Detected %d pivots / %d swings at %s up to bar %d (%s mode)",
            len(pivots), len(swings), self.degree.name, last, self.config.mode,
        )
        return swings

    def detect_pivots(self, series: PriceSeries, last: int) -> List[Pivot]:
        """
        Run the zigzag state machine over bars 0..last.

        When a reversal confirms, the new leg starts from the most extreme
        bar since the confirmed pivot, not from the confirming bar.
        """
        thresholds = self._adaptive_thresholds(series, last) if self.config.mode == "adaptive" else None
        min_bars = self.config.min_bars_between_pivots

        pivots: List[Pivot] = []
        state = 0  # 0 undefined, 1 tracking a high, -1 tracking a low
        hi = lo = None
        hi_idx = lo_idx = -1

        for i in range(last + 1):
            h, l = self._prices(series, i)
            if is_nan(h) or is_nan(l):
                continue

            if state == 0:
                if hi is None or h > hi:
                    hi, hi_idx = h, i
                if lo is None or l < lo:
                    lo, lo_idx = l, i
                confirm_high = hi_idx < i and self._reversed(hi - l, hi, i, thresholds)
                confirm_low = lo_idx < i and self._reversed(h - lo, lo, i, thresholds)
                if confirm_high and confirm_low:
                    if hi_idx < lo_idx:
                        pivots.extend([Pivot(hi_idx, hi, True), Pivot(lo_idx, lo, False)])
                        state = 1
                        hi, hi_idx = self._extreme_between(series, lo_idx + 1, i, highest=True)
                    else:
                        pivots.extend([Pivot(lo_idx, lo, False), Pivot(hi_idx, hi, True)])
                        state = -1
                        lo, lo_idx = self._extreme_between(series, hi_idx + 1, i, highest=False)
                elif confirm_high:
                    pivots.append(Pivot(hi_idx, hi, True))
                    state = -1
                    lo, lo_idx = self._extreme_between(series, hi_idx + 1, i, highest=False)
                elif confirm_low:
                    pivots.append(Pivot(lo_idx, lo, False))
                    state = 1
                    hi, hi_idx = self._extreme_between(series, lo_idx + 1, i, highest=True)
                continue

            if state == 1:
                # A lower low before the high confirms extends the previous low pivot.
                if l < pivots[-1].price:
                    pivots[-1] = Pivot(i, l, False)
                    hi, hi_idx = h, i
                    continue
                if h > hi:
                    hi, hi_idx = h, i
                    continue
                if hi_idx - pivots[-1].index >= min_bars and self._reversed(hi - l, hi, i, thresholds):
                    pivots.append(Pivot(hi_idx, hi, True))
                    state = -1
                    lo, lo_idx = self._extreme_between(series, hi_idx + 1, i, highest=False)
            else:
                if h > pivots[-1].price:
                    pivots[-1] = Pivot(i, h, True)
                    lo, lo_idx = l, i
                    continue
                if l < lo:
                    lo, lo_idx = l, i
                    continue
                if lo_idx - pivots[-1].index >= min_bars and self._reversed(h - lo, lo, i, thresholds):
                    pivots.append(Pivot(lo_idx, lo, False))
                    state = 1
                    hi, hi_idx = self._extreme_between(series, lo_idx + 1, i, highest=True)

        return merge_same_type(pivots)

    def _prices(self, series: PriceSeries, index: int) -> Tuple[Num, Num]:
        """(peak price, trough price) of a bar for the configured source."""
        if self.config.price_source == "high_low":
            return series.high(index), series.low(index)
        close = series.close(index)
        return close, close

    def _extreme_between(self, series: PriceSeries, start: int, end: int, highest: bool) -> Tuple[Num, int]:
        """Highest peak (or lowest trough) over bars start..end, earliest on ties, NaN bars skipped."""
        best, best_idx = None, -1
        for j in range(start, end + 1):
            h, l = self._prices(series, j)
            if is_nan(h) or is_nan(l):
                continue
            price = h if highest else l
            if best is None or (price > best if highest else price < best):
                best, best_idx = price, j
        return best, best_idx

    def _reversed(self, move: Num, extreme: Num, index: int, thresholds) -> bool:
        """True when ``move`` is a strictly positive reversal of at least the threshold."""
        if move <= 0:
            return False
        if thresholds is None:
            threshold = abs(extreme) * to_num(self.config.reversal_percent, like=extreme)
        else:
            threshold = thresholds[index]
            if threshold is None:
                return False
        return move >= threshold

    def _adaptive_thresholds(self, series: PriceSeries, last: int) -> List[Optional[Num]]:
        """Per-bar ATR x multiplier, clamped, in the series' numeric type."""
        highs, lows, closes = series.as_arrays(last)
        atr = average_true_range(highs, lows, closes, self.config.atr_period)
        raw = atr * self.config.atr_multiplier
        if self.config.min_threshold > 0:
            raw = np.fmax(raw, self.config.min_threshold)
        if self.config.max_threshold > 0:
            raw = np.fmin(raw, self.config.max_threshold)

        sample = series.close(0)
        thresholds: List[Optional[Num]] = []
        for value in raw:
            if np.isnan(value):
                thresholds.append(None)
            else:
                # Rounded so Decimal thresholds carry no binary noise.
                thresholds.append(to_num(round(float(value), 10), like=sample))
        return thresholds


def merge_same_type(pivots: List[Pivot]) -> List[Pivot]:
    """
    Collapse consecutive pivots of the same type, keeping the more extreme.

    Pivots with NaN prices are dropped.
    """
    merged: List[Pivot] = []
    for pivot in pivots:
        if is_nan(pivot.price):
            continue
        if merged and merged[-1].is_high == pivot.is_high:
            previous = merged[-1]
            if pivot.is_high:
                keep = pivot if pivot.price > previous.price else previous
            else:
                keep = pivot if pivot.price < previous.price else previous
            merged[-1] = keep
            continue
        merged.append(pivot)
    return merged


def pivots_to_swings(pivots: List[Pivot], degree: Degree) -> List[Swing]:
    """Pair consecutive pivots into swings."""
    swings = []
    for start, end in zip(pivots, pivots[1:]):
        if end.index <= start.index:
            continue
        swings.append(Swing(start.index, end.index, start.price, end.price, degree))
    return swings
