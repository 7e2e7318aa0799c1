"""
Immutable price series adapter.

The engine only reads high/low/close values and the index bounds of a
series. ``PriceSeries`` wraps an ordered tuple of ``Bar`` objects and keeps
every price in one numeric type (Decimal or float).
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .numeric import Num, is_nan, to_float, to_num
from .types import Bar

logger = logging.getLogger(__name__)


class PriceSeries:
    """
    Ordered, zero-indexed, immutable sequence of bars.

    Args:
        bars: Bars in chronological order. Bar indices are reassigned to
            0..n-1 if they are not already sequential.
        name: Optional label (e.g. "BTC-USD").

    Example:
        >>> series = PriceSeries.from_closes([100, 110, 104], use_decimal=True)
        >>> series.end_index, series.close(1)
        (2, Decimal('110'))
    """

    def __init__(self, bars: Sequence[Bar], name: str = ""):
        normalized = []
        for position, bar in enumerate(bars):
            if bar.index != position:
                bar = Bar(position, bar.timestamp, bar.open, bar.high, bar.low, bar.close)
            normalized.append(bar)
        self._bars: Tuple[Bar, ...] = tuple(normalized)
        self.name = name

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self):
        return iter(self._bars)

    def __getitem__(self, index: int) -> Bar:
        return self._bars[index]

    @property
    def bars(self) -> Tuple[Bar, ...]:
        return self._bars

    @property
    def is_empty(self) -> bool:
        return not self._bars

    @property
    def begin_index(self) -> int:
        return 0

    @property
    def end_index(self) -> int:
        """Index of the last bar, -1 for an empty series."""
        return len(self._bars) - 1

    @property
    def uses_decimal(self) -> bool:
        return bool(self._bars) and isinstance(self._bars[0].close, Decimal)

    def high(self, index: int) -> Num:
        return self._bars[index].high

    def low(self, index: int) -> Num:
        return self._bars[index].low

    def close(self, index: int) -> Num:
        return self._bars[index].close

    def num(self, value) -> Num:
        """Convert a literal into this series' numeric type."""
        sample = self._bars[0].close if self._bars else None
        return to_num(value, like=sample)

    def span_days(self, end_index: Optional[int] = None) -> Optional[float]:
        """Days covered from the first bar to ``end_index``; None without timestamps."""
        if self.is_empty:
            return None
        last = self.end_index if end_index is None else min(end_index, self.end_index)
        first_ts = self._bars[0].timestamp
        last_ts = self._bars[last].timestamp
        if first_ts is None or last_ts is None or last_ts <= first_ts:
            return None
        return (last_ts - first_ts) / 86400.0

    def as_arrays(self, end_index: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Float numpy arrays of (high, low, close) up to ``end_index`` inclusive."""
        last = self.end_index if end_index is None else min(end_index, self.end_index)
        bars = self._bars[:last + 1]
        highs = np.array([to_float(b.high) for b in bars], dtype=float)
        lows = np.array([to_float(b.low) for b in bars], dtype=float)
        closes = np.array([to_float(b.close) for b in bars], dtype=float)
        return highs, lows, closes

    @classmethod
    def from_closes(
        cls,
        closes: Iterable,
        use_decimal: bool = True,
        start_timestamp: Optional[int] = None,
        bar_seconds: int = 86400,
        name: str = "",
    ) -> "PriceSeries":
        """Build a series where open=high=low=close for each value."""
        like = Decimal(0) if use_decimal else 0.0
        bars = []
        for i, value in enumerate(closes):
            price = to_num(value, like=like)
            ts = None if start_timestamp is None else start_timestamp + i * bar_seconds
            bars.append(Bar(index=i, timestamp=ts, open=price, high=price, low=price, close=price))
        return cls(bars, name=name)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, use_decimal: bool = True, name: str = "") -> "PriceSeries":
        """
        Convert a DataFrame with OHLC columns to a PriceSeries.

        Column names are matched case-insensitively. A ``timestamp``,
        ``time``, ``date`` or ``datetime`` column, or a DatetimeIndex, is
        used for timestamps when present.

        Raises:
            ValueError: If a required price column is missing.
        """
        col_map = {str(c).lower(): c for c in df.columns}
        missing = [c for c in ("high", "low", "close") if c not in col_map]
        if missing:
            raise ValueError(f"DataFrame is missing required columns: {missing}")

        like = Decimal(0) if use_decimal else 0.0
        bars: List[Bar] = []
        for position, (idx, row) in enumerate(df.iterrows()):
            timestamp = _row_timestamp(row, col_map, idx)
            close = _price(row[col_map["close"]], like)
            open_ = _price(row[col_map["open"]], like) if "open" in col_map else close
            bars.append(Bar(
                index=position,
                timestamp=timestamp,
                open=open_,
                high=_price(row[col_map["high"]], like),
                low=_price(row[col_map["low"]], like),
                close=close,
            ))
        logger.debug("Loaded %d bars into PriceSeries %r", len(bars), name)
        return cls(bars, name=name)


def _price(value, like: Num) -> Num:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return to_num(float("nan"), like=like)
    return to_num(value, like=like)


def _row_timestamp(row, col_map, idx) -> Optional[int]:
    for ts_col in ("timestamp", "time", "date", "datetime"):
        if ts_col in col_map:
            value = row[col_map[ts_col]]
            if isinstance(value, (int, np.integer)):
                return int(value)
            if isinstance(value, (float, np.floating)) and not np.isnan(value):
                return int(value)
            if isinstance(value, str):
                return int(pd.Timestamp(value).timestamp())
            if hasattr(value, "timestamp"):
                return int(value.timestamp())
            return None
    if isinstance(idx, (datetime, pd.Timestamp)):
        return int(idx.timestamp())
    return None


def last_valid_close(series: PriceSeries, end_index: int) -> Optional[Num]:
    """Most recent non-NaN close at or before ``end_index``."""
    for i in range(min(end_index, series.end_index), -1, -1):
        close = series.close(i)
        if not is_nan(close):
            return close
    return None
