"""
Shared test fixtures and helpers for Elliott wave tests.
"""

from decimal import Decimal

import pytest

from src.elliott_wave.degree import Degree
from src.elliott_wave.price_series import PriceSeries
from src.elliott_wave.types import Bar, Swing

# 2020-01-01 00:00:00 UTC
START_TIMESTAMP = 1577836800

# Daily close pivots: five-wave advance (0-28), A-B-C decline (28-43), then
# a partial rebound that has not yet reversed.
BTC_PIVOTS = [
    (0, 30000),
    (6, 33000),
    (10, 31200),
    (18, 36000),
    (22, 34200),
    (28, 37500),
    (33, 33900),
    (37, 36300),
    (43, 32400),
    (46, 34200),
]


def make_bar(
    index: int,
    open_: float,
    high: float,
    low: float,
    close: float,
    timestamp: int = None,
) -> Bar:
    """Helper to create Bar objects for testing.

    Args:
        index: Bar index in the sequence
        open_: Opening price
        high: High price
        low: Low price
        close: Closing price
        timestamp: Unix timestamp (defaults to START_TIMESTAMP + index days)

    Returns:
        Bar object with Decimal prices
    """
    return Bar(
        index=index,
        timestamp=timestamp or START_TIMESTAMP + index * 86400,
        open=Decimal(str(open_)),
        high=Decimal(str(high)),
        low=Decimal(str(low)),
        close=Decimal(str(close)),
    )


def make_swing(from_index: int, to_index: int, from_price, to_price, degree: Degree = Degree.MINOR) -> Swing:
    """Swing with Decimal prices."""
    return Swing(from_index, to_index, Decimal(str(from_price)), Decimal(str(to_price)), degree)


def swing_chain(points, degree: Degree = Degree.MINOR):
    """Alternating swings through consecutive (index, price) points."""
    return [make_swing(a[0], b[0], a[1], b[1], degree) for a, b in zip(points, points[1:])]


def interpolate_closes(pivots):
    """Linearly interpolated closes through (index, price) pivots, rounded to cents."""
    closes = []
    for (i0, p0), (i1, p1) in zip(pivots, pivots[1:]):
        for i in range(i0, i1):
            value = p0 + (p1 - p0) * (i - i0) / (i1 - i0)
            closes.append(Decimal(str(round(value, 2))))
    closes.append(Decimal(str(pivots[-1][1])))
    return closes


def closes_series(closes, use_decimal: bool = True, name: str = "") -> PriceSeries:
    return PriceSeries.from_closes(closes, use_decimal=use_decimal, start_timestamp=START_TIMESTAMP, name=name)


@pytest.fixture
def btc_series() -> PriceSeries:
    """Daily BTC-USD style series: impulse up, zigzag down, partial rebound."""
    return closes_series(interpolate_closes(BTC_PIVOTS), name="BTC-USD")


@pytest.fixture
def impulse_swings():
    """Textbook rising five-wave impulse."""
    return swing_chain(BTC_PIVOTS[:6])


@pytest.fixture
def cycle_swings():
    """Rising impulse followed by a complete A-B-C correction."""
    return swing_chain(BTC_PIVOTS[:9])
