"""Core data types for Elliott wave analysis."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from .degree import Degree
from .numeric import Num, is_nan, is_valid, nan_like


@dataclass(frozen=True)
class Bar:
    """Single OHLC bar"""
    index: int
    timestamp: Optional[int]
    open: Num
    high: Num
    low: Num
    close: Num

    @property
    def date(self) -> Optional[datetime]:
        if self.timestamp is None:
            return None
        return datetime.fromtimestamp(self.timestamp)


class Phase(Enum):
    """Position within an impulse (1-5) or correction (A-C)."""
    NONE = "NONE"
    WAVE1 = "WAVE1"
    WAVE2 = "WAVE2"
    WAVE3 = "WAVE3"
    WAVE4 = "WAVE4"
    WAVE5 = "WAVE5"
    CORRECTIVE_A = "CORRECTIVE_A"
    CORRECTIVE_B = "CORRECTIVE_B"
    CORRECTIVE_C = "CORRECTIVE_C"

    @property
    def is_impulse(self) -> bool:
        return self in _IMPULSE_PHASES

    @property
    def is_corrective(self) -> bool:
        return self in _CORRECTIVE_PHASES

    @property
    def impulse_index(self) -> int:
        """1..5 for impulse phases, 0 otherwise."""
        if self.is_impulse:
            return _IMPULSE_PHASES.index(self) + 1
        return 0

    @property
    def corrective_index(self) -> int:
        """1..3 for A/B/C, 0 otherwise."""
        if self.is_corrective:
            return _CORRECTIVE_PHASES.index(self) + 1
        return 0

    @property
    def position(self) -> int:
        """Number of legs the phase implies: impulse or corrective index."""
        return self.impulse_index or self.corrective_index

    @property
    def completes_structure(self) -> bool:
        return self in (Phase.WAVE5, Phase.CORRECTIVE_C)

    @classmethod
    def impulse(cls, count: int) -> "Phase":
        """Impulse phase for ``count`` legs (1..5)."""
        if not 1 <= count <= len(_IMPULSE_PHASES):
            raise ValueError(f"Impulse leg count must be 1..5, got {count}")
        return _IMPULSE_PHASES[count - 1]

    @classmethod
    def corrective(cls, count: int) -> "Phase":
        """Corrective phase for ``count`` legs (1..3)."""
        if not 1 <= count <= len(_CORRECTIVE_PHASES):
            raise ValueError(f"Corrective leg count must be 1..3, got {count}")
        return _CORRECTIVE_PHASES[count - 1]


_IMPULSE_PHASES = (Phase.WAVE1, Phase.WAVE2, Phase.WAVE3, Phase.WAVE4, Phase.WAVE5)
_CORRECTIVE_PHASES = (Phase.CORRECTIVE_A, Phase.CORRECTIVE_B, Phase.CORRECTIVE_C)


class ScenarioType(Enum):
    """Pattern family a scenario hypothesises."""
    IMPULSE = "IMPULSE"
    CORRECTIVE_ZIGZAG = "CORRECTIVE_ZIGZAG"
    CORRECTIVE_FLAT = "CORRECTIVE_FLAT"

    @property
    def is_impulse(self) -> bool:
        return self is ScenarioType.IMPULSE

    @property
    def is_corrective(self) -> bool:
        return not self.is_impulse

    @property
    def max_swings(self) -> int:
        return 5 if self.is_impulse else 3

    @property
    def id_prefix(self) -> str:
        return {
            ScenarioType.IMPULSE: "impulse",
            ScenarioType.CORRECTIVE_ZIGZAG: "zigzag",
            ScenarioType.CORRECTIVE_FLAT: "flat",
        }[self]


class TrendDirection(Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Swing:
    """
    Directional price leg between two confirmed pivots.

    Attributes:
        from_index: Bar index of the starting pivot.
        to_index: Bar index of the ending pivot (strictly after from_index).
        from_price: Price at the starting pivot.
        to_price: Price at the ending pivot.
        degree: Degree the swing was detected at.

    Example:
        >>> s = Swing(0, 3, Decimal("100"), Decimal("110"), Degree.MINOR)
        >>> s.is_rising, s.amplitude, s.length
        (True, Decimal('10'), 3)
    """
    from_index: int
    to_index: int
    from_price: Num
    to_price: Num
    degree: Degree

    def __post_init__(self):
        if self.to_index <= self.from_index:
            raise ValueError(
                f"Swing to_index ({self.to_index}) must be greater than from_index ({self.from_index})"
            )

    @property
    def is_valid(self) -> bool:
        return is_valid(self.from_price) and is_valid(self.to_price)

    @property
    def is_rising(self) -> bool:
        if not self.is_valid:
            return False
        return self.to_price > self.from_price

    @property
    def amplitude(self) -> Num:
        if not self.is_valid:
            return nan_like(self.from_price)
        return abs(self.to_price - self.from_price)

    @property
    def length(self) -> int:
        return self.to_index - self.from_index

    @property
    def high(self) -> Num:
        return self.to_price if self.is_rising else self.from_price

    @property
    def low(self) -> Num:
        return self.from_price if self.is_rising else self.to_price


def alternates(swings: Sequence[Swing]) -> bool:
    """True when consecutive swings strictly alternate direction."""
    for previous, current in zip(swings, swings[1:]):
        if previous.is_rising == current.is_rising:
            return False
    return True


def has_nan(swings: Sequence[Swing]) -> bool:
    return any(is_nan(s.from_price) or is_nan(s.to_price) for s in swings)
