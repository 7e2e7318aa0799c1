"""
Numeric helpers for prices held as Decimal or float.

Prices keep the numeric type of the series they come from. Literals that
take part in price arithmetic (Fibonacci multipliers, thresholds) are
converted to that type with ``to_num`` so Decimal and float never mix.
Scores and ratios are plain floats.
"""

import math
from decimal import Decimal
from typing import Optional, Union

Num = Union[Decimal, float]


def is_nan(value: Optional[Num]) -> bool:
    """True for None, Decimal NaN or float NaN."""
    if value is None:
        return True
    if isinstance(value, Decimal):
        return value.is_nan()
    return math.isnan(value)


def is_valid(value: Optional[Num]) -> bool:
    return not is_nan(value)


def to_num(value, like: Optional[Num] = None) -> Num:
    """
    Convert an int/float/str literal to the numeric type of ``like``.

    Decimal conversion goes through ``str`` so that 1.618 stays 1.618
    rather than its binary approximation.

    Example:
        >>> to_num(1.618, like=Decimal("10"))
        Decimal('1.618')
        >>> to_num(1.618, like=10.0)
        1.618
    """
    if isinstance(like, Decimal):
        if isinstance(value, Decimal):
            return value
        if isinstance(value, float) and math.isnan(value):
            return Decimal("NaN")
        return Decimal(str(value))
    if isinstance(value, Decimal) and value.is_nan():
        return float("nan")
    return float(value)


def nan_like(like: Optional[Num] = None) -> Num:
    """NaN sentinel in the numeric type of ``like``."""
    if isinstance(like, Decimal):
        return Decimal("NaN")
    return float("nan")


def to_float(value: Optional[Num]) -> float:
    """Float view of a price, NaN for None/NaN."""
    if is_nan(value):
        return float("nan")
    return float(value)


def finite_or_none(value: Optional[Num]) -> Optional[float]:
    """Float value for serialization; NaN and infinities become None."""
    if value is None or is_nan(value):
        return None
    as_float = float(value)
    if math.isinf(as_float):
        return None
    return as_float


def clamp01(value: float) -> float:
    """Clamp to [0, 1]; NaN maps to 0."""
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))
