"""
Shared test utilities for Elliott wave tests.

These are plain utility functions, not pytest fixtures.
"""

from decimal import Decimal
from typing import List, Optional

from src.elliott_wave.confidence import Confidence
from src.elliott_wave.degree import Degree
from src.elliott_wave.scenario import Scenario, create_scenario
from src.elliott_wave.types import Phase, ScenarioType, Swing


def make_confidence(overall: float, **scores) -> Confidence:
    """
    Confidence whose sub-scores default to ``overall``.

    Args:
        overall: Aggregate score.
        **scores: Optional overrides for individual sub-scores.
    """
    values = {name: scores.get(name, overall) for name in ("fibonacci", "time", "alternation", "channel", "completeness")}
    return Confidence(
        overall=overall,
        primary_reason="Strong Fibonacci conformance",
        weakest_factor="Time proportions",
        **values,
    )


def zigzag_swings(count: int, rising_first: bool = True, start_index: int = 0, start_price: float = 100.0,
                  degree: Degree = Degree.MINOR) -> List[Swing]:
    """``count`` alternating swings of 5 bars: 10-point moves, 5-point pullbacks."""
    swings = []
    index = start_index
    price = Decimal(str(start_price))
    rising = rising_first
    for leg in range(count):
        move = Decimal("10") if leg % 2 == 0 else Decimal("5")
        end = price + move if rising else price - move
        swings.append(Swing(index, index + 5, price, end, degree))
        index += 5
        price = end
        rising = not rising
    return swings


def make_scenario(
    scenario_id: str,
    phase: Phase,
    confidence: float,
    bullish: bool = True,
    scenario_type: Optional[ScenarioType] = None,
    invalidation: Optional[float] = None,
    start_index: int = 0,
    degree: Degree = Degree.MINOR,
    targets=(),
) -> Scenario:
    """Valid scenario with synthetic swings matching ``phase``."""
    if scenario_type is None:
        scenario_type = ScenarioType.IMPULSE if phase.is_impulse else ScenarioType.CORRECTIVE_ZIGZAG
    swings = zigzag_swings(phase.position, rising_first=bullish, start_index=start_index, degree=degree)
    level = swings[0].from_price if invalidation is None else Decimal(str(invalidation))
    return create_scenario(
        scenario_type,
        phase,
        swings,
        make_confidence(confidence),
        degree,
        invalidation_price=level,
        fibonacci_targets=[Decimal(str(t)) for t in targets],
        scenario_id=scenario_id,
        bullish_direction=bullish,
    )
