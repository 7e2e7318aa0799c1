"""
Scenario value type.

A scenario is one self-consistent hypothesis about where price sits in a
wave structure. Scenarios are immutable and validated on construction:

- the phase belongs to the scenario type (impulse phases for IMPULSE,
  corrective phases for the corrective types)
- the swing count equals the phase position, so a WAVE5 impulse carries
  exactly 5 swings and a CORRECTIVE_C pattern exactly 3
- consecutive swings alternate direction
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .confidence import Confidence
from .degree import Degree
from .numeric import Num, finite_or_none, is_nan, nan_like
from .types import Phase, ScenarioType, Swing, TrendDirection, alternates


@dataclass(frozen=True)
class Scenario:
    """
    Immutable wave-count hypothesis.

    Attributes:
        id: Identifier, unique within a ScenarioSet.
        current_phase: Phase the latest swing represents.
        swings: Swings backing the hypothesis, oldest first.
        confidence: Confidence breakdown.
        degree: Degree the scenario was generated at.
        type: Pattern family.
        bullish_direction: Net direction of the structure.
        invalidation_price: Price whose breach falsifies the scenario.
        primary_target: First Fibonacci target, NaN when none applies.
        fibonacci_targets: All Fibonacci-derived targets.
        start_index: Bar index where the first swing starts.
    """
    id: str
    current_phase: Phase
    swings: Tuple[Swing, ...]
    confidence: Confidence
    degree: Degree
    type: ScenarioType
    bullish_direction: bool
    invalidation_price: Num
    primary_target: Num
    fibonacci_targets: Tuple[Num, ...]
    start_index: int

    def __post_init__(self):
        if not self.id:
            raise ValueError("Scenario id must be a non-empty string")
        if self.type.is_impulse and not self.current_phase.is_impulse:
            raise ValueError(f"{self.type.value} scenario cannot be in phase {self.current_phase.value}")
        if self.type.is_corrective and not self.current_phase.is_corrective:
            raise ValueError(f"{self.type.value} scenario cannot be in phase {self.current_phase.value}")
        expected = self.current_phase.position
        if len(self.swings) != expected:
            raise ValueError(
                f"{self.type.value} scenario in {self.current_phase.value} requires {expected} swings, "
                f"got {len(self.swings)}"
            )
        if not alternates(self.swings):
            raise ValueError(f"Scenario {self.id} swings must alternate direction")

    @property
    def confidence_score(self) -> float:
        return self.confidence.overall

    @property
    def direction(self) -> TrendDirection:
        return TrendDirection.BULLISH if self.bullish_direction else TrendDirection.BEARISH

    @property
    def is_bullish(self) -> bool:
        return self.bullish_direction

    @property
    def is_bearish(self) -> bool:
        return not self.bullish_direction

    @property
    def expects_completion(self) -> bool:
        return self.current_phase.completes_structure

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence.is_high_confidence

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence.is_low_confidence

    @property
    def end_index(self) -> int:
        return self.swings[-1].to_index

    def is_invalidated_by(self, price: Num) -> bool:
        """Bullish scenarios die below the invalidation price, bearish ones above it."""
        if is_nan(price) or is_nan(self.invalidation_price):
            return False
        if self.bullish_direction:
            return price < self.invalidation_price
        return price > self.invalidation_price

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary view; NaN prices become None."""
        return {
            "id": self.id,
            "current_phase": self.current_phase.value,
            "type": self.type.value,
            "degree": self.degree.value,
            "direction": self.direction.value,
            "confidence": self.confidence.overall,
            "invalidation_price": finite_or_none(self.invalidation_price),
            "primary_target": finite_or_none(self.primary_target),
            "fibonacci_targets": [finite_or_none(t) for t in self.fibonacci_targets],
            "start_index": self.start_index,
            "swings": [
                {
                    "from_index": s.from_index,
                    "to_index": s.to_index,
                    "from_price": finite_or_none(s.from_price),
                    "to_price": finite_or_none(s.to_price),
                    "is_rising": s.is_rising,
                }
                for s in self.swings
            ],
        }


def net_direction(swings: Sequence[Swing]) -> bool:
    """True when the sequence ends above where it started; ties follow the first swing."""
    first, last = swings[0], swings[-1]
    if is_nan(first.from_price) or is_nan(last.to_price) or last.to_price == first.from_price:
        return first.is_rising
    return last.to_price > first.from_price


def make_scenario_id(scenario_type: ScenarioType, start_index: int, phase: Phase) -> str:
    """Deterministic id, e.g. ``impulse-18-wave3``."""
    return f"{scenario_type.id_prefix}-{start_index}-{phase.value.lower()}"


def create_scenario(
    scenario_type: ScenarioType,
    phase: Phase,
    swings: Sequence[Swing],
    confidence: Confidence,
    degree: Degree,
    invalidation_price: Num,
    fibonacci_targets: Sequence[Num] = (),
    scenario_id: Optional[str] = None,
    bullish_direction: Optional[bool] = None,
) -> Scenario:
    """
    Validating factory for Scenario.

    Derives the id, direction, start index and primary target when not
    given.

    Raises:
        ValueError: If ``swings`` is empty or the scenario is inconsistent.
    """
    if not swings:
        raise ValueError(f"{scenario_type.value} scenario requires at least one swing")
    swings = tuple(swings)
    start_index = swings[0].from_index
    targets = tuple(fibonacci_targets)
    primary = targets[0] if targets else nan_like(swings[0].from_price)
    return Scenario(
        id=scenario_id or make_scenario_id(scenario_type, start_index, phase),
        current_phase=phase,
        swings=swings,
        confidence=confidence,
        degree=degree,
        type=scenario_type,
        bullish_direction=net_direction(swings) if bullish_direction is None else bullish_direction,
        invalidation_price=invalidation_price,
        primary_target=primary,
        fibonacci_targets=targets,
        start_index=start_index,
    )
