"""
Pairwise and group comparisons between scenarios.

Used by reporting and by callers that want to know how far competing wave
counts disagree, and which price levels they have in common.
"""

from typing import Iterable, Optional, Tuple

from .numeric import Num, is_nan, nan_like
from .scenario import Scenario
from .types import Phase


def divergence_score(first: Optional[Scenario], second: Optional[Scenario]) -> float:
    """
    How strongly two scenarios disagree, in [0, 1].

    Phase mismatch adds 0.2 (another 0.2 when one is impulsive and the other
    corrective), opposite direction adds 0.3, type mismatch adds 0.15
    (another 0.15 across the impulse/corrective divide). A missing scenario
    diverges completely.
    """
    if first is None or second is None:
        return 1.0
    score = 0.0
    if first.current_phase is not second.current_phase:
        score += 0.2
        if first.current_phase.is_impulse != second.current_phase.is_impulse:
            score += 0.2
    if first.bullish_direction != second.bullish_direction:
        score += 0.3
    if first.type is not second.type:
        score += 0.15
        if first.type.is_impulse != second.type.is_impulse:
            score += 0.15
    return min(1.0, score)


def shared_invalidation(scenarios: Iterable[Scenario]) -> Optional[Num]:
    """
    Invalidation level every scenario respects.

    The lowest level for bullish scenarios, the highest for bearish ones.
    Mixed directions have no comparable level and give NaN; so does a
    collection without any usable invalidation price. Returns None for an
    empty collection.
    """
    scenarios = list(scenarios)
    if not scenarios:
        return None
    like = scenarios[0].invalidation_price
    shared = None
    direction = None
    for scenario in scenarios:
        level = scenario.invalidation_price
        if is_nan(level):
            continue
        if direction is None:
            direction, shared = scenario.bullish_direction, level
        elif direction != scenario.bullish_direction:
            return nan_like(like)
        elif direction:
            shared = min(shared, level)
        else:
            shared = max(shared, level)
    return nan_like(like) if shared is None else shared


def average_confidence(scenarios: Iterable[Scenario]) -> float:
    scores = [s.confidence_score for s in scenarios]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def high_confidence_phase(scenarios: Iterable[Scenario]) -> Phase:
    """The phase all high-confidence scenarios agree on, NONE if they differ or none exist."""
    agreed = None
    for scenario in scenarios:
        if not scenario.is_high_confidence:
            continue
        if agreed is None:
            agreed = scenario.current_phase
        elif agreed is not scenario.current_phase:
            return Phase.NONE
    return agreed or Phase.NONE


def has_directional_consensus(scenarios: Iterable[Scenario]) -> bool:
    """True when at least one scenario is high-confidence and all such scenarios point the same way."""
    agreed = None
    for scenario in scenarios:
        if not scenario.is_high_confidence:
            continue
        if agreed is None:
            agreed = scenario.bullish_direction
        elif agreed != scenario.bullish_direction:
            return False
    return agreed is not None


def common_target_range(scenarios: Iterable[Scenario]) -> Optional[Tuple[Num, Num]]:
    """(lowest, highest) primary target, or None when no scenario has one."""
    targets = [s.primary_target for s in scenarios if not is_nan(s.primary_target)]
    if not targets:
        return None
    return min(targets), max(targets)


def compare_summary(first: Optional[Scenario], second: Optional[Scenario]) -> str:
    """Multi-line human readable comparison of two scenarios."""
    if first is None or second is None:
        return "Cannot compare missing scenarios"
    lines = [
        "Scenario comparison:",
        f"  {first.id}: {first.current_phase.value} ({first.confidence.as_percentage:.1f}%)",
        f"  {second.id}: {second.current_phase.value} ({second.confidence.as_percentage:.1f}%)",
        f"  Divergence: {divergence_score(first, second) * 100:.1f}%",
        "  Phase: AGREE" if first.current_phase is second.current_phase else "  Phase: DIFFER",
    ]
    if first.bullish_direction == second.bullish_direction:
        lines.append(f"  Direction: AGREE ({first.direction.value.lower()})")
    else:
        lines.append("  Direction: DIFFER")
    return "\n".join(lines)
