"""
Multi-factor confidence scoring.

Five independent sub-scores, each in [0, 1]:

- fibonacci: how well leg ratios sit inside their canonical ranges
- time: duration proportions between legs
- alternation: difference in depth and duration between waves 2 and 4
- channel: share of swing endpoints inside the fitted channel
- completeness: share of the expected leg count present

The aggregate is their weighted sum. Every score is clamped, and NaN
inputs score 0, so the [0, 1] bound holds for any input.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .channel import Channel
from .constants import (
    COMPLETION_BONUS,
    CORRECTION_LENGTH,
    FLAT_WAVEB_RETRACEMENT,
    HIGH_CONFIDENCE,
    IMPULSE_LENGTH,
    LOW_CONFIDENCE,
    NEUTRAL_SCORE,
    WAVE2_RETRACEMENT,
    WAVE3_EXTENSION,
    WAVE3_IDEAL,
    WAVE4_RETRACEMENT,
    WAVE5_IDEAL,
    WAVE5_PROJECTION,
    WAVEB_RETRACEMENT,
    WAVEC_EXTENSION,
    WAVEC_IDEAL,
)
from .fibonacci import swing_ratio
from .numeric import clamp01
from .types import Phase, ScenarioType, Swing
from .wave_config import ConfidenceWeights

FACTOR_NAMES = ("fibonacci", "time", "alternation", "channel", "completeness")

PRIMARY_REASONS = {
    "fibonacci": "Strong Fibonacci conformance",
    "time": "Good time proportions",
    "alternation": "Clear wave alternation",
    "channel": "Strong channel adherence",
    "completeness": "Complete structure",
}

WEAKEST_FACTORS = {
    "fibonacci": "Fibonacci proportions",
    "time": "Time proportions",
    "alternation": "Wave alternation",
    "channel": "Channel adherence",
    "completeness": "Structure completeness",
}


@dataclass(frozen=True)
class Confidence:
    """
    Immutable confidence breakdown for one candidate structure.

    All scores are in [0, 1]; ``as_percentage`` rescales the aggregate.
    """
    overall: float
    fibonacci: float
    time: float
    alternation: float
    channel: float
    completeness: float
    primary_reason: str
    weakest_factor: str

    @property
    def is_high_confidence(self) -> bool:
        return self.overall >= HIGH_CONFIDENCE

    @property
    def is_low_confidence(self) -> bool:
        return self.overall < LOW_CONFIDENCE

    @property
    def as_percentage(self) -> float:
        return self.overall * 100.0

    def factor_scores(self) -> Dict[str, float]:
        return {
            "fibonacci": self.fibonacci,
            "time": self.time,
            "alternation": self.alternation,
            "channel": self.channel,
            "completeness": self.completeness,
        }

    @classmethod
    def zero(cls) -> "Confidence":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, "No structure", WEAKEST_FACTORS["fibonacci"])


def score_retracement(ratio: float, bounds: Tuple[float, float]) -> float:
    """1 inside ``bounds``, partial within 0.8x-1.2x of them, else 0."""
    if ratio is None or math.isnan(ratio):
        return 0.0
    low, high = bounds
    if ratio < low * 0.8 or ratio > high * 1.2:
        return 0.0
    if low <= ratio <= high:
        return 1.0
    if ratio < low:
        return max(0.0, 1.0 - (low - ratio) / low)
    return max(0.0, 1.0 - (ratio - high) / high)


def score_extension(ratio: float, bounds: Tuple[float, float], ideal: float) -> float:
    """0.7 base inside ``bounds`` (scaled down near them) plus up to 0.3 for closeness to ``ideal``."""
    if ratio is None or math.isnan(ratio):
        return 0.0
    low, high = bounds
    outer_low, outer_high = low * 0.8, high * 1.2
    if ratio < outer_low or ratio > outer_high:
        return 0.0
    if ratio < low:
        base = 0.7 * max(0.0, (ratio - outer_low) / (low - outer_low))
    elif ratio > high:
        base = 0.7 * max(0.0, (outer_high - ratio) / (outer_high - high))
    else:
        base = 0.7
    bonus = 0.3 * max(0.0, 1.0 - abs(ratio - ideal) / ideal)
    return min(1.0, base + bonus)


class ConfidenceScorer:
    """
    Scores a candidate structure.

    Args:
        weights: Factor weights (non-negative, summing to 1).
    """

    def __init__(self, weights: Optional[ConfidenceWeights] = None):
        self.weights = weights or ConfidenceWeights()

    def score(
        self,
        swings: List[Swing],
        phase: Phase,
        channel: Optional[Channel] = None,
        scenario_type: Optional[ScenarioType] = None,
    ) -> Confidence:
        if not swings or phase is Phase.NONE:
            return Confidence.zero()

        scores = {
            "fibonacci": clamp01(self.score_fibonacci(swings, phase, scenario_type)),
            "time": clamp01(self.score_time(swings, phase)),
            "alternation": clamp01(self.score_alternation(swings, phase)),
            "channel": clamp01(self.score_channel(swings, channel)),
            "completeness": clamp01(self.score_completeness(swings, phase)),
        }
        weights = self._weight_map()
        overall = clamp01(sum(scores[name] * weights[name] for name in FACTOR_NAMES))
        return Confidence(
            overall=overall,
            fibonacci=scores["fibonacci"],
            time=scores["time"],
            alternation=scores["alternation"],
            channel=scores["channel"],
            completeness=scores["completeness"],
            primary_reason=self._primary_reason(scores, weights),
            weakest_factor=_weakest_factor(scores),
        )

    def score_fibonacci(
        self,
        swings: List[Swing],
        phase: Phase,
        scenario_type: Optional[ScenarioType] = None,
    ) -> float:
        """Average range score of each leg ratio; flats use a deeper wave B range."""
        if len(swings) < 2:
            return 0.0
        if phase.is_impulse:
            parts = [score_retracement(swing_ratio(swings[1], swings[0]), WAVE2_RETRACEMENT)]
            if len(swings) >= 3:
                parts.append(score_extension(swing_ratio(swings[2], swings[0]), WAVE3_EXTENSION, WAVE3_IDEAL))
            if len(swings) >= 4:
                parts.append(score_retracement(swing_ratio(swings[3], swings[2]), WAVE4_RETRACEMENT))
            if len(swings) >= 5:
                parts.append(score_extension(swing_ratio(swings[4], swings[0]), WAVE5_PROJECTION, WAVE5_IDEAL))
        elif phase.is_corrective:
            b_bounds = FLAT_WAVEB_RETRACEMENT if scenario_type is ScenarioType.CORRECTIVE_FLAT else WAVEB_RETRACEMENT
            parts = [score_retracement(swing_ratio(swings[1], swings[0]), b_bounds)]
            if len(swings) >= 3:
                parts.append(score_extension(swing_ratio(swings[2], swings[0]), WAVEC_EXTENSION, WAVEC_IDEAL))
        else:
            return 0.0
        return sum(parts) / len(parts)

    def score_time(self, swings: List[Swing], phase: Phase) -> float:
        if len(swings) < 3:
            return NEUTRAL_SCORE
        score = NEUTRAL_SCORE
        first = swings[0].length
        if phase.is_impulse:
            if swings[2].length >= first:
                score += 0.25
            if len(swings) >= 5 and first > 0 and 0.5 <= swings[4].length / first <= 1.5:
                score += 0.25
        elif phase.is_corrective:
            if first > 0 and 0.5 <= swings[2].length / first <= 1.5:
                score += 0.25
            if swings[1].length <= first + swings[2].length:
                score += 0.25
        return min(1.0, score)

    def score_alternation(self, swings: List[Swing], phase: Phase) -> float:
        if len(swings) < 4 or not phase.is_impulse:
            return NEUTRAL_SCORE
        wave2, wave4 = swings[1], swings[3]
        depth2 = swing_ratio(wave2, swings[0])
        depth4 = swing_ratio(wave4, swings[2])
        depth2 = 0.0 if math.isnan(depth2) else depth2
        depth4 = 0.0 if math.isnan(depth4) else depth4
        depth_score = min(abs(depth2 - depth4) * 2.0, 1.0)

        longest = max(wave2.length, wave4.length)
        time_score = min(abs(wave2.length - wave4.length) / longest, 1.0) if longest > 0 else 0.0
        return (depth_score + time_score) / 2.0

    def score_channel(self, swings: List[Swing], channel: Optional[Channel]) -> float:
        if not swings or channel is None or not channel.is_valid:
            return NEUTRAL_SCORE
        inside = 0
        total = 0
        for swing in swings:
            for index, price in ((swing.from_index, swing.from_price), (swing.to_index, swing.to_price)):
                total += 1
                if channel.contains(price, index):
                    inside += 1
        return inside / total if total else NEUTRAL_SCORE

    def score_completeness(self, swings: List[Swing], phase: Phase) -> float:
        if not swings:
            return 0.0
        if phase.is_impulse:
            expected = IMPULSE_LENGTH
        elif phase.is_corrective:
            expected = CORRECTION_LENGTH
        else:
            return 0.0
        completeness = min(len(swings) / expected, 1.0)
        if phase.completes_structure:
            completeness = min(completeness + COMPLETION_BONUS, 1.0)
        return completeness

    def _weight_map(self) -> Dict[str, float]:
        return {
            "fibonacci": self.weights.fibonacci,
            "time": self.weights.time,
            "alternation": self.weights.alternation,
            "channel": self.weights.channel,
            "completeness": self.weights.completeness,
        }

    def _primary_reason(self, scores: Dict[str, float], weights: Dict[str, float]) -> str:
        best = FACTOR_NAMES[0]
        best_contribution = scores[best] * weights[best]
        for name in FACTOR_NAMES[1:]:
            contribution = scores[name] * weights[name]
            if contribution > best_contribution:
                best, best_contribution = name, contribution
        return PRIMARY_REASONS[best]


def _weakest_factor(scores: Dict[str, float]) -> str:
    weakest = min(FACTOR_NAMES, key=lambda name: (scores[name], FACTOR_NAMES.index(name)))
    return WEAKEST_FACTORS[weakest]
