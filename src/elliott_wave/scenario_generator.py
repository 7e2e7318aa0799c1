"""
Scenario generation.

Builds competing wave-count hypotheses from the most recent structural
swings. Every candidate ends at the latest swing: a trailing window of k
swings is read as an impulse in WAVE k (k = 1..5), a zigzag in the k-th
corrective phase (k = 1..3) or a flat (k = 2..3, deep wave B). Windows that
break a hard price rule are skipped, the rest are scored, filtered by
minimum confidence and capped to the strongest few.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .channel import Channel, ChannelFitter
from .confidence import ConfidenceScorer
from .constants import WAVE3_TARGET_EXTENSION, WAVE5_TARGET_EXTENSIONS, WAVEC_TARGET_EXTENSIONS
from .degree import Degree
from .fibonacci import FibonacciValidator
from .numeric import Num, to_num
from .scenario import Scenario, create_scenario
from .scenario_set import ScenarioSet
from .types import Phase, ScenarioType, Swing, alternates, has_nan
from .wave_config import ConfidenceWeights, GeneratorConfig

logger = logging.getLogger(__name__)


class ScenarioGenerator:
    """
    Generates impulse, zigzag and flat scenarios.

    Args:
        config: Minimum confidence, scenario cap, window size and allowed
            pattern types.
        validator: Fibonacci validator used for the flat wave B check.
        scorer: Confidence scorer.
        channel_fitter: Used when ``generate`` is called without a channel.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        validator: Optional[FibonacciValidator] = None,
        scorer: Optional[ConfidenceScorer] = None,
        channel_fitter: Optional[ChannelFitter] = None,
    ):
        self.config = config or GeneratorConfig()
        self.validator = validator or FibonacciValidator()
        self.scorer = scorer or ConfidenceScorer(ConfidenceWeights())
        self.channel_fitter = channel_fitter or ChannelFitter()
        self.logger = logging.getLogger(__name__)

    def generate(
        self,
        swings: Sequence[Swing],
        evaluation_index: Optional[int] = None,
        channel: Optional[Channel] = None,
    ) -> ScenarioSet:
        """
        Build the scenario set for the latest swing.

        Args:
            swings: Structural swings, oldest first.
            evaluation_index: Bar the set describes; defaults to the last
                swing's end bar (or 0 without swings).
            channel: Channel used for scoring; fitted from ``swings`` when
                omitted.

        Returns:
            A ScenarioSet, empty for degenerate input.
        """
        swings = list(swings)
        if evaluation_index is None:
            evaluation_index = swings[-1].to_index if swings else 0
        if not swings:
            return ScenarioSet.empty(evaluation_index)

        recent = swings[-self.config.window_swings:]
        if channel is None:
            channel = self.channel_fitter.fit(swings, evaluation_index)

        candidates: List[Scenario] = []
        if self.config.allows(ScenarioType.IMPULSE):
            candidates.extend(self._impulse_candidates(recent, channel))
        if self.config.allows(ScenarioType.CORRECTIVE_ZIGZAG):
            candidates.extend(self._corrective_candidates(recent, channel, ScenarioType.CORRECTIVE_ZIGZAG))
        if self.config.allows(ScenarioType.CORRECTIVE_FLAT):
            candidates.extend(self._corrective_candidates(recent, channel, ScenarioType.CORRECTIVE_FLAT))

        kept = self._prune(candidates)
        self.logger.debug(
            "Generated %d candidates, kept %d at bar %d", len(candidates), len(kept), evaluation_index
        )
        return ScenarioSet.of(kept, evaluation_index)

    def _impulse_candidates(self, recent: List[Swing], channel: Channel) -> Iterable[Scenario]:
        for count in range(1, min(ScenarioType.IMPULSE.max_swings, len(recent)) + 1):
            window = recent[-count:]
            if not is_valid_impulse(window):
                continue
            phase = Phase.impulse(count)
            yield self._build(ScenarioType.IMPULSE, phase, window, channel, impulse_targets(window, phase))

    def _corrective_candidates(
        self, recent: List[Swing], channel: Channel, scenario_type: ScenarioType
    ) -> Iterable[Scenario]:
        shortest = 2 if scenario_type is ScenarioType.CORRECTIVE_FLAT else 1
        for count in range(shortest, min(scenario_type.max_swings, len(recent)) + 1):
            window = recent[-count:]
            if not is_valid_correction(window):
                continue
            if scenario_type is ScenarioType.CORRECTIVE_FLAT and not self.validator.is_wave_b_flat_retracement_valid(
                window[0], window[1]
            ):
                continue
            phase = Phase.corrective(count)
            yield self._build(scenario_type, phase, window, channel, corrective_targets(window, phase))

    def _build(
        self,
        scenario_type: ScenarioType,
        phase: Phase,
        window: List[Swing],
        channel: Channel,
        targets: List[Num],
    ) -> Scenario:
        confidence = self.scorer.score(window, phase, channel, scenario_type)
        return create_scenario(
            scenario_type,
            phase,
            window,
            confidence,
            _degree_of(window),
            invalidation_price=window[0].from_price,
            fibonacci_targets=targets,
        )

    def _prune(self, candidates: List[Scenario]) -> List[Scenario]:
        kept = [s for s in candidates if s.confidence_score >= self.config.min_confidence]
        kept.sort(key=lambda s: (-s.confidence_score, s.id))
        return kept[:self.config.max_scenarios]


def is_valid_impulse(window: Sequence[Swing]) -> bool:
    """
    Hard impulse rules for a window read from wave 1.

    Swings alternate, wave 2 does not retrace past the start of wave 1 and
    wave 4 does not enter wave 1's territory (mirrored for bearish counts).
    """
    if not window or has_nan(window) or not alternates(window):
        return False
    wave1 = window[0]
    rising = wave1.is_rising
    if len(window) >= 2:
        end2 = window[1].to_price
        if (end2 < wave1.from_price) if rising else (end2 > wave1.from_price):
            return False
    if len(window) >= 4:
        end4 = window[3].to_price
        if (end4 < wave1.to_price) if rising else (end4 > wave1.to_price):
            return False
    return True


def is_valid_correction(window: Sequence[Swing]) -> bool:
    """Swings alternate and wave B stays inside the start of wave A."""
    if not window or has_nan(window) or not alternates(window):
        return False
    if len(window) >= 2:
        wave_a, end_b = window[0], window[1].to_price
        if (end_b < wave_a.from_price) if wave_a.is_rising else (end_b > wave_a.from_price):
            return False
    return True


def impulse_targets(window: Sequence[Swing], phase: Phase) -> List[Num]:
    """Wave 3 target from wave 2's end, wave 5 targets from wave 4's end."""
    wave1 = window[0]
    amplitude = wave1.amplitude
    sign = 1 if wave1.is_rising else -1
    targets: List[Num] = []
    if phase.impulse_index >= 2:
        targets.append(_project(window[1].to_price, amplitude, WAVE3_TARGET_EXTENSION, sign))
    if phase.impulse_index >= 4:
        for extension in WAVE5_TARGET_EXTENSIONS:
            targets.append(_project(window[3].to_price, amplitude, extension, sign))
    return targets


def corrective_targets(window: Sequence[Swing], phase: Phase) -> List[Num]:
    """Wave C targets from wave B's end, in the direction of wave A."""
    wave_a = window[0]
    sign = 1 if wave_a.is_rising else -1
    targets: List[Num] = []
    if phase.corrective_index >= 2:
        for extension in WAVEC_TARGET_EXTENSIONS:
            targets.append(_project(window[1].to_price, wave_a.amplitude, extension, sign))
    return targets


def _project(origin: Num, amplitude: Num, extension: float, sign: int) -> Num:
    offset = amplitude * to_num(extension, like=amplitude)
    return origin + offset if sign > 0 else origin - offset


def _degree_of(window: Sequence[Swing]) -> Degree:
    return window[-1].degree
