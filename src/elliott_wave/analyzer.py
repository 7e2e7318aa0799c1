"""
Single-degree wave analysis pipeline.

Runs every stage for one degree and one evaluation bar:

1. detect raw swings with the zigzag detector
2. compress them into structural swings
3. fit a channel over the structural swings
4. classify the phase reached by the structural swings
5. generate and rank scenarios
6. aggregate the trend bias and normalize scenario probabilities

The result is an immutable DegreeAnalysis snapshot. Running the analyzer
twice on the same input gives equal results.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .channel import Channel, ChannelFitter
from .confidence import ConfidenceScorer
from .degree import Degree
from .fibonacci import FibonacciValidator
from .numeric import Num
from .phase_classifier import PhaseAssessment, WaveRules, assess_swings
from .price_series import PriceSeries, last_valid_close
from .probability import ProbabilityNormalizer
from .scenario import Scenario
from .scenario_generator import ScenarioGenerator
from .scenario_set import ScenarioSet
from .swing_compressor import SwingCompressor
from .swing_detector import SwingDetector
from .trend_bias import TrendBias, TrendBiasAggregator
from .types import Phase, Swing
from .wave_config import AnalyzerConfig


@dataclass(frozen=True)
class DegreeAnalysis:
    """
    Snapshot of one degree's analysis at one bar.

    Attributes:
        degree: Degree analysed.
        evaluation_index: Bar the analysis describes (-1 for an empty series).
        raw_swings: Swings straight from the detector.
        structural_swings: Swings after compression; every later stage uses these.
        assessment: Phase classification of the structural swings.
        scenario_set: Ranked scenarios.
        channel: Channel fitted over the structural swings.
        trend_bias: Confidence-weighted directional lean.
        probabilities: Scenario id to probability, summing to 1 when non-empty.
        latest_price: Last valid close at or before the evaluation bar.
        history_days: Calendar span of the analysed bars, None without timestamps.
    """
    degree: Degree
    evaluation_index: int
    raw_swings: Tuple[Swing, ...]
    structural_swings: Tuple[Swing, ...]
    assessment: PhaseAssessment
    scenario_set: ScenarioSet
    channel: Channel
    trend_bias: TrendBias
    probabilities: Dict[str, float] = field(default_factory=dict)
    latest_price: Optional[Num] = None
    history_days: Optional[float] = None

    @property
    def phase(self) -> Phase:
        return self.assessment.phase

    @property
    def base_case(self) -> Optional[Scenario]:
        return self.scenario_set.base()

    @property
    def has_structure(self) -> bool:
        return bool(self.structural_swings)

    def probability_of(self, scenario_id: str) -> float:
        return self.probabilities.get(scenario_id, 0.0)

    @classmethod
    def empty(cls, degree: Degree, evaluation_index: int) -> "DegreeAnalysis":
        return cls(
            degree=degree,
            evaluation_index=evaluation_index,
            raw_swings=(),
            structural_swings=(),
            assessment=PhaseAssessment.none(),
            scenario_set=ScenarioSet.empty(evaluation_index),
            channel=Channel.invalid(evaluation_index),
            trend_bias=TrendBias.unknown(),
        )


class WaveAnalyzer:
    """
    Runs the full pipeline for one degree.

    Args:
        config: Analyzer configuration; ``config.degree`` is stamped on
            every swing and scenario.

    Example:
        >>> analyzer = WaveAnalyzer(AnalyzerConfig.default().with_zigzag(mode="fixed", reversal_percent=0.03))
        >>> analysis = analyzer.analyze(series)
        >>> analysis.phase
        <Phase.CORRECTIVE_C: 'CORRECTIVE_C'>
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig.default()
        self.logger = logging.getLogger(__name__)
        validator = FibonacciValidator(self.config.fibonacci)
        self.detector = SwingDetector(self.config.zigzag, self.config.degree)
        self.compressor = SwingCompressor(self.config.compressor)
        self.channel_fitter = ChannelFitter()
        self.rules = WaveRules(validator)
        self.generator = ScenarioGenerator(
            self.config.generator,
            validator=validator,
            scorer=ConfidenceScorer(self.config.weights),
            channel_fitter=self.channel_fitter,
        )
        self.bias_aggregator = TrendBiasAggregator(self.config.trend_neutral_threshold)
        self.normalizer = ProbabilityNormalizer(self.config.probability)

    @property
    def degree(self) -> Degree:
        return self.config.degree

    def analyze(self, series: PriceSeries, end_index: Optional[int] = None) -> DegreeAnalysis:
        """
        Analyse ``series`` up to ``end_index`` (default: the last bar).

        Raises:
            ValueError: If ``end_index`` lies outside the series.
        """
        if series.is_empty:
            return DegreeAnalysis.empty(self.degree, series.end_index)
        if end_index is None:
            end_index = series.end_index
        if end_index < 0 or end_index > series.end_index:
            raise ValueError(f"end_index {end_index} outside series bounds 0..{series.end_index}")

        raw_swings = self.detector.detect(series, end_index)
        latest_price = last_valid_close(series, end_index)
        structural = self.compressor.compress(raw_swings, latest_price)
        channel = self.channel_fitter.fit(structural, end_index)
        assessment = assess_swings(structural, self.rules)
        scenario_set = self.generator.generate(structural, end_index, channel)
        trend_bias = self.bias_aggregator.aggregate(scenario_set)
        probabilities = self.normalizer.normalize(scenario_set)

        self.logger.debug(
            "%s @%d: %d raw / %d structural swings, phase=%s, %s",
            self.degree.name, end_index, len(raw_swings), len(structural),
            assessment.phase.value, scenario_set.summary(),
        )
        return DegreeAnalysis(
            degree=self.degree,
            evaluation_index=end_index,
            raw_swings=tuple(raw_swings),
            structural_swings=tuple(structural),
            assessment=assessment,
            scenario_set=scenario_set,
            channel=channel,
            trend_bias=trend_bias,
            probabilities=probabilities,
            latest_price=latest_price,
            history_days=series.span_days(end_index),
        )


def analyze_series(series: PriceSeries, config: Optional[AnalyzerConfig] = None) -> DegreeAnalysis:
    """Convenience wrapper: analyse the whole series with ``config``."""
    return WaveAnalyzer(config).analyze(series)
