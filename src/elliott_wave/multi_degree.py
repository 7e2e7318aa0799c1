"""
Multi-degree composition.

Runs the single-degree pipeline over a contiguous band of degrees and picks
a recommended scenario. Detector sensitivity scales with the degree: each
step above the band centre multiplies the zigzag threshold by
``threshold_factor`` and adds one bar of minimum pivot spacing, each step
below divides and subtracts.

The recommendation ranks every degree's base case by a composite of its
own confidence and its cross-degree support, the best compatibility it
finds among the other degrees' scenarios weighted by how well each of
those degrees fits the available history.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from .analyzer import DegreeAnalysis, WaveAnalyzer
from .constants import NEUTRAL_CROSS_DEGREE_SCORE
from .degree import Degree
from .numeric import clamp01, is_nan
from .price_series import PriceSeries
from .scenario import Scenario
from .wave_config import AnalyzerConfig, DegreeBandConfig

logger = logging.getLogger(__name__)

# Clamp applied to the degree-scaled compressor amplitude.
MIN_COMPRESSOR_AMPLITUDE = 0.0025
MAX_COMPRESSOR_AMPLITUDE = 0.05


@dataclass(frozen=True)
class SupportingMatch:
    """Best-matching scenario found at another degree."""
    degree: Degree
    scenario_id: str
    confidence: float
    compatibility: float
    weighted_compatibility: float
    history_fit: float


@dataclass(frozen=True)
class BaseCaseAssessment:
    """
    A degree's base case scored against the rest of the band.

    Attributes:
        degree: Degree the base case comes from.
        scenario: The base case itself.
        confidence: Its own confidence.
        cross_degree_score: Weighted support from the other degrees (0.5
            when none of them offers any).
        composite_score: w * confidence + (1 - w) * cross_degree_score.
        strong_consensus: Whether its scenario set has strong consensus.
        matches: Best supporting scenario per other degree.
    """
    degree: Degree
    scenario: Scenario
    confidence: float
    cross_degree_score: float
    composite_score: float
    strong_consensus: bool
    matches: Tuple[SupportingMatch, ...] = ()


@dataclass(frozen=True)
class MultiDegreeResult:
    """
    Analyses for every degree in the band, highest degree first.

    ``recommended_scenario`` is None when no degree produced structural
    swings or a base case.
    """
    analyses: Tuple[DegreeAnalysis, ...]
    assessments: Tuple[BaseCaseAssessment, ...]
    recommended_degree: Optional[Degree]
    recommended_scenario: Optional[Scenario]
    notes: Tuple[str, ...] = ()

    @property
    def degrees(self) -> List[Degree]:
        return [a.degree for a in self.analyses]

    def analysis_for(self, degree: Degree) -> Optional[DegreeAnalysis]:
        for analysis in self.analyses:
            if analysis.degree is degree:
                return analysis
        return None


def scale_config(base: AnalyzerConfig, degree: Degree, center: Degree, factor: float) -> AnalyzerConfig:
    """
    Degree-scaled copy of ``base``.

    ``steps`` is positive for degrees above ``center``. The fixed reversal
    percent (or adaptive ATR multiplier) is multiplied by ``factor ** steps``;
    minimum pivot spacing becomes ``max(1, base + steps)``; an enabled
    compressor amplitude is scaled the same way and clamped.
    """
    steps = center.rank - degree.rank
    scale = factor ** steps
    zigzag = base.zigzag
    if zigzag.mode == "fixed":
        zigzag = replace(zigzag, reversal_percent=zigzag.reversal_percent * scale)
    else:
        zigzag = replace(zigzag, atr_multiplier=zigzag.atr_multiplier * scale)
    zigzag = replace(zigzag, min_bars_between_pivots=max(1, zigzag.min_bars_between_pivots + steps))

    compressor = base.compressor
    if compressor.min_amplitude_percent > 0:
        scaled = compressor.min_amplitude_percent * scale
        scaled = min(MAX_COMPRESSOR_AMPLITUDE, max(MIN_COMPRESSOR_AMPLITUDE, scaled))
        compressor = replace(compressor, min_amplitude_percent=scaled)

    return replace(base, degree=degree, zigzag=zigzag, compressor=compressor)


def direction_compatibility(base: Scenario, supporting: Scenario) -> float:
    if base.bullish_direction == supporting.bullish_direction:
        return 1.0
    if base.type.is_corrective or supporting.type.is_corrective:
        return 0.6
    return 0.0


def structure_compatibility(base: Scenario, supporting: Scenario) -> float:
    if base.type.is_impulse and supporting.type.is_impulse:
        return 1.0
    if base.type.is_corrective and supporting.type.is_corrective:
        return 0.9
    return 0.7


def invalidation_compatibility(base: Scenario, supporting: Scenario, supporting_is_higher: bool) -> float:
    """
    1.0 when the invalidation levels nest the right way, else 0.0.

    A higher-degree supporter should have the looser (further away) level,
    a lower-degree supporter the tighter one. Opposite directions or
    missing levels score a neutral 0.5.
    """
    if base.bullish_direction != supporting.bullish_direction:
        return 0.5
    base_level = base.invalidation_price
    other_level = supporting.invalidation_price
    if is_nan(base_level) or is_nan(other_level):
        return 0.5
    looser = other_level <= base_level if base.bullish_direction else other_level >= base_level
    tighter = other_level >= base_level if base.bullish_direction else other_level <= base_level
    ok = looser if supporting_is_higher else tighter
    return 1.0 if ok else 0.0


def compatibility_score(base: Scenario, supporting: Scenario, base_degree: Degree, supporting_degree: Degree) -> float:
    """0.55 direction + 0.30 structure + 0.15 invalidation, in [0, 1]; 0 for the same degree."""
    if base_degree is supporting_degree:
        return 0.0
    score = (
        0.55 * direction_compatibility(base, supporting)
        + 0.30 * structure_compatibility(base, supporting)
        + 0.15 * invalidation_compatibility(base, supporting, supporting_degree.is_higher_than(base_degree))
    )
    return clamp01(score)


class MultiDegreeRunner:
    """
    Runs WaveAnalyzer over a degree band.

    Args:
        band: Band centre, neighbour counts, composite weight, threshold
            factor and worker count.
        base_config: Analyzer settings for the centre degree; every other
            degree gets a scaled copy.
        analyzer_factory: Builds the analyzer for a degree's config.

    Example:
        >>> runner = MultiDegreeRunner(DegreeBandConfig(center=Degree.MINOR))
        >>> result = runner.run(series)
        >>> result.recommended_degree
    """

    def __init__(
        self,
        band: Optional[DegreeBandConfig] = None,
        base_config: Optional[AnalyzerConfig] = None,
        analyzer_factory: Optional[Callable[[AnalyzerConfig], WaveAnalyzer]] = None,
    ):
        self.band = band or DegreeBandConfig()
        self.base_config = base_config or AnalyzerConfig.default()
        self.analyzer_factory = analyzer_factory or WaveAnalyzer
        self.logger = logging.getLogger(__name__)

    def config_for(self, degree: Degree) -> AnalyzerConfig:
        return scale_config(self.base_config, degree, self.band.center, self.band.threshold_factor)

    def run(self, series: PriceSeries, end_index: Optional[int] = None) -> MultiDegreeResult:
        """
        Analyse every degree of the band and pick a recommendation.

        A degree whose analysis raises ValueError is noted and keeps an empty
        analysis in its slot, so there is one analysis per band degree.
        Results keep band order (highest degree first) regardless of
        ``max_workers``.
        """
        degrees = self.band.degrees
        if self.band.max_workers > 1 and len(degrees) > 1:
            with ThreadPoolExecutor(max_workers=self.band.max_workers) as pool:
                outcomes = list(pool.map(lambda d: self._analyze(d, series, end_index), degrees))
        else:
            outcomes = [self._analyze(d, series, end_index) for d in degrees]

        analyses: List[DegreeAnalysis] = []
        notes: List[str] = []
        for degree, analysis, error in outcomes:
            if analysis is None:
                notes.append(f"Skipped {degree.name} analysis: {error}")
                index = end_index if end_index is not None else series.end_index
                analyses.append(DegreeAnalysis.empty(degree, index))
                continue
            analyses.append(analysis)
            fit = self._history_fit(analysis)
            if fit < 1.0:
                notes.append(f"Degree {degree.name} has limited history fit: {fit:.2f}")

        assessments = self._rank(analyses)
        recommended = assessments[0] if assessments else None
        if recommended is None:
            self.logger.info("No degree in %s produced a recommendation", [d.name for d in degrees])
        return MultiDegreeResult(
            analyses=tuple(analyses),
            assessments=tuple(assessments),
            recommended_degree=recommended.degree if recommended else None,
            recommended_scenario=recommended.scenario if recommended else None,
            notes=tuple(notes),
        )

    def _analyze(
        self, degree: Degree, series: PriceSeries, end_index: Optional[int]
    ) -> Tuple[Degree, Optional[DegreeAnalysis], Optional[str]]:
        try:
            analyzer = self.analyzer_factory(self.config_for(degree))
            return degree, analyzer.analyze(series, end_index), None
        except ValueError as e:
            self.logger.warning("Skipping %s analysis: %s", degree.name, e)
            return degree, None, str(e)

    def _rank(self, analyses: List[DegreeAnalysis]) -> List[BaseCaseAssessment]:
        if not any(a.has_structure for a in analyses):
            return []
        weight = self.band.base_confidence_weight
        assessments = []
        for analysis in analyses:
            base = analysis.base_case
            if base is None:
                continue
            confidence = clamp01(base.confidence_score)
            matches = self._supporting_matches(analysis, analyses)
            cross = self._cross_degree_score(matches)
            assessments.append(BaseCaseAssessment(
                degree=analysis.degree,
                scenario=base,
                confidence=confidence,
                cross_degree_score=cross,
                composite_score=weight * confidence + (1.0 - weight) * cross,
                strong_consensus=analysis.scenario_set.has_strong_consensus(),
                matches=tuple(matches),
            ))
        assessments.sort(key=lambda a: (not a.strong_consensus, -a.composite_score, -a.confidence, a.degree.rank))
        return assessments

    def _supporting_matches(self, own: DegreeAnalysis, analyses: List[DegreeAnalysis]) -> List[SupportingMatch]:
        base = own.base_case
        matches = []
        for other in analyses:
            if other.degree is own.degree or other.scenario_set.is_empty:
                continue
            best = None
            for candidate in other.scenario_set:
                compatibility = compatibility_score(base, candidate, own.degree, other.degree)
                candidate_confidence = clamp01(candidate.confidence_score)
                weighted = compatibility * candidate_confidence
                if best is None or weighted > best.weighted_compatibility:
                    best = SupportingMatch(
                        degree=other.degree,
                        scenario_id=candidate.id,
                        confidence=candidate_confidence,
                        compatibility=compatibility,
                        weighted_compatibility=weighted,
                        history_fit=self._history_fit(other),
                    )
            matches.append(best)
        return matches

    @staticmethod
    def _cross_degree_score(matches: List[SupportingMatch]) -> float:
        total_weight = sum(m.history_fit for m in matches)
        if total_weight <= 0:
            return NEUTRAL_CROSS_DEGREE_SCORE
        return clamp01(sum(m.history_fit * m.compatibility for m in matches) / total_weight)

    @staticmethod
    def _history_fit(analysis: DegreeAnalysis) -> float:
        """History fit of the analysed span; 1.0 when the series has no timestamps."""
        if analysis.history_days is None or math.isnan(analysis.history_days):
            return 1.0
        return analysis.degree.history_fit_score(analysis.history_days)
