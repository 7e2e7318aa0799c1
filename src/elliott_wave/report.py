"""
Pydantic report models for wave analysis results.

Flat, serialization-ready views of DegreeAnalysis and MultiDegreeResult.
Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``). Prices are floats, and NaN becomes null.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .analyzer import DegreeAnalysis
from .channel import Channel
from .constants import HIGH_CONFIDENCE, LOW_CONFIDENCE
from .levels import InvalidationMode, confluence_score, invalidation_level, is_confluent, latest_ratio
from .multi_degree import MultiDegreeResult
from .numeric import finite_or_none
from .scenario import Scenario
from .types import Swing


class ReportModel(BaseModel):
    """Base model: camelCase aliases, constructible by field name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Building Blocks
# ============================================================================


class SwingView(ReportModel):
    from_index: int
    to_index: int
    from_price: Optional[float] = None
    to_price: Optional[float] = None
    is_rising: bool


class SwingSnapshot(ReportModel):
    """Structural swing overview: count and price extremes."""
    valid: bool
    swings: int
    high: Optional[float] = None
    low: Optional[float] = None


class ChannelView(ReportModel):
    valid: bool
    upper: Optional[float] = None
    lower: Optional[float] = None
    median: Optional[float] = None


class TrendBiasView(ReportModel):
    direction: str  # BULLISH, BEARISH or UNKNOWN
    strength: float


# ============================================================================
# Degree Report Sections
# ============================================================================


class LatestAnalysis(ReportModel):
    """Phase state, latest swing ratio and confluence at the evaluation bar."""
    phase: str
    impulse_confirmed: bool
    corrective_confirmed: bool
    ratio_type: str
    ratio_value: Optional[float] = None
    channel: ChannelView
    confluence_score: int
    confluent: bool
    invalidation: Optional[float] = None


class ScenarioSummary(ReportModel):
    summary: str
    strong_consensus: bool
    consensus_phase: str


class BaseCaseView(ReportModel):
    """The highest-confidence scenario; scores are percentages (0-100)."""
    id: str
    current_phase: str
    type: str
    overall_confidence: float
    fibonacci_score: float
    time_score: float
    alternation_score: float
    channel_score: float
    completeness_score: float
    confidence_level: str  # HIGH, MEDIUM or LOW
    primary_reason: str
    weakest_factor: str
    direction: str
    scenario_probability: Optional[float] = None
    invalidation_price: Optional[float] = None
    primary_target: Optional[float] = None
    fibonacci_targets: List[Optional[float]] = []
    swings: List[SwingView] = []


class AlternativeView(ReportModel):
    id: str
    current_phase: str
    type: str
    confidence_percent: float
    scenario_probability: Optional[float] = None
    swings: List[SwingView] = []


class DegreeReport(ReportModel):
    """Complete single-degree report."""
    degree: str
    end_index: int
    swing_snapshot: SwingSnapshot
    latest_analysis: LatestAnalysis
    scenario_summary: ScenarioSummary
    trend_bias: TrendBiasView
    base_case: Optional[BaseCaseView] = None
    alternatives: List[AlternativeView] = []


class MultiDegreeReport(ReportModel):
    recommended_degree: Optional[str] = None
    recommended_scenario_id: Optional[str] = None
    degrees: List[DegreeReport] = []
    notes: List[str] = []


# ============================================================================
# Assembly
# ============================================================================


def round_probability(value: Optional[float]) -> Optional[float]:
    """Half-up rounding to 3 decimals for display; None stays None."""
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP))


def confidence_level(overall: float) -> str:
    if overall >= HIGH_CONFIDENCE:
        return "HIGH"
    if overall < LOW_CONFIDENCE:
        return "LOW"
    return "MEDIUM"


def swing_views(swings: Sequence[Swing]) -> List[SwingView]:
    return [
        SwingView(
            from_index=s.from_index,
            to_index=s.to_index,
            from_price=finite_or_none(s.from_price),
            to_price=finite_or_none(s.to_price),
            is_rising=s.is_rising,
        )
        for s in swings
    ]


class ReportAssembler:
    """
    Builds report models from analysis results.

    Example:
        >>> report = ReportAssembler().assemble(analysis)
        >>> report.model_dump(by_alias=True)["latestAnalysis"]["phase"]
        'CORRECTIVE_C'
    """

    def assemble(self, analysis: DegreeAnalysis) -> DegreeReport:
        scenario_set = analysis.scenario_set
        base = scenario_set.base()
        return DegreeReport(
            degree=analysis.degree.value,
            end_index=analysis.evaluation_index,
            swing_snapshot=self._swing_snapshot(analysis.structural_swings),
            latest_analysis=self._latest_analysis(analysis),
            scenario_summary=ScenarioSummary(
                summary=scenario_set.summary(),
                strong_consensus=scenario_set.has_strong_consensus(),
                consensus_phase=scenario_set.consensus().value,
            ),
            trend_bias=TrendBiasView(
                direction=analysis.trend_bias.direction.value,
                strength=analysis.trend_bias.strength,
            ),
            base_case=self._base_case(base, analysis) if base is not None else None,
            alternatives=[self._alternative(s, analysis) for s in scenario_set.alternatives()],
        )

    def assemble_multi(self, result: MultiDegreeResult) -> MultiDegreeReport:
        return MultiDegreeReport(
            recommended_degree=result.recommended_degree.value if result.recommended_degree else None,
            recommended_scenario_id=result.recommended_scenario.id if result.recommended_scenario else None,
            degrees=[self.assemble(a) for a in result.analyses],
            notes=list(result.notes),
        )

    def _swing_snapshot(self, swings: Sequence[Swing]) -> SwingSnapshot:
        if not swings:
            return SwingSnapshot(valid=False, swings=0)
        highs = [finite_or_none(s.high) for s in swings if s.is_valid]
        lows = [finite_or_none(s.low) for s in swings if s.is_valid]
        return SwingSnapshot(
            valid=bool(highs),
            swings=len(swings),
            high=max(highs) if highs else None,
            low=min(lows) if lows else None,
        )

    def _latest_analysis(self, analysis: DegreeAnalysis) -> LatestAnalysis:
        ratio = latest_ratio(analysis.structural_swings)
        score = confluence_score(ratio, analysis.latest_price, analysis.channel, analysis.evaluation_index)
        assessment = analysis.assessment
        return LatestAnalysis(
            phase=assessment.phase.value,
            impulse_confirmed=assessment.impulse_confirmed,
            corrective_confirmed=assessment.corrective_confirmed,
            ratio_type=ratio.type.value,
            ratio_value=finite_or_none(ratio.value),
            channel=_channel_view(analysis.channel),
            confluence_score=score,
            confluent=is_confluent(score),
            invalidation=finite_or_none(invalidation_level(analysis.scenario_set, InvalidationMode.PRIMARY)),
        )

    def _base_case(self, scenario: Scenario, analysis: DegreeAnalysis) -> BaseCaseView:
        confidence = scenario.confidence
        return BaseCaseView(
            id=scenario.id,
            current_phase=scenario.current_phase.value,
            type=scenario.type.value,
            overall_confidence=confidence.as_percentage,
            fibonacci_score=confidence.fibonacci * 100.0,
            time_score=confidence.time * 100.0,
            alternation_score=confidence.alternation * 100.0,
            channel_score=confidence.channel * 100.0,
            completeness_score=confidence.completeness * 100.0,
            confidence_level=confidence_level(confidence.overall),
            primary_reason=confidence.primary_reason,
            weakest_factor=confidence.weakest_factor,
            direction=scenario.direction.value,
            scenario_probability=round_probability(analysis.probabilities.get(scenario.id)),
            invalidation_price=finite_or_none(scenario.invalidation_price),
            primary_target=finite_or_none(scenario.primary_target),
            fibonacci_targets=[finite_or_none(t) for t in scenario.fibonacci_targets],
            swings=swing_views(scenario.swings),
        )

    def _alternative(self, scenario: Scenario, analysis: DegreeAnalysis) -> AlternativeView:
        return AlternativeView(
            id=scenario.id,
            current_phase=scenario.current_phase.value,
            type=scenario.type.value,
            confidence_percent=scenario.confidence.as_percentage,
            scenario_probability=round_probability(analysis.probabilities.get(scenario.id)),
            swings=swing_views(scenario.swings),
        )


def _channel_view(channel: Channel) -> ChannelView:
    return ChannelView(
        valid=channel.is_valid,
        upper=finite_or_none(channel.upper),
        lower=finite_or_none(channel.lower),
        median=finite_or_none(channel.median),
    )


def to_json(report: ReportModel, indent: Optional[int] = None) -> str:
    """camelCase JSON for any report model."""
    return report.model_dump_json(by_alias=True, indent=indent)
