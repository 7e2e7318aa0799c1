# Elliott Wave Module
#
# Multi-scenario Elliott wave analysis: swing detection, phase
# classification, confidence scoring, scenario ranking and multi-degree
# composition.

from .degree import Degree
from .types import Bar, Phase, ScenarioType, Swing, TrendDirection
from .price_series import PriceSeries
from .wave_config import (
    AnalyzerConfig,
    CompressorConfig,
    ConfidenceWeights,
    DegreeBandConfig,
    FibonacciConfig,
    GeneratorConfig,
    ProbabilityConfig,
    ZigzagConfig,
)

# Pipeline stages
from .swing_detector import SwingDetector
from .swing_compressor import SwingCompressor
from .fibonacci import FibonacciValidator
from .phase_classifier import PhaseAssessment, PhaseClassifier, assess_swings
from .channel import Channel, ChannelFitter
from .confidence import Confidence, ConfidenceScorer
from .scenario import Scenario, create_scenario
from .scenario_generator import ScenarioGenerator
from .scenario_set import ScenarioSet
from .scenario_comparison import (
    average_confidence,
    common_target_range,
    compare_summary,
    divergence_score,
    has_directional_consensus,
    high_confidence_phase,
    shared_invalidation,
)
from .trend_bias import TrendBias, TrendBiasAggregator
from .probability import ProbabilityNormalizer
from .levels import InvalidationMode, RatioType, SwingRatio, invalidation_level

# Single and multi-degree analysis
from .analyzer import DegreeAnalysis, WaveAnalyzer, analyze_series
from .multi_degree import BaseCaseAssessment, MultiDegreeResult, MultiDegreeRunner

# Reporting
from .report import DegreeReport, MultiDegreeReport, ReportAssembler, to_json
