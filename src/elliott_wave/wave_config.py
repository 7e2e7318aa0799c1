"""
Elliott Wave Analysis Configuration

Centralized, immutable configuration for every stage of the analysis
pipeline. Each config validates itself on construction and raises
ValueError for settings that cannot produce a meaningful analysis; nothing
is silently corrected.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Literal

from .constants import (
    DEFAULT_ALTERNATION_WEIGHT,
    DEFAULT_BASE_CONFIDENCE_WEIGHT,
    DEFAULT_CHANNEL_WEIGHT,
    DEFAULT_COMPLETENESS_WEIGHT,
    DEFAULT_CONSENSUS_BOOST,
    DEFAULT_CONTRAST_EXPONENT,
    DEFAULT_CONTRAST_MIX,
    DEFAULT_FIB_TOLERANCE,
    DEFAULT_FIBONACCI_WEIGHT,
    DEFAULT_MAX_SCENARIOS,
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_OUTLIER_PENALTY,
    DEFAULT_TIME_WEIGHT,
    DEFAULT_TREND_NEUTRAL_THRESHOLD,
    DEFAULT_WINDOW_SWINGS,
)
from .degree import Degree
from .types import ScenarioType


@dataclass(frozen=True)
class ZigzagConfig:
    """
    Swing detector sensitivity.

    Attributes:
        mode: 'fixed' confirms a pivot once price reverses by reversal_percent
            of the running extreme. 'adaptive' uses ATR x atr_multiplier.
        reversal_percent: Fixed-mode reversal as a fraction (0.05 = 5%).
        atr_period: Adaptive-mode ATR lookback in bars.
        atr_multiplier: Adaptive-mode multiplier applied to ATR.
        min_threshold: Absolute floor for the adaptive threshold (0 disables).
        max_threshold: Absolute cap for the adaptive threshold (0 disables).
        min_bars_between_pivots: Minimum bars between consecutive pivots.
        price_source: 'close' tracks closes; 'high_low' tracks highs for
            peaks and lows for troughs.

    Example:
        >>> config = ZigzagConfig.fixed(0.05)
        >>> config.mode
        'fixed'
    """
    mode: Literal["fixed", "adaptive"] = "adaptive"
    reversal_percent: float = 0.05
    atr_period: int = 14
    atr_multiplier: float = 1.0
    min_threshold: float = 0.0
    max_threshold: float = 0.0
    min_bars_between_pivots: int = 2
    price_source: Literal["close", "high_low"] = "close"

    def __post_init__(self):
        if self.mode not in ("fixed", "adaptive"):
            raise ValueError(f"Unknown zigzag mode: {self.mode!r}. Must be 'fixed' or 'adaptive'.")
        if self.price_source not in ("close", "high_low"):
            raise ValueError(f"Unknown price source: {self.price_source!r}. Must be 'close' or 'high_low'.")
        if not self.reversal_percent > 0:
            raise ValueError(f"reversal_percent must be > 0, got {self.reversal_percent}")
        if self.atr_period <= 0:
            raise ValueError(f"atr_period must be > 0, got {self.atr_period}")
        if not self.atr_multiplier > 0:
            raise ValueError(f"atr_multiplier must be > 0, got {self.atr_multiplier}")
        if self.min_threshold < 0 or self.max_threshold < 0:
            raise ValueError("min_threshold and max_threshold must be >= 0")
        if self.min_threshold > 0 and self.max_threshold > 0 and self.max_threshold < self.min_threshold:
            raise ValueError(
                f"max_threshold ({self.max_threshold}) must be >= min_threshold ({self.min_threshold})"
            )
        if self.min_bars_between_pivots < 1:
            raise ValueError(f"min_bars_between_pivots must be >= 1, got {self.min_bars_between_pivots}")

    @classmethod
    def default(cls) -> "ZigzagConfig":
        """Create a config with default values."""
        return cls()

    @classmethod
    def fixed(cls, reversal_percent: float, **kwargs: Any) -> "ZigzagConfig":
        return cls(mode="fixed", reversal_percent=reversal_percent, **kwargs)

    @classmethod
    def adaptive(cls, atr_period: int = 14, atr_multiplier: float = 1.0, **kwargs: Any) -> "ZigzagConfig":
        return cls(mode="adaptive", atr_period=atr_period, atr_multiplier=atr_multiplier, **kwargs)

    def with_(self, **kwargs: Any) -> "ZigzagConfig":
        """
        Create a new config with modified parameters.

        Since ZigzagConfig is frozen, this creates a new instance.
        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class CompressorConfig:
    """
    Post-detection swing noise filter.

    Attributes:
        min_amplitude_percent: Swings smaller than this fraction of the
            reference (latest) price are merged away. 0 disables.
        min_bars: Swings shorter than this many bars are merged away. 0 disables.
    """
    min_amplitude_percent: float = 0.0
    min_bars: int = 0

    def __post_init__(self):
        if self.min_amplitude_percent < 0:
            raise ValueError(f"min_amplitude_percent must be >= 0, got {self.min_amplitude_percent}")
        if self.min_bars < 0:
            raise ValueError(f"min_bars must be >= 0, got {self.min_bars}")

    @property
    def enabled(self) -> bool:
        return self.min_amplitude_percent > 0 or self.min_bars > 0


@dataclass(frozen=True)
class FibonacciConfig:
    """
    Fibonacci ratio tolerance.

    Attributes:
        tolerance: Allowed distance from a canonical ratio.
        mode: 'absolute' compares |ratio - target| <= tolerance,
            'relative' compares |ratio - target| <= tolerance * target.
    """
    tolerance: float = DEFAULT_FIB_TOLERANCE
    mode: Literal["absolute", "relative"] = "absolute"

    def __post_init__(self):
        if self.tolerance < 0 or math.isnan(self.tolerance):
            raise ValueError(f"Fibonacci tolerance must be >= 0, got {self.tolerance}")
        if self.mode not in ("absolute", "relative"):
            raise ValueError(f"Unknown tolerance mode: {self.mode!r}. Must be 'absolute' or 'relative'.")


@dataclass(frozen=True)
class ConfidenceWeights:
    """Weights of the five confidence factors; must be non-negative and sum to 1."""
    fibonacci: float = DEFAULT_FIBONACCI_WEIGHT
    time: float = DEFAULT_TIME_WEIGHT
    alternation: float = DEFAULT_ALTERNATION_WEIGHT
    channel: float = DEFAULT_CHANNEL_WEIGHT
    completeness: float = DEFAULT_COMPLETENESS_WEIGHT

    def __post_init__(self):
        weights = (self.fibonacci, self.time, self.alternation, self.channel, self.completeness)
        if any(w < 0 for w in weights):
            raise ValueError(f"Confidence weights must be >= 0, got {weights}")
        if abs(sum(weights) - 1.0) > 1e-9:
            raise ValueError(f"Confidence weights must sum to 1, got {sum(weights)}")


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Scenario generation limits.

    Attributes:
        min_confidence: Scenarios scoring below this are discarded.
        max_scenarios: At most this many scenarios are kept per set.
        window_swings: Number of most recent structural swings considered.
        patterns: Scenario types to generate.
    """
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    max_scenarios: int = DEFAULT_MAX_SCENARIOS
    window_swings: int = DEFAULT_WINDOW_SWINGS
    patterns: FrozenSet[ScenarioType] = field(default_factory=lambda: frozenset(ScenarioType))

    def __post_init__(self):
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {self.min_confidence}")
        if self.max_scenarios <= 0:
            raise ValueError(f"max_scenarios must be > 0, got {self.max_scenarios}")
        if self.window_swings <= 0:
            raise ValueError(f"window_swings must be > 0, got {self.window_swings}")

    def allows(self, scenario_type: ScenarioType) -> bool:
        return scenario_type in self.patterns


@dataclass(frozen=True)
class ProbabilityConfig:
    """
    Probability normalization shape.

    Attributes:
        consensus_boost: Consensus group weights are multiplied by (1 + boost).
        outlier_penalty: Outlier weights are multiplied by (1 - penalty).
        contrast_exponent: Power used for contrast amplification (> 1).
        contrast_mix: Upper bound on the share of the power split mixed into
            each group's proportional split.
    """
    consensus_boost: float = DEFAULT_CONSENSUS_BOOST
    outlier_penalty: float = DEFAULT_OUTLIER_PENALTY
    contrast_exponent: float = DEFAULT_CONTRAST_EXPONENT
    contrast_mix: float = DEFAULT_CONTRAST_MIX

    def __post_init__(self):
        if self.consensus_boost <= 0:
            raise ValueError(f"consensus_boost must be > 0, got {self.consensus_boost}")
        if not 0 < self.outlier_penalty < 1:
            raise ValueError(f"outlier_penalty must be within (0, 1), got {self.outlier_penalty}")
        if self.contrast_exponent <= 1:
            raise ValueError(f"contrast_exponent must be > 1, got {self.contrast_exponent}")
        if not 0 < self.contrast_mix <= 1:
            raise ValueError(f"contrast_mix must be within (0, 1], got {self.contrast_mix}")


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    All parameters for one single-degree analysis.

    Example:
        >>> config = AnalyzerConfig.default().with_zigzag(mode='fixed', reversal_percent=0.04)
        >>> config.zigzag.reversal_percent
        0.04
    """
    degree: Degree = Degree.MINOR
    zigzag: ZigzagConfig = field(default_factory=ZigzagConfig)
    compressor: CompressorConfig = field(default_factory=CompressorConfig)
    fibonacci: FibonacciConfig = field(default_factory=FibonacciConfig)
    weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    probability: ProbabilityConfig = field(default_factory=ProbabilityConfig)
    trend_neutral_threshold: float = DEFAULT_TREND_NEUTRAL_THRESHOLD

    def __post_init__(self):
        if not 0.0 <= self.trend_neutral_threshold < 1.0:
            raise ValueError(f"trend_neutral_threshold must be within [0, 1), got {self.trend_neutral_threshold}")

    @classmethod
    def default(cls) -> "AnalyzerConfig":
        """Create a config with default values."""
        return cls()

    def with_degree(self, degree: Degree) -> "AnalyzerConfig":
        return replace(self, degree=degree)

    def with_zigzag(self, **kwargs: Any) -> "AnalyzerConfig":
        """
        Create a new config with modified zigzag parameters.

        Since AnalyzerConfig is frozen, this creates a new instance.
        """
        return replace(self, zigzag=replace(self.zigzag, **kwargs))

    def with_compressor(self, **kwargs: Any) -> "AnalyzerConfig":
        return replace(self, compressor=replace(self.compressor, **kwargs))

    def with_generator(self, **kwargs: Any) -> "AnalyzerConfig":
        return replace(self, generator=replace(self.generator, **kwargs))

    def with_fibonacci(self, **kwargs: Any) -> "AnalyzerConfig":
        return replace(self, fibonacci=replace(self.fibonacci, **kwargs))


@dataclass(frozen=True)
class DegreeBandConfig:
    """
    Multi-degree band around a central degree.

    Attributes:
        center: Base degree of the analysis.
        higher: Number of higher neighbouring degrees.
        lower: Number of lower neighbouring degrees.
        base_confidence_weight: Weight of a scenario's own confidence in its
            composite score; the rest comes from cross-degree support.
        threshold_factor: Per-degree scale applied to the zigzag threshold.
        max_workers: Degrees analysed concurrently (1 = sequential).
    """
    center: Degree = Degree.MINOR
    higher: int = 1
    lower: int = 1
    base_confidence_weight: float = DEFAULT_BASE_CONFIDENCE_WEIGHT
    threshold_factor: float = 1.5
    max_workers: int = 1

    def __post_init__(self):
        if self.higher < 0 or self.lower < 0:
            raise ValueError(f"Degree band counts must be >= 0, got higher={self.higher}, lower={self.lower}")
        if not 0.0 <= self.base_confidence_weight <= 1.0:
            raise ValueError(f"base_confidence_weight must be within [0, 1], got {self.base_confidence_weight}")
        if self.threshold_factor <= 0:
            raise ValueError(f"threshold_factor must be > 0, got {self.threshold_factor}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @property
    def degrees(self):
        return Degree.band(self.center, self.higher, self.lower)
