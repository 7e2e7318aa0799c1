"""
Tests for analysis configuration dataclasses.

Verifies:
- Defaults match the documented constants
- Immutability (frozen=True)
- Invalid settings raise ValueError eagerly
"""

import pytest

from src.elliott_wave.degree import Degree
from src.elliott_wave.types import ScenarioType
from src.elliott_wave.wave_config import (
    AnalyzerConfig,
    CompressorConfig,
    ConfidenceWeights,
    DegreeBandConfig,
    FibonacciConfig,
    GeneratorConfig,
    ProbabilityConfig,
    ZigzagConfig,
)


class TestZigzagConfig:
    """Tests for ZigzagConfig."""

    def test_defaults(self):
        config = ZigzagConfig.default()
        assert config.mode == "adaptive"
        assert config.atr_period == 14
        assert config.atr_multiplier == 1.0
        assert config.min_bars_between_pivots == 2
        assert config.price_source == "close"

    def test_fixed_factory(self):
        config = ZigzagConfig.fixed(0.03, min_bars_between_pivots=1)
        assert config.mode == "fixed"
        assert config.reversal_percent == 0.03
        assert config.min_bars_between_pivots == 1

    def test_with_returns_new_instance(self):
        config = ZigzagConfig.default()
        changed = config.with_(atr_period=21)
        assert changed.atr_period == 21
        assert config.atr_period == 14

    def test_immutability(self):
        config = ZigzagConfig.default()
        with pytest.raises(AttributeError):
            config.atr_period = 5

    @pytest.mark.parametrize("kwargs", [
        {"mode": "percent"},
        {"price_source": "open"},
        {"reversal_percent": 0},
        {"atr_period": 0},
        {"atr_multiplier": -1.0},
        {"min_threshold": -1.0},
        {"min_threshold": 10.0, "max_threshold": 5.0},
        {"min_bars_between_pivots": 0},
    ])
    def test_invalid_settings_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ZigzagConfig(**kwargs)


class TestOtherConfigs:
    """Tests for the remaining stage configs."""

    def test_compressor_disabled_by_default(self):
        assert not CompressorConfig().enabled
        assert CompressorConfig(min_bars=2).enabled
        with pytest.raises(ValueError):
            CompressorConfig(min_amplitude_percent=-0.1)

    def test_fibonacci_mode_validated(self):
        assert FibonacciConfig().tolerance == 0.05
        with pytest.raises(ValueError, match="Unknown tolerance mode"):
            FibonacciConfig(mode="percent")
        with pytest.raises(ValueError):
            FibonacciConfig(tolerance=-0.01)

    def test_weights_must_sum_to_one(self):
        weights = ConfidenceWeights()
        total = weights.fibonacci + weights.time + weights.alternation + weights.channel + weights.completeness
        assert total == pytest.approx(1.0)
        with pytest.raises(ValueError, match="sum to 1"):
            ConfidenceWeights(fibonacci=0.5)

    def test_weights_must_be_non_negative(self):
        with pytest.raises(ValueError, match=">= 0"):
            ConfidenceWeights(fibonacci=0.6, time=-0.1, alternation=0.2, channel=0.15, completeness=0.15)

    def test_generator_defaults(self):
        config = GeneratorConfig()
        assert config.min_confidence == 0.15
        assert config.max_scenarios == 5
        assert all(config.allows(t) for t in ScenarioType)
        with pytest.raises(ValueError):
            GeneratorConfig(max_scenarios=0)
        with pytest.raises(ValueError):
            GeneratorConfig(min_confidence=1.5)

    def test_probability_bounds(self):
        ProbabilityConfig(outlier_penalty=0.9, contrast_mix=1.0)
        with pytest.raises(ValueError):
            ProbabilityConfig(outlier_penalty=1.0)
        with pytest.raises(ValueError):
            ProbabilityConfig(contrast_exponent=1.0)
        with pytest.raises(ValueError):
            ProbabilityConfig(consensus_boost=0.0)

    def test_band_config(self):
        band = DegreeBandConfig(center=Degree.MINOR, higher=2, lower=0)
        assert band.degrees == [Degree.PRIMARY, Degree.INTERMEDIATE, Degree.MINOR]
        with pytest.raises(ValueError):
            DegreeBandConfig(lower=-1)
        with pytest.raises(ValueError):
            DegreeBandConfig(max_workers=0)


class TestAnalyzerConfig:
    """Tests for the aggregate analyzer config."""

    def test_with_helpers_replace_nested_configs(self):
        config = AnalyzerConfig.default()
        changed = config.with_zigzag(mode="fixed", reversal_percent=0.04).with_degree(Degree.MINUTE)
        assert changed.zigzag.mode == "fixed"
        assert changed.zigzag.reversal_percent == 0.04
        assert changed.degree is Degree.MINUTE
        assert config.zigzag.mode == "adaptive"
        assert config.degree is Degree.MINOR

    def test_nested_validation_still_applies(self):
        with pytest.raises(ValueError):
            AnalyzerConfig.default().with_generator(max_scenarios=-1)

    def test_trend_threshold_validated(self):
        with pytest.raises(ValueError):
            AnalyzerConfig(trend_neutral_threshold=1.0)
