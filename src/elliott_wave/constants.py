"""Centralized constants for Elliott wave analysis."""

# Canonical Fibonacci ratios used for proximity checks.
CANONICAL_FIB_RATIOS = [
    0.236,  # Shallow retracement
    0.382,  # Standard retracement
    0.5,    # Half retracement
    0.618,  # Golden retracement
    0.786,  # Deep retracement
    1.0,    # Equality
    1.272,  # Shallow extension
    1.618,  # Golden extension
    2.618,  # Extended third wave
]

# Confluence level sets for the latest swing ratio.
CONFLUENCE_RETRACEMENT_LEVELS = [0.236, 0.382, 0.5, 0.618, 0.786, 1.0]
CONFLUENCE_EXTENSION_LEVELS = [1.272, 1.414, 1.618, 2.0]
CONFLUENCE_RATIO_TOLERANCE = 0.05
CONFLUENCE_CHANNEL_TOLERANCE = 0.5
CONFLUENCE_MIN_SCORE = 2

DEFAULT_FIB_TOLERANCE = 0.05

# (low, high) ranges for each wave relationship.
WAVE2_RETRACEMENT = (0.382, 0.786)
WAVE3_EXTENSION = (1.0, 2.618)
WAVE4_RETRACEMENT = (0.236, 0.786)
WAVE5_PROJECTION = (0.618, 1.618)
WAVEB_RETRACEMENT = (0.382, 0.886)
WAVEC_EXTENSION = (1.0, 1.618)
FLAT_WAVEB_MIN_RETRACEMENT = 0.786
FLAT_WAVEB_RETRACEMENT = (0.786, 1.0)

# Ideal ratios used by proximity scoring.
WAVE2_IDEAL = 0.618
WAVE3_IDEAL = 1.618
WAVE4_IDEAL = 0.382
WAVE5_IDEAL = 1.0
WAVEB_IDEAL = 0.618
WAVEC_IDEAL = 1.0

IMPULSE_LENGTH = 5
CORRECTION_LENGTH = 3

# Confidence scoring
DEFAULT_FIBONACCI_WEIGHT = 0.35
DEFAULT_TIME_WEIGHT = 0.20
DEFAULT_ALTERNATION_WEIGHT = 0.15
DEFAULT_CHANNEL_WEIGHT = 0.15
DEFAULT_COMPLETENESS_WEIGHT = 0.15
NEUTRAL_SCORE = 0.5
COMPLETION_BONUS = 0.1
HIGH_CONFIDENCE = 0.7
LOW_CONFIDENCE = 0.3

# Scenario generation
DEFAULT_MIN_CONFIDENCE = 0.15
DEFAULT_MAX_SCENARIOS = 5
DEFAULT_WINDOW_SWINGS = 5
WAVE3_TARGET_EXTENSION = 1.618
WAVE5_TARGET_EXTENSIONS = (1.0, 0.618)
WAVEC_TARGET_EXTENSIONS = (1.0, 1.618)

# Consensus / probability
STRONG_CONSENSUS_SHARE = 0.5
DEFAULT_CONSENSUS_BOOST = 0.5
DEFAULT_OUTLIER_PENALTY = 0.5
DEFAULT_CONTRAST_EXPONENT = 4.0
DEFAULT_CONTRAST_MIX = 0.5
DEFAULT_TREND_NEUTRAL_THRESHOLD = 0.15

# Multi-degree composition
DEFAULT_BASE_CONFIDENCE_WEIGHT = 0.7
NEUTRAL_CROSS_DEGREE_SCORE = 0.5
DEGREE_THRESHOLD_FACTOR = 1.5
RECOMMENDED_DEGREE_MIN_SCORE = 0.5
SECONDS_PER_DAY = 86400
