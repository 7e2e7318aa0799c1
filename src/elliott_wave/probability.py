"""
Consensus-aware probability normalization.

Turns scenario confidences into a probability distribution in two stages.

Stage 1 splits the probability mass between the consensus group (scenarios
in the consensus phase) and the outliers. The consensus group's summed
confidence is multiplied by (1 + consensus_boost), the outliers' by
(1 - outlier_penalty), and the two are renormalized. Each group's share of
the mass therefore moves by a common factor f, above 1 for the consensus
group and below 1 for the outliers.

Stage 2 splits each group's share among its members. The split mixes the
proportional split c_i / sum(c) with a contrast split c_i^k / sum(c^k):

    w_i = (1 - t) * c_i / sum(c) + t * c_i^k / sum(c^k)

The contrast split widens the gap between close confidences. Relative to
the plain proportional distribution a member ends up scaled by
f * (1 - t + t * r_i), where r_i is the ratio of its contrast share to its
proportional share. The mixing weight t is capped per group so that factor
stays above 1 for every consensus member and below 1 for every outlier.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from .scenario import Scenario
from .scenario_set import ScenarioSet
from .wave_config import ProbabilityConfig

logger = logging.getLogger(__name__)


class ProbabilityNormalizer:
    """
    Maps a ScenarioSet to ``{scenario id: probability}``.

    Args:
        config: Consensus boost, outlier penalty and contrast shape.

    Example:
        >>> probabilities = ProbabilityNormalizer().normalize(scenario_set)
        >>> round(sum(probabilities.values()), 9)
        1.0
    """

    def __init__(self, config: Optional[ProbabilityConfig] = None):
        self.config = config or ProbabilityConfig()

    def normalize(self, scenario_set: ScenarioSet) -> Dict[str, float]:
        """
        Probability per scenario id, summing to 1.

        An empty set gives an empty mapping, a single scenario gets 1.0 and
        a set where every confidence is zero is uniform.
        """
        scenarios = list(scenario_set)
        if not scenarios:
            return {}
        if len(scenarios) == 1:
            return {scenarios[0].id: 1.0}

        raw = [_confidence(s) for s in scenarios]
        if sum(raw) <= 0:
            uniform = 1.0 / len(scenarios)
            return {s.id: uniform for s in scenarios}

        weights = {s.id: c for s, c in zip(scenarios, raw)}
        consensus = scenario_set.consensus()
        aligned = [s for s in scenarios if s.current_phase is consensus]
        outliers = [s for s in scenarios if s.current_phase is not consensus]

        aligned_sum = sum(weights[s.id] for s in aligned)
        outlier_sum = sum(weights[s.id] for s in outliers)
        if outlier_sum <= 0:
            probabilities = self._split(aligned, weights, share=1.0, factor=1.0)
            probabilities.update({s.id: 0.0 for s in outliers})
        else:
            total = aligned_sum + outlier_sum
            boosted = aligned_sum * (1.0 + self.config.consensus_boost)
            penalized = outlier_sum * (1.0 - self.config.outlier_penalty)
            aligned_share = boosted / (boosted + penalized)
            outlier_share = penalized / (boosted + penalized)
            probabilities = self._split(aligned, weights, aligned_share, aligned_share / (aligned_sum / total))
            probabilities.update(
                self._split(outliers, weights, outlier_share, outlier_share / (outlier_sum / total))
            )

        total = sum(probabilities.values())
        result = {s.id: probabilities[s.id] / total for s in scenarios}
        logger.debug("Normalized %d scenarios, consensus=%s", len(scenarios), consensus.value)
        return result

    def _split(
        self, members: Sequence[Scenario], weights: Dict[str, float], share: float, factor: float
    ) -> Dict[str, float]:
        """Distribute ``share`` among ``members`` with a capped contrast mix."""
        confidences = [weights[s.id] for s in members]
        group_sum = sum(confidences)
        if group_sum <= 0:
            return {s.id: 0.0 for s in members}
        exponent = self.config.contrast_exponent
        powered = [c ** exponent for c in confidences]
        power_sum = sum(powered)
        if power_sum <= 0 or not math.isfinite(power_sum):
            return {s.id: share * c / group_sum for s, c in zip(members, confidences)}

        ratios = [p / power_sum * group_sum / c for p, c in zip(powered, confidences) if c > 0]
        mix = self._mix(ratios, factor)
        return {
            s.id: share * ((1.0 - mix) * c / group_sum + mix * p / power_sum)
            for s, c, p in zip(members, confidences, powered)
        }

    def _mix(self, ratios: List[float], factor: float) -> float:
        """Largest contrast weight (up to contrast_mix) that keeps the stage 1 direction."""
        limit = self.config.contrast_mix
        if factor > 1.0:
            lowest = min(ratios)
            if lowest < 1.0:
                limit = min(limit, 0.5 * (1.0 - 1.0 / factor) / (1.0 - lowest))
        elif factor < 1.0:
            highest = max(ratios)
            if highest > 1.0:
                limit = min(limit, 0.5 * (1.0 / factor - 1.0) / (highest - 1.0))
        return limit


def _confidence(scenario: Scenario) -> float:
    value = scenario.confidence_score
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, value)
