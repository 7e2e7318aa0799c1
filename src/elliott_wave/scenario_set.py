"""
Ranked collection of competing scenarios.

A ScenarioSet holds every hypothesis generated for one evaluation bar,
ordered by confidence (highest first, ties broken by id). The first entry
is the base case; everything else is an alternative.

Consensus groups scenarios by phase and sums their confidence. The phase
with the largest sum wins, ties going to the larger group and then to the
alphabetically first phase name. Consensus is "strong" when the winning
group holds more than half of the total confidence.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .constants import DEFAULT_TREND_NEUTRAL_THRESHOLD, STRONG_CONSENSUS_SHARE
from .numeric import Num, clamp01
from .scenario import Scenario
from .trend_bias import TrendBias, TrendBiasAggregator
from .types import Phase, ScenarioType


@dataclass(frozen=True)
class ScenarioSet:
    """
    Immutable, sorted scenario collection for one evaluation index.

    Build with ``ScenarioSet.of`` so ordering and id uniqueness hold.
    """
    scenarios: Tuple[Scenario, ...]
    evaluation_index: int

    @classmethod
    def of(cls, scenarios: Iterable[Scenario], evaluation_index: int) -> "ScenarioSet":
        """
        Sort and validate ``scenarios``.

        Raises:
            ValueError: If two scenarios share an id.
        """
        scenarios = list(scenarios)
        seen = set()
        for scenario in scenarios:
            if scenario.id in seen:
                raise ValueError(f"Duplicate scenario id: {scenario.id!r}")
            seen.add(scenario.id)
        ordered = sorted(scenarios, key=lambda s: (-clamp01(s.confidence_score), s.id))
        return cls(tuple(ordered), evaluation_index)

    @classmethod
    def empty(cls, evaluation_index: int) -> "ScenarioSet":
        return cls((), evaluation_index)

    def __len__(self) -> int:
        return len(self.scenarios)

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self.scenarios)

    @property
    def is_empty(self) -> bool:
        return not self.scenarios

    @property
    def ids(self) -> List[str]:
        return [s.id for s in self.scenarios]

    def get(self, scenario_id: str) -> Optional[Scenario]:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None

    def base(self) -> Optional[Scenario]:
        """Highest-confidence scenario, None when empty."""
        return self.scenarios[0] if self.scenarios else None

    def alternatives(self) -> List[Scenario]:
        return list(self.scenarios[1:])

    def phase_weights(self) -> Dict[Phase, float]:
        """Summed confidence per phase, in first-seen order."""
        weights: Dict[Phase, float] = OrderedDict()
        for scenario in self.scenarios:
            weights[scenario.current_phase] = weights.get(scenario.current_phase, 0.0) + clamp01(
                scenario.confidence_score
            )
        return weights

    def consensus(self) -> Phase:
        """Phase with the largest summed confidence; NONE for an empty set."""
        if not self.scenarios:
            return Phase.NONE
        weights = self.phase_weights()
        counts: Dict[Phase, int] = {}
        for scenario in self.scenarios:
            counts[scenario.current_phase] = counts.get(scenario.current_phase, 0) + 1
        return min(weights, key=lambda phase: (-weights[phase], -counts[phase], phase.value))

    def consensus_share(self) -> float:
        """Winning group's share of the total confidence, 0 when there is none."""
        weights = self.phase_weights()
        total = sum(weights.values())
        if total <= 0:
            return 0.0
        return weights[self.consensus()] / total

    def has_strong_consensus(self) -> bool:
        return self.consensus_share() > STRONG_CONSENSUS_SHARE

    def consensus_members(self) -> List[Scenario]:
        phase = self.consensus()
        return [s for s in self.scenarios if s.current_phase is phase]

    def by_phase(self, phase: Phase) -> List[Scenario]:
        return [s for s in self.scenarios if s.current_phase is phase]

    def by_type(self, scenario_type: ScenarioType) -> List[Scenario]:
        return [s for s in self.scenarios if s.type is scenario_type]

    def valid_at(self, price: Num) -> List[Scenario]:
        """Scenarios not invalidated by ``price``."""
        return [s for s in self.scenarios if not s.is_invalidated_by(price)]

    def invalidated_by(self, price: Num) -> List[Scenario]:
        return [s for s in self.scenarios if s.is_invalidated_by(price)]

    @property
    def high_confidence_count(self) -> int:
        return sum(1 for s in self.scenarios if s.is_high_confidence)

    @property
    def low_confidence_count(self) -> int:
        return sum(1 for s in self.scenarios if s.is_low_confidence)

    @property
    def confidence_spread(self) -> float:
        """Base confidence minus the weakest scenario's; 0 with fewer than two."""
        if len(self.scenarios) < 2:
            return 0.0
        return self.scenarios[0].confidence_score - self.scenarios[-1].confidence_score

    def trend_bias(self, neutral_threshold: float = DEFAULT_TREND_NEUTRAL_THRESHOLD) -> TrendBias:
        return TrendBiasAggregator(neutral_threshold).aggregate(self.scenarios)

    def summary(self) -> str:
        """
        One-line description.

        Example:
            "3 scenario(s): Base case=WAVE3 (62.0%), 2 alternative(s), consensus=WAVE3"
        """
        base = self.base()
        if base is None:
            return "No scenarios"
        return (
            f"{len(self.scenarios)} scenario(s): "
            f"Base case={base.current_phase.value} ({base.confidence.as_percentage:.1f}%), "
            f"{len(self.scenarios) - 1} alternative(s), "
            f"consensus={self.consensus().value}"
        )
