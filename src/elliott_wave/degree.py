"""
Wave degree ordering and history recommendations.

Degrees are ordered from the largest time-scale to the smallest. Stepping
"higher" moves toward GRAND_SUPERCYCLE, stepping "lower" toward
SUBMINUETTE; both clamp at the ends and never skip a value.
"""

from enum import Enum
from typing import List, Tuple

from .constants import RECOMMENDED_DEGREE_MIN_SCORE


class Degree(Enum):
    """Elliott wave degree, declared highest first."""
    GRAND_SUPERCYCLE = "GRAND_SUPERCYCLE"
    SUPERCYCLE = "SUPERCYCLE"
    CYCLE = "CYCLE"
    PRIMARY = "PRIMARY"
    INTERMEDIATE = "INTERMEDIATE"
    MINOR = "MINOR"
    MINUTE = "MINUTE"
    MINUETTE = "MINUETTE"
    SUBMINUETTE = "SUBMINUETTE"

    @property
    def rank(self) -> int:
        """Position in the ordering; 0 is the highest degree."""
        return _ORDER.index(self)

    def higher(self, steps: int = 1) -> "Degree":
        """Degree ``steps`` levels higher, clamped at GRAND_SUPERCYCLE."""
        if steps < 0:
            return self.lower(-steps)
        return _ORDER[max(0, self.rank - steps)]

    def lower(self, steps: int = 1) -> "Degree":
        """Degree ``steps`` levels lower, clamped at SUBMINUETTE."""
        if steps < 0:
            return self.higher(-steps)
        return _ORDER[min(len(_ORDER) - 1, self.rank + steps)]

    def is_higher_than(self, other: "Degree") -> bool:
        return self.rank < other.rank

    @property
    def recommended_days(self) -> Tuple[int, int]:
        """(min_days, max_days) of history suited to this degree; 0 max is unbounded."""
        return _RECOMMENDED_DAYS[self]

    def history_fit_score(self, days: float) -> float:
        """
        How well a history span matches this degree, in [0, 1].

        1.0 inside the recommended range, decaying proportionally outside it.
        """
        if days <= 0:
            return 0.0
        min_days, max_days = self.recommended_days
        if days < min_days:
            return days / min_days
        if max_days > 0 and days > max_days:
            return max_days / days
        return 1.0

    @classmethod
    def band(cls, center: "Degree", higher: int = 1, lower: int = 1) -> List["Degree"]:
        """
        Contiguous degrees around ``center``, highest first.

        Raises:
            ValueError: If either neighbour count is negative.

        Example:
            >>> [d.name for d in Degree.band(Degree.MINOR, 1, 1)]
            ['INTERMEDIATE', 'MINOR', 'MINUTE']
        """
        if higher < 0 or lower < 0:
            raise ValueError(f"Degree band counts must be >= 0, got higher={higher}, lower={lower}")
        top = center.higher(higher).rank
        bottom = center.lower(lower).rank
        return _ORDER[top:bottom + 1]

    @classmethod
    def recommended_for(cls, days: float) -> List["Degree"]:
        """Degrees whose history fit for ``days`` is at least 0.5, best first."""
        scored = [(d.history_fit_score(days), d) for d in _ORDER]
        picked = [(score, d) for score, d in scored if score >= RECOMMENDED_DEGREE_MIN_SCORE]
        picked.sort(key=lambda item: (-item[0], item[1].rank))
        return [d for _, d in picked]


_ORDER: List[Degree] = list(Degree)

_RECOMMENDED_DAYS = {
    Degree.GRAND_SUPERCYCLE: (20000, 0),
    Degree.SUPERCYCLE: (7000, 20000),
    Degree.CYCLE: (1000, 7000),
    Degree.PRIMARY: (400, 1000),
    Degree.INTERMEDIATE: (180, 400),
    Degree.MINOR: (60, 180),
    Degree.MINUTE: (30, 90),
    Degree.MINUETTE: (7, 30),
    Degree.SUBMINUETTE: (2, 7),
}
