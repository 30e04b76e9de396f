"""Joint distribution over the four cells and the statistics derived from it.

Marginals, conditionals, correlation, lift and odds ratio are what a user
reads off the 2x2 matrix before choosing a conditional, marginal or
correlation bet.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping

from .types import CELLS, Cell, Event, PoolSet
from .utils import safe_div


@dataclass(frozen=True)
class JointDistribution:
    p_ab: float
    p_a_not_b: float
    p_not_a_b: float
    p_not_a_not_b: float

    @classmethod
    def from_mapping(cls, probs: Mapping[Cell, float], normalize: bool = True) -> "JointDistribution":
        values = [float(probs.get(c, 0.0)) for c in CELLS]
        total = sum(values)
        if normalize and total > 0:
            values = [v / total for v in values]
        return cls(*values)

    @classmethod
    def from_pools(cls, pools: PoolSet) -> "JointDistribution":
        return cls.from_mapping(pools.probabilities())

    def __getitem__(self, cell: Cell) -> float:
        return self.as_dict()[Cell(cell)]

    def as_dict(self) -> Dict[Cell, float]:
        return dict(zip(CELLS, (self.p_ab, self.p_a_not_b, self.p_not_a_b, self.p_not_a_not_b)))

    # marginals
    @property
    def p_a(self) -> float:
        return self.p_ab + self.p_a_not_b

    @property
    def p_not_a(self) -> float:
        return self.p_not_a_b + self.p_not_a_not_b

    @property
    def p_b(self) -> float:
        return self.p_ab + self.p_not_a_b

    @property
    def p_not_b(self) -> float:
        return self.p_a_not_b + self.p_not_a_not_b

    def marginal(self, event: Event, value: bool = True) -> float:
        return sum(p for c, p in self.as_dict().items() if c.holds(event) == value)

    def conditional(self, target: Event, given: Event, given_value: bool = True) -> float:
        """P(target | given == given_value); 0 when the condition has zero mass."""
        denom = self.marginal(given, given_value)
        num = sum(
            p
            for c, p in self.as_dict().items()
            if c.holds(target) and c.holds(given) == given_value
        )
        return safe_div(num, denom, 0.0)

    def correlation(self) -> float:
        cov = self.p_ab - self.p_a * self.p_b
        sigma_a = math.sqrt(max(0.0, self.p_a * self.p_not_a))
        sigma_b = math.sqrt(max(0.0, self.p_b * self.p_not_b))
        if sigma_a > 0 and sigma_b > 0:
            return cov / (sigma_a * sigma_b)
        return 0.0

    def lift(self, target: Event = Event.A) -> float:
        given = Event.B if target is Event.A else Event.A
        return safe_div(self.conditional(target, given), self.marginal(target), 0.0)

    def odds_ratio(self) -> float:
        denom = self.p_a_not_b * self.p_not_a_b
        if denom <= 0:
            return math.inf
        return self.p_ab * self.p_not_a_not_b / denom
