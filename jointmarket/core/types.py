"""Core type definitions for the joint-market engine.

A 2x2 joint market has four mutually exclusive answers, one per conjunction of
two binary events A and B. Each answer is backed by its own YES/NO pool.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Union

from .utils import is_finite


class InvalidPoolError(ValueError):
    """Raised for pools with missing, non-finite or non-positive reserves."""


class MarketDataError(RuntimeError):
    """Venue payload cannot be turned into a usable joint market."""


class QuoteError(RuntimeError):
    """A dry-run quote could not be obtained from the venue."""


class Side(str, Enum):
    YES = "YES"
    NO = "NO"

    @property
    def opposite(self) -> "Side":
        return Side.NO if self is Side.YES else Side.YES


class Event(str, Enum):
    A = "a"
    B = "b"


class Cell(str, Enum):
    A_YES_B_YES = "a_yes_b_yes"
    A_YES_B_NO = "a_yes_b_no"
    A_NO_B_YES = "a_no_b_yes"
    A_NO_B_NO = "a_no_b_no"

    @property
    def a(self) -> bool:
        return self in (Cell.A_YES_B_YES, Cell.A_YES_B_NO)

    @property
    def b(self) -> bool:
        return self in (Cell.A_YES_B_YES, Cell.A_NO_B_YES)

    def holds(self, event: Event) -> bool:
        return self.a if event is Event.A else self.b

    @classmethod
    def of(cls, a: bool, b: bool) -> "Cell":
        if a:
            return cls.A_YES_B_YES if b else cls.A_YES_B_NO
        return cls.A_NO_B_YES if b else cls.A_NO_B_NO


# Canonical order: (A∧B, A∧¬B, ¬A∧B, ¬A∧¬B)
CELLS = (Cell.A_YES_B_YES, Cell.A_YES_B_NO, Cell.A_NO_B_YES, Cell.A_NO_B_NO)


class ConvergenceStatus(str, Enum):
    CONVERGED = "converged"
    FELL_BACK = "fell_back_to_approximation"
    INFEASIBLE = "infeasible"


_STATUS_RANK = {
    ConvergenceStatus.CONVERGED: 0,
    ConvergenceStatus.FELL_BACK: 1,
    ConvergenceStatus.INFEASIBLE: 2,
}


def worst_status(statuses) -> ConvergenceStatus:
    worst = ConvergenceStatus.CONVERGED
    for s in statuses:
        if _STATUS_RANK[s] > _STATUS_RANK[worst]:
            worst = s
    return worst


@dataclass(frozen=True)
class Pool:
    yes: float
    no: float

    def __post_init__(self):
        for name, value in (("yes", self.yes), ("no", self.no)):
            if not is_finite(value) or value <= 0:
                raise InvalidPoolError(f"pool {name} reserve must be > 0, got {value!r}")

    @property
    def k(self) -> float:
        return self.yes * self.no

    @property
    def probability(self) -> float:
        return self.no / (self.yes + self.no)


class PoolSet(Mapping[Cell, Pool]):
    """Immutable snapshot of the four pools of one joint market."""

    __slots__ = ("_pools",)

    def __init__(self, pools: Mapping[Cell, Pool]):
        converted: Dict[Cell, Pool] = {}
        for key, pool in pools.items():
            cell = Cell(key)
            if not isinstance(pool, Pool):
                raise InvalidPoolError(f"{cell.value}: expected Pool, got {type(pool).__name__}")
            converted[cell] = pool
        if set(converted) != set(CELLS):
            missing = sorted(c.value for c in set(CELLS) - set(converted))
            raise InvalidPoolError(f"pool set must cover all four cells; missing {missing}")
        self._pools = MappingProxyType({c: converted[c] for c in CELLS})

    def __getitem__(self, cell: Cell) -> Pool:
        return self._pools[Cell(cell)]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._pools)

    def __len__(self) -> int:
        return len(self._pools)

    def __repr__(self) -> str:
        inner = ", ".join(f"{c.value}=({p.yes:.4f}, {p.no:.4f})" for c, p in self._pools.items())
        return f"PoolSet({inner})"

    def replace(self, cell: Cell, pool: Pool) -> "PoolSet":
        updated = dict(self._pools)
        updated[Cell(cell)] = pool
        return PoolSet(updated)

    def probability(self, cell: Cell) -> float:
        return self[cell].probability

    def probabilities(self) -> Dict[Cell, float]:
        return {c: p.probability for c, p in self._pools.items()}

    def probability_sum(self) -> float:
        return sum(p.probability for p in self._pools.values())


@dataclass(frozen=True)
class TradeIntent:
    """Buy ``side`` of ``outcome`` either with a fixed spend or a fixed share count."""

    outcome: Cell
    side: Side = Side.YES
    amount: Optional[float] = None
    shares: Optional[float] = None

    def __post_init__(self):
        if (self.amount is None) == (self.shares is None):
            raise ValueError("exactly one of amount or shares must be given")
        value = self.amount if self.amount is not None else self.shares
        if math.isnan(value) or value < 0:
            raise ValueError(f"trade size must be >= 0, got {value!r}")

    @property
    def by_shares(self) -> bool:
        return self.shares is not None


@dataclass(frozen=True)
class TradeResult:
    shares_acquired: float
    cost_paid: float
    pools: PoolSet
    status: ConvergenceStatus = ConvergenceStatus.CONVERGED
    equilibrium_error: float = 0.0  # |Σp - 1| after the trade
    arbitrage_shares: float = 0.0  # NO shares bought in each other outcome

    @property
    def feasible(self) -> bool:
        return is_finite(self.cost_paid, self.shares_acquired)


class LegRole(str, Enum):
    DIRECT = "direct"
    HEDGE = "hedge"
    TARGET = "target"
    MARGINAL = "marginal"
    CORRELATION = "correlation"


@dataclass
class Leg:
    intent: TradeIntent
    role: LegRole
    result: Optional[TradeResult] = None
    below_minimum: bool = False

    @property
    def cost(self) -> float:
        return self.result.cost_paid if self.result is not None else 0.0

    @property
    def shares(self) -> float:
        return self.result.shares_acquired if self.result is not None else 0.0


class PayoutClass(str, Enum):
    WIN = "WIN"
    LOSE = "LOSE"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class Payout:
    classification: PayoutClass
    gross: float  # shares redeemed if this cell resolves YES
    net: float  # gross minus total plan cost


@dataclass(frozen=True)
class PlanError:
    leg_index: int
    outcome: Cell
    reason: str


@dataclass
class HedgePlan:
    kind: str
    legs: List[Leg] = field(default_factory=list)
    total_cost: float = 0.0
    payout_by_outcome: Dict[Cell, Payout] = field(default_factory=dict)
    pools: Optional[PoolSet] = None  # projected state after every leg
    error: Optional[PlanError] = None
    warnings: List[str] = field(default_factory=list)
    conditional_probability: Optional[float] = None

    @property
    def valid(self) -> bool:
        return self.error is None

    @property
    def status(self) -> ConvergenceStatus:
        if self.error is not None:
            return ConvergenceStatus.INFEASIBLE
        return worst_status(leg.result.status for leg in self.legs if leg.result is not None)

    @property
    def below_minimum_legs(self) -> List[int]:
        return [i for i, leg in enumerate(self.legs) if leg.below_minimum]

    def classify(self, outcome) -> Optional[PayoutClass]:
        """Payout class for ``outcome``; None for ids outside the four cells."""
        try:
            cell = Cell(outcome)
        except ValueError:
            return None
        payout = self.payout_by_outcome.get(cell)
        return payout.classification if payout is not None else None


@dataclass
class CorrelationPlan(HedgePlan):
    weights: Dict[Cell, float] = field(default_factory=dict)
    degenerate: bool = False
    neutrality_quality: float = 0.0
    quoted_neutrality: float = 0.0


# ---- plan requests (tagged union dispatched by exec.router) -----------------


@dataclass(frozen=True)
class Condition:
    """Conditional event ``target | given == given_value``."""

    target: Event
    given: Event
    given_value: bool = True

    def __post_init__(self):
        if self.target is self.given:
            raise ValueError("conditional target and condition must be different events")

    @classmethod
    def parse(cls, name: str) -> "Condition":
        """Parse names such as ``a_given_b`` or ``b_given_not_a``."""
        parts = name.strip().lower().split("_given_")
        if len(parts) != 2:
            raise ValueError(f"unknown condition {name!r}")
        target, given = parts
        given_value = True
        if given.startswith("not_"):
            given_value = False
            given = given[len("not_"):]
        try:
            return cls(Event(target), Event(given), given_value)
        except ValueError as e:
            raise ValueError(f"unknown condition {name!r}") from e

    @property
    def name(self) -> str:
        neg = "" if self.given_value else "not_"
        return f"{self.target.value}_given_{neg}{self.given.value}"

    def _cell(self, target_value: bool) -> Cell:
        if self.target is Event.A:
            return Cell.of(target_value, self.given_value)
        return Cell.of(self.given_value, target_value)

    def target_cell(self, direction: Side = Side.YES) -> Cell:
        return self._cell(direction is Side.YES)

    def hedge_cells(self) -> List[Cell]:
        return [c for c in CELLS if c.holds(self.given) != self.given_value]


@dataclass(frozen=True)
class DirectRequest:
    outcome: Cell
    amount: float
    side: Side = Side.YES


@dataclass(frozen=True)
class ConditionalRequest:
    condition: Condition
    budget: float
    direction: Side = Side.YES
    hedge_shares: Optional[float] = None  # defaults to the budget


@dataclass(frozen=True)
class MarginalRequest:
    event: Event
    budget: float
    value: bool = True

    def cells(self) -> List[Cell]:
        return [c for c in CELLS if c.holds(self.event) == self.value]


@dataclass(frozen=True)
class CorrelationRequest:
    max_shares: float
    long: bool = True
    round_up_small_legs: bool = False


PlanRequest = Union[DirectRequest, ConditionalRequest, MarginalRequest, CorrelationRequest]
