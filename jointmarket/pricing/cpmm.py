"""Constant-product pricing for a single binary (YES/NO) pool.

Buying YES with ``cost`` adds ``cost`` to the NO reserve and shrinks the YES
reserve so that ``yes * no = k`` is unchanged; the buyer receives ``cost`` plus
the YES removed from the pool. NO is the mirror image.

    p_yes = no / (yes + no)

The ``*_reserves`` helpers work on raw floats and answer domain errors with
sentinels (0 shares, ``inf`` cost) so infeasibility propagates through
arithmetic comparisons. The :class:`Pool` based wrappers are what the rest of
the engine uses.
"""

from __future__ import annotations

import math
from typing import Tuple

from .base import TradeSimulator
from ..core.types import Cell, ConvergenceStatus, Pool, PoolSet, Side, TradeResult
from ..core.utils import is_finite


def _valid(y: float, n: float) -> bool:
    return is_finite(y, n) and y > 0 and n > 0


def shares_for_cost_reserves(y: float, n: float, cost: float, side: Side) -> float:
    if cost <= 0 or not _valid(y, n):
        return 0.0
    k = y * n
    if side is Side.YES:
        y_new = k / (n + cost)
        return cost + (y - y_new)
    n_new = k / (y + cost)
    return cost + (n - n_new)


def cost_for_shares_reserves(y: float, n: float, shares: float, side: Side) -> float:
    if shares <= 0:
        return 0.0
    if not _valid(y, n):
        return math.inf
    other = n if side is Side.YES else y
    discriminant = (y + n - shares) ** 2 + 4 * shares * other
    if discriminant < 0:
        return math.inf
    return (shares - y - n + math.sqrt(discriminant)) / 2


def reserves_after_trade(y: float, n: float, cost: float, side: Side) -> Tuple[float, float]:
    k = y * n
    if side is Side.YES:
        n_new = n + cost
        return k / n_new, n_new
    y_new = y + cost
    return y_new, k / y_new


def shares_for_cost(pool: Pool, cost: float, side: Side = Side.YES) -> float:
    return shares_for_cost_reserves(pool.yes, pool.no, cost, side)


def cost_for_shares(pool: Pool, shares: float, side: Side = Side.YES) -> float:
    return cost_for_shares_reserves(pool.yes, pool.no, shares, side)


def pool_after_trade(pool: Pool, cost: float, side: Side = Side.YES) -> Pool:
    """Pool after a ``cost``-funded buy of ``side``; non-positive cost is a no-op."""
    if not math.isfinite(cost):
        raise ValueError(f"cannot apply a trade with non-finite cost {cost!r}")
    if cost <= 0:
        return pool
    return Pool(*reserves_after_trade(pool.yes, pool.no, cost, side))


def probability_from_pool(pool: Pool) -> float:
    return pool.no / (pool.yes + pool.no)


class BinarySimulator(TradeSimulator):
    """Prices each outcome on its own pool, ignoring the coupling between outcomes."""

    def buy(self, pools: PoolSet, outcome: Cell, side: Side, amount: float) -> TradeResult:
        if not math.isfinite(amount):
            return TradeResult(0.0, math.inf, pools, ConvergenceStatus.INFEASIBLE)
        pool = pools[outcome]
        shares = shares_for_cost(pool, amount, side)
        updated = pools.replace(outcome, pool_after_trade(pool, amount, side))
        return TradeResult(
            shares_acquired=shares,
            cost_paid=max(0.0, amount),
            pools=updated,
            equilibrium_error=abs(updated.probability_sum() - 1.0),
        )

    def buy_shares(self, pools: PoolSet, outcome: Cell, side: Side, shares: float) -> TradeResult:
        cost = cost_for_shares(pools[outcome], shares, side)
        if not math.isfinite(cost):
            return TradeResult(0.0, math.inf, pools, ConvergenceStatus.INFEASIBLE)
        result = self.buy(pools, outcome, side, cost)
        return TradeResult(
            shares_acquired=max(0.0, shares),
            cost_paid=result.cost_paid,
            pools=result.pools,
            equilibrium_error=result.equilibrium_error,
        )
