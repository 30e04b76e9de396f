"""Auto-arbitrage simulation for a four-answer multiple-choice market.

The venue keeps the answer probabilities summing to 1. A YES purchase in one
answer is filled as:

1. buy ``x`` NO shares in each of the other ``n - 1`` answers,
2. redeem them: NO in every other answer is worth ``n - 2`` cash plus one YES
   share of the target, so the arbitrage yields ``x * (n - 2)`` cash and
   ``x`` target YES shares,
3. spend what is left of the budget directly on target YES.

``x`` is bisected so Σp lands on 1. NO purchases are priced on the target pool
alone; the reverse arbitrage direction is not modelled and such results are
marked ``FELL_BACK``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from . import cpmm
from .base import TradeSimulator
from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.types import (
    CELLS,
    Cell,
    ConvergenceStatus,
    InvalidPoolError,
    PoolSet,
    Side,
    TradeResult,
    worst_status,
)
from ..io.metrics import inc_simulations

logger = logging.getLogger(__name__)

_MIN_SPEND = 1e-9


@dataclass(frozen=True)
class _Candidate:
    no_shares: float
    total_shares: float
    pools: PoolSet
    prob_sum: float


def _evaluate(pools: PoolSet, outcome: Cell, budget: float, no_shares: float) -> Optional[_Candidate]:
    """Apply steps 1-3 for a given ``no_shares``; None when it cannot be afforded."""
    updated = pools
    no_cost = 0.0
    try:
        for cell in CELLS:
            if cell is outcome:
                continue
            pool = updated[cell]
            cost = cpmm.cost_for_shares(pool, no_shares, Side.NO)
            if not math.isfinite(cost):
                return None
            no_cost += cost
            updated = updated.replace(cell, cpmm.pool_after_trade(pool, cost, Side.NO))
        remaining = budget - no_cost + no_shares * (len(CELLS) - 2)
        if remaining < 0:
            return None
        target = updated[outcome]
        direct = cpmm.shares_for_cost(target, remaining, Side.YES)
        updated = updated.replace(outcome, cpmm.pool_after_trade(target, remaining, Side.YES))
    except InvalidPoolError:
        return None
    return _Candidate(no_shares, no_shares + direct, updated, updated.probability_sum())


def _binary_fallback(pools: PoolSet, outcome: Cell, side: Side, amount: float) -> TradeResult:
    result = cpmm.BinarySimulator().buy(pools, outcome, side, amount)
    status = worst_status([result.status, ConvergenceStatus.FELL_BACK])
    inc_simulations(status.value)
    return TradeResult(
        shares_acquired=result.shares_acquired,
        cost_paid=result.cost_paid,
        pools=result.pools,
        status=status,
        equilibrium_error=result.equilibrium_error,
    )


def _binary_shares_fallback(pools: PoolSet, outcome: Cell, side: Side, shares: float) -> TradeResult:
    result = cpmm.BinarySimulator().buy_shares(pools, outcome, side, shares)
    return TradeResult(
        shares_acquired=result.shares_acquired,
        cost_paid=result.cost_paid,
        pools=result.pools,
        status=worst_status([result.status, ConvergenceStatus.FELL_BACK]),
        equilibrium_error=result.equilibrium_error,
    )


def simulate_multi_choice_trade(
    pools: PoolSet,
    outcome: Cell,
    side: Side,
    budget: float,
    config: EngineConfig = DEFAULT_CONFIG,
) -> TradeResult:
    """Spend ``budget`` on ``side`` of ``outcome`` under full auto-arbitrage."""
    outcome = Cell(outcome)
    if not math.isfinite(budget):
        inc_simulations(ConvergenceStatus.INFEASIBLE.value)
        return TradeResult(0.0, math.inf, pools, ConvergenceStatus.INFEASIBLE)
    if budget <= 0:
        return TradeResult(0.0, 0.0, pools, equilibrium_error=abs(pools.probability_sum() - 1.0))
    if side is Side.NO:
        logger.debug("NO purchase in %s priced on its own pool", outcome.value)
        return _binary_fallback(pools, outcome, side, budget)

    lo, hi = 0.0, 2.0 * budget
    best: Optional[_Candidate] = None
    best_err = math.inf
    iterations = 0
    for iterations in range(1, config.equilibrium_iterations + 1):
        mid = (lo + hi) / 2
        cand = _evaluate(pools, outcome, budget, mid)
        if cand is None:
            hi = mid
            continue
        err = cand.prob_sum - 1.0
        if abs(err) < best_err:
            best, best_err = cand, abs(err)
        if abs(err) <= config.equilibrium_tolerance:
            break
        if err > 0:
            lo = mid
        else:
            hi = mid

    if best is None:
        # unreachable with four answers at sane prices: the first midpoint is always affordable
        logger.warning(
            "no affordable arbitrage for %.4f in %s; using single-pool pricing",
            budget,
            outcome.value,
        )
        return _binary_fallback(pools, outcome, side, budget)

    status = (
        ConvergenceStatus.CONVERGED
        if best_err <= config.equilibrium_tolerance
        else ConvergenceStatus.FELL_BACK
    )
    logger.debug(
        "arbitrage %s budget=%.4f no_shares=%.6f sum_p_err=%.2e iters=%d",
        outcome.value,
        budget,
        best.no_shares,
        best_err,
        iterations,
    )
    inc_simulations(status.value)
    return TradeResult(
        shares_acquired=best.total_shares,
        cost_paid=budget,
        pools=best.pools,
        status=status,
        equilibrium_error=best_err,
        arbitrage_shares=best.no_shares,
    )


def multi_choice_cost_for_shares(
    pools: PoolSet,
    outcome: Cell,
    side: Side,
    shares: float,
    config: EngineConfig = DEFAULT_CONFIG,
) -> TradeResult:
    """Spend needed to acquire ``shares`` under auto-arbitrage, with the resulting state."""
    outcome = Cell(outcome)
    if not math.isfinite(shares):
        return TradeResult(0.0, math.inf, pools, ConvergenceStatus.INFEASIBLE)
    if shares <= 0:
        return TradeResult(0.0, 0.0, pools, equilibrium_error=abs(pools.probability_sum() - 1.0))
    if side is Side.NO:
        return _binary_shares_fallback(pools, outcome, side, shares)

    def run(spend: float) -> TradeResult:
        return simulate_multi_choice_trade(pools, outcome, side, spend, config)

    hi = max(shares * pools.probability(outcome), _MIN_SPEND)
    best: Optional[TradeResult] = None
    for _ in range(config.cost_search_expansions):
        result = run(hi)
        if result.feasible and result.shares_acquired >= shares:
            best = result
            break
        hi *= 2
    if best is None:
        logger.warning(
            "%.4f shares of %s unreachable within spend %.4f; using single-pool pricing",
            shares,
            outcome.value,
            hi,
        )
        return _binary_shares_fallback(pools, outcome, side, shares)

    tolerance = config.cost_search_rel_tolerance * shares
    lo = 0.0
    for _ in range(config.cost_search_iterations):
        if best.shares_acquired - shares <= tolerance:
            break
        mid = (lo + hi) / 2
        result = run(mid)
        if result.feasible and result.shares_acquired >= shares:
            hi, best = mid, result
        else:
            lo = mid

    search_status = (
        ConvergenceStatus.CONVERGED
        if best.shares_acquired - shares <= tolerance
        else ConvergenceStatus.FELL_BACK
    )
    return TradeResult(
        shares_acquired=best.shares_acquired,
        cost_paid=best.cost_paid,
        pools=best.pools,
        status=worst_status([best.status, search_status]),
        equilibrium_error=best.equilibrium_error,
        arbitrage_shares=best.arbitrage_shares,
    )


class MultiChoiceSimulator(TradeSimulator):
    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self.config = config

    def buy(self, pools: PoolSet, outcome: Cell, side: Side, amount: float) -> TradeResult:
        return simulate_multi_choice_trade(pools, outcome, side, amount, self.config)

    def buy_shares(self, pools: PoolSet, outcome: Cell, side: Side, shares: float) -> TradeResult:
        return multi_choice_cost_for_shares(pools, outcome, side, shares, self.config)
