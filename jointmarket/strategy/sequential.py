"""Sequential leg execution against one threaded pool snapshot.

Auto-arbitrage touches all four pools on every trade, so each leg is priced
against the state left by every earlier leg of the same plan, not only the
earlier legs on the same answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..core.types import HedgePlan, Leg, LegRole, PlanError, PoolSet, TradeIntent
from ..pricing.base import TradeSimulator
from ..risk.exposure import payout_map
from ..risk.limits import StakeLimits

logger = logging.getLogger(__name__)


@dataclass
class LegRun:
    legs: List[Leg] = field(default_factory=list)
    pools: Optional[PoolSet] = None
    error: Optional[PlanError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def total_cost(self) -> float:
        return sum(leg.cost for leg in self.legs)


def run_leg(
    pools: PoolSet,
    intent: TradeIntent,
    role: LegRole,
    simulator: TradeSimulator,
    limits: StakeLimits,
) -> Tuple[Leg, Optional[str]]:
    """Price a single leg; the second item is an error reason for infeasible legs."""
    result = simulator.execute(pools, intent)
    leg = Leg(intent=intent, role=role, result=result)
    if not result.feasible:
        return leg, f"{role.value} leg on {intent.outcome.value} has no finite cost"
    leg.below_minimum = limits.below_minimum(result.cost_paid)
    return leg, None


def run_legs(
    pools: PoolSet,
    intents: Sequence[Tuple[TradeIntent, LegRole]],
    simulator: TradeSimulator,
    limits: StakeLimits,
    run: Optional[LegRun] = None,
) -> LegRun:
    """Execute ``intents`` in order, feeding each leg the pools left by the previous one.

    Stops at the first infeasible leg and records it as the run's error; the
    caller must treat such a run as invalid as a whole.
    """
    run = run or LegRun(pools=pools)
    state = run.pools if run.pools is not None else pools
    for intent, role in intents:
        index = len(run.legs)
        leg, reason = run_leg(state, intent, role, simulator, limits)
        run.legs.append(leg)
        if reason is not None:
            run.error = PlanError(leg_index=index, outcome=intent.outcome, reason=reason)
            logger.warning("plan leg %d invalid: %s", index, reason)
            break
        if leg.below_minimum:
            msg = (
                f"leg {index} ({intent.outcome.value}) costs {leg.cost:.4f}, "
                f"below the minimum stake of {limits.min_stake:g}"
            )
            logger.warning(msg)
            run.warnings.append(msg)
        state = leg.result.pools
    run.pools = state
    return run


def finish_plan(plan: HedgePlan, run: LegRun, classifier=None) -> HedgePlan:
    """Copy a leg run into ``plan`` and attach the payout map of a valid run."""
    plan.legs = run.legs
    plan.total_cost = run.total_cost
    plan.pools = run.pools
    plan.error = run.error
    plan.warnings.extend(run.warnings)
    if run.error is None:
        plan.payout_by_outcome = payout_map(run.legs, plan.total_cost, classifier)
        logger.info(
            "%s plan: %d legs, total cost %.4f, status %s",
            plan.kind,
            len(plan.legs),
            plan.total_cost,
            plan.status.value,
        )
    return plan
