"""Conditional bets with hedging.

To bet on P(X | Y) the plan buys the same number of YES shares in both cells
where the condition fails, then spends what is left of the budget on the
target cell. If the condition fails, one hedge leg pays out its shares, which
returns the stake; the bet only wins or loses when the condition holds.

Hedge legs are sized by share count rather than by equal spend, otherwise the
two hedge cells would pay out different amounts.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from .base import Strategy
from .sequential import finish_plan, run_legs
from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.joint import JointDistribution
from ..core.types import (
    Cell,
    ConditionalRequest,
    HedgePlan,
    LegRole,
    PayoutClass,
    PlanError,
    PoolSet,
    Side,
    TradeIntent,
)
from ..pricing.base import TradeSimulator

logger = logging.getLogger(__name__)


class ConditionalStrategy(Strategy):
    kind = "conditional"

    def __init__(
        self,
        request: ConditionalRequest,
        config: EngineConfig = DEFAULT_CONFIG,
        simulator: Optional[TradeSimulator] = None,
    ):
        super().__init__(config, simulator)
        if not math.isfinite(request.budget) or request.budget < 0:
            raise ValueError(f"budget must be a finite amount >= 0, got {request.budget!r}")
        self.request = request
        cond = request.condition
        self.target = cond.target_cell(request.direction)
        self.complement = cond.target_cell(request.direction.opposite)
        self.hedge_cells = cond.hedge_cells()

    @property
    def hedge_shares(self) -> float:
        if self.request.hedge_shares is None:
            return self.request.budget
        return self.request.hedge_shares

    def _classify(self, cell: Cell, net: float) -> PayoutClass:
        if cell is self.target:
            return PayoutClass.WIN
        if cell is self.complement:
            return PayoutClass.LOSE
        return PayoutClass.NEUTRAL

    def plan(self, pools: PoolSet) -> HedgePlan:
        req = self.request
        cond = req.condition
        plan = HedgePlan(kind=self.kind)
        p = JointDistribution.from_pools(pools).conditional(cond.target, cond.given, cond.given_value)
        plan.conditional_probability = p if req.direction is Side.YES else 1.0 - p

        hedges = [
            (TradeIntent(cell, Side.YES, shares=self.hedge_shares), LegRole.HEDGE)
            for cell in self.hedge_cells
        ]
        run = run_legs(pools, hedges, self.simulator, self.limits)
        if run.error is None:
            spent = 0.0
            for index, leg in enumerate(run.legs):
                spent += leg.cost
                if spent > req.budget:
                    run.error = PlanError(
                        leg_index=index,
                        outcome=leg.intent.outcome,
                        reason=(
                            f"hedge legs cost {spent:.4f} by leg {index}, "
                            f"more than the budget {req.budget:.4f}"
                        ),
                    )
                    logger.warning("%s plan invalid: %s", cond.name, run.error.reason)
                    break
        if run.error is None:
            remaining = req.budget - run.total_cost
            target = (TradeIntent(self.target, Side.YES, amount=remaining), LegRole.TARGET)
            run = run_legs(pools, [target], self.simulator, self.limits, run=run)
        return finish_plan(plan, run, self._classify)
