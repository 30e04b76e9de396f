"""Row/column bets: back one event regardless of the other."""

from __future__ import annotations

from typing import Optional

from .base import Strategy
from .sequential import finish_plan, run_legs
from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.types import (
    Cell,
    HedgePlan,
    LegRole,
    MarginalRequest,
    PayoutClass,
    PoolSet,
    Side,
    TradeIntent,
)
from ..pricing.base import TradeSimulator


class MarginalStrategy(Strategy):
    """Split the budget evenly over the two cells of a row or column.

    The legs are priced one after the other, so the second cell is bought
    against the pools left by the first.
    """

    kind = "marginal"

    def __init__(
        self,
        request: MarginalRequest,
        config: EngineConfig = DEFAULT_CONFIG,
        simulator: Optional[TradeSimulator] = None,
    ):
        super().__init__(config, simulator)
        if request.budget < 0:
            raise ValueError("budget must be >= 0")
        self.request = request

    def _classify(self, cell: Cell, net: float) -> PayoutClass:
        if cell.holds(self.request.event) == self.request.value:
            return PayoutClass.WIN
        return PayoutClass.LOSE

    def plan(self, pools: PoolSet) -> HedgePlan:
        cells = self.request.cells()
        per_cell = self.request.budget / len(cells)
        intents = [
            (TradeIntent(cell, Side.YES, amount=per_cell), LegRole.MARGINAL) for cell in cells
        ]
        run = run_legs(pools, intents, self.simulator, self.limits)
        return finish_plan(HedgePlan(kind=self.kind), run, self._classify)
