"""Single-answer market order."""

from __future__ import annotations

from typing import Optional

from .base import Strategy
from .sequential import finish_plan, run_legs
from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.types import (
    Cell,
    DirectRequest,
    HedgePlan,
    LegRole,
    PayoutClass,
    PoolSet,
    Side,
    TradeIntent,
)
from ..pricing.base import TradeSimulator


class DirectStrategy(Strategy):
    kind = "direct"

    def __init__(
        self,
        request: DirectRequest,
        config: EngineConfig = DEFAULT_CONFIG,
        simulator: Optional[TradeSimulator] = None,
    ):
        super().__init__(config, simulator)
        self.request = request

    def _classify(self, cell: Cell, net: float) -> PayoutClass:
        hit = cell is self.request.outcome
        wins = hit if self.request.side is Side.YES else not hit
        return PayoutClass.WIN if wins else PayoutClass.LOSE

    def plan(self, pools: PoolSet) -> HedgePlan:
        req = self.request
        intent = TradeIntent(Cell(req.outcome), req.side, amount=req.amount)
        run = run_legs(pools, [(intent, LegRole.DIRECT)], self.simulator, self.limits)
        return finish_plan(HedgePlan(kind=self.kind), run, self._classify)
