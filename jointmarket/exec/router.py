"""Dispatch a plan request to the strategy that prices it."""

from __future__ import annotations

from typing import Optional

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.types import (
    ConditionalRequest,
    CorrelationRequest,
    DirectRequest,
    HedgePlan,
    MarginalRequest,
    PlanRequest,
    PoolSet,
)
from ..pricing.base import TradeSimulator
from ..strategy.base import Strategy
from ..strategy.conditional import ConditionalStrategy
from ..strategy.correlation import CorrelationStrategy
from ..strategy.direct import DirectStrategy
from ..strategy.marginal import MarginalStrategy

_STRATEGIES = {
    DirectRequest: DirectStrategy,
    ConditionalRequest: ConditionalStrategy,
    MarginalRequest: MarginalStrategy,
    CorrelationRequest: CorrelationStrategy,
}


def strategy_for(
    request: PlanRequest,
    config: EngineConfig = DEFAULT_CONFIG,
    simulator: Optional[TradeSimulator] = None,
) -> Strategy:
    try:
        cls = _STRATEGIES[type(request)]
    except KeyError:
        raise TypeError(f"unsupported plan request {type(request).__name__}") from None
    return cls(request, config, simulator)


def plan_trade(
    request: PlanRequest,
    pools: PoolSet,
    config: EngineConfig = DEFAULT_CONFIG,
    simulator: Optional[TradeSimulator] = None,
) -> HedgePlan:
    return strategy_for(request, config, simulator).plan(pools)
