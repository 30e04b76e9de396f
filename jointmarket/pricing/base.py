"""Trade simulator abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..core.types import Cell, PoolSet, Side, TradeIntent, TradeResult


class TradeSimulator(ABC):
    @abstractmethod
    def buy(self, pools: PoolSet, outcome: Cell, side: Side, amount: float) -> TradeResult:
        """Spend ``amount`` on ``side`` of ``outcome``; return shares and the projected pools."""
        ...

    @abstractmethod
    def buy_shares(self, pools: PoolSet, outcome: Cell, side: Side, shares: float) -> TradeResult:
        """Acquire ``shares`` of ``side`` of ``outcome`` at whatever it costs."""
        ...

    def execute(self, pools: PoolSet, intent: TradeIntent) -> TradeResult:
        if intent.by_shares:
            return self.buy_shares(pools, intent.outcome, intent.side, intent.shares)
        return self.buy(pools, intent.outcome, intent.side, intent.amount)
