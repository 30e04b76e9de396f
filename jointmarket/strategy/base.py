"""Strategy base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.types import HedgePlan, PoolSet
from ..pricing.base import TradeSimulator
from ..pricing.multi_choice import MultiChoiceSimulator
from ..risk.limits import StakeLimits


class Strategy(ABC):
    kind: str = "plan"

    def __init__(
        self,
        config: EngineConfig = DEFAULT_CONFIG,
        simulator: Optional[TradeSimulator] = None,
    ):
        self.config = config
        self.simulator = simulator or MultiChoiceSimulator(config)
        self.limits = StakeLimits(min_stake=config.min_stake)

    @abstractmethod
    def plan(self, pools: PoolSet) -> HedgePlan:
        """Price every leg against ``pools`` without mutating it."""
        ...
