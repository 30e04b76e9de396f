"""Per-leg stake limits."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StakeLimits:
    min_stake: float = 1.0

    def below_minimum(self, cost: float) -> bool:
        """True for a leg the venue would reject for being too small (0 is not a leg)."""
        return 0 < cost < self.min_stake
