"""Engine configuration.

Defaults mirror the venue's rules (1-unit minimum stake per leg) and the
bisection budgets of the simulators. Every field can be overridden from the
environment (or a ``.env`` file) with a ``JOINTMARKET_`` prefixed variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv  # type: ignore

ENV_PREFIX = "JOINTMARKET_"


@dataclass(frozen=True)
class EngineConfig:
    min_stake: float = 1.0
    equilibrium_tolerance: float = 1e-4
    equilibrium_iterations: int = 60
    cost_search_iterations: int = 50
    cost_search_expansions: int = 60
    cost_search_rel_tolerance: float = 1e-6
    single_leg_tolerance_pct: float = 1.0
    multi_leg_tolerance_pct: float = 2.0
    degenerate_det: float = 1e-9

    def __post_init__(self):
        if self.min_stake < 0:
            raise ValueError("min_stake must be >= 0")
        if self.equilibrium_iterations <= 0 or self.cost_search_iterations <= 0:
            raise ValueError("iteration budgets must be positive")
        if not 0 < self.multi_leg_tolerance_pct <= 5.0:
            raise ValueError("multi_leg_tolerance_pct must be in (0, 5]")

    def tolerance_pct(self, leg_count: int) -> float:
        return self.single_leg_tolerance_pct if leg_count <= 1 else self.multi_leg_tolerance_pct

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "EngineConfig":
        load_dotenv(env_file)
        overrides = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            caster = int if f.type in ("int", int) else float
            try:
                overrides[f.name] = caster(raw)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()}={raw!r} is not a valid {caster.__name__}") from e
        return cls(**overrides)


DEFAULT_CONFIG = EngineConfig()
