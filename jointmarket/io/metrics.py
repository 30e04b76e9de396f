"""Metrics instrumentation."""

from __future__ import annotations

from prometheus_client import Counter

simulations_total = Counter(
    "jointmarket_simulations_total",
    "Multi-choice trade simulations by convergence status",
    ["status"],
)
reconciled_legs_total = Counter(
    "jointmarket_reconciled_legs_total",
    "Plan legs compared against venue dry-run quotes",
    ["status"],
)


def inc_simulations(status: str, n: int = 1) -> None:
    simulations_total.labels(status=status).inc(n)


def inc_reconciled(status: str, n: int = 1) -> None:
    reconciled_legs_total.labels(status=status).inc(n)
