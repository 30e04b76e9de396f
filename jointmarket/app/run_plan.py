"""Entry point: price every plan type against the mock market."""

from __future__ import annotations

import logging

from .main import build_mock_environment
from ..core.config import EngineConfig
from ..core.types import (
    Cell,
    Condition,
    ConditionalRequest,
    CorrelationRequest,
    DirectRequest,
    Event,
    MarginalRequest,
)
from ..exec.reconcile import reconcile_plan
from ..exec.router import plan_trade


def main():  # pragma: no cover - manual run
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    config = EngineConfig.from_env()
    venue, market = build_mock_environment()
    plan_requests = [
        DirectRequest(Cell.A_YES_B_YES, 10.0),
        ConditionalRequest(Condition.parse("a_given_b"), 50.0, hedge_shares=10.0),
        MarginalRequest(Event.B, 20.0),
        CorrelationRequest(max_shares=25.0),
    ]
    for request in plan_requests:
        plan = plan_trade(request, market.pools(), config)
        print(f"{plan.kind}: valid={plan.valid} cost={plan.total_cost:.4f} status={plan.status.value}")
        for leg in plan.legs:
            print(f"  {leg.role.value:<11} {leg.intent.outcome.value:<12} cost={leg.cost:8.4f} shares={leg.shares:8.4f}")
        for cell, payout in plan.payout_by_outcome.items():
            print(f"  {cell.value:<12} {payout.classification.value:<7} net={payout.net:+.2f}")
        for warning in plan.warnings:
            print(f"  warning: {warning}")
        if plan.valid:
            report = reconcile_plan(plan, venue, market.market_id, market.answer_ids, config)
            print(f"  reconciliation: {report.error_pct:.3f}% passed={report.passed}")


if __name__ == "__main__":  # pragma: no cover
    main()
