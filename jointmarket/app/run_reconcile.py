"""Entry point: reconcile a plan against live Manifold dry-run quotes.

Usage::

    python -m jointmarket.app.run_reconcile <slug> <a_yes_b_yes text> <a_yes_b_no text> \
        <a_no_b_yes text> <a_no_b_no text> [budget]

Requires ``MANIFOLD_API_KEY``; nothing is bet, every quote is a dry run.
"""

from __future__ import annotations

import logging
import sys

from ..core.config import EngineConfig
from ..core.types import CELLS, Cell, DirectRequest, MarginalRequest, Event
from ..exec.reconcile import reconcile_plan
from ..exec.router import plan_trade
from ..venue.manifold import ManifoldVenue
from ..venue.markets import build_joint_market


def main(argv=None):  # pragma: no cover - manual run
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 5:
        print(__doc__)
        return 2
    slug, texts = args[0], args[1:5]
    budget = float(args[5]) if len(args) > 5 else 10.0
    config = EngineConfig.from_env()
    venue = ManifoldVenue()
    market = build_joint_market(venue.fetch_market(slug), dict(zip(CELLS, texts)))
    for cell, drift in market.probability_drift().items():
        print(f"{cell.value:<12} quoted-vs-pool drift {drift:.5f}")
    pools = market.pools()
    for request in (DirectRequest(Cell.A_YES_B_YES, budget), MarginalRequest(Event.A, budget)):
        plan = plan_trade(request, pools, config)
        report = reconcile_plan(plan, venue, market.market_id, market.answer_ids, config)
        for check in report.legs:
            print(
                f"{plan.kind} leg {check.leg_index} {check.outcome.value}: local={check.local_shares:.4f} "
                f"venue={check.external_shares} status={check.status.value}"
            )
        print(f"{plan.kind}: error {report.error_pct:.3f}% passed={report.passed}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
