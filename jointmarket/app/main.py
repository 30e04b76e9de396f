"""App bootstrap for mock or live sessions."""

from __future__ import annotations

from typing import Dict, Tuple

from ..core.types import Cell, Pool, PoolSet
from ..venue.markets import JointMarket, build_joint_market
from ..venue.mock import MockVenue

DEMO_SLUG = "agi-and-python-4-by-2030"

DEMO_TEXTS: Dict[Cell, str] = {
    Cell.A_YES_B_YES: "AGI // Python 4",
    Cell.A_YES_B_NO: "AGI // No Python 4",
    Cell.A_NO_B_YES: "No AGI // Python 4",
    Cell.A_NO_B_NO: "No AGI // No Python 4",
}


def demo_pools() -> PoolSet:
    # probabilities 0.30 / 0.20 / 0.10 / 0.40
    return PoolSet(
        {
            Cell.A_YES_B_YES: Pool(700.0, 300.0),
            Cell.A_YES_B_NO: Pool(800.0, 200.0),
            Cell.A_NO_B_YES: Pool(900.0, 100.0),
            Cell.A_NO_B_NO: Pool(600.0, 400.0),
        }
    )


def build_mock_environment(bias: float = 1.0) -> Tuple[MockVenue, JointMarket]:
    venue = MockVenue(bias=bias)
    venue.add_market("DEMO", DEMO_SLUG, demo_pools(), DEMO_TEXTS, question="AGI and Python 4 by 2030?")
    market = build_joint_market(venue.fetch_market(DEMO_SLUG), DEMO_TEXTS)
    return venue, market
