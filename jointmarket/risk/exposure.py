"""Payout exposure of multi-leg plans.

Exactly one of the four cells resolves YES. A YES share of a cell pays 1 if
that cell resolves, a NO share pays 1 if any other cell resolves.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from ..core.joint import JointDistribution
from ..core.types import CELLS, Cell, Event, Leg, Payout, PayoutClass, Side
from ..core.utils import safe_div


def gross_payouts(legs: Iterable[Leg]) -> Dict[Cell, float]:
    """Redemption value of all legs for each resolving cell."""
    out = {c: 0.0 for c in CELLS}
    for leg in legs:
        shares = leg.shares
        if shares <= 0:
            continue
        for cell in CELLS:
            hit = cell is leg.intent.outcome
            if (leg.intent.side is Side.YES) == hit:
                out[cell] += shares
    return out


def classify_by_sign(net: float, eps: float = 1e-9) -> PayoutClass:
    if net > eps:
        return PayoutClass.WIN
    if net < -eps:
        return PayoutClass.LOSE
    return PayoutClass.NEUTRAL


def payout_map(
    legs: Iterable[Leg],
    total_cost: float,
    classifier: Optional[Callable[[Cell, float], PayoutClass]] = None,
) -> Dict[Cell, Payout]:
    gross = gross_payouts(legs)
    out: Dict[Cell, Payout] = {}
    for cell, value in gross.items():
        net = value - total_cost
        label = classifier(cell, net) if classifier is not None else classify_by_sign(net)
        out[cell] = Payout(classification=label, gross=value, net=net)
    return out


def conditional_payouts(
    payouts: Mapping[Cell, float], probs: JointDistribution
) -> Dict[Tuple[Event, bool], float]:
    """Expected payout given each event outcome, keyed by ``(event, value)``."""
    out = {}
    for event in (Event.A, Event.B):
        for value in (True, False):
            mass = probs.marginal(event, value)
            weighted = sum(probs[c] * payouts[c] for c in CELLS if c.holds(event) == value)
            out[(event, value)] = safe_div(weighted, mass, 0.0)
    return out


def neutrality_gaps(payouts: Mapping[Cell, float], probs: JointDistribution) -> Tuple[float, float]:
    cond = conditional_payouts(payouts, probs)
    gap_a = abs(cond[(Event.A, True)] - cond[(Event.A, False)])
    gap_b = abs(cond[(Event.B, True)] - cond[(Event.B, False)])
    return gap_a, gap_b


def neutrality_quality(payouts: Mapping[Cell, float], probs: JointDistribution) -> float:
    """Largest conditional payout gap relative to the mean conditional payout.

    0 means the position is indifferent to A and to B on their own.
    """
    cond = conditional_payouts(payouts, probs)
    gap = max(neutrality_gaps(payouts, probs))
    mean = sum(cond.values()) / len(cond)
    if mean <= 0:
        return 0.0 if gap == 0 else float("inf")
    return gap / mean
