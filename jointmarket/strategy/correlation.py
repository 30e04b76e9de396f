"""Market-neutral correlation bets.

A position ``s`` over the cells (A∧B, A∧¬B, ¬A∧B, ¬A∧¬B) is doubly neutral when
its expected payout is the same whether or not A happens, and the same whether
or not B happens. That is two linear constraints in four unknowns; the
solutions are the uniform (cash-like) vector plus one genuine correlation
direction. Pinning ``s1 = 1, s4 = 0`` leaves a 2x2 system in ``(s2, s3)``:

    p2/pA  * s2 - p3/p¬A * s3 = -p1/pA
    -p2/p¬B * s2 + p3/pB * s3 = -p1/pB

Its determinant vanishes when P(A∧B) == P(¬A∧¬B), which includes the
independent 50/50 market; there the solver returns ``(1, 0, 0, 1)``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from .base import Strategy
from .sequential import LegRun, finish_plan, run_leg, run_legs
from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.joint import JointDistribution
from ..core.types import (
    CELLS,
    Cell,
    CorrelationPlan,
    CorrelationRequest,
    LegRole,
    PoolSet,
    Side,
    TradeIntent,
)
from ..pricing.base import TradeSimulator
from ..risk.exposure import gross_payouts, neutrality_quality

logger = logging.getLogger(__name__)

FALLBACK_WEIGHTS = {
    Cell.A_YES_B_YES: 1.0,
    Cell.A_YES_B_NO: 0.0,
    Cell.A_NO_B_YES: 0.0,
    Cell.A_NO_B_NO: 1.0,
}


@dataclass(frozen=True)
class CorrelationWeights:
    raw: Dict[Cell, float]
    determinant: float
    degenerate: bool


def solve_correlation_weights(
    probs: JointDistribution, degenerate_det: float = DEFAULT_CONFIG.degenerate_det
) -> CorrelationWeights:
    p1, p2, p3 = probs.p_ab, probs.p_a_not_b, probs.p_not_a_b
    marginals = (probs.p_a, probs.p_not_a, probs.p_b, probs.p_not_b)
    if min(marginals) <= 0:
        return CorrelationWeights(dict(FALLBACK_WEIGHTS), 0.0, True)
    p_a, p_not_a, p_b, p_not_b = marginals

    a11, a12, b1 = p2 / p_a, -p3 / p_not_a, -p1 / p_a
    a21, a22, b2 = -p2 / p_not_b, p3 / p_b, -p1 / p_b
    det = a11 * a22 - a12 * a21
    if abs(det) < degenerate_det:
        logger.debug("correlation system degenerate (det=%.3e)", det)
        return CorrelationWeights(dict(FALLBACK_WEIGHTS), det, True)

    s2 = (b1 * a22 - a12 * b2) / det
    s3 = (a11 * b2 - b1 * a21) / det
    raw = {
        Cell.A_YES_B_YES: 1.0,
        Cell.A_YES_B_NO: s2,
        Cell.A_NO_B_YES: s3,
        Cell.A_NO_B_NO: 0.0,
    }
    return CorrelationWeights(raw, det, False)


def diagonal_exposure(weights: Dict[Cell, float]) -> float:
    """Positive when the position favours the diagonal (A∧B, ¬A∧¬B) cells."""
    return (
        weights[Cell.A_YES_B_YES]
        - weights[Cell.A_YES_B_NO]
        - weights[Cell.A_NO_B_YES]
        + weights[Cell.A_NO_B_NO]
    )


def shape_weights(raw: Dict[Cell, float], long: bool = True, max_shares: float = 1.0) -> Dict[Cell, float]:
    """Orient, shift to long-only and scale so the largest weight is ``max_shares``."""
    weights = {c: float(raw[c]) for c in CELLS}
    exposure = diagonal_exposure(weights)
    if (long and exposure < 0) or (not long and exposure > 0):
        weights = {c: -w for c, w in weights.items()}
    floor = min(weights.values())
    weights = {c: w - floor for c, w in weights.items()}
    top = max(weights.values())
    if top <= 0:
        return {c: 0.0 for c in CELLS}
    scale = max_shares / top
    return {c: w * scale for c, w in weights.items()}


class CorrelationStrategy(Strategy):
    kind = "correlation"

    def __init__(
        self,
        request: CorrelationRequest,
        config: EngineConfig = DEFAULT_CONFIG,
        simulator: Optional[TradeSimulator] = None,
    ):
        super().__init__(config, simulator)
        if not math.isfinite(request.max_shares) or request.max_shares <= 0:
            raise ValueError(f"max_shares must be a finite count > 0, got {request.max_shares!r}")
        self.request = request

    def _leg_order(self, pools: PoolSet, weights: Dict[Cell, float]):
        """Cells to trade, cheapest standalone cost first."""
        estimates = {
            cell: self.simulator.buy_shares(pools, cell, Side.YES, w).cost_paid
            for cell, w in weights.items()
            if w > 0
        }
        return sorted(estimates, key=lambda c: estimates[c])

    def plan(self, pools: PoolSet) -> CorrelationPlan:
        req = self.request
        quoted = JointDistribution.from_pools(pools)
        solved = solve_correlation_weights(quoted, self.config.degenerate_det)
        weights = shape_weights(solved.raw, req.long, req.max_shares)
        plan = CorrelationPlan(kind=self.kind, weights=weights, degenerate=solved.degenerate)
        if solved.degenerate:
            plan.warnings.append(
                "correlation system is degenerate at these prices; using the (1, 0, 0, 1) fallback"
            )

        run = LegRun(pools=pools)
        for cell in self._leg_order(pools, weights):
            intent = TradeIntent(cell, Side.YES, shares=weights[cell])
            if req.round_up_small_legs:
                probe, reason = run_leg(run.pools, intent, LegRole.CORRELATION, self.simulator, self.limits)
                if reason is None and probe.below_minimum:
                    intent = TradeIntent(cell, Side.YES, amount=self.limits.min_stake)
                    plan.warnings.append(
                        f"{cell.value} leg raised from {probe.cost:.4f} to the minimum stake"
                    )
            run = run_legs(pools, [(intent, LegRole.CORRELATION)], self.simulator, self.limits, run=run)
            if run.error is not None:
                break

        finish_plan(plan, run)
        if plan.valid:
            held = gross_payouts(plan.legs)
            plan.quoted_neutrality = neutrality_quality(held, quoted)
            plan.neutrality_quality = neutrality_quality(held, JointDistribution.from_pools(plan.pools))
            logger.info(
                "correlation plan neutrality %.4f (quoted %.4f)",
                plan.neutrality_quality,
                plan.quoted_neutrality,
            )
        return plan
