"""Compare locally simulated legs with the venue's dry-run quotes.

Each leg's local spend is sent to the quote provider and the shares the venue
would give back are compared with the local projection. Multi-leg plans get a
looser tolerance: the local plan prices leg N after legs 1..N-1 have moved the
pools, while every dry run is evaluated against the same live state.

Quotes are requested one leg at a time. The first failed quote aborts the
rest of the plan, and every leg that was not compared is reported as
``UNAVAILABLE``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional

import requests

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.types import Cell, HedgePlan, QuoteError
from ..core.utils import relative_error_pct
from ..io.metrics import inc_reconciled
from ..venue.base import QuoteProvider

logger = logging.getLogger(__name__)


class LegCheckStatus(str, Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    UNAVAILABLE = "unavailable"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class LegCheck:
    leg_index: int
    outcome: Cell
    local_cost: float
    local_shares: float
    status: LegCheckStatus
    external_shares: Optional[float] = None
    absolute_error: Optional[float] = None
    relative_error_pct: Optional[float] = None
    detail: str = ""


@dataclass
class ReconciliationReport:
    tolerance_pct: float
    legs: List[LegCheck] = field(default_factory=list)
    error_pct: float = 0.0
    passed: bool = False
    aborted: bool = False

    @property
    def mismatches(self) -> List[LegCheck]:
        return [c for c in self.legs if c.status is LegCheckStatus.MISMATCH]

    @property
    def unavailable(self) -> List[LegCheck]:
        return [c for c in self.legs if c.status is LegCheckStatus.UNAVAILABLE]


def compare_leg(
    leg_index: int,
    outcome: Cell,
    local_cost: float,
    local_shares: float,
    external_shares: float,
    tolerance_pct: float,
) -> LegCheck:
    abs_err = abs(local_shares - external_shares)
    rel = relative_error_pct(local_shares, external_shares)
    status = LegCheckStatus.MATCH if rel < tolerance_pct else LegCheckStatus.MISMATCH
    return LegCheck(
        leg_index=leg_index,
        outcome=outcome,
        local_cost=local_cost,
        local_shares=local_shares,
        status=status,
        external_shares=external_shares,
        absolute_error=abs_err,
        relative_error_pct=rel,
    )


def reconcile_plan(
    plan: HedgePlan,
    provider: QuoteProvider,
    market_id: str,
    answer_ids: Mapping[Cell, str],
    config: EngineConfig = DEFAULT_CONFIG,
) -> ReconciliationReport:
    if not plan.valid:
        raise ValueError(f"cannot reconcile an invalid {plan.kind} plan: {plan.error.reason}")
    missing = {leg.intent.outcome for leg in plan.legs} - set(answer_ids)
    if missing:
        names = ", ".join(sorted(c.value for c in missing))
        raise ValueError(f"no answer id for: {names}")

    report = ReconciliationReport(tolerance_pct=config.tolerance_pct(len(plan.legs)))
    for index, leg in enumerate(plan.legs):
        outcome = leg.intent.outcome
        if report.aborted:
            check = LegCheck(
                index, outcome, leg.cost, leg.shares, LegCheckStatus.UNAVAILABLE,
                detail="not quoted: reconciliation aborted by an earlier failure",
            )
        elif leg.cost <= 0:
            check = LegCheck(index, outcome, leg.cost, leg.shares, LegCheckStatus.SKIPPED, detail="zero spend")
        else:
            try:
                quote = provider.quote(market_id, answer_ids[outcome], leg.intent.side, leg.cost)
            except (QuoteError, requests.RequestException) as e:
                logger.warning("quote for leg %d (%s) failed: %s", index, outcome.value, e)
                report.aborted = True
                check = LegCheck(index, outcome, leg.cost, leg.shares, LegCheckStatus.UNAVAILABLE, detail=str(e))
            else:
                check = compare_leg(index, outcome, leg.cost, leg.shares, quote.shares, report.tolerance_pct)
        inc_reconciled(check.status.value)
        report.legs.append(check)

    compared = [c for c in report.legs if c.absolute_error is not None]
    total_shares = sum(c.local_shares for c in compared)
    total_error = sum(c.absolute_error for c in compared)
    report.error_pct = total_error / total_shares * 100.0 if total_shares > 0 else 0.0
    report.passed = bool(compared) and not report.aborted and report.error_pct < report.tolerance_pct
    logger.info(
        "reconciled %s plan: error %.3f%% (tolerance %.1f%%) %s",
        plan.kind,
        report.error_pct,
        report.tolerance_pct,
        "pass" if report.passed else "fail",
    )
    return report
