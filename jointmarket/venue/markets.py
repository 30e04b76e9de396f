"""Turn a venue market payload into a joint-market snapshot.

Which answer is which cell is decided by the caller (``truth_table`` maps each
cell to its answer text); this module only validates the payload and pulls
out ids, quoted probabilities and pool reserves. Answers with a missing or
unusable pool are tolerated and listed in ``missing_pools``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..core.joint import JointDistribution
from ..core.types import CELLS, Cell, InvalidPoolError, MarketDataError, Pool, PoolSet

logger = logging.getLogger(__name__)


@dataclass
class JointMarket:
    market_id: str
    question: str = ""
    answer_ids: Dict[Cell, str] = field(default_factory=dict)
    quoted: Dict[Cell, float] = field(default_factory=dict)
    pool_by_cell: Dict[Cell, Pool] = field(default_factory=dict)
    missing_pools: List[Cell] = field(default_factory=list)

    def pools(self) -> PoolSet:
        """Fresh PoolSet snapshot; raises if any cell lacks a usable pool."""
        if self.missing_pools:
            names = ", ".join(c.value for c in self.missing_pools)
            raise MarketDataError(f"market {self.market_id} has no pool for: {names}")
        return PoolSet(self.pool_by_cell)

    def quoted_distribution(self) -> JointDistribution:
        return JointDistribution.from_mapping(self.quoted)

    def probability_drift(self) -> Dict[Cell, float]:
        """|quoted - pool-implied| probability per cell that has a pool."""
        return {
            cell: abs(self.quoted.get(cell, 0.0) - pool.probability)
            for cell, pool in self.pool_by_cell.items()
        }


def _parse_pool(raw: Any) -> Optional[Pool]:
    if not isinstance(raw, Mapping):
        return None
    try:
        return Pool(float(raw["YES"]), float(raw["NO"]))
    except (KeyError, TypeError, ValueError, InvalidPoolError):
        return None


def build_joint_market(payload: Mapping[str, Any], truth_table: Mapping[Cell, str]) -> JointMarket:
    if payload.get("isResolved"):
        raise MarketDataError("market has resolved; select an active market")
    answers = payload.get("answers") or []
    if len(answers) != len(CELLS):
        raise MarketDataError(f"expected 4 answers for a 2x2 market, got {len(answers)}")

    text_to_cell = {str(text).strip().lower(): Cell(cell) for cell, text in truth_table.items()}
    market = JointMarket(market_id=str(payload.get("id", "")), question=str(payload.get("question", "")))
    for answer in answers:
        text = str(answer.get("text", "")).strip().lower()
        cell = text_to_cell.get(text)
        if cell is None:
            logger.warning("answer %r is not in the truth table", answer.get("text"))
            continue
        market.answer_ids[cell] = str(answer.get("id", ""))
        market.quoted[cell] = float(answer.get("probability") or 0.0)
        pool = _parse_pool(answer.get("pool"))
        if pool is None:
            logger.warning("answer %r has no usable pool", answer.get("text"))
        else:
            market.pool_by_cell[cell] = pool

    unmapped = [c for c in CELLS if c not in market.answer_ids]
    if unmapped:
        names = ", ".join(c.value for c in unmapped)
        raise MarketDataError(f"no answer mapped to: {names}")
    market.missing_pools = [c for c in CELLS if c not in market.pool_by_cell]
    return market
