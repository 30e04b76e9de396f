"""Mock venue for demos and tests.

Holds 2x2 markets in memory and answers dry-run quotes with the local
multi-choice simulator, optionally skewed by ``bias`` so reconciliation has
something to disagree with. Quotes never change the stored pools, like a real
dry run.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Set

from .base import MarketDataProvider, Quote, QuoteProvider
from ..core.types import CELLS, Cell, MarketDataError, PoolSet, QuoteError, Side
from ..pricing.multi_choice import MultiChoiceSimulator


class MockVenue(MarketDataProvider, QuoteProvider):
    def __init__(self, bias: float = 1.0, failing_answers: Optional[Iterable[str]] = None):
        self.bias = bias
        self.failing_answers: Set[str] = set(failing_answers or ())
        self.simulator = MultiChoiceSimulator()
        self._markets: Dict[str, Dict[str, Any]] = {}
        self._pools: Dict[str, PoolSet] = {}
        self._answers: Dict[str, Dict[str, Cell]] = {}
        self.calls = 0

    def add_market(
        self,
        market_id: str,
        slug: str,
        pools: PoolSet,
        texts: Mapping[Cell, str],
        question: str = "",
    ) -> Dict[str, Any]:
        answers = []
        ids: Dict[str, Cell] = {}
        for i, cell in enumerate(CELLS):
            answer_id = f"{market_id}-{i}"
            ids[answer_id] = cell
            pool = pools[cell]
            answers.append(
                {
                    "id": answer_id,
                    "text": texts[cell],
                    "probability": pool.probability,
                    "pool": {"YES": pool.yes, "NO": pool.no},
                }
            )
        payload = {"id": market_id, "slug": slug, "question": question, "isResolved": False, "answers": answers}
        self._markets[slug] = payload
        self._pools[market_id] = pools
        self._answers[market_id] = ids
        return payload

    def fetch_market(self, slug: str) -> Dict[str, Any]:
        try:
            return self._markets[slug]
        except KeyError:
            raise MarketDataError(f"unknown market {slug!r}") from None

    def quote(self, market_id: str, answer_id: str, side: Side, amount: float) -> Quote:
        self.calls += 1
        if answer_id in self.failing_answers:
            raise QuoteError(f"API error 503: quote unavailable for {answer_id}")
        try:
            pools = self._pools[market_id]
            cell = self._answers[market_id][answer_id]
        except KeyError:
            raise QuoteError(f"API error 404: unknown answer {answer_id}") from None
        result = self.simulator.buy(pools, cell, Side(side), amount)
        return Quote(
            amount=amount,
            shares=result.shares_acquired * self.bias,
            prob_before=pools.probability(cell),
            prob_after=result.pools.probability(cell),
        )
