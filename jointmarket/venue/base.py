"""Venue collaborator interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict

from ..core.types import Side


@dataclass(frozen=True)
class Quote:
    amount: float
    shares: float
    prob_before: float | None = None
    prob_after: float | None = None


class MarketDataProvider(ABC):
    @abstractmethod
    def fetch_market(self, slug: str) -> Dict[str, Any]:
        """Raw market payload with an ``answers`` list (id, text, probability, pool)."""
        ...


class QuoteProvider(ABC):
    @abstractmethod
    def quote(self, market_id: str, answer_id: str, side: Side, amount: float) -> Quote:
        """Dry-run ``amount`` on ``side`` of one answer at the venue's live state.

        Raises ``QuoteError`` when the venue cannot produce a quote.
        """
        ...
