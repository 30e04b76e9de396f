"""Manifold adapter.

Reads multiple-choice markets by slug and asks the venue for dry-run quotes
(``POST /bet`` with ``dryRun: true``), which are evaluated server-side against
the live market without placing anything. Placing real bets is left to the
client application.

Settings come from the constructor or the environment (``.env`` supported):
``MANIFOLD_API_BASE`` and ``MANIFOLD_API_KEY``.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv  # type: ignore

from .base import MarketDataProvider, Quote, QuoteProvider
from ..core.types import MarketDataError, QuoteError, Side

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.manifold.markets/v0"


class ManifoldVenue(MarketDataProvider, QuoteProvider):
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        min_interval_ms: int = 150,
    ):
        load_dotenv()
        self.base_url = (base_url or os.getenv("MANIFOLD_API_BASE") or DEFAULT_BASE_URL).rstrip("/")
        self.api_key = api_key or os.getenv("MANIFOLD_API_KEY")
        self.timeout = timeout
        self.min_interval_ms = min_interval_ms
        self._last_call: Optional[float] = None

    def _headers(self, auth: bool = False) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if auth:
            if not self.api_key:
                raise QuoteError("MANIFOLD_API_KEY is required for dry-run quotes")
            headers["Authorization"] = f"Key {self.api_key}"
        return headers

    def _rate_limit(self) -> None:
        now = time.monotonic()
        if self._last_call is not None:
            remaining = self.min_interval_ms / 1000.0 - (now - self._last_call)
            if remaining > 0:
                time.sleep(remaining)
        self._last_call = time.monotonic()

    def fetch_market(self, slug: str) -> Dict[str, Any]:
        self._rate_limit()
        url = f"{self.base_url}/slug/{slug}"
        try:
            resp = requests.get(url, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise MarketDataError(f"failed to load market {slug!r}: {e}") from e
        if not isinstance(data, dict):
            raise MarketDataError(f"unexpected market payload for {slug!r}")
        return data

    def quote(self, market_id: str, answer_id: str, side: Side, amount: float) -> Quote:
        body = {
            "contractId": market_id,
            "answerId": answer_id,
            "outcome": Side(side).value,
            "amount": amount,
            "dryRun": True,
        }
        headers = self._headers(auth=True)
        headers["Content-Type"] = "application/json"
        self._rate_limit()
        try:
            resp = requests.post(
                f"{self.base_url}/bet", json=body, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise QuoteError(f"dry-run request failed: {e}") from e
        if not (200 <= resp.status_code < 300):
            raise QuoteError(f"API error {resp.status_code}: {resp.text}")
        try:
            data = resp.json()
        except ValueError as e:
            raise QuoteError("dry-run response is not JSON") from e
        if not isinstance(data, dict) or data.get("shares") is None:
            raise QuoteError(f"dry-run response for {answer_id} has no share count")
        logger.debug("dry-run %s %s %.4f -> %s", answer_id, body["outcome"], amount, data["shares"])
        return Quote(
            amount=float(data.get("amount", amount) or 0.0),
            shares=float(data["shares"]),
            prob_before=data.get("probBefore"),
            prob_after=data.get("probAfter"),
        )
