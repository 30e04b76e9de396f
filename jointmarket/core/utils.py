"""Small numeric utilities."""

from __future__ import annotations

import math
from typing import Optional


def safe_div(n: float, d: float, default: Optional[float] = None) -> Optional[float]:
    if d == 0:
        return default
    return n / d


def is_finite(*values: float) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def relative_error_pct(local: float, reference: float) -> float:
    """|local - reference| as a percentage of ``reference``.

    A positive ``local`` against a non-positive ``reference`` is a 100% miss.
    """
    if reference <= 0:
        return 100.0 if local > 0 else 0.0
    return abs(local - reference) / reference * 100.0
