"""
Rounding helpers for monetary values and percentages.
"""

from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP

_TWO_PLACES = Decimal("0.01")


def to_fixed(value: float) -> float:
    """
    Round to 2 decimal places, half away from zero, on the exact binary value.

    Same result as JavaScript's ``Number.prototype.toFixed(2)``, so
    2.675 rounds to 2.67 (its binary value is just below 2.675).
    """
    return float(Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    """Round half up on ``value * 100``, as ``Math.round(x * 100) / 100`` does."""
    return math.floor(value * 100 + 0.5) / 100
