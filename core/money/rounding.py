"""
DocFlow Money — Rounding
==========================
Fixed-point money helpers shared by the calculator and the lifecycles.

RULES:
- Money and rates are Decimal end to end. Floats are converted via str().
- round2() is applied once per output field, at finalization only.
- Half-up rounding on the second decimal place.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Convert value to a finite Decimal.

    Returns `default` for None, booleans, unparsable text, NaN and infinity.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return default
    if not result.is_finite():
        return default
    return result


def round2(value: Any) -> Decimal:
    """
    Round to 2 decimal places, half-up.

    Non-numeric and non-finite input rounds to 0.00.
    Idempotent: round2(round2(x)) == round2(x).
    """
    amount = to_decimal(value, ZERO)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
