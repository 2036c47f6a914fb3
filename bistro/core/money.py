from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_CENT = Decimal("0.01")


def parse_amount(value: Any) -> Decimal | None:
    """Decimal for numbers and numeric strings; None for anything missing, non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def to_cents(value: Any) -> int:
    amount = parse_amount(value)
    if amount is None:
        raise ValueError(f"not a monetary amount: {value!r}")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int | None) -> float:
    return float((Decimal(int(cents or 0)) * _CENT).quantize(_CENT))
