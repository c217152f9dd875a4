"""
MMK amounts.

The kyat has no subunit in this shop, so every amount is a whole number.
Inputs typed at the till may be blank, strings, or floats; they are
coerced here and nowhere else.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CURRENCY = "MMK"


def parse_amount(value: Any) -> Optional[int]:
    """
    Parse a typed amount to whole MMK, or None when it is not a number.

    Half values round away from zero (2.5 -> 3).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        dec = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not dec.is_finite():
        return None
    return int(dec.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_amount(value: Any) -> int:
    """
    Coerce a price/amount input to whole MMK.

    - None / "" / unparsable -> 0
    """
    amount = parse_amount(value)
    return 0 if amount is None else amount


def format_mmk(value: Any) -> str:
    """Render an amount with zero decimals and the unit suffix."""
    return f"{to_amount(value)} {CURRENCY}"
